"""
Thread API routes.

Inbox listing, single-thread lookup and the per-store reset.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.connection import get_db
from ..models.session import Session
from ..models.thread import ThreadStatus, ChannelType
from ..schemas.thread import (
    ThreadResponse,
    ThreadList,
    ThreadDetail,
    ThreadReset,
    ThreadStatusEnum,
    ChannelEnum,
)
from ..services.exceptions import HitomeError
from ..services.thread_service import ThreadService
from .deps import get_inbox_store, raise_http, require_session

router = APIRouter()


def get_thread_service(db: AsyncSession = Depends(get_db)) -> ThreadService:
    """Dependency to get thread service."""
    return ThreadService(db)


@router.get("/", response_model=ThreadList)
async def list_threads(
    status: Optional[ThreadStatusEnum] = Query(None, description="Filter by status"),
    channel: Optional[ChannelEnum] = Query(None, description="Filter by channel"),
    tag: Optional[str] = Query(None, description="Filter by tag"),
    unread: Optional[bool] = Query(None, description="Only unread (true) or read (false)"),
    limit: Optional[int] = Query(None, ge=1, le=500, description="Max threads to return"),
    session: Session = Depends(require_session),
    store=Depends(get_inbox_store),
    service: ThreadService = Depends(get_thread_service),
):
    """
    List the current store's threads, newest first.

    Without a selected store the unassigned inbox of the environment LINE
    channel is listed.
    """
    threads = await service.list(
        store_id=store.id if store else None,
        status=ThreadStatus(status.value) if status else None,
        channel=ChannelType(channel.value) if channel else None,
        tag=tag,
        unread=unread,
        limit=limit,
    )
    return ThreadList(
        threads=[ThreadResponse.model_validate(t.to_dict()) for t in threads],
        total=len(threads),
    )


@router.delete("/", response_model=ThreadReset)
async def reset_threads(
    session: Session = Depends(require_session),
    store=Depends(get_inbox_store),
    service: ThreadService = Depends(get_thread_service),
):
    """
    Delete every thread and message of the current store.
    """
    deleted = await service.reset(store.id if store else None)
    return ThreadReset(deleted=deleted)


@router.get("/{thread_id}", response_model=ThreadDetail)
async def get_thread(
    thread_id: str,
    session: Session = Depends(require_session),
    store=Depends(get_inbox_store),
    service: ThreadService = Depends(get_thread_service),
):
    """
    Get a specific thread by ID.
    """
    try:
        thread = await service.get(thread_id, store.id if store else None)
    except HitomeError as e:
        raise_http(e)

    return ThreadDetail(thread=ThreadResponse.model_validate(thread.to_dict()))
