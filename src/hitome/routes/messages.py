"""
Message API routes.

Per-thread message fetch, status change and manual reply.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.connection import get_db
from ..models.session import Session
from ..models.thread import ThreadStatus
from ..schemas.message import MessageResponse, MessageList, ManualReply, ReplyResult
from ..schemas.thread import ThreadResponse, ThreadDetail, ThreadStatusUpdate
from ..services.exceptions import HitomeError
from ..services.thread_service import ThreadService
from .deps import get_inbox_store, raise_http, require_session

logger = logging.getLogger(__name__)

router = APIRouter()


def get_thread_service(db: AsyncSession = Depends(get_db)) -> ThreadService:
    """Dependency to get thread service."""
    return ThreadService(db)


@router.get("/{thread_id}", response_model=MessageList)
async def list_messages(
    thread_id: str,
    session: Session = Depends(require_session),
    store=Depends(get_inbox_store),
    service: ThreadService = Depends(get_thread_service),
):
    """
    List messages in a thread, oldest first.

    Opening a thread marks it as read.
    """
    try:
        thread = await service.get(thread_id, store.id if store else None)
    except HitomeError as e:
        raise_http(e)

    messages = await service.get_messages(thread)
    return MessageList(
        messages=[MessageResponse.model_validate(m.to_dict()) for m in messages],
        thread_id=thread_id,
    )


@router.patch("/{thread_id}", response_model=ThreadDetail)
async def update_thread_status(
    thread_id: str,
    data: ThreadStatusUpdate,
    session: Session = Depends(require_session),
    store=Depends(get_inbox_store),
    service: ThreadService = Depends(get_thread_service),
):
    """
    Change a thread's status (unhandled / review / completed).
    """
    try:
        thread = await service.get(thread_id, store.id if store else None)
    except HitomeError as e:
        raise_http(e)

    thread = await service.update_status(thread, ThreadStatus(data.status.value))
    return ThreadDetail(thread=ThreadResponse.model_validate(thread.to_dict()))


@router.post("/{thread_id}", response_model=ReplyResult)
async def send_reply(
    thread_id: str,
    data: ManualReply,
    session: Session = Depends(require_session),
    store=Depends(get_inbox_store),
    service: ThreadService = Depends(get_thread_service),
):
    """
    Send a manual reply to the customer and complete the thread.
    """
    try:
        thread = await service.get(thread_id, store.id if store else None)
        message = await service.send_manual_reply(thread, data.message, store)
    except HitomeError as e:
        raise_http(e)

    return ReplyResult(
        message=MessageResponse.model_validate(message.to_dict()),
        thread=ThreadResponse.model_validate(thread.to_dict()),
    )
