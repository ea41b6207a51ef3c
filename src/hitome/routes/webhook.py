"""
Inbound webhook routes.

LINE Messaging API deliveries (per-channel and shared) and Google Business
Profile review notifications. These endpoints are called by the platforms,
so they are not behind the session cookie.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.connection import get_db
from ..schemas.webhook import (
    GoogleReviewNotification,
    GoogleWebhookResult,
    LineWebhookResult,
)
from ..services.exceptions import HitomeError
from ..services.ingestion_service import IngestionService
from .deps import raise_http

logger = logging.getLogger(__name__)

router = APIRouter()


def get_ingestion_service(db: AsyncSession = Depends(get_db)) -> IngestionService:
    """Dependency to get ingestion service."""
    return IngestionService(db)


async def _handle_line(
    request: Request,
    signature: Optional[str],
    channel_id: Optional[str],
    service: IngestionService,
) -> LineWebhookResult:
    raw_body = await request.body()
    try:
        result = await service.ingest_line(raw_body, signature, channel_id)
    except HitomeError as e:
        raise_http(e)

    return LineWebhookResult(
        processed=result.processed,
        skipped=result.skipped,
        autoReplied=result.auto_replied,
    )


@router.get("/line")
async def line_webhook_ping():
    """Verification endpoint used from the LINE Developers console."""
    return {"status": "ok", "message": "LINE webhook endpoint is ready"}


@router.post("/line", response_model=LineWebhookResult)
async def line_webhook(
    request: Request,
    x_line_signature: Optional[str] = Header(None),
    service: IngestionService = Depends(get_ingestion_service),
):
    """
    Shared LINE webhook.

    The store is picked from the body's ``destination``; unmatched deliveries
    go to the environment channel.
    """
    return await _handle_line(request, x_line_signature, None, service)


@router.post("/line/{channel_id}", response_model=LineWebhookResult)
async def line_channel_webhook(
    channel_id: str,
    request: Request,
    x_line_signature: Optional[str] = Header(None),
    service: IngestionService = Depends(get_ingestion_service),
):
    """
    Per-store LINE webhook, routed by channel ID.
    """
    return await _handle_line(request, x_line_signature, channel_id, service)


@router.post("/google", response_model=GoogleWebhookResult)
async def google_webhook(
    notification: GoogleReviewNotification,
    token: Optional[str] = Query(None),
    service: IngestionService = Depends(get_ingestion_service),
):
    """
    Google Business Profile review notification.
    """
    try:
        result = await service.ingest_google_review(notification, token)
    except HitomeError as e:
        raise_http(e)

    return GoogleWebhookResult(
        threadId=result.thread.id,
        autoReplied=result.auto_replied,
        duplicate=result.duplicate,
    )
