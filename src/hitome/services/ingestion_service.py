"""
Webhook ingestion for hitome.

Turns LINE message events and Google review notifications into inbox
threads: verifies the sender, routes to the owning store, classifies the
text, stores the message and, when allowed, sends the automatic reply.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import json
import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.message import MessageSender
from ..models.store import Store
from ..models.thread import Thread, ThreadStatus, ChannelType
from ..schemas.webhook import LineEvent, LineWebhookBody, GoogleReviewNotification
from . import classifier
from .danger_word_service import DangerWordService
from .exceptions import (
    NotConfiguredError,
    NotFoundError,
    SignatureError,
    ValidationFailedError,
)
from .google_client import GoogleBusinessClient
from .line_client import LineClient
from .signature import verify_signature
from .store_service import StoreService
from .thread_service import ThreadService, apply_status

logger = logging.getLogger(__name__)

DEFAULT_LINE_USER_NAME = "LINE User"


@dataclass
class LineChannel:
    """Credentials and tenant a LINE webhook call is processed with."""
    secret: str
    access_token: str
    store: Optional[Store] = None

    @property
    def store_id(self) -> Optional[str]:
        return self.store.id if self.store else None

    @property
    def auto_reply(self) -> bool:
        # The environment-level channel has no settings and always auto-replies
        return bool(self.store.auto_reply_enabled) if self.store else True


@dataclass
class LineIngestResult:
    processed: int = 0
    skipped: int = 0
    auto_replied: int = 0


@dataclass
class GoogleIngestResult:
    thread: Thread
    auto_replied: bool = False
    duplicate: bool = False


def _event_time(event: LineEvent) -> datetime:
    if event.timestamp:
        return datetime.utcfromtimestamp(event.timestamp / 1000)
    return datetime.utcnow()


def _merge_tags(existing: Optional[List[str]], new: List[str]) -> List[str]:
    merged = list(existing or [])
    for tag in new:
        if tag not in merged:
            merged.append(tag)
    return merged


class IngestionService:
    """Processes inbound webhooks into threads and messages."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.stores = StoreService(db)
        self.threads = ThreadService(db)
        self.danger_words = DangerWordService(db)

    # ------------------------------------------------------------------
    # LINE
    # ------------------------------------------------------------------

    async def resolve_line_channel(
        self,
        raw_body: bytes,
        channel_id: Optional[str] = None,
    ) -> LineChannel:
        """
        Pick the credentials a webhook call must be verified with.

        With ``channel_id`` the store is looked up directly. Without it the
        body's ``destination`` is matched against store channel IDs, falling
        back to the environment channel.

        Raises:
            NotFoundError: If ``channel_id`` matches no active store
            NotConfiguredError: If the chosen channel has no secret or token
        """
        if channel_id:
            store = await self.stores.resolve_by_line_channel(channel_id)
            if not store:
                raise NotFoundError("Unknown LINE channel")
            return self._store_channel(store)

        destination = None
        try:
            destination = json.loads(raw_body or b"{}").get("destination")
        except (ValueError, AttributeError):
            pass

        store = await self.stores.resolve_by_line_channel(destination)
        if store is None and settings.LINE_CHANNEL_ID:
            store = await self.stores.resolve_by_line_channel(settings.LINE_CHANNEL_ID)
        if store and store.line_channel_secret and store.line_access_token:
            return self._store_channel(store)

        if not settings.line_configured:
            raise NotConfiguredError("Not configured")
        return LineChannel(
            secret=settings.LINE_CHANNEL_SECRET,
            access_token=settings.LINE_CHANNEL_ACCESS_TOKEN,
        )

    @staticmethod
    def _needs_manual_review(thread: Thread) -> bool:
        # A flagged thread stays flagged for every later message
        return bool(thread.has_danger_word) or thread.status == ThreadStatus.REVIEW

    @staticmethod
    def _store_channel(store: Store) -> LineChannel:
        if not store.line_channel_secret or not store.line_access_token:
            raise NotConfiguredError("Not configured")
        return LineChannel(
            secret=store.line_channel_secret,
            access_token=store.line_access_token,
            store=store,
        )

    async def ingest_line(
        self,
        raw_body: bytes,
        signature: Optional[str],
        channel_id: Optional[str] = None,
    ) -> LineIngestResult:
        """
        Verify and process one LINE webhook delivery.

        Raises:
            NotFoundError / NotConfiguredError: See resolve_line_channel
            SignatureError: If the signature header is missing or wrong
            ValidationFailedError: If the verified body is not a webhook payload
        """
        channel = await self.resolve_line_channel(raw_body, channel_id)

        if not signature:
            raise SignatureError("No signature")
        if not verify_signature(raw_body, signature, channel.secret):
            logger.warning(f"Rejected LINE webhook with invalid signature (store={channel.store_id})")
            raise SignatureError("Invalid signature")

        try:
            body = LineWebhookBody.model_validate_json(raw_body)
        except ValidationError as e:
            raise ValidationFailedError("Invalid webhook body") from e

        result = LineIngestResult()
        client = LineClient(channel.access_token)
        extra_words = await self.danger_words.words_for_store(channel.store_id)

        for event in body.events:
            if not event.is_text_message or not event.source or not event.source.user_id:
                result.skipped += 1
                continue

            auto_replied = await self._ingest_line_message(event, channel, client, extra_words)
            result.processed += 1
            if auto_replied:
                result.auto_replied += 1

        logger.info(
            f"LINE webhook for store {channel.store_id}: processed={result.processed} "
            f"skipped={result.skipped} auto_replied={result.auto_replied}"
        )
        return result

    async def _ingest_line_message(
        self,
        event: LineEvent,
        channel: LineChannel,
        client: LineClient,
        extra_words: List[str],
    ) -> bool:
        text = event.message.text
        line_user_id = event.source.user_id
        profile = classifier.StoreProfile.from_store(channel.store) if channel.store else None
        result = classifier.classify(text, ChannelType.LINE, profile, extra_words=extra_words)

        thread = await self.threads.find_open_line_thread(channel.store_id, line_user_id)
        if thread is None:
            user_profile = await client.get_profile(line_user_id)
            user_name = (user_profile or {}).get("displayName") or DEFAULT_LINE_USER_NAME
            thread = Thread(
                store_id=channel.store_id,
                channel=ChannelType.LINE,
                user_name=user_name,
                user_id=line_user_id,
                status=result.status,
                tags=[],
                received_at=_event_time(event),
            )
            self.db.add(thread)
            await self.db.flush()
            logger.info(f"Created LINE thread {thread.id} for store {channel.store_id}")
        elif result.has_danger_word and thread.status == ThreadStatus.UNHANDLED:
            apply_status(thread, ThreadStatus.REVIEW)

        await self.threads.add_message(
            thread, MessageSender.USER, text, line_message_id=event.message.id
        )

        thread.last_message = text
        thread.tags = _merge_tags(thread.tags, result.tags)
        thread.ai_summary = result.summary
        thread.ai_intent = result.intent
        thread.ai_response = result.reply
        thread.has_danger_word = bool(thread.has_danger_word or result.has_danger_word)
        thread.is_read = False
        thread.updated_at = datetime.utcnow()

        auto_replied = False
        if not self._needs_manual_review(thread) and (
            result.reply and channel.auto_reply and event.reply_token
        ):
            if await client.reply_message(event.reply_token, result.reply):
                await self.threads.add_message(thread, MessageSender.AI, result.reply)
                thread.auto_replied = True
                apply_status(thread, ThreadStatus.COMPLETED)
                auto_replied = True
            else:
                logger.error(f"Auto-reply failed for thread {thread.id}")

        await self.db.commit()
        return auto_replied

    # ------------------------------------------------------------------
    # Google reviews
    # ------------------------------------------------------------------

    async def ingest_google_review(
        self,
        notification: GoogleReviewNotification,
        token: Optional[str] = None,
    ) -> GoogleIngestResult:
        """
        Store a Google review notification as a thread.

        Raises:
            SignatureError: If a webhook token is configured and does not match
            NotFoundError: If no store is connected to the location
        """
        if settings.GOOGLE_WEBHOOK_TOKEN and token != settings.GOOGLE_WEBHOOK_TOKEN:
            raise SignatureError("Invalid token")

        store = await self.stores.resolve_by_google_business(notification.location_id)
        if not store:
            raise NotFoundError("Unknown Google Business location")

        review = notification.review
        existing = await self.threads.find_google_review(store.id, review.review_id)
        if existing:
            logger.info(f"Ignoring duplicate Google review {review.review_id} for store {store.id}")
            return GoogleIngestResult(thread=existing, duplicate=True)

        rating = review.star_rating
        text = review.comment or ""
        extra_words = await self.danger_words.words_for_store(store.id)
        result = classifier.classify(
            text,
            ChannelType.GOOGLE,
            classifier.StoreProfile.from_store(store),
            rating=rating,
            extra_words=extra_words,
        )

        thread = Thread(
            store_id=store.id,
            channel=ChannelType.GOOGLE,
            user_name=review.reviewer_name,
            status=result.status,
            tags=result.tags,
            last_message=text,
            ai_summary=result.summary,
            ai_intent=result.intent,
            ai_response=result.reply,
            has_danger_word=result.has_danger_word,
            google_rating=rating,
            google_review_comment=text,
            google_review_id=review.review_id,
            google_review_name=review.name,
            received_at=datetime.utcnow(),
        )
        self.db.add(thread)
        await self.db.flush()
        await self.threads.add_message(thread, MessageSender.USER, text or f"★{rating}")

        auto_replied = False
        if (
            result.reply
            and store.auto_reply_enabled
            and store.google_access_token
            and review.name
        ):
            client = GoogleBusinessClient(store.google_access_token)
            if await client.reply_to_review(review.name, result.reply):
                await self.threads.add_message(thread, MessageSender.AI, result.reply)
                thread.auto_replied = True
                apply_status(thread, ThreadStatus.COMPLETED)
                auto_replied = True

        await self.db.commit()
        await self.db.refresh(thread)

        logger.info(
            f"Created Google review thread {thread.id} for store {store.id} "
            f"(rating={rating}, status={thread.status.value}, auto_replied={auto_replied})"
        )
        return GoogleIngestResult(thread=thread, auto_replied=auto_replied)
