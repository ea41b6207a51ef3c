"""
Thread service for hitome.

Handles inbox threads and their messages: listing and filtering, status
transitions, manual replies and the per-store reset.
"""

from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete

from ..config import settings
from ..models.message import Message, MessageSender
from ..models.store import Store
from ..models.thread import Thread, ThreadStatus, ChannelType
from .exceptions import (
    NotConfiguredError,
    NotFoundError,
    UpstreamError,
    ValidationFailedError,
)
from .google_client import GoogleBusinessClient
from .line_client import LineClient

logger = logging.getLogger(__name__)


def store_scope(store_id: Optional[str]):
    """Threads of a store; store_id None selects the unassigned (environment channel) inbox."""
    if store_id is None:
        return Thread.store_id.is_(None)
    return Thread.store_id == store_id


def apply_status(thread: Thread, status: ThreadStatus, now: Optional[datetime] = None) -> None:
    """
    Set a thread's status and keep responded_at consistent with it.

    Completing stamps responded_at once; leaving completed clears it.
    """
    now = now or datetime.utcnow()
    if status == ThreadStatus.COMPLETED:
        if thread.responded_at is None:
            thread.responded_at = now
    else:
        thread.responded_at = None
    thread.status = status
    thread.updated_at = now


class ThreadService:
    """Service for inbox threads and messages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(
        self,
        store_id: Optional[str],
        status: Optional[ThreadStatus] = None,
        channel: Optional[ChannelType] = None,
        tag: Optional[str] = None,
        unread: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[Thread]:
        """
        List a store's threads, newest first.

        Args:
            store_id: Store to list (None for unassigned threads)
            status: Filter by status
            channel: Filter by channel
            tag: Only threads carrying this tag
            unread: True for unread only, False for read only
            limit: Maximum number of threads

        Returns:
            List of threads
        """
        query = select(Thread).where(store_scope(store_id))

        if status:
            query = query.where(Thread.status == status)
        if channel:
            query = query.where(Thread.channel == channel)
        if unread is not None:
            query = query.where(Thread.is_read.is_(not unread))

        query = query.order_by(Thread.received_at.desc(), Thread.created_at.desc())

        result = await self.db.execute(query)
        threads = list(result.scalars().all())

        # Tags are a JSON list; filter them here rather than in SQL
        if tag:
            threads = [t for t in threads if tag in (t.tags or [])]
        if limit:
            threads = threads[:limit]
        return threads

    async def get(self, thread_id: str, store_id: Optional[str]) -> Thread:
        """
        Get a thread that belongs to the store.

        Raises:
            NotFoundError: If the thread does not exist in this store
        """
        result = await self.db.execute(
            select(Thread)
            .where(Thread.id == thread_id)
            .where(store_scope(store_id))
        )
        thread = result.scalar_one_or_none()
        if not thread:
            raise NotFoundError("Thread not found")
        return thread

    async def get_messages(self, thread: Thread, mark_read: bool = True) -> List[Message]:
        """Messages of a thread in order. Opening a thread marks it read."""
        result = await self.db.execute(
            select(Message)
            .where(Message.thread_id == thread.id)
            .order_by(Message.sequence.asc(), Message.created_at.asc())
        )
        messages = list(result.scalars().all())

        if mark_read and not thread.is_read:
            thread.is_read = True
            await self.db.commit()

        return messages

    async def add_message(
        self,
        thread: Thread,
        sender: MessageSender,
        content: str,
        line_message_id: Optional[str] = None,
    ) -> Message:
        """Append a message with the next sequence number. Does not commit."""
        max_seq_result = await self.db.execute(
            select(func.max(Message.sequence))
            .where(Message.thread_id == thread.id)
        )
        max_seq = max_seq_result.scalar() or 0

        message = Message(
            thread_id=thread.id,
            sender=sender,
            content=content,
            sequence=max_seq + 1,
            line_message_id=line_message_id,
        )
        self.db.add(message)
        await self.db.flush()
        return message

    async def update_status(self, thread: Thread, status: ThreadStatus) -> Thread:
        previous = thread.status
        apply_status(thread, status)

        await self.db.commit()
        await self.db.refresh(thread)

        logger.info(f"Thread {thread.id} status changed from {previous.value} to {status.value}")
        return thread

    async def find_open_line_thread(
        self,
        store_id: Optional[str],
        line_user_id: str,
    ) -> Optional[Thread]:
        """The customer's most recent LINE thread that has not been completed."""
        result = await self.db.execute(
            select(Thread)
            .where(store_scope(store_id))
            .where(Thread.channel == ChannelType.LINE)
            .where(Thread.user_id == line_user_id)
            .where(Thread.status != ThreadStatus.COMPLETED)
            .order_by(Thread.received_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_google_review(self, store_id: Optional[str], review_id: str) -> Optional[Thread]:
        result = await self.db.execute(
            select(Thread)
            .where(store_scope(store_id))
            .where(Thread.channel == ChannelType.GOOGLE)
            .where(Thread.google_review_id == review_id)
        )
        return result.scalars().first()

    async def send_manual_reply(
        self,
        thread: Thread,
        text: Optional[str],
        store: Optional[Store] = None,
    ) -> Message:
        """
        Deliver a staff reply and complete the thread.

        LINE threads are answered with a push message to the customer; Google
        threads get an owner reply on the review. Nothing is stored when the
        upstream call fails.

        Raises:
            ValidationFailedError: If the text is empty
            NotConfiguredError: If the channel credentials are missing
            UpstreamError: If LINE or Google rejected the reply
        """
        text = (text or "").strip()
        if not text:
            raise ValidationFailedError("Message is required")

        if thread.channel == ChannelType.LINE:
            token = store.line_access_token if store else settings.LINE_CHANNEL_ACCESS_TOKEN
            if not token:
                raise NotConfiguredError("LINE channel is not configured")
            if not thread.user_id:
                raise ValidationFailedError("Thread has no LINE user to reply to")
            sent = await LineClient(token).push_message(thread.user_id, text)
        else:
            if not store or not store.google_access_token:
                raise NotConfiguredError("Google Business is not configured")
            if not thread.google_review_name:
                raise ValidationFailedError("Review cannot be replied to")
            sent = await GoogleBusinessClient(store.google_access_token).reply_to_review(
                thread.google_review_name, text
            )

        if not sent:
            raise UpstreamError("Failed to send reply")

        message = await self.add_message(thread, MessageSender.STORE, text)
        thread.last_message = text
        thread.is_read = True
        apply_status(thread, ThreadStatus.COMPLETED)

        await self.db.commit()
        await self.db.refresh(message)
        await self.db.refresh(thread)

        logger.info(f"Manual reply sent on thread {thread.id} ({thread.channel.value})")
        return message

    async def reset(self, store_id: Optional[str]) -> int:
        """Delete every thread and message of a store."""
        thread_ids = select(Thread.id).where(store_scope(store_id))

        count_result = await self.db.execute(
            select(func.count()).select_from(thread_ids.subquery())
        )
        count = count_result.scalar() or 0

        await self.db.execute(delete(Message).where(Message.thread_id.in_(thread_ids)))
        await self.db.execute(delete(Thread).where(store_scope(store_id)))
        await self.db.commit()

        logger.info(f"Reset inbox for store {store_id}: {count} threads deleted")
        return count
