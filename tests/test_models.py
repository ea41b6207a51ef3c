"""
Tests for database models.
"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession

from hitome.models.danger_word import DangerWord
from hitome.models.message import Message, MessageSender, generate_message_id
from hitome.models.session import Session, generate_session_id
from hitome.models.store import Store, StoreTone, AlertSegment
from hitome.models.thread import Thread, ThreadStatus, ChannelType, generate_thread_id
from hitome.models.user import User

from conftest import make_store, make_user


class TestIdGeneration:

    def test_generate_thread_id(self):
        id1 = generate_thread_id()
        id2 = generate_thread_id()

        assert id1.startswith("thread_")
        assert id1 != id2
        assert len(id1) == len("thread_") + 12

    def test_generate_message_id(self):
        assert generate_message_id().startswith("msg_")

    def test_generate_session_id_is_long(self):
        session_id = generate_session_id()
        assert session_id.startswith("session_")
        assert len(session_id) == len("session_") + 32

    def test_thread_status_values(self):
        assert ThreadStatus.UNHANDLED.value == "unhandled"
        assert ThreadStatus.REVIEW.value == "review"
        assert ThreadStatus.COMPLETED.value == "completed"


class TestStoreModel:

    @pytest.mark.asyncio
    async def test_store_defaults(self, db_session: AsyncSession):
        owner = await make_user(db_session)
        store = Store(name="Cafe", owner_id=owner.id)
        db_session.add(store)
        await db_session.commit()
        await db_session.refresh(store)

        assert store.id.startswith("store_")
        assert store.tone == StoreTone.POLITE
        assert store.alert_segment == AlertSegment.STANDARD
        assert store.auto_reply_enabled is False
        assert store.is_active is True
        assert store.business_hours == "09:00-21:00"

    @pytest.mark.asyncio
    async def test_store_to_dict_masks_secrets(self, db_session: AsyncSession):
        owner = await make_user(db_session)
        store = await make_store(
            db_session,
            owner,
            line_channel_id="1656789012",
            line_channel_secret="very-secret",
            line_access_token="very-token",
        )

        data = store.to_dict()

        assert data["lineChannelId"] == "1656789012"
        assert data["lineConnected"] is True
        assert data["googleConnected"] is False
        assert data["businessHours"] == {"start": "10:00", "end": "20:00"}
        assert "very-secret" not in str(data)
        assert "very-token" not in str(data)


class TestThreadModel:

    @pytest.mark.asyncio
    async def test_thread_creation(self, db_session: AsyncSession):
        thread = Thread(
            channel=ChannelType.LINE,
            user_name="Customer",
            user_id="U1",
            last_message="hello",
        )
        db_session.add(thread)
        await db_session.commit()
        await db_session.refresh(thread)

        assert thread.store_id is None
        assert thread.status == ThreadStatus.UNHANDLED
        assert thread.tags == []
        assert thread.is_read is False
        assert thread.received_at is not None
        assert thread.responded_at is None

    @pytest.mark.asyncio
    async def test_thread_to_dict(self, db_session: AsyncSession):
        thread = Thread(
            channel=ChannelType.GOOGLE,
            user_name="Reviewer",
            tags=["low_rating"],
            google_rating=2,
            last_message="微妙",
        )
        db_session.add(thread)
        await db_session.commit()
        await db_session.refresh(thread)

        data = thread.to_dict()

        assert data["channel"] == "GOOGLE"
        assert data["status"] == "unhandled"
        assert data["tags"] == ["low_rating"]
        assert data["google_rating"] == 2
        assert data["responded_at"] is None

    @pytest.mark.asyncio
    async def test_message_creation(self, db_session: AsyncSession):
        thread = Thread(channel=ChannelType.LINE, user_name="C", last_message="hi")
        db_session.add(thread)
        await db_session.flush()

        message = Message(thread_id=thread.id, sender=MessageSender.USER, content="hi", sequence=1)
        db_session.add(message)
        await db_session.commit()
        await db_session.refresh(message)

        data = message.to_dict()
        assert data["thread_id"] == thread.id
        assert data["sender"] == "user"
        assert data["sequence"] == 1


class TestSessionModel:

    def test_is_expired(self):
        now = datetime(2024, 1, 10, 12, 0, 0)
        session = Session(user_id="user_x", expires_at=now + timedelta(seconds=1))

        assert session.is_expired(now) is False
        assert session.is_expired(now + timedelta(seconds=1)) is True


class TestDangerWordModel:

    def test_to_dict_global_flag(self):
        global_word = DangerWord(word="炎上", store_id=None, created_at=datetime(2024, 1, 1))
        store_word = DangerWord(word="キャンセル料", store_id="store_1", created_at=datetime(2024, 1, 1))

        assert global_word.to_dict()["is_global"] is True
        assert store_word.to_dict()["is_global"] is False

    @pytest.mark.asyncio
    async def test_user_to_dict(self, db_session: AsyncSession):
        user = await make_user(db_session, name="Owner")
        user.avatar_url = "https://example.com/a.png"

        data = user.to_dict()
        assert data["name"] == "Owner"
        assert data["avatarUrl"] == "https://example.com/a.png"
        assert isinstance(user, User)
