"""
Tests for per-thread message endpoints.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from hitome.models import ChannelType, Message, MessageSender, ThreadStatus
from hitome.services.google_client import GoogleBusinessClient
from hitome.services.line_client import LineClient
from hitome.services.thread_service import apply_status

from conftest import cookie_for, make_session, make_store, make_thread


async def add_message(db: AsyncSession, thread, content: str, sequence: int, sender=MessageSender.USER):
    message = Message(thread_id=thread.id, sender=sender, content=content, sequence=sequence)
    db.add(message)
    await db.commit()
    return message


@pytest.fixture
async def thread(db_session: AsyncSession, store):
    return await make_thread(db_session, store)


class TestApplyStatus:

    def test_completing_stamps_responded_at_once(self):
        from hitome.models import Thread

        thread = Thread(status=ThreadStatus.UNHANDLED)
        first = datetime(2024, 1, 2, 10, 0)
        second = first + timedelta(hours=1)

        apply_status(thread, ThreadStatus.COMPLETED, now=first)
        apply_status(thread, ThreadStatus.COMPLETED, now=second)

        assert thread.status == ThreadStatus.COMPLETED
        assert thread.responded_at == first
        assert thread.updated_at == second

    def test_leaving_completed_clears_responded_at(self):
        from hitome.models import Thread

        thread = Thread(status=ThreadStatus.COMPLETED, responded_at=datetime(2024, 1, 2))

        apply_status(thread, ThreadStatus.REVIEW, now=datetime(2024, 1, 3))

        assert thread.status == ThreadStatus.REVIEW
        assert thread.responded_at is None


@pytest.mark.asyncio
async def test_list_messages_in_order_and_marks_read(client: AsyncClient, db_session, thread, auth_headers):
    await add_message(db_session, thread, "second", 2)
    await add_message(db_session, thread, "first", 1)

    response = await client.get(f"/api/messages/{thread.id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert [m["content"] for m in data["messages"]] == ["first", "second"]
    assert data["thread_id"] == thread.id

    detail = await client.get(f"/api/threads/{thread.id}", headers=auth_headers)
    assert detail.json()["thread"]["is_read"] is True


@pytest.mark.asyncio
async def test_list_messages_other_store(client: AsyncClient, db_session, owner, thread):
    other = await make_store(db_session, owner, name="Other")
    session = await make_session(db_session, owner, other)

    response = await client.get(f"/api/messages/{thread.id}", headers=cookie_for(session))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_status_to_completed_and_back(client: AsyncClient, thread, auth_headers):
    response = await client.patch(
        f"/api/messages/{thread.id}", json={"status": "completed"}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()["thread"]
    assert data["status"] == "completed"
    assert data["responded_at"] is not None

    response = await client.patch(
        f"/api/messages/{thread.id}", json={"status": "unhandled"}, headers=auth_headers
    )

    data = response.json()["thread"]
    assert data["status"] == "unhandled"
    assert data["responded_at"] is None


@pytest.mark.asyncio
async def test_update_status_invalid(client: AsyncClient, thread, auth_headers):
    response = await client.patch(
        f"/api/messages/{thread.id}", json={"status": "archived"}, headers=auth_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_manual_reply_line(client: AsyncClient, db_session, store, thread, auth_headers):
    store.line_access_token = "store-token"
    await db_session.commit()

    with patch.object(LineClient, "push_message", new=AsyncMock(return_value=True)) as push:
        response = await client.post(
            f"/api/messages/{thread.id}",
            json={"message": "ご連絡ありがとうございます。"},
            headers=auth_headers,
        )

    assert response.status_code == 200
    data = response.json()
    assert data["message"]["sender"] == "store"
    assert data["message"]["content"] == "ご連絡ありがとうございます。"
    assert data["thread"]["status"] == "completed"
    assert data["thread"]["responded_at"] is not None
    assert data["thread"]["last_message"] == "ご連絡ありがとうございます。"

    push.assert_awaited_once()
    assert push.await_args.args == ("Ucustomer0001", "ご連絡ありがとうございます。")


@pytest.mark.asyncio
async def test_manual_reply_empty_message(client: AsyncClient, thread, auth_headers):
    response = await client.post(f"/api/messages/{thread.id}", json={"message": "  "}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "Message is required"


@pytest.mark.asyncio
async def test_manual_reply_without_line_token(client: AsyncClient, thread, auth_headers):
    response = await client.post(f"/api/messages/{thread.id}", json={"message": "hi"}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_manual_reply_upstream_failure_stores_nothing(
    client: AsyncClient, db_session, store, thread, auth_headers
):
    store.line_access_token = "store-token"
    await db_session.commit()

    with patch.object(LineClient, "push_message", new=AsyncMock(return_value=False)):
        response = await client.post(
            f"/api/messages/{thread.id}", json={"message": "hi"}, headers=auth_headers
        )

    assert response.status_code == 502

    messages = await client.get(f"/api/messages/{thread.id}", headers=auth_headers)
    assert messages.json()["messages"] == []
    detail = await client.get(f"/api/threads/{thread.id}", headers=auth_headers)
    assert detail.json()["thread"]["status"] == "unhandled"


@pytest.mark.asyncio
async def test_manual_reply_unassigned_thread_uses_env_token(
    client: AsyncClient, db_session, admin, line_env
):
    session = await make_session(db_session, admin, None)
    thread = await make_thread(db_session, None)

    with patch.object(LineClient, "push_message", new=AsyncMock(return_value=True)) as push:
        response = await client.post(
            f"/api/messages/{thread.id}", json={"message": "hi"}, headers=cookie_for(session)
        )

    assert response.status_code == 200
    push.assert_awaited_once()


@pytest.mark.asyncio
async def test_unassigned_thread_is_closed_to_non_admins(
    client: AsyncClient, db_session, owner, line_env
):
    session = await make_session(db_session, owner, None)
    thread = await make_thread(db_session, None)

    with patch.object(LineClient, "push_message", new=AsyncMock(return_value=True)) as push:
        reply = await client.post(
            f"/api/messages/{thread.id}", json={"message": "hi"}, headers=cookie_for(session)
        )
    listed = await client.get(f"/api/messages/{thread.id}", headers=cookie_for(session))

    assert reply.status_code == 400
    assert reply.json()["error"] == "No store selected"
    assert listed.status_code == 400
    push.assert_not_awaited()


@pytest.mark.asyncio
async def test_manual_reply_google(client: AsyncClient, db_session, store, auth_headers):
    store.google_access_token = "google-token"
    store.google_business_id = "locations/1"
    await db_session.commit()
    thread = await make_thread(
        db_session,
        store,
        channel=ChannelType.GOOGLE,
        user_id=None,
        google_rating=2,
        google_review_id="rev-9",
        google_review_name="accounts/1/locations/1/reviews/rev-9",
        status=ThreadStatus.REVIEW,
    )

    with patch.object(GoogleBusinessClient, "reply_to_review", new=AsyncMock(return_value=True)) as reply:
        response = await client.post(
            f"/api/messages/{thread.id}",
            json={"message": "ご意見ありがとうございます。"},
            headers=auth_headers,
        )

    assert response.status_code == 200
    assert response.json()["thread"]["status"] == "completed"
    reply.assert_awaited_once_with("accounts/1/locations/1/reviews/rev-9", "ご意見ありがとうございます。")
