"""
Tests for the Google review webhook.
"""

import pytest
from unittest.mock import AsyncMock, patch
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hitome.config import settings
from hitome.models import Thread, ThreadStatus, ChannelType
from hitome.database.connection import make_session_factory
from hitome.services.google_client import GoogleBusinessClient

from conftest import make_store


LOCATION = "locations/1234567890"


def notification(review_id: str = "rev-1", rating="FIVE", comment: str = "スタッフが親切でした") -> dict:
    return {
        "locationId": LOCATION,
        "review": {
            "reviewId": review_id,
            "name": f"accounts/1/{LOCATION}/reviews/{review_id}",
            "reviewer": {"displayName": "佐藤 健"},
            "starRating": rating,
            "comment": comment,
        },
    }


async def load_threads(test_engine) -> list:
    factory = make_session_factory(test_engine)
    async with factory() as session:
        result = await session.execute(select(Thread))
        return list(result.scalars().all())


@pytest.fixture
def google_api():
    with patch.object(
        GoogleBusinessClient, "reply_to_review", new=AsyncMock(return_value=True)
    ) as reply:
        yield reply


@pytest.fixture(autouse=True)
def no_webhook_token(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_WEBHOOK_TOKEN", None)


@pytest.fixture
async def google_store(db_session: AsyncSession, owner):
    return await make_store(
        db_session,
        owner,
        google_business_id=LOCATION,
        google_access_token="google-token",
        auto_reply_enabled=True,
    )


@pytest.mark.asyncio
async def test_high_rating_is_auto_replied(client: AsyncClient, test_engine, google_store, google_api):
    response = await client.post("/api/webhook/google", json=notification())

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["autoReplied"] is True

    thread = (await load_threads(test_engine))[0]
    assert thread.id == data["threadId"]
    assert thread.store_id == google_store.id
    assert thread.channel == ChannelType.GOOGLE
    assert thread.user_name == "佐藤 健"
    assert thread.google_rating == 5
    assert thread.status == ThreadStatus.COMPLETED
    assert thread.responded_at is not None

    review_name, reply_text = google_api.await_args.args
    assert review_name == f"accounts/1/{LOCATION}/reviews/rev-1"
    assert google_store.name in reply_text


@pytest.mark.asyncio
async def test_low_rating_needs_review(client: AsyncClient, test_engine, google_store, google_api):
    response = await client.post(
        "/api/webhook/google", json=notification(rating=2, comment="待ち時間が長かった")
    )

    assert response.json()["autoReplied"] is False
    google_api.assert_not_awaited()

    thread = (await load_threads(test_engine))[0]
    assert thread.status == ThreadStatus.REVIEW
    assert "low_rating" in thread.tags
    assert thread.ai_intent == "低評価"


@pytest.mark.asyncio
async def test_auto_reply_off(client: AsyncClient, test_engine, db_session, owner, google_api):
    await make_store(
        db_session,
        owner,
        google_business_id=LOCATION,
        google_access_token="google-token",
        auto_reply_enabled=False,
    )

    response = await client.post("/api/webhook/google", json=notification())

    assert response.json()["autoReplied"] is False
    google_api.assert_not_awaited()
    thread = (await load_threads(test_engine))[0]
    assert thread.status == ThreadStatus.UNHANDLED


@pytest.mark.asyncio
async def test_redelivery_is_idempotent(client: AsyncClient, test_engine, google_store, google_api):
    first = await client.post("/api/webhook/google", json=notification())
    second = await client.post("/api/webhook/google", json=notification())

    assert second.status_code == 200
    assert second.json()["duplicate"] is True
    assert second.json()["threadId"] == first.json()["threadId"]
    assert len(await load_threads(test_engine)) == 1
    assert google_api.await_count == 1


@pytest.mark.asyncio
async def test_unknown_location(client: AsyncClient):
    response = await client.post("/api/webhook/google", json=notification())

    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_token_required_when_configured(client: AsyncClient, monkeypatch, google_store, google_api):
    monkeypatch.setattr(settings, "GOOGLE_WEBHOOK_TOKEN", "hook-token")

    rejected = await client.post("/api/webhook/google?token=nope", json=notification())
    accepted = await client.post("/api/webhook/google?token=hook-token", json=notification())

    assert rejected.status_code == 401
    assert accepted.status_code == 200


@pytest.mark.asyncio
async def test_invalid_rating_is_rejected(client: AsyncClient, google_store):
    response = await client.post("/api/webhook/google", json=notification(rating=7))

    assert response.status_code == 422
    assert response.json()["success"] is False
    assert "details" in response.json()
