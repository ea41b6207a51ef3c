"""
Tests for store API endpoints.
"""

import pytest
from httpx import AsyncClient

from hitome.models import StoreRole

from conftest import cookie_for, make_session, make_store, make_user


@pytest.fixture
async def fresh_login(db_session, owner):
    """A login session with no store selected."""
    return await make_session(db_session, owner, None)


@pytest.mark.asyncio
async def test_create_store_selects_it(client: AsyncClient, fresh_login):
    headers = cookie_for(fresh_login)

    response = await client.post(
        "/api/stores/",
        json={"name": "Cafe Hitome", "businessHours": "08:00-18:00", "category": "restaurant"},
        headers=headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    store_id = data["storeId"]
    assert store_id.startswith("store_")

    me = await client.get("/api/auth/me", headers=headers)
    assert me.json()["currentStoreId"] == store_id

    detail = await client.get(f"/api/stores/{store_id}", headers=headers)
    store = detail.json()["store"]
    assert store["businessHours"] == {"start": "08:00", "end": "18:00"}
    assert store["tone"] == "polite"
    assert store["category"] == "restaurant"
    assert store["alertSegment"] == "standard"
    assert store["autoReplyEnabled"] is False


@pytest.mark.asyncio
async def test_create_store_accepts_hours_object(client: AsyncClient, fresh_login):
    response = await client.post(
        "/api/stores/",
        json={"name": "Salon", "businessHours": {"start": "09:30", "end": "19:00"}},
        headers=cookie_for(fresh_login),
    )

    assert response.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"businessHours": "09:00-21:00"},
    {"name": "Salon"},
    {"name": "   ", "businessHours": "09:00-21:00"},
    {"name": "Salon", "businessHours": "all day"},
    {"name": "Salon", "businessHours": {"start": "9"}},
    {"name": "Salon", "businessHours": {"start": "09:00", "end": "25:00"}},
    {"name": "Salon", "businessHours": 900},
])
async def test_create_store_validation(client: AsyncClient, fresh_login, payload):
    response = await client.post("/api/stores/", json=payload, headers=cookie_for(fresh_login))

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_list_stores_only_active_memberships(client: AsyncClient, db_session, owner, store, auth_headers):
    stranger = await make_user(db_session, line_user_id="Ustranger", name="Stranger")
    await make_store(db_session, stranger, name="Not Mine")
    closed = await make_store(db_session, owner, name="Closed")
    closed.is_active = False
    await db_session.commit()

    response = await client.get("/api/stores/", headers=auth_headers)

    assert response.status_code == 200
    assert [s["name"] for s in response.json()["stores"]] == [store.name]


@pytest.mark.asyncio
async def test_switch_store(client: AsyncClient, db_session, owner, store, fresh_login):
    headers = cookie_for(fresh_login)

    response = await client.patch("/api/stores/", json={"storeId": store.id}, headers=headers)

    assert response.status_code == 200
    me = await client.get("/api/auth/me", headers=headers)
    assert me.json()["currentStoreId"] == store.id


@pytest.mark.asyncio
async def test_switch_store_requires_id(client: AsyncClient, fresh_login):
    response = await client.patch("/api/stores/", json={}, headers=cookie_for(fresh_login))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_switch_to_foreign_store_is_forbidden(client: AsyncClient, db_session, fresh_login):
    stranger = await make_user(db_session, line_user_id="Ustranger", name="Stranger")
    foreign = await make_store(db_session, stranger, name="Foreign")

    response = await client.patch(
        "/api/stores/", json={"storeId": foreign.id}, headers=cookie_for(fresh_login)
    )

    assert response.status_code == 403
    assert response.json()["error"] == "Access denied"


@pytest.mark.asyncio
async def test_get_store_hides_credentials(client: AsyncClient, db_session, store, auth_headers):
    store.line_channel_id = "1656789012"
    store.line_channel_secret = "secret-value"
    store.line_access_token = "token-value"
    await db_session.commit()

    response = await client.get(f"/api/stores/{store.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["store"]["lineConnected"] is True
    assert "secret-value" not in response.text
    assert "token-value" not in response.text


@pytest.mark.asyncio
async def test_update_store(client: AsyncClient, store, auth_headers):
    response = await client.put(
        f"/api/stores/{store.id}",
        json={
            "tone": "casual",
            "alertSegment": "immediate",
            "autoReplyEnabled": True,
            "businessHours": "11:00〜23:00",
            "lineChannelId": "1656789012",
            "lineChannelSecret": "secret",
            "lineAccessToken": "token",
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["store"]
    assert data["tone"] == "casual"
    assert data["alertSegment"] == "immediate"
    assert data["autoReplyEnabled"] is True
    assert data["businessHours"] == {"start": "11:00", "end": "23:00"}
    assert data["lineChannelId"] == "1656789012"
    assert data["lineConnected"] is True


@pytest.mark.asyncio
async def test_update_store_malformed_hours(client: AsyncClient, store, auth_headers):
    response = await client.put(
        f"/api/stores/{store.id}", json={"businessHours": {"start": "9"}}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_update_store_conflicting_channel(client: AsyncClient, db_session, owner, store, auth_headers):
    await make_store(db_session, owner, name="Other", line_channel_id="1600000000")

    response = await client.put(
        f"/api/stores/{store.id}", json={"lineChannelId": "1600000000"}, headers=auth_headers
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_store_takes_channel_from_inactive_store(
    client: AsyncClient, db_session, owner, store, auth_headers
):
    closed = await make_store(
        db_session, owner, name="Closed", line_channel_id="1600000000", google_business_id="loc-1"
    )
    closed.is_active = False
    await db_session.commit()

    response = await client.put(
        f"/api/stores/{store.id}",
        json={"lineChannelId": "1600000000", "googleBusinessId": "loc-1"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["store"]
    assert data["lineChannelId"] == "1600000000"
    assert data["googleBusinessId"] == "loc-1"

    await db_session.refresh(closed)
    assert closed.line_channel_id is None
    assert closed.google_business_id is None


@pytest.mark.asyncio
async def test_delete_store_releases_channel(client: AsyncClient, db_session, owner, store, auth_headers):
    old = await make_store(db_session, owner, name="Old", line_channel_id="1600000000")

    deleted = await client.delete(f"/api/stores/{old.id}", headers=auth_headers)
    assert deleted.status_code == 200

    response = await client.put(
        f"/api/stores/{store.id}", json={"lineChannelId": "1600000000"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["store"]["lineChannelId"] == "1600000000"


@pytest.mark.asyncio
async def test_non_member_cannot_read_or_update(client: AsyncClient, db_session, store):
    stranger = await make_user(db_session, line_user_id="Ustranger", name="Stranger")
    headers = cookie_for(await make_session(db_session, stranger, None))

    assert (await client.get(f"/api/stores/{store.id}", headers=headers)).status_code == 403
    assert (await client.put(f"/api/stores/{store.id}", json={"tone": "casual"}, headers=headers)).status_code == 403


@pytest.mark.asyncio
async def test_delete_store_owner_only(client: AsyncClient, db_session, owner, store, auth_headers):
    member = await make_user(db_session, line_user_id="Umember", name="Member")
    shared = await make_store(db_session, owner, name="Shared")
    from hitome.models import StoreUser

    db_session.add(StoreUser(store_id=shared.id, user_id=member.id, role=StoreRole.MEMBER))
    await db_session.commit()
    member_headers = cookie_for(await make_session(db_session, member, shared))

    forbidden = await client.delete(f"/api/stores/{shared.id}", headers=member_headers)
    assert forbidden.status_code == 403

    deleted = await client.delete(f"/api/stores/{store.id}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    listed = await client.get("/api/stores/", headers=auth_headers)
    assert store.id not in [s["id"] for s in listed.json()["stores"]]

    me = await client.get("/api/auth/me", headers=auth_headers)
    assert me.json()["currentStoreId"] is None


@pytest.mark.asyncio
async def test_store_endpoints_require_login(client: AsyncClient):
    response = await client.get("/api/stores/")

    assert response.status_code == 401
