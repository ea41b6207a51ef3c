"""
Store API routes.

Tenant CRUD and switching the session's current store.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.connection import get_db
from ..models.session import Session
from ..schemas.store import (
    StoreCreate,
    StoreCreated,
    StoreDetail,
    StoreList,
    StoreResponse,
    StoreSwitch,
    StoreUpdate,
)
from ..services.auth_service import AuthService
from ..services.exceptions import HitomeError
from ..services.store_service import StoreService
from .deps import raise_http, require_session

router = APIRouter()


def get_store_service(db: AsyncSession = Depends(get_db)) -> StoreService:
    """Dependency to get store service."""
    return StoreService(db)


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.get("/", response_model=StoreList)
async def list_stores(
    session: Session = Depends(require_session),
    service: StoreService = Depends(get_store_service),
):
    """
    List the active stores the user belongs to, newest first.
    """
    stores = await service.list_for_user(session.user_id)
    return StoreList(stores=[StoreResponse(**s.to_dict()) for s in stores])


@router.post("/", response_model=StoreCreated, status_code=201)
async def create_store(
    data: StoreCreate,
    session: Session = Depends(require_session),
    service: StoreService = Depends(get_store_service),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Create a store owned by the user and make it the current store.
    """
    try:
        store = await service.create(session.user_id, data)
    except HitomeError as e:
        raise_http(e)

    await auth_service.update_session_store(session, store.id)
    return StoreCreated(storeId=store.id)


@router.patch("/", response_model=StoreDetail)
async def switch_store(
    data: StoreSwitch,
    session: Session = Depends(require_session),
    service: StoreService = Depends(get_store_service),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Switch the session's current store.
    """
    if not data.store_id:
        raise HTTPException(status_code=400, detail="storeId is required")

    try:
        store = await service.get_for_user(session.user_id, data.store_id)
    except HitomeError as e:
        raise_http(e)

    await auth_service.update_session_store(session, store.id)
    return StoreDetail(store=StoreResponse(**store.to_dict()))


@router.get("/{store_id}", response_model=StoreDetail)
async def get_store(
    store_id: str,
    session: Session = Depends(require_session),
    service: StoreService = Depends(get_store_service),
):
    """
    Get one store's settings. Credentials are reported only as connected flags.
    """
    try:
        store = await service.get_for_user(session.user_id, store_id)
    except HitomeError as e:
        raise_http(e)

    return StoreDetail(store=StoreResponse(**store.to_dict()))


@router.put("/{store_id}", response_model=StoreDetail)
async def update_store(
    store_id: str,
    data: StoreUpdate,
    session: Session = Depends(require_session),
    service: StoreService = Depends(get_store_service),
):
    """
    Update a store's settings and channel credentials.
    """
    try:
        store = await service.update(session.user_id, store_id, data)
    except HitomeError as e:
        raise_http(e)

    return StoreDetail(store=StoreResponse(**store.to_dict()))


@router.delete("/{store_id}")
async def delete_store(
    store_id: str,
    session: Session = Depends(require_session),
    service: StoreService = Depends(get_store_service),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Deactivate a store. Only the owner may do this.
    """
    try:
        await service.deactivate(session.user_id, store_id)
    except HitomeError as e:
        raise_http(e)

    if session.store_id == store_id:
        await auth_service.update_session_store(session, None)

    return {"success": True, "storeId": store_id}
