"""
Danger word API routes.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.connection import get_db
from ..schemas.danger_word import (
    DangerWordCreate,
    DangerWordCreated,
    DangerWordList,
    DangerWordResponse,
)
from ..services.classifier import DANGER_WORDS
from ..services.danger_word_service import DangerWordService
from ..services.exceptions import HitomeError
from .deps import get_current_store, get_is_admin, raise_http

router = APIRouter()


def get_danger_word_service(db: AsyncSession = Depends(get_db)) -> DangerWordService:
    """Dependency to get danger word service."""
    return DangerWordService(db)


@router.get("/", response_model=DangerWordList)
async def list_danger_words(
    store=Depends(get_current_store),
    service: DangerWordService = Depends(get_danger_word_service),
):
    """
    Built-in danger words plus the custom words that apply to the current store.
    """
    rows = await service.list_for_store(store.id if store else None)
    return DangerWordList(
        builtin=list(DANGER_WORDS),
        custom=[DangerWordResponse(**row.to_dict()) for row in rows],
    )


@router.post(
    "/",
    response_model=DangerWordCreated,
    status_code=201,
)
async def add_danger_word(
    data: DangerWordCreate,
    store=Depends(get_current_store),
    is_admin: bool = Depends(get_is_admin),
    service: DangerWordService = Depends(get_danger_word_service),
):
    """
    Add a custom danger word to the current store, or to every store with ``global``.
    """
    if data.is_global and not is_admin:
        raise HTTPException(status_code=403, detail="Only administrators can manage global danger words")
    if not data.is_global and store is None:
        raise HTTPException(status_code=400, detail="No store selected")

    store_id = None if data.is_global else store.id
    try:
        row = await service.add(data.word, store_id)
    except HitomeError as e:
        raise_http(e)

    return DangerWordCreated(word=DangerWordResponse(**row.to_dict()))


@router.delete("/{word_id}")
async def delete_danger_word(
    word_id: str,
    store=Depends(get_current_store),
    is_admin: bool = Depends(get_is_admin),
    service: DangerWordService = Depends(get_danger_word_service),
):
    """
    Delete a custom danger word.
    """
    try:
        await service.delete(word_id, store.id if store else None, allow_global=is_admin)
    except HitomeError as e:
        raise_http(e)

    return {"success": True, "id": word_id}
