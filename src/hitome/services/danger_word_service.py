"""
Danger word service for hitome.

Custom denylist words extend the built-in list. A word is either global
(store_id NULL) or scoped to one store.
"""

from typing import List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_

from ..models.danger_word import DangerWord
from .exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)


class DangerWordService:
    """Service for managing custom danger words."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_store(self, store_id: Optional[str]) -> List[DangerWord]:
        """Global words plus the store's own words, oldest first."""
        condition = DangerWord.store_id.is_(None)
        if store_id:
            condition = or_(condition, DangerWord.store_id == store_id)

        result = await self.db.execute(
            select(DangerWord)
            .where(condition)
            .order_by(DangerWord.created_at.asc())
        )
        return list(result.scalars().all())

    async def words_for_store(self, store_id: Optional[str]) -> List[str]:
        """Plain word list handed to the classifier."""
        return [row.word for row in await self.list_for_store(store_id)]

    async def add(self, word: Optional[str], store_id: Optional[str]) -> DangerWord:
        """
        Add a word for a store, or globally when ``store_id`` is None.

        Raises:
            ValidationFailedError: If the word is empty
            ConflictError: If the word already exists in that scope
        """
        word = (word or "").strip()
        if not word:
            raise ValidationFailedError("Word is required")

        scope = DangerWord.store_id.is_(None) if store_id is None else DangerWord.store_id == store_id
        result = await self.db.execute(
            select(DangerWord).where(scope).where(DangerWord.word == word)
        )
        if result.scalar_one_or_none():
            raise ConflictError(f"Danger word '{word}' already exists")

        row = DangerWord(word=word, store_id=store_id)
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)

        logger.info(f"Added danger word '{word}' ({'global' if store_id is None else store_id})")
        return row

    async def delete(self, word_id: str, store_id: Optional[str], allow_global: bool = False) -> None:
        """
        Delete a word of the store, or a global word when ``allow_global`` is set.

        Raises:
            NotFoundError: If the word does not exist or belongs to another store
            AccessDeniedError: If the word is global and ``allow_global`` is not set
        """
        result = await self.db.execute(select(DangerWord).where(DangerWord.id == word_id))
        row = result.scalar_one_or_none()
        if not row or (row.store_id is not None and row.store_id != store_id):
            raise NotFoundError("Danger word not found")
        if row.store_id is None and not allow_global:
            raise AccessDeniedError("Only administrators can delete global danger words")

        await self.db.delete(row)
        await self.db.commit()

        logger.info(f"Deleted danger word {word_id}")
