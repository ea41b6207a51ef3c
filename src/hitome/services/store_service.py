"""
Store service for hitome.

Handles tenant CRUD, membership checks and webhook routing lookups.
"""

from typing import List, Optional
import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..models.store import (
    Store,
    StoreUser,
    StoreRole,
    StoreTone,
    StoreCategory,
    AlertSegment,
)
from ..schemas.store import BusinessHours, StoreCreate, StoreUpdate
from .exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


def _parse_hours(value) -> BusinessHours:
    try:
        return BusinessHours.parse(value)
    except (ValueError, TypeError, ValidationError) as e:
        raise ValidationFailedError(f"Invalid business hours: {value!r}") from e


class StoreService:
    """Service for managing stores and store membership."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: str, data: StoreCreate) -> Store:
        """
        Create a store owned by ``owner_id``.

        Raises:
            ValidationFailedError: If name or business hours are missing or malformed
        """
        name = (data.name or "").strip()
        if not name or not data.business_hours:
            raise ValidationFailedError("Name and business hours are required")
        hours = _parse_hours(data.business_hours)

        store = Store(
            name=name,
            owner_id=owner_id,
            business_hours_start=hours.start,
            business_hours_end=hours.end,
            tone=StoreTone(data.tone.value) if data.tone else StoreTone.POLITE,
            category=StoreCategory(data.category.value) if data.category else StoreCategory.SALON,
            alert_segment=(
                AlertSegment(data.alert_segment.value)
                if data.alert_segment else AlertSegment.STANDARD
            ),
            auto_reply_enabled=False,
            is_active=True,
        )
        self.db.add(store)
        await self.db.flush()

        self.db.add(StoreUser(store_id=store.id, user_id=owner_id, role=StoreRole.OWNER))
        await self.db.commit()
        await self.db.refresh(store)

        logger.info(f"Created store {store.id} '{name}' for owner {owner_id}")
        return store

    async def list_for_user(self, user_id: str) -> List[Store]:
        """Active stores the user belongs to, newest first."""
        result = await self.db.execute(
            select(Store)
            .join(StoreUser, StoreUser.store_id == Store.id)
            .where(StoreUser.user_id == user_id)
            .where(Store.is_active.is_(True))
            .order_by(Store.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_membership(self, user_id: str, store_id: str) -> Optional[StoreUser]:
        result = await self.db.execute(
            select(StoreUser)
            .where(StoreUser.user_id == user_id)
            .where(StoreUser.store_id == store_id)
        )
        return result.scalar_one_or_none()

    async def has_access(self, user_id: str, store_id: str) -> bool:
        return await self.get_membership(user_id, store_id) is not None

    async def get(self, store_id: str) -> Optional[Store]:
        """Get an active store by ID."""
        result = await self.db.execute(
            select(Store)
            .where(Store.id == store_id)
            .where(Store.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: str, store_id: str) -> Store:
        """
        Get a store the user is a member of.

        Raises:
            NotFoundError: If the store does not exist or is inactive
            AccessDeniedError: If the user is not a member
        """
        store = await self.get(store_id)
        if not store:
            raise NotFoundError("Store not found")
        if not await self.has_access(user_id, store_id):
            raise AccessDeniedError("Access denied")
        return store

    async def update(self, user_id: str, store_id: str, data: StoreUpdate) -> Store:
        """Update settings and credentials of a store the user belongs to."""
        store = await self.get_for_user(user_id, store_id)
        changes = data.model_dump(exclude_unset=True)

        if "business_hours" in changes:
            value = changes.pop("business_hours")
            if value:
                hours = _parse_hours(data.business_hours)
                store.business_hours_start = hours.start
                store.business_hours_end = hours.end

        await self._claim(
            store, Store.line_channel_id, changes.get("line_channel_id"),
            "LINE channel is already connected to another store",
        )
        await self._claim(
            store, Store.google_business_id, changes.get("google_business_id"),
            "Google Business profile is already connected to another store",
        )

        enum_fields = {
            "tone": StoreTone,
            "category": StoreCategory,
            "alert_segment": AlertSegment,
        }
        for field, value in changes.items():
            if value is None and field in ("name", "auto_reply_enabled", *enum_fields):
                continue
            if field in enum_fields:
                value = enum_fields[field](getattr(value, "value", value))
            elif isinstance(value, str):
                value = value.strip() or None
            setattr(store, field, value)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("LINE channel or Google Business profile is already in use") from e
        await self.db.refresh(store)

        logger.info(f"Updated store {store_id}: {sorted(changes)}")
        return store

    async def deactivate(self, user_id: str, store_id: str) -> Store:
        """
        Deactivate a store. Only its owner may do this.

        Raises:
            AccessDeniedError: If the user is not the owner
        """
        store = await self.get_for_user(user_id, store_id)
        membership = await self.get_membership(user_id, store_id)
        if membership.role != StoreRole.OWNER:
            raise AccessDeniedError("Only the owner can delete a store")

        store.is_active = False
        # Inactive stores hold no webhook routing keys
        store.line_channel_id = None
        store.google_business_id = None
        await self.db.commit()
        await self.db.refresh(store)

        logger.info(f"Deactivated store {store_id}")
        return store

    async def _claim(self, store: Store, column, value: Optional[str], message: str) -> None:
        """
        Make sure ``value`` for a unique routing column can be given to ``store``.

        A deactivated holder gives the value up; an active one is a conflict.
        """
        value = (value or "").strip()
        if not value:
            return
        result = await self.db.execute(select(Store).where(column == value))
        holder = result.scalar_one_or_none()
        if holder is None or holder.id == store.id:
            return
        if holder.is_active:
            raise ConflictError(message)

        setattr(holder, column.key, None)
        await self.db.flush()
        logger.info(f"Released {column.key} {value} from inactive store {holder.id}")

    async def resolve_by_line_channel(self, channel_id: Optional[str]) -> Optional[Store]:
        """Find the active store whose LINE channel ID matches."""
        if not channel_id:
            return None
        result = await self.db.execute(
            select(Store)
            .where(Store.line_channel_id == channel_id)
            .where(Store.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def resolve_by_google_business(self, business_id: Optional[str]) -> Optional[Store]:
        """Find the active store connected to a Google Business location."""
        if not business_id:
            return None
        result = await self.db.execute(
            select(Store)
            .where(Store.google_business_id == business_id)
            .where(Store.is_active.is_(True))
        )
        return result.scalar_one_or_none()
