"""
Store model for hitome.

A store is one tenant business with its own settings and channel credentials.
"""

from sqlalchemy import (
    Column, String, DateTime, Enum, Boolean, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import uuid

from ..database.connection import Base


class StoreTone(str, enum.Enum):
    """Tone used by generated replies."""
    POLITE = "polite"
    STANDARD = "standard"
    CASUAL = "casual"


class StoreCategory(str, enum.Enum):
    """Business category of the store."""
    SALON = "salon"
    RESTAURANT = "restaurant"
    MEDICAL = "medical"


class AlertSegment(str, enum.Enum):
    """How quickly an unhandled thread must be answered."""
    IMMEDIATE = "immediate"  # 30 minutes
    STANDARD = "standard"    # 2 hours
    RELAXED = "relaxed"      # next business day


class StoreRole(str, enum.Enum):
    """Role of a user inside a store."""
    OWNER = "owner"
    MEMBER = "member"


def generate_store_id() -> str:
    """Generate a unique store ID."""
    return f"store_{uuid.uuid4().hex[:12]}"


def generate_store_user_id() -> str:
    return f"su_{uuid.uuid4().hex[:12]}"


class Store(Base):
    """
    SQLAlchemy model for stores (tenants).

    LINE and Google credentials live on the store so that webhooks can be
    routed to the right tenant by channel or business ID.
    """
    __tablename__ = "stores"

    id = Column(String(64), primary_key=True, default=generate_store_id)

    name = Column(String(255), nullable=False)
    owner_id = Column(
        String(64),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Profile used by reply templates
    business_hours_start = Column(String(5), nullable=False, default="09:00")
    business_hours_end = Column(String(5), nullable=False, default="21:00")
    tone = Column(Enum(StoreTone), nullable=False, default=StoreTone.POLITE)
    category = Column(Enum(StoreCategory), nullable=False, default=StoreCategory.SALON)
    alert_segment = Column(
        Enum(AlertSegment),
        nullable=False,
        default=AlertSegment.STANDARD
    )
    auto_reply_enabled = Column(Boolean, nullable=False, default=False)

    # LINE Messaging API credentials
    line_channel_id = Column(String(64), nullable=True, unique=True, index=True)
    line_channel_secret = Column(String(255), nullable=True)
    line_access_token = Column(String(1024), nullable=True)

    # Google Business Profile credentials
    google_access_token = Column(String(2048), nullable=True)
    google_business_id = Column(String(255), nullable=True, unique=True, index=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    members = relationship(
        "StoreUser",
        back_populates="store",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Store(id={self.id}, name={self.name}, active={self.is_active})>"

    @property
    def business_hours(self) -> str:
        return f"{self.business_hours_start}-{self.business_hours_end}"

    def to_dict(self) -> dict:
        """Convert store to dictionary for API responses. Secrets are masked."""
        return {
            "id": self.id,
            "name": self.name,
            "ownerId": self.owner_id,
            "businessHours": {
                "start": self.business_hours_start,
                "end": self.business_hours_end,
            },
            "tone": self.tone.value if self.tone else None,
            "category": self.category.value if self.category else None,
            "alertSegment": self.alert_segment.value if self.alert_segment else None,
            "autoReplyEnabled": bool(self.auto_reply_enabled),
            "lineChannelId": self.line_channel_id,
            "lineConnected": bool(self.line_channel_secret and self.line_access_token),
            "googleBusinessId": self.google_business_id,
            "googleConnected": bool(self.google_access_token and self.google_business_id),
            "isActive": bool(self.is_active),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class StoreUser(Base):
    """Membership of a user in a store."""
    __tablename__ = "store_users"
    __table_args__ = (
        UniqueConstraint("store_id", "user_id", name="uq_store_users_store_user"),
    )

    id = Column(String(64), primary_key=True, default=generate_store_user_id)
    store_id = Column(
        String(64),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    role = Column(Enum(StoreRole), nullable=False, default=StoreRole.MEMBER)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    store = relationship("Store", back_populates="members")
    user = relationship("User", back_populates="memberships")

    def __repr__(self) -> str:
        return f"<StoreUser(store_id={self.store_id}, user_id={self.user_id}, role={self.role})>"
