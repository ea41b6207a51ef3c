"""
Thread model for hitome.

A thread is one inbox item: a LINE conversation with a customer or a single
Google review.
"""

from sqlalchemy import (
    Column, String, DateTime, Enum, JSON, Text, Boolean, Integer, ForeignKey,
)
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import uuid

from ..database.connection import Base


class ThreadStatus(str, enum.Enum):
    """Handling status of a thread."""
    UNHANDLED = "unhandled"  # Waiting for a reply
    REVIEW = "review"        # Needs a careful manual response
    COMPLETED = "completed"  # Replied to


class ChannelType(str, enum.Enum):
    """Where the thread came from."""
    LINE = "LINE"
    GOOGLE = "GOOGLE"


def generate_thread_id() -> str:
    """Generate a unique thread ID."""
    return f"thread_{uuid.uuid4().hex[:12]}"


class Thread(Base):
    """SQLAlchemy model for inbox threads."""
    __tablename__ = "threads"

    id = Column(String(64), primary_key=True, default=generate_thread_id)

    # Tenant; NULL for threads received on the environment-level LINE channel
    store_id = Column(
        String(64),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    channel = Column(Enum(ChannelType), nullable=False, index=True)
    user_name = Column(String(255), nullable=False, default="")
    user_id = Column(String(64), nullable=True, index=True)

    status = Column(
        Enum(ThreadStatus),
        default=ThreadStatus.UNHANDLED,
        nullable=False,
        index=True
    )
    tags = Column(JSON, nullable=False, default=list)
    last_message = Column(Text, nullable=False, default="")

    # Rule-based suggestions
    ai_summary = Column(Text, nullable=True)
    ai_intent = Column(String(64), nullable=True)
    ai_response = Column(Text, nullable=True)

    has_danger_word = Column(Boolean, nullable=False, default=False)
    is_read = Column(Boolean, nullable=False, default=False)
    auto_replied = Column(Boolean, nullable=False, default=False)

    # Google review fields
    google_rating = Column(Integer, nullable=True)
    google_review_comment = Column(Text, nullable=True)
    google_review_id = Column(String(255), nullable=True, index=True)
    google_review_name = Column(String(512), nullable=True)

    # Timestamps
    received_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    messages = relationship(
        "Message",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="Message.sequence",
    )

    def __repr__(self) -> str:
        return f"<Thread(id={self.id}, channel={self.channel}, status={self.status})>"

    def to_dict(self) -> dict:
        """Convert thread to dictionary for API responses."""
        return {
            "id": self.id,
            "store_id": self.store_id,
            "channel": self.channel.value if self.channel else None,
            "user_name": self.user_name,
            "user_id": self.user_id,
            "status": self.status.value if self.status else None,
            "tags": list(self.tags or []),
            "last_message": self.last_message,
            "ai_summary": self.ai_summary,
            "ai_intent": self.ai_intent,
            "ai_response": self.ai_response,
            "has_danger_word": bool(self.has_danger_word),
            "is_read": bool(self.is_read),
            "auto_replied": bool(self.auto_replied),
            "google_rating": self.google_rating,
            "google_review_comment": self.google_review_comment,
            "received_at": self.received_at.isoformat() if self.received_at else None,
            "responded_at": self.responded_at.isoformat() if self.responded_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
