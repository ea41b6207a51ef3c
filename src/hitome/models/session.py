"""
Login session model for hitome.

Maps an opaque cookie token to a user and the store they are working in.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey
from datetime import datetime
from typing import Optional
import uuid

from ..database.connection import Base


def generate_session_id() -> str:
    """Generate a unique session ID."""
    return f"session_{uuid.uuid4().hex}"


class Session(Base):
    """SQLAlchemy model for login sessions."""
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True, default=generate_session_id)

    user_id = Column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    store_id = Column(
        String(64),
        ForeignKey("stores.id", ondelete="SET NULL"),
        nullable=True
    )

    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Session(id={self.id[:16]}..., user_id={self.user_id}, store_id={self.store_id})>"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())
