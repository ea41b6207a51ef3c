"""
Danger word model for hitome.

Custom denylist entries. A NULL store_id makes the word apply to every store.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime
import uuid

from ..database.connection import Base


def generate_danger_word_id() -> str:
    return f"dw_{uuid.uuid4().hex[:12]}"


class DangerWord(Base):
    """SQLAlchemy model for per-store or global danger words."""
    __tablename__ = "danger_words"
    __table_args__ = (
        UniqueConstraint("store_id", "word", name="uq_danger_words_store_word"),
    )

    id = Column(String(64), primary_key=True, default=generate_danger_word_id)
    store_id = Column(
        String(64),
        ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )
    word = Column(String(128), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<DangerWord(id={self.id}, word={self.word}, store_id={self.store_id})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "word": self.word,
            "is_global": self.store_id is None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
