"""
Message model for hitome.

Represents one entry of a thread's conversation.
"""

from sqlalchemy import Column, String, DateTime, Enum, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import uuid

from ..database.connection import Base


class MessageSender(str, enum.Enum):
    """Who wrote the message."""
    USER = "user"    # The customer
    STORE = "store"  # Staff reply
    AI = "ai"        # Automatic reply


def generate_message_id() -> str:
    """Generate a unique message ID."""
    return f"msg_{uuid.uuid4().hex[:12]}"


class Message(Base):
    """
    SQLAlchemy model for thread messages.

    Messages are associated with a thread and ordered by sequence number.
    """
    __tablename__ = "messages"

    id = Column(String(64), primary_key=True, default=generate_message_id)

    thread_id = Column(
        String(64),
        ForeignKey("threads.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    sender = Column(Enum(MessageSender), nullable=False)
    content = Column(Text, nullable=False)

    # Ordering within thread
    sequence = Column(Integer, nullable=False, default=0)

    # Upstream message id (LINE message.id), when there is one
    line_message_id = Column(String(64), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    thread = relationship("Thread", back_populates="messages")

    def __repr__(self) -> str:
        content_preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"<Message(id={self.id}, sender={self.sender}, content='{content_preview}')>"

    def to_dict(self) -> dict:
        """Convert message to dictionary for API responses."""
        return {
            "id": self.id,
            "thread_id": self.thread_id,
            "sender": self.sender.value if self.sender else None,
            "content": self.content,
            "sequence": self.sequence,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
