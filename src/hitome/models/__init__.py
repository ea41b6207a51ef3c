"""
SQLAlchemy models for hitome.
"""

from .user import User
from .store import (
    Store,
    StoreUser,
    StoreTone,
    StoreCategory,
    StoreRole,
    AlertSegment,
)
from .session import Session
from .thread import Thread, ThreadStatus, ChannelType
from .message import Message, MessageSender
from .danger_word import DangerWord

__all__ = [
    "User",
    "Store",
    "StoreUser",
    "StoreTone",
    "StoreCategory",
    "StoreRole",
    "AlertSegment",
    "Session",
    "Thread",
    "ThreadStatus",
    "ChannelType",
    "Message",
    "MessageSender",
    "DangerWord",
]
