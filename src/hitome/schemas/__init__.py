"""
Pydantic schemas for request/response validation.
"""

from .thread import (
    ThreadStatusEnum,
    ChannelEnum,
    ThreadResponse,
    ThreadList,
    ThreadDetail,
    ThreadStatusUpdate,
    ThreadReset,
)
from .message import (
    MessageSenderEnum,
    MessageResponse,
    MessageList,
    ManualReply,
    ReplyResult,
)
from .store import (
    BusinessHours,
    StoreCreate,
    StoreSwitch,
    StoreUpdate,
    StoreResponse,
    StoreDetail,
    StoreList,
    StoreCreated,
)
from .auth import UserResponse, StoreSummary, MeResponse
from .danger_word import (
    DangerWordCreate,
    DangerWordResponse,
    DangerWordList,
    DangerWordCreated,
)
from .metrics import MetricsResponse
from .webhook import (
    LineWebhookBody,
    LineEvent,
    LineWebhookResult,
    GoogleReviewNotification,
    GoogleWebhookResult,
)

__all__ = [
    "ThreadStatusEnum",
    "ChannelEnum",
    "ThreadResponse",
    "ThreadList",
    "ThreadDetail",
    "ThreadStatusUpdate",
    "ThreadReset",
    "MessageSenderEnum",
    "MessageResponse",
    "MessageList",
    "ManualReply",
    "ReplyResult",
    "BusinessHours",
    "StoreCreate",
    "StoreSwitch",
    "StoreUpdate",
    "StoreResponse",
    "StoreDetail",
    "StoreList",
    "StoreCreated",
    "UserResponse",
    "StoreSummary",
    "MeResponse",
    "DangerWordCreate",
    "DangerWordResponse",
    "DangerWordList",
    "DangerWordCreated",
    "MetricsResponse",
    "LineWebhookBody",
    "LineEvent",
    "LineWebhookResult",
    "GoogleReviewNotification",
    "GoogleWebhookResult",
]
