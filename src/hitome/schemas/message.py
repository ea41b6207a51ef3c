"""
Pydantic schemas for Message API.

Defines request/response models for per-thread message endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from .thread import ThreadResponse


class MessageSenderEnum(str, Enum):
    """Message sender values for API."""
    USER = "user"
    STORE = "store"
    AI = "ai"


class MessageResponse(BaseModel):
    """Response schema for a single message."""

    id: str = Field(..., description="Unique message identifier")
    thread_id: str = Field(..., description="Associated thread ID")
    sender: MessageSenderEnum = Field(..., description="Who wrote the message")
    content: str = Field(..., description="Message content")
    sequence: int = Field(..., description="Message sequence number in thread")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "msg_xyz789abc123",
                    "thread_id": "thread_abc123def456",
                    "sender": "user",
                    "content": "営業時間は何時までですか？",
                    "sequence": 1,
                    "created_at": "2024-01-02T10:32:00Z",
                }
            ]
        }
    }


class MessageList(BaseModel):
    """Response schema for listing a thread's messages."""

    messages: List[MessageResponse] = Field(..., description="Messages in order")
    thread_id: str = Field(..., description="Thread ID")
    success: bool = True


class ManualReply(BaseModel):
    """Request schema for a staff reply."""

    message: Optional[str] = Field(None, description="Reply text to send")

    model_config = {
        "json_schema_extra": {
            "examples": [{"message": "営業時間は21時までです。お待ちしております。"}]
        }
    }


class ReplyResult(BaseModel):
    """Response schema after a reply was delivered."""

    message: MessageResponse
    thread: ThreadResponse
    success: bool = True
