"""
Pydantic schemas for Thread API.

Defines request/response models for inbox endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ThreadStatusEnum(str, Enum):
    """Thread status values for API."""
    UNHANDLED = "unhandled"
    REVIEW = "review"
    COMPLETED = "completed"


class ChannelEnum(str, Enum):
    """Channel values for API."""
    LINE = "LINE"
    GOOGLE = "GOOGLE"


class ThreadResponse(BaseModel):
    """Response schema for a single thread."""

    id: str = Field(..., description="Unique thread identifier")
    store_id: Optional[str] = Field(None, description="Owning store")
    channel: ChannelEnum = Field(..., description="Source channel")
    user_name: str = Field(..., description="Customer display name")
    user_id: Optional[str] = Field(None, description="Customer ID on the channel")
    status: ThreadStatusEnum = Field(..., description="Handling status")
    tags: List[str] = Field(default_factory=list, description="Rule-based tags")
    last_message: str = Field(..., description="Latest customer text")
    ai_summary: Optional[str] = Field(None, description="Generated summary")
    ai_intent: Optional[str] = Field(None, description="Generated intent label")
    ai_response: Optional[str] = Field(
        None,
        description="Suggested reply; empty when the thread needs manual handling"
    )
    has_danger_word: bool = Field(False, description="A danger word was detected")
    is_read: bool = Field(False, description="Opened by staff")
    auto_replied: bool = Field(False, description="An automatic reply was sent")
    google_rating: Optional[int] = Field(None, description="Review star rating")
    google_review_comment: Optional[str] = Field(None, description="Review text")
    received_at: datetime = Field(..., description="When the first item arrived")
    responded_at: Optional[datetime] = Field(None, description="When it was answered")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "thread_abc123def456",
                    "store_id": "store_0a1b2c3d4e5f",
                    "channel": "LINE",
                    "user_name": "田中 美咲",
                    "user_id": "U4af4980629",
                    "status": "unhandled",
                    "tags": ["reservation"],
                    "last_message": "明日の19時から2名で予約したいです",
                    "ai_summary": "予約の問い合わせ。日時・人数の確認が必要",
                    "ai_intent": "予約希望",
                    "ai_response": "ご予約のお問い合わせありがとうございます。",
                    "has_danger_word": False,
                    "is_read": False,
                    "auto_replied": False,
                    "google_rating": None,
                    "google_review_comment": None,
                    "received_at": "2024-01-02T10:30:00Z",
                    "responded_at": None,
                    "created_at": "2024-01-02T10:30:00Z",
                    "updated_at": "2024-01-02T10:30:00Z",
                }
            ]
        }
    }


class ThreadList(BaseModel):
    """Response schema for listing threads."""

    threads: List[ThreadResponse] = Field(..., description="List of threads")
    total: int = Field(..., description="Number of threads returned")
    success: bool = True


class ThreadDetail(BaseModel):
    """Response schema wrapping a single thread."""

    thread: ThreadResponse
    success: bool = True


class ThreadStatusUpdate(BaseModel):
    """Request schema for changing a thread's status."""

    status: ThreadStatusEnum = Field(..., description="New status for the thread")

    model_config = {
        "json_schema_extra": {
            "examples": [{"status": "completed"}]
        }
    }


class ThreadReset(BaseModel):
    """Response schema for the inbox reset."""

    deleted: int = Field(..., description="Number of threads removed")
    success: bool = True
