"""
Pydantic schemas for inbound webhooks.

LINE payloads follow the Messaging API webhook format; only the fields the
inbox needs are declared and everything else is ignored.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Union


class LineSource(BaseModel):
    type: str = "user"
    user_id: Optional[str] = Field(None, alias="userId")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class LineMessage(BaseModel):
    id: Optional[str] = None
    type: str
    text: Optional[str] = None

    model_config = {"extra": "ignore"}


class LineEvent(BaseModel):
    type: str
    reply_token: Optional[str] = Field(None, alias="replyToken")
    source: Optional[LineSource] = None
    timestamp: Optional[int] = None
    message: Optional[LineMessage] = None

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @property
    def is_text_message(self) -> bool:
        return (
            self.type == "message"
            and self.message is not None
            and self.message.type == "text"
            and bool(self.message.text)
        )


class LineWebhookBody(BaseModel):
    destination: Optional[str] = None
    events: List[LineEvent] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class LineWebhookResult(BaseModel):
    success: bool = True
    processed: int = 0
    skipped: int = 0
    autoReplied: int = 0


_STAR_NAMES = {"ONE": 1, "TWO": 2, "THREE": 3, "FOUR": 4, "FIVE": 5}


class GoogleReview(BaseModel):
    """A review as delivered by a Google Business Profile notification."""

    review_id: str = Field(..., alias="reviewId", min_length=1)
    name: Optional[str] = Field(
        None,
        description="Resource name accounts/*/locations/*/reviews/*, needed to reply"
    )
    reviewer: Union[str, dict, None] = None
    star_rating: Union[int, str] = Field(..., alias="starRating")
    comment: str = ""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @field_validator("star_rating")
    @classmethod
    def normalize_rating(cls, value: Union[int, str]) -> int:
        if isinstance(value, str):
            key = value.strip().upper()
            if key in _STAR_NAMES:
                return _STAR_NAMES[key]
            value = int(key)
        if not 1 <= value <= 5:
            raise ValueError("starRating must be between 1 and 5")
        return value

    @property
    def reviewer_name(self) -> str:
        if isinstance(self.reviewer, dict):
            return self.reviewer.get("displayName") or "Google User"
        return self.reviewer or "Google User"


class GoogleReviewNotification(BaseModel):
    location_id: str = Field(..., alias="locationId", min_length=1)
    review: GoogleReview

    model_config = {"populate_by_name": True, "extra": "ignore"}


class GoogleWebhookResult(BaseModel):
    success: bool = True
    threadId: str
    autoReplied: bool = False
    duplicate: bool = False
