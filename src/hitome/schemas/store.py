"""
Pydantic schemas for Store API.

Store payloads use camelCase on the wire.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional, List, Union
from datetime import datetime
from enum import Enum
import re


_HOURS_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ToneEnum(str, Enum):
    POLITE = "polite"
    STANDARD = "standard"
    CASUAL = "casual"


class CategoryEnum(str, Enum):
    SALON = "salon"
    RESTAURANT = "restaurant"
    MEDICAL = "medical"


class AlertSegmentEnum(str, Enum):
    IMMEDIATE = "immediate"
    STANDARD = "standard"
    RELAXED = "relaxed"


class BusinessHours(BaseModel):
    """Opening and closing time, both "HH:MM"."""

    start: str = Field(..., description="Opening time")
    end: str = Field(..., description="Closing time")

    @field_validator("start", "end")
    @classmethod
    def check_format(cls, value: str) -> str:
        value = value.strip()
        if not _HOURS_RE.match(value):
            raise ValueError("time must be HH:MM")
        return value

    @classmethod
    def parse(cls, value: Union[str, dict, "BusinessHours"]) -> "BusinessHours":
        """Accept either "09:00-21:00" (also with 〜 or ~) or {start, end}."""
        if isinstance(value, BusinessHours):
            return value
        if isinstance(value, dict):
            return cls(**value)
        parts = re.split(r"\s*[-〜~]\s*", str(value).strip(), maxsplit=1)
        if len(parts) != 2:
            raise ValueError("business hours must look like 09:00-21:00")
        return cls(start=parts[0], end=parts[1])


class StoreCreate(BaseModel):
    """Request schema for creating a store. name and businessHours are checked by the service."""

    name: Optional[str] = Field(None, max_length=255, description="Store name")
    business_hours: Optional[Any] = Field(
        None,
        alias="businessHours",
        description='Either "09:00-21:00" or {"start": "09:00", "end": "21:00"}'
    )
    tone: Optional[ToneEnum] = None
    category: Optional[CategoryEnum] = None
    alert_segment: Optional[AlertSegmentEnum] = Field(None, alias="alertSegment")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Hair Salon Hitome",
                    "businessHours": "09:00-21:00",
                    "tone": "polite",
                    "category": "salon",
                    "alertSegment": "standard",
                }
            ]
        }
    }


class StoreSwitch(BaseModel):
    """Request schema for switching the session's current store."""

    store_id: Optional[str] = Field(None, alias="storeId")

    model_config = {"populate_by_name": True}


class StoreUpdate(BaseModel):
    """Request schema for updating store settings and credentials."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    business_hours: Optional[Any] = Field(None, alias="businessHours")
    tone: Optional[ToneEnum] = None
    category: Optional[CategoryEnum] = None
    alert_segment: Optional[AlertSegmentEnum] = Field(None, alias="alertSegment")
    auto_reply_enabled: Optional[bool] = Field(None, alias="autoReplyEnabled")
    line_channel_id: Optional[str] = Field(None, alias="lineChannelId")
    line_channel_secret: Optional[str] = Field(None, alias="lineChannelSecret")
    line_access_token: Optional[str] = Field(None, alias="lineAccessToken")
    google_access_token: Optional[str] = Field(None, alias="googleAccessToken")
    google_business_id: Optional[str] = Field(None, alias="googleBusinessId")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "autoReplyEnabled": True,
                    "lineChannelId": "1656789012",
                    "lineChannelSecret": "********",
                    "lineAccessToken": "********",
                }
            ]
        }
    }


class StoreResponse(BaseModel):
    """Response schema for a single store. Secrets are reported as connected flags."""

    id: str
    name: str
    ownerId: Optional[str] = None
    businessHours: BusinessHours
    tone: ToneEnum
    category: CategoryEnum
    alertSegment: AlertSegmentEnum
    autoReplyEnabled: bool
    lineChannelId: Optional[str] = None
    lineConnected: bool = False
    googleBusinessId: Optional[str] = None
    googleConnected: bool = False
    isActive: bool = True
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class StoreDetail(BaseModel):
    store: StoreResponse
    success: bool = True


class StoreList(BaseModel):
    """Response schema for listing the user's stores."""

    stores: List[StoreResponse]
    success: bool = True


class StoreCreated(BaseModel):
    storeId: str
    success: bool = True
