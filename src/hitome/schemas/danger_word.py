"""
Pydantic schemas for the danger word API.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class DangerWordCreate(BaseModel):
    """Request schema for adding a danger word."""

    word: Optional[str] = Field(None, max_length=128, description="Substring to flag")
    is_global: bool = Field(
        False,
        alias="global",
        description="Apply to every store instead of the current one"
    )

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [{"word": "キャンセル料", "global": False}]
        }
    }


class DangerWordResponse(BaseModel):
    id: str
    word: str
    is_global: bool = Field(..., serialization_alias="global")
    created_at: datetime


class DangerWordList(BaseModel):
    """Built-in words plus the custom rows that apply to the current store."""

    builtin: List[str]
    custom: List[DangerWordResponse]
    success: bool = True


class DangerWordCreated(BaseModel):
    word: DangerWordResponse
    success: bool = True
