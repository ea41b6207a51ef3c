"""
Pydantic schemas for the authentication endpoints.
"""

from pydantic import BaseModel
from typing import Optional, List


class UserResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    avatarUrl: Optional[str] = None


class StoreSummary(BaseModel):
    id: str
    name: str
    isActive: bool


class MeResponse(BaseModel):
    """Current user, their stores, and the store the session points at."""

    authenticated: bool = True
    user: UserResponse
    currentStoreId: Optional[str] = None
    stores: List[StoreSummary]
