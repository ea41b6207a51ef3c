"""
Pydantic schemas for KPI metrics.
"""

from pydantic import BaseModel, Field


class MetricsResponse(BaseModel):
    """Response-time KPIs for one store."""

    unhandledCount: int = Field(0, description="Threads waiting for a reply")
    reviewCount: int = Field(0, description="Threads flagged for manual review")
    missedThisMonth: int = Field(
        0,
        description="Unhandled threads this month older than the alert segment"
    )
    avgResponseMinutes: int = Field(
        0,
        description="Mean minutes from receipt to reply for threads completed this month"
    )
    zeroUnhandledDays: int = Field(
        0,
        description="Days this month with nothing received that day left unhandled"
    )
    success: bool = True
