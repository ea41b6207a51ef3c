"""
Response-time KPIs for hitome.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Iterable, Optional
import math

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..models.store import AlertSegment
from ..models.thread import Thread, ThreadStatus
from .thread_service import store_scope

# Minutes an unhandled thread may wait before it counts as missed
ALERT_SEGMENT_MINUTES = {
    AlertSegment.IMMEDIATE: 30,
    AlertSegment.STANDARD: 120,
    AlertSegment.RELAXED: 1440,
}


@dataclass
class KPIMetrics:
    unhandledCount: int = 0
    reviewCount: int = 0
    missedThisMonth: int = 0
    avgResponseMinutes: int = 0
    zeroUnhandledDays: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_metrics(
    threads: Iterable[Thread],
    alert_segment: AlertSegment = AlertSegment.STANDARD,
    now: Optional[datetime] = None,
) -> KPIMetrics:
    """Compute KPIs over a store's threads. All datetimes are naive UTC."""
    now = now or datetime.utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    alert_minutes = ALERT_SEGMENT_MINUTES[alert_segment]
    threads = list(threads)

    unhandled = [t for t in threads if t.status == ThreadStatus.UNHANDLED]
    this_month = [t for t in threads if t.received_at >= month_start]

    missed = 0
    for thread in this_month:
        if thread.status != ThreadStatus.UNHANDLED:
            continue
        elapsed_minutes = math.floor((now - thread.received_at).total_seconds() / 60)
        if elapsed_minutes > alert_minutes:
            missed += 1

    response_minutes = [
        (t.responded_at - t.received_at).total_seconds() / 60
        for t in this_month
        if t.status == ThreadStatus.COMPLETED and t.responded_at is not None
    ]
    avg_response = (
        math.floor(sum(response_minutes) / len(response_minutes))
        if response_minutes else 0
    )

    # A day counts when nothing received on it is still waiting for a reply
    days_with_unhandled = {
        t.received_at.date() for t in this_month if t.status == ThreadStatus.UNHANDLED
    }
    zero_days = 0
    day = month_start.date()
    while day <= now.date():
        if day not in days_with_unhandled:
            zero_days += 1
        day += timedelta(days=1)

    return KPIMetrics(
        unhandledCount=len(unhandled),
        reviewCount=sum(1 for t in threads if t.status == ThreadStatus.REVIEW),
        missedThisMonth=missed,
        avgResponseMinutes=max(avg_response, 0),
        zeroUnhandledDays=zero_days,
    )


class MetricsService:
    """Loads a store's threads and computes its KPIs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def for_store(
        self,
        store_id: Optional[str],
        alert_segment: AlertSegment = AlertSegment.STANDARD,
        now: Optional[datetime] = None,
    ) -> KPIMetrics:
        result = await self.db.execute(select(Thread).where(store_scope(store_id)))
        return calculate_metrics(result.scalars().all(), alert_segment, now)
