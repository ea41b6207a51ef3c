"""
KPI metrics route.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.connection import get_db
from ..models.store import AlertSegment
from ..schemas.metrics import MetricsResponse
from ..services.metrics_service import MetricsService
from .deps import get_inbox_store

router = APIRouter()


def get_metrics_service(db: AsyncSession = Depends(get_db)) -> MetricsService:
    """Dependency to get metrics service."""
    return MetricsService(db)


@router.get("/", response_model=MetricsResponse)
async def get_metrics(
    store=Depends(get_inbox_store),
    service: MetricsService = Depends(get_metrics_service),
):
    """
    Response-time KPIs for the current store.

    Administrators without a selected store see the unassigned inbox,
    measured with the standard alert segment.
    """
    if store is None:
        metrics = await service.for_store(None, AlertSegment.STANDARD)
    else:
        metrics = await service.for_store(store.id, store.alert_segment)
    return MetricsResponse(**metrics.to_dict())
