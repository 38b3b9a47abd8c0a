"""Health check and real-user-monitoring ingestion, served under ``/api``."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_db, require_admin
from contramind.models.user import User
from contramind.schemas.common import SuccessResponse
from contramind.schemas.rum import RumMetricRead, RumMetricsPage, RumPayload
from contramind.services import rum as rum_service


router = APIRouter()


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.post("/rum", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED, tags=["rum"])
def ingest_rum_metric(
    payload: RumPayload,
    request: Request,
    db: Session = Depends(get_db),
) -> SuccessResponse:
    rum_service.store_metric(
        db,
        payload,
        user_agent=request.headers.get("user-agent"),
        ip_address=_client_ip(request),
    )
    db.commit()
    return SuccessResponse()


@router.get("/rum/metrics", response_model=RumMetricsPage, tags=["rum"])
def list_rum_metrics(
    limit: int = Query(default=100, ge=1),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> RumMetricsPage:
    limit = min(limit, rum_service.MAX_PAGE_SIZE)
    metrics = rum_service.list_metrics(db, limit=limit, offset=offset)
    total = rum_service.count_metrics(db)
    return RumMetricsPage(
        data=[RumMetricRead.model_validate(m) for m in metrics],
        limit=limit,
        offset=offset,
        total=total,
    )
