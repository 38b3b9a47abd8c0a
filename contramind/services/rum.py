from __future__ import annotations

import math

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from contramind.models.admin import RumMetric
from contramind.schemas.rum import RumPayload

MAX_PAGE_SIZE = 1000


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def store_metric(
    db: Session, payload: RumPayload, *, user_agent: str | None, ip_address: str | None
) -> RumMetric:
    metric = RumMetric(
        metric_name=payload.name,
        metric_value=_round_half_up(payload.value),
        metric_rating=payload.rating,
        metric_delta=_round_half_up(payload.delta),
        metric_id=payload.id,
        navigation_type=payload.navigation_type,
        url=str(payload.url),
        user_agent=user_agent,
        ip_address=ip_address,
    )
    db.add(metric)
    db.flush()
    return metric


def list_metrics(db: Session, *, limit: int = 100, offset: int = 0) -> list[RumMetric]:
    stmt = (
        select(RumMetric)
        .order_by(RumMetric.created_at, RumMetric.id)
        .offset(offset)
        .limit(min(limit, MAX_PAGE_SIZE))
    )
    return list(db.scalars(stmt))


def count_metrics(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(RumMetric)) or 0
