from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field


class RumPayload(BaseModel):
    """Web-Vitals report as sent by the browser."""

    name: Literal["LCP", "CLS", "INP", "FCP", "TTFB", "FID"]
    value: float
    rating: Literal["good", "needs-improvement", "poor"]
    delta: float
    id: str
    navigation_type: str = Field(alias="navigationType")
    url: AnyHttpUrl
    timestamp: float

    model_config = ConfigDict(populate_by_name=True)


class RumMetricRead(BaseModel):
    id: int
    metric_name: str
    metric_value: int
    metric_rating: str
    metric_delta: int
    metric_id: str
    navigation_type: str | None = None
    url: str
    user_agent: str | None = None
    ip_address: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RumMetricsPage(BaseModel):
    success: bool = True
    data: list[RumMetricRead]
    limit: int
    offset: int
    total: int
