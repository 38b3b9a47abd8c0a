from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from contramind.schemas.contract import ContractRead
from contramind.schemas.subscription import SubscriptionRead
from contramind.schemas.user import UserRead


class DashboardStats(BaseModel):
    total_users: int
    active_subscriptions: int
    open_tickets: int
    revenue: int


class AdminUserDetail(BaseModel):
    user: UserRead
    subscription: SubscriptionRead | None = None
    contracts: list[ContractRead]


class AuditLogRead(BaseModel):
    id: int
    admin_user_id: int
    action: str
    resource_type: str | None = None
    resource_id: int | None = None
    details: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PromptRead(BaseModel):
    id: int
    category: str
    title: str
    title_ar: str | None = None
    prompt: str
    prompt_ar: str | None = None
    display_order: int

    model_config = ConfigDict(from_attributes=True)
