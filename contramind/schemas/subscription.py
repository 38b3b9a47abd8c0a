from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from contramind.models.enums import (
    BillingCycle,
    PaymentStatus,
    SubscriptionStatus,
    SubscriptionTier,
)


class SubscriptionRead(BaseModel):
    id: int
    user_id: int
    tier: SubscriptionTier
    status: SubscriptionStatus
    billing_cycle: BillingCycle
    current_period_start: datetime
    current_period_end: datetime
    payment_method_last4: str | None = None
    payment_method_brand: str | None = None
    cancel_at_period_end: bool
    canceled_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class PaymentRead(BaseModel):
    id: int
    user_id: int
    subscription_id: int | None = None
    amount: int
    currency: str
    status: PaymentStatus
    payment_method: str | None = None
    transaction_id: str | None = None
    failure_reason: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlanRead(BaseModel):
    tier: SubscriptionTier
    name: str
    name_ar: str
    price_monthly: int
    price_annual: int
    currency: str = "SAR"


class CheckoutRequest(BaseModel):
    tier: SubscriptionTier
    billing_cycle: BillingCycle
    source_token: str = Field(min_length=1, description="Token issued by the gateway card SDK")
    redirect_url: str = Field(min_length=1)


class CheckoutResponse(BaseModel):
    payment_id: int
    charge_id: str
    status: str
    redirect_url: str | None = None


class WebhookEvent(BaseModel):
    """Subset of the gateway webhook body; only the charge id is trusted."""

    id: str = Field(min_length=1)
    object: str | None = None
    status: str | None = None

    model_config = ConfigDict(extra="allow")


class WebhookResult(BaseModel):
    payment_id: int
    status: PaymentStatus
