from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from contramind.models.billing import Payment, Subscription
from contramind.models.enums import (
    AccountStatus,
    BillingCycle,
    PaymentStatus,
    SubscriptionStatus,
    SubscriptionTier,
)
from contramind.models.user import User
from contramind.schemas.subscription import PlanRead
from contramind.services.payment_gateway import Charge, ChargeCustomer, ChargeRequest, TapPaymentClient

logger = logging.getLogger(__name__)

PLANS: dict[SubscriptionTier, PlanRead] = {
    SubscriptionTier.STARTER: PlanRead(
        tier=SubscriptionTier.STARTER, name="Starter", name_ar="المبتدئ",
        price_monthly=299, price_annual=2990,
    ),
    SubscriptionTier.PROFESSIONAL: PlanRead(
        tier=SubscriptionTier.PROFESSIONAL, name="Professional", name_ar="المحترف",
        price_monthly=799, price_annual=7990,
    ),
    SubscriptionTier.BUSINESS: PlanRead(
        tier=SubscriptionTier.BUSINESS, name="Business", name_ar="الأعمال",
        price_monthly=1999, price_annual=19990,
    ),
}

PERIOD_LENGTH = {
    BillingCycle.MONTHLY: timedelta(days=30),
    BillingCycle.ANNUAL: timedelta(days=365),
}


class UnknownPlanError(ValueError):
    """Raised for tiers that cannot be purchased (the free trial)."""


@dataclass
class SettlementResult:
    payment: Payment
    newly_settled: bool


def plan_price(tier: SubscriptionTier, cycle: BillingCycle) -> int:
    plan = PLANS.get(tier)
    if plan is None:
        raise UnknownPlanError(f"Tier {tier.value} cannot be purchased")
    return plan.price_monthly if cycle == BillingCycle.MONTHLY else plan.price_annual


def get_user_subscription(db: Session, user_id: int) -> Subscription | None:
    return db.scalar(select(Subscription).where(Subscription.user_id == user_id))


def list_user_payments(db: Session, user_id: int, *, limit: int = 50, offset: int = 0) -> list[Payment]:
    stmt = (
        select(Payment)
        .where(Payment.user_id == user_id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(db.scalars(stmt))


def get_payment_by_transaction(
    db: Session, transaction_id: str, *, for_update: bool = False
) -> Payment | None:
    """Look up a payment by gateway charge id; ``for_update`` locks and re-reads the row."""
    stmt = select(Payment).where(Payment.transaction_id == transaction_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    return db.scalar(stmt)


def total_revenue(db: Session) -> int:
    stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
        Payment.status == PaymentStatus.SUCCESS
    )
    return int(db.scalar(stmt) or 0)


async def start_checkout(
    db: Session,
    gateway: TapPaymentClient,
    *,
    user: User,
    tier: SubscriptionTier,
    cycle: BillingCycle,
    source_token: str,
    redirect_url: str,
) -> tuple[Payment, Charge]:
    """
    Create a gateway charge for the plan and record it as a pending payment.

    Raises:
        UnknownPlanError: ``tier`` has no price.
        PaymentGatewayError: the gateway is not configured or rejected the charge.
    """
    amount = plan_price(tier, cycle)
    charge = await gateway.create_charge(
        ChargeRequest(
            amount=amount,
            customer=ChargeCustomer(email=user.email, first_name=user.name),
            source_id=source_token,
            redirect_url=redirect_url,
            metadata={"user_id": user.id, "tier": tier.value, "billing_cycle": cycle.value},
        )
    )
    payment = Payment(
        user_id=user.id,
        amount=amount,
        currency="SAR",
        status=PaymentStatus.PENDING,
        transaction_id=charge.id,
        tier=tier,
        billing_cycle=cycle,
        payment_method=charge.payment_method,
    )
    db.add(payment)
    db.flush()
    logger.info("Created pending payment %s for user %s (charge %s)", payment.id, user.id, charge.id)
    return payment, charge


def settle_payment(db: Session, payment: Payment, charge: Charge) -> SettlementResult:
    """
    Apply the gateway's view of ``charge`` to ``payment``.

    A successful charge activates (or renews) the user's subscription. Payments
    already settled are left untouched so redelivered webhooks are harmless.
    """
    if payment.status != PaymentStatus.PENDING or charge.pending:
        return SettlementResult(payment=payment, newly_settled=False)

    if not charge.succeeded:
        payment.status = PaymentStatus.FAILED
        payment.failure_reason = charge.response_message or f"Charge {charge.status}"
        db.flush()
        logger.info("Payment %s failed: %s", payment.id, payment.failure_reason)
        return SettlementResult(payment=payment, newly_settled=True)

    payment.status = PaymentStatus.SUCCESS
    payment.gateway_payment_id = charge.id
    payment.payment_method = charge.payment_method or payment.payment_method

    tier = payment.tier or SubscriptionTier.STARTER
    cycle = payment.billing_cycle or BillingCycle.MONTHLY
    now = datetime.now(timezone.utc)

    subscription = get_user_subscription(db, payment.user_id)
    if subscription is None:
        subscription = Subscription(user_id=payment.user_id)
        db.add(subscription)
    subscription.tier = tier
    subscription.status = SubscriptionStatus.ACTIVE
    subscription.billing_cycle = cycle
    subscription.current_period_start = now
    subscription.current_period_end = now + PERIOD_LENGTH[cycle]
    subscription.cancel_at_period_end = False
    subscription.canceled_at = None
    if charge.last4:
        subscription.payment_method_last4 = charge.last4
    if charge.brand:
        subscription.payment_method_brand = charge.brand
    db.flush()
    payment.subscription_id = subscription.id

    user = db.get(User, payment.user_id)
    if user is not None:
        user.subscription_tier = tier
        user.subscription_status = AccountStatus.ACTIVE
    db.flush()
    logger.info("Payment %s succeeded; subscription %s active until %s",
                payment.id, subscription.id, subscription.current_period_end)
    return SettlementResult(payment=payment, newly_settled=True)


def cancel_subscription(db: Session, subscription: Subscription) -> Subscription:
    """Stop renewal; access continues until the end of the current period."""
    subscription.cancel_at_period_end = True
    subscription.canceled_at = datetime.now(timezone.utc)
    db.flush()
    return subscription
