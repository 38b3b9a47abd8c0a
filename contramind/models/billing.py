from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contramind.db.base_class import Base
from contramind.models.enums import (
    BillingCycle,
    PaymentStatus,
    SubscriptionStatus,
    SubscriptionTier,
    str_enum,
)


class Subscription(Base):
    """Paid plan of a user; at most one row per user."""

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    tier: Mapped[SubscriptionTier] = mapped_column(str_enum(SubscriptionTier), nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        str_enum(SubscriptionStatus), nullable=False
    )
    billing_cycle: Mapped[BillingCycle] = mapped_column(str_enum(BillingCycle), nullable=False)
    current_period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    current_period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    payment_method_token: Mapped[str | None] = mapped_column(String(length=500))
    payment_method_last4: Mapped[str | None] = mapped_column(String(length=4))
    payment_method_brand: Mapped[str | None] = mapped_column(String(length=50))

    cancel_at_period_end: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="subscription", order_by="desc(Payment.created_at)"
    )


class Payment(Base):
    """A single charge attempt against the payment gateway."""

    __tablename__ = "payments"
    __table_args__ = (Index("ix_payments_user_id", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    subscription_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("subscriptions.id", ondelete="SET NULL")
    )

    # Whole SAR units; the gateway is sent the same figure.
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(length=3), nullable=False, default="SAR")
    status: Mapped[PaymentStatus] = mapped_column(str_enum(PaymentStatus), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(length=50))
    transaction_id: Mapped[str | None] = mapped_column(String(length=500), unique=True)

    tier: Mapped[SubscriptionTier | None] = mapped_column(str_enum(SubscriptionTier))
    billing_cycle: Mapped[BillingCycle | None] = mapped_column(str_enum(BillingCycle))
    gateway_order_id: Mapped[str | None] = mapped_column(String(length=500))
    gateway_payment_id: Mapped[str | None] = mapped_column(String(length=500))

    failure_reason: Mapped[str | None] = mapped_column(Text)
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    subscription: Mapped[Subscription | None] = relationship(
        "Subscription", back_populates="payments"
    )
