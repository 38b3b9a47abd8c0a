from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import (
    get_current_user,
    get_db,
    get_email_client,
    get_payment_gateway,
)
from contramind.core.exceptions import PaymentGatewayError
from contramind.models.billing import Payment, Subscription
from contramind.models.enums import PaymentStatus
from contramind.models.user import User
from contramind.schemas.subscription import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentRead,
    PlanRead,
    SubscriptionRead,
    WebhookEvent,
    WebhookResult,
)
from contramind.services import billing as billing_service
from contramind.services.email import EmailClient, subscription_confirmation_email
from contramind.services.payment_gateway import TapPaymentClient

logger = logging.getLogger(__name__)

router = APIRouter()
webhook_router = APIRouter()


@router.get("/current", response_model=SubscriptionRead | None)
def get_current_subscription(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Subscription | None:
    return billing_service.get_user_subscription(db, current_user.id)


@router.get("/payments", response_model=list[PaymentRead])
def get_payments(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[Payment]:
    return billing_service.list_user_payments(db, current_user.id, limit=limit, offset=offset)


@router.get("/plans", response_model=list[PlanRead])
def get_plans() -> list[PlanRead]:
    return list(billing_service.PLANS.values())


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gateway: TapPaymentClient = Depends(get_payment_gateway),
) -> CheckoutResponse:
    try:
        payment, charge = await billing_service.start_checkout(
            db,
            gateway,
            user=current_user,
            tier=payload.tier,
            cycle=payload.billing_cycle,
            source_token=payload.source_token,
            redirect_url=payload.redirect_url,
        )
    except billing_service.UnknownPlanError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PaymentGatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    db.commit()
    return CheckoutResponse(
        payment_id=payment.id,
        charge_id=charge.id,
        status=charge.status,
        redirect_url=charge.redirect_url,
    )


@router.post("/cancel", response_model=SubscriptionRead)
def cancel_subscription(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Subscription:
    subscription = billing_service.get_user_subscription(db, current_user.id)
    if not subscription:
        raise HTTPException(status_code=404, detail="No active subscription")
    billing_service.cancel_subscription(db, subscription)
    db.commit()
    db.refresh(subscription)
    return subscription


@webhook_router.post("/webhook", response_model=WebhookResult)
async def payment_webhook(
    event: WebhookEvent,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: TapPaymentClient = Depends(get_payment_gateway),
    mailer: EmailClient = Depends(get_email_client),
) -> WebhookResult:
    """Settle a payment from the gateway's own record of the charge named in the event."""
    payment = billing_service.get_payment_by_transaction(db, event.id)
    if not payment:
        logger.warning("Webhook for unknown charge %s", event.id)
        raise HTTPException(status_code=404, detail="Payment not found")

    try:
        charge = await gateway.retrieve_charge(event.id)
    except PaymentGatewayError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    # Serialize concurrent deliveries for the same charge.
    payment = billing_service.get_payment_by_transaction(db, event.id, for_update=True)
    result = billing_service.settle_payment(db, payment, charge)
    db.commit()

    if result.newly_settled and payment.status == PaymentStatus.SUCCESS:
        user = db.get(User, payment.user_id)
        if user and user.email:
            background_tasks.add_task(
                mailer.send_quietly,
                subscription_confirmation_email(
                    user.email,
                    user.name or "there",
                    payment.tier.value if payment.tier else "",
                    payment.amount,
                ),
            )
    return WebhookResult(payment_id=payment.id, status=payment.status)
