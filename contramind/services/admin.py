from __future__ import annotations

import json

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from contramind.models.admin import AdminAuditLog
from contramind.models.billing import Subscription
from contramind.models.enums import SubscriptionStatus, TicketStatus
from contramind.models.support import SupportTicket
from contramind.models.user import User
from contramind.schemas.admin import DashboardStats
from contramind.services import billing


def dashboard_stats(db: Session) -> DashboardStats:
    total_users = db.scalar(select(func.count()).select_from(User)) or 0
    active_subscriptions = db.scalar(
        select(func.count())
        .select_from(Subscription)
        .where(Subscription.status == SubscriptionStatus.ACTIVE)
    ) or 0
    open_tickets = db.scalar(
        select(func.count())
        .select_from(SupportTicket)
        .where(SupportTicket.status == TicketStatus.OPEN)
    ) or 0
    return DashboardStats(
        total_users=total_users,
        active_subscriptions=active_subscriptions,
        open_tickets=open_tickets,
        revenue=billing.total_revenue(db),
    )


def record_action(
    db: Session,
    *,
    admin: User,
    action: str,
    resource_type: str | None = None,
    resource_id: int | None = None,
    details: dict | None = None,
) -> AdminAuditLog:
    entry = AdminAuditLog(
        admin_user_id=admin.id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=json.dumps(details, sort_keys=True) if details is not None else None,
    )
    db.add(entry)
    db.flush()
    return entry


def list_audit_logs(db: Session, *, limit: int = 50, offset: int = 0) -> list[AdminAuditLog]:
    stmt = (
        select(AdminAuditLog)
        .order_by(AdminAuditLog.created_at.desc(), AdminAuditLog.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(db.scalars(stmt))
