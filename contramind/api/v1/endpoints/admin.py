from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_db, require_admin
from contramind.models.admin import AdminAuditLog
from contramind.models.support import SupportTicket
from contramind.models.user import User
from contramind.schemas.admin import AdminUserDetail, AuditLogRead, DashboardStats
from contramind.schemas.contract import ContractRead
from contramind.schemas.subscription import SubscriptionRead
from contramind.schemas.support import TicketRead, TicketUpdate
from contramind.schemas.user import UserRead
from contramind.services import admin as admin_service
from contramind.services import billing as billing_service
from contramind.services import contracts as contract_service
from contramind.services import support as support_service
from contramind.services import users as user_service

router = APIRouter()

RECENT_CONTRACTS_LIMIT = 10


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> DashboardStats:
    return admin_service.dashboard_stats(db)


@router.get("/users", response_model=list[UserRead])
def list_users(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> list[User]:
    return user_service.list_users(db, limit=limit, offset=offset)


@router.get("/users/{user_id}", response_model=AdminUserDetail)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> AdminUserDetail:
    user = user_service.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    subscription = billing_service.get_user_subscription(db, user.id)
    contracts = contract_service.list_user_contracts(db, user.id, limit=RECENT_CONTRACTS_LIMIT)
    return AdminUserDetail(
        user=UserRead.model_validate(user),
        subscription=SubscriptionRead.model_validate(subscription) if subscription else None,
        contracts=[ContractRead.model_validate(c) for c in contracts],
    )


@router.get("/tickets", response_model=list[TicketRead])
def list_tickets(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> list[SupportTicket]:
    return support_service.list_all_tickets(db, limit=limit, offset=offset)


@router.patch("/tickets/{ticket_id}", response_model=TicketRead)
def update_ticket(
    ticket_id: int,
    payload: TicketUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> SupportTicket:
    ticket = support_service.get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    changes = support_service.update_ticket(db, ticket, payload)
    admin_service.record_action(
        db,
        admin=admin,
        action="ticket_updated",
        resource_type="ticket",
        resource_id=ticket.id,
        details=changes,
    )
    db.commit()
    db.refresh(ticket)
    return ticket


@router.get("/audit-logs", response_model=list[AuditLogRead])
def list_audit_logs(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> list[AdminAuditLog]:
    return admin_service.list_audit_logs(db, limit=limit, offset=offset)
