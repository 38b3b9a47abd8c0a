from __future__ import annotations

import secrets
import string
import time

from sqlalchemy import select
from sqlalchemy.orm import Session

from contramind.models.enums import SenderType, TicketPriority, TicketStatus
from contramind.models.support import SupportTicket, TicketMessage
from contramind.models.user import User
from contramind.schemas.support import TicketUpdate

_TICKET_ALPHABET = string.ascii_uppercase + string.digits


def generate_ticket_number() -> str:
    """``TKT-<epoch ms>-<5 random uppercase alphanumerics>``."""
    suffix = "".join(secrets.choice(_TICKET_ALPHABET) for _ in range(5))
    return f"TKT-{int(time.time() * 1000)}-{suffix}"


def get_ticket(db: Session, ticket_id: int) -> SupportTicket | None:
    return db.get(SupportTicket, ticket_id)


def list_user_tickets(db: Session, user_id: int) -> list[SupportTicket]:
    stmt = (
        select(SupportTicket)
        .where(SupportTicket.user_id == user_id)
        .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
    )
    return list(db.scalars(stmt))


def list_all_tickets(db: Session, *, limit: int = 50, offset: int = 0) -> list[SupportTicket]:
    stmt = (
        select(SupportTicket)
        .order_by(SupportTicket.created_at.desc(), SupportTicket.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(db.scalars(stmt))


def list_ticket_messages(db: Session, ticket_id: int) -> list[TicketMessage]:
    stmt = select(TicketMessage).where(TicketMessage.ticket_id == ticket_id).order_by(TicketMessage.id)
    return list(db.scalars(stmt))


def create_ticket(
    db: Session, *, user: User, subject: str, message: str, priority: TicketPriority
) -> SupportTicket:
    ticket = SupportTicket(
        ticket_number=generate_ticket_number(),
        user_id=user.id,
        subject=subject,
        status=TicketStatus.OPEN,
        priority=priority,
    )
    ticket.messages.append(
        TicketMessage(sender_id=user.id, sender_type=SenderType.USER, message=message)
    )
    db.add(ticket)
    db.flush()
    return ticket


def reply_to_ticket(db: Session, ticket: SupportTicket, *, sender: User, message: str) -> TicketMessage:
    """Append a reply; an ``open`` ticket moves to ``in_progress``."""
    reply = TicketMessage(
        ticket_id=ticket.id,
        sender_id=sender.id,
        sender_type=SenderType.ADMIN if sender.is_admin else SenderType.USER,
        message=message,
    )
    db.add(reply)
    if ticket.status == TicketStatus.OPEN:
        ticket.status = TicketStatus.IN_PROGRESS
    db.flush()
    return reply


def update_ticket(db: Session, ticket: SupportTicket, data: TicketUpdate) -> dict:
    """Apply the provided fields and return them for auditing."""
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(ticket, field, value)
    db.flush()
    return data.model_dump(exclude_unset=True, mode="json")
