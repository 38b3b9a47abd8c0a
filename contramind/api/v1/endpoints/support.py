from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_current_user, get_db, get_email_client
from contramind.models.support import SupportTicket
from contramind.models.user import User
from contramind.schemas.common import SuccessResponse
from contramind.schemas.support import (
    TicketCreate,
    TicketCreated,
    TicketMessageRead,
    TicketRead,
    TicketReply,
    TicketWithMessages,
)
from contramind.services import support as support_service
from contramind.services.email import EmailClient, ticket_reply_email

router = APIRouter()


def get_accessible_ticket(db: Session, ticket_id: int, user: User) -> SupportTicket:
    ticket = support_service.get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    if ticket.user_id != user.id and not user.is_admin:
        raise HTTPException(status_code=403, detail="Access denied")
    return ticket


@router.get("/tickets", response_model=list[TicketRead])
def list_my_tickets(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[SupportTicket]:
    return support_service.list_user_tickets(db, current_user.id)


@router.get("/tickets/{ticket_id}", response_model=TicketWithMessages)
def get_ticket(
    ticket_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TicketWithMessages:
    ticket = get_accessible_ticket(db, ticket_id, current_user)
    return TicketWithMessages(
        ticket=TicketRead.model_validate(ticket),
        messages=[
            TicketMessageRead.model_validate(m)
            for m in support_service.list_ticket_messages(db, ticket.id)
        ],
    )


@router.post("/tickets", response_model=TicketCreated, status_code=status.HTTP_201_CREATED)
def create_ticket(
    payload: TicketCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TicketCreated:
    ticket = support_service.create_ticket(
        db,
        user=current_user,
        subject=payload.subject,
        message=payload.message,
        priority=payload.priority,
    )
    db.commit()
    return TicketCreated(id=ticket.id, ticket_number=ticket.ticket_number)


@router.post("/replies", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED)
def reply_to_ticket(
    payload: TicketReply,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    mailer: EmailClient = Depends(get_email_client),
) -> SuccessResponse:
    ticket = get_accessible_ticket(db, payload.ticket_id, current_user)
    support_service.reply_to_ticket(db, ticket, sender=current_user, message=payload.message)
    db.commit()

    if current_user.is_admin and ticket.user_id != current_user.id:
        owner = db.get(User, ticket.user_id)
        if owner and owner.email:
            background_tasks.add_task(
                mailer.send_quietly,
                ticket_reply_email(
                    owner.email, owner.name or "there", ticket.ticket_number, payload.message
                ),
            )
    return SuccessResponse()
