from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contramind.models.enums import SenderType, TicketPriority, TicketStatus


class TicketCreate(BaseModel):
    subject: str = Field(min_length=1, max_length=500)
    message: str = Field(min_length=1)
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketCreated(BaseModel):
    id: int
    ticket_number: str


class TicketReply(BaseModel):
    ticket_id: int
    message: str = Field(min_length=1)


class TicketUpdate(BaseModel):
    status: TicketStatus | None = None
    priority: TicketPriority | None = None
    assigned_to: int | None = None

    @field_validator("status", "priority")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class TicketRead(BaseModel):
    id: int
    ticket_number: str
    user_id: int
    subject: str
    status: TicketStatus
    priority: TicketPriority
    assigned_to: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketMessageRead(BaseModel):
    id: int
    ticket_id: int
    sender_id: int
    sender_type: SenderType
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketWithMessages(BaseModel):
    ticket: TicketRead
    messages: list[TicketMessageRead]
