from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from contramind.core.exceptions import ContractNotReadyError
from contramind.models.contract import AiFeedback, AiMessage, Contract
from contramind.models.enums import FeedbackRating, MessageRole
from contramind.schemas.chat import SendMessageResponse
from contramind.services.ai_service import AIService, ChatTurn

logger = logging.getLogger(__name__)


def create_message(
    db: Session,
    *,
    contract_id: int,
    user_id: int,
    role: MessageRole,
    content: str,
    prompt_type: str | None = None,
    tokens_used: int | None = None,
) -> AiMessage:
    message = AiMessage(
        contract_id=contract_id,
        user_id=user_id,
        role=role,
        content=content,
        prompt_type=prompt_type,
        tokens_used=tokens_used,
    )
    db.add(message)
    db.flush()
    return message


def list_messages(db: Session, contract_id: int) -> list[AiMessage]:
    stmt = (
        select(AiMessage)
        .where(AiMessage.contract_id == contract_id)
        .order_by(AiMessage.created_at, AiMessage.id)
    )
    return list(db.scalars(stmt))


def get_message(db: Session, message_id: int) -> AiMessage | None:
    return db.get(AiMessage, message_id)


async def send_message(
    db: Session,
    ai: AIService,
    *,
    contract: Contract,
    user_id: int,
    content: str,
    prompt_type: str | None = None,
) -> SendMessageResponse:
    """
    Persist the user turn, ask the model, persist the reply.

    The user message is committed before the AI call so it survives a
    downstream failure; no assistant row is written in that case.

    Raises:
        ContractNotReadyError: the contract is not analyzed yet.
        AIServiceError: the model call failed.
    """
    if not contract.is_chat_enabled:
        raise ContractNotReadyError("Contract must be analyzed first")

    user_message = create_message(
        db,
        contract_id=contract.id,
        user_id=user_id,
        role=MessageRole.USER,
        content=content,
        prompt_type=prompt_type,
    )
    db.commit()

    history = [
        ChatTurn(role=m.role, content=m.content)
        for m in list_messages(db, contract.id)
        if m.id != user_message.id
    ]

    reply = await ai.chat(
        contract.extracted_text or "",
        history,
        content,
        language=contract.detected_language,
    )

    ai_message = create_message(
        db,
        contract_id=contract.id,
        user_id=user_id,
        role=MessageRole.ASSISTANT,
        content=reply.response,
        tokens_used=reply.tokens_used,
    )
    db.commit()
    logger.info(
        "Chat exchange stored for contract %s (messages %s/%s, ~%s tokens)",
        contract.id,
        user_message.id,
        ai_message.id,
        reply.tokens_used,
    )
    return SendMessageResponse(
        user_message_id=user_message.id,
        ai_message_id=ai_message.id,
        response=reply.response,
    )


def _insert_for(db: Session):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql_insert
    return sqlite_insert


def upsert_feedback(
    db: Session,
    *,
    message_id: int,
    user_id: int,
    rating: FeedbackRating,
    comment: str | None = None,
) -> AiFeedback:
    """One feedback row per message; a later submission overwrites the earlier one."""
    insert = _insert_for(db)
    stmt = insert(AiFeedback).values(
        message_id=message_id, user_id=user_id, rating=rating, comment=comment
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[AiFeedback.message_id],
        set_={
            "rating": stmt.excluded.rating,
            "comment": stmt.excluded.comment,
            "user_id": stmt.excluded.user_id,
        },
    )
    db.execute(stmt)
    return db.scalars(
        select(AiFeedback)
        .where(AiFeedback.message_id == message_id)
        .execution_options(populate_existing=True)
    ).one()
