from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_ai_service, get_current_user, get_db
from contramind.api.v1.endpoints.contracts import get_accessible_contract
from contramind.core.exceptions import AIServiceError, ContractNotReadyError
from contramind.models.contract import AiMessage
from contramind.models.user import User
from contramind.schemas.chat import (
    AiMessageRead,
    FeedbackCreate,
    SendMessageRequest,
    SendMessageResponse,
    SuggestedPrompts,
)
from contramind.schemas.common import SuccessResponse
from contramind.services import chat as chat_service
from contramind.services import contracts as contract_service
from contramind.services import prompts as prompt_service
from contramind.services.ai_service import AIService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/contracts/{contract_id}/messages", response_model=list[AiMessageRead])
def get_messages(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[AiMessage]:
    get_accessible_contract(db, contract_id, current_user)
    return chat_service.list_messages(db, contract_id)


@router.get("/contracts/{contract_id}/suggested-prompts", response_model=SuggestedPrompts)
def get_suggested_prompts(
    contract_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuggestedPrompts:
    contract = get_accessible_contract(db, contract_id, current_user)
    language = contract.detected_language.value if contract.detected_language else "en"
    return SuggestedPrompts(
        language=language,
        prompts=prompt_service.starter_questions(contract.detected_language),
    )


@router.post("/messages", response_model=SendMessageResponse)
async def send_message(
    payload: SendMessageRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
) -> SendMessageResponse:
    contract = contract_service.get_contract(db, payload.contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    if contract.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    try:
        return await chat_service.send_message(
            db,
            ai,
            contract=contract,
            user_id=current_user.id,
            content=payload.content,
            prompt_type=payload.prompt_type,
        )
    except ContractNotReadyError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AIServiceError as exc:
        logger.error("AI chat failed for contract %s: %s", contract.id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to get AI response"
        ) from exc


@router.post("/feedback", response_model=SuccessResponse)
def submit_feedback(
    payload: FeedbackCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    message = chat_service.get_message(db, payload.message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.contract.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Access denied")

    chat_service.upsert_feedback(
        db,
        message_id=message.id,
        user_id=current_user.id,
        rating=payload.rating,
        comment=payload.comment,
    )
    db.commit()
    return SuccessResponse()
