from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from contramind.api.v1.dependencies import get_current_user, get_db
from contramind.models.knowledge import KnowledgeBaseDocument
from contramind.models.user import User
from contramind.schemas.common import SuccessResponse
from contramind.schemas.knowledge import KnowledgeBaseCreate, KnowledgeBaseCreated, KnowledgeBaseRead
from contramind.services import knowledge as knowledge_service

router = APIRouter()


@router.get("", response_model=list[KnowledgeBaseRead])
def list_documents(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[KnowledgeBaseDocument]:
    return knowledge_service.list_user_documents(db, current_user.id)


@router.post("", response_model=KnowledgeBaseCreated, status_code=status.HTTP_201_CREATED)
def create_document(
    payload: KnowledgeBaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> KnowledgeBaseCreated:
    document = knowledge_service.create_document(db, user_id=current_user.id, data=payload)
    db.commit()
    return KnowledgeBaseCreated(id=document.id)


@router.delete("/{document_id}", response_model=SuccessResponse)
def delete_document(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SuccessResponse:
    document = knowledge_service.get_document(db, document_id)
    if not document or document.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="Document not found")
    knowledge_service.delete_document(db, document)
    db.commit()
    return SuccessResponse()
