from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from contramind.models.knowledge import KnowledgeBaseDocument
from contramind.schemas.knowledge import KnowledgeBaseCreate


def list_user_documents(db: Session, user_id: int) -> list[KnowledgeBaseDocument]:
    stmt = (
        select(KnowledgeBaseDocument)
        .where(KnowledgeBaseDocument.user_id == user_id)
        .order_by(KnowledgeBaseDocument.uploaded_at.desc(), KnowledgeBaseDocument.id.desc())
    )
    return list(db.scalars(stmt))


def create_document(db: Session, *, user_id: int, data: KnowledgeBaseCreate) -> KnowledgeBaseDocument:
    document = KnowledgeBaseDocument(user_id=user_id, **data.model_dump())
    db.add(document)
    db.flush()
    return document


def get_document(db: Session, document_id: int) -> KnowledgeBaseDocument | None:
    return db.get(KnowledgeBaseDocument, document_id)


def delete_document(db: Session, document: KnowledgeBaseDocument) -> None:
    db.delete(document)
    db.flush()
