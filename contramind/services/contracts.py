from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from contramind.models.contract import Contract
from contramind.models.enums import ContractStatus
from contramind.schemas.analysis import ContractAnalysisResult
from contramind.schemas.contract import ContractCreate

ANALYSIS_FAILED_MESSAGE = "Failed to analyze contract. Please try again."


def create_contract(db: Session, *, user_id: int, data: ContractCreate) -> Contract:
    """Persist a contract in ``processing``; the caller commits and schedules analysis."""
    contract = Contract(
        user_id=user_id,
        filename=data.filename,
        file_key=data.file_key,
        file_url=data.file_url,
        file_size=data.file_size,
        mime_type=data.mime_type,
        status=ContractStatus.PROCESSING,
    )
    db.add(contract)
    db.flush()
    return contract


def get_contract(db: Session, contract_id: int) -> Contract | None:
    return db.get(Contract, contract_id)


def list_user_contracts(
    db: Session, user_id: int, *, limit: int = 50, offset: int = 0
) -> list[Contract]:
    stmt = (
        select(Contract)
        .where(Contract.user_id == user_id)
        .order_by(Contract.uploaded_at.desc(), Contract.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(db.scalars(stmt))


def search_contracts(db: Session, user_id: int, query: str) -> list[Contract]:
    pattern = f"%{query.lower()}%"
    stmt = (
        select(Contract)
        .where(
            Contract.user_id == user_id,
            or_(
                func.lower(Contract.filename).like(pattern),
                func.lower(Contract.extracted_text).like(pattern),
            ),
        )
        .order_by(Contract.uploaded_at.desc(), Contract.id.desc())
    )
    return list(db.scalars(stmt))


def delete_contract(db: Session, contract: Contract) -> None:
    db.delete(contract)
    db.flush()


def _finish_processing(db: Session, contract_id: int, values: dict) -> bool:
    """Write a terminal state only while the row is still ``processing``."""
    stmt = (
        update(Contract)
        .where(Contract.id == contract_id, Contract.status == ContractStatus.PROCESSING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount == 1


def mark_analyzed(
    db: Session, contract_id: int, *, extracted_text: str, result: ContractAnalysisResult
) -> bool:
    """Move the contract to ``analyzed``; every derived field is written together.

    Returns False when the row already left ``processing``.
    """
    return _finish_processing(
        db,
        contract_id,
        {
            "status": ContractStatus.ANALYZED,
            "extracted_text": extracted_text,
            "detected_language": result.detected_language,
            "risk_score": result.risk_score,
            "sharia_compliance": result.sharia_compliance,
            "ksa_compliance": result.ksa_compliance,
            "analysis": result.model_dump(mode="json", by_alias=True),
            "error_message": None,
            "analyzed_at": datetime.now(timezone.utc),
        },
    )


def mark_failed(db: Session, contract_id: int, message: str = ANALYSIS_FAILED_MESSAGE) -> bool:
    """Move the contract to ``error`` and clear derived fields; False if it already left ``processing``."""
    return _finish_processing(
        db,
        contract_id,
        {
            "status": ContractStatus.ERROR,
            "error_message": (message or ANALYSIS_FAILED_MESSAGE)[:2000],
            "extracted_text": None,
            "detected_language": None,
            "risk_score": None,
            "sharia_compliance": None,
            "ksa_compliance": None,
            "analysis": None,
            "analyzed_at": None,
        },
    )


def list_stalled_contract_ids(db: Session, *, older_than: timedelta) -> list[int]:
    cutoff = datetime.now(timezone.utc) - older_than
    stmt = select(Contract.id).where(
        Contract.status == ContractStatus.PROCESSING,
        Contract.uploaded_at < cutoff,
    )
    return list(db.scalars(stmt))
