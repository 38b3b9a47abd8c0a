from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from sqlalchemy.orm import Session, sessionmaker

from contramind.core.config import settings
from contramind.db.session import SessionLocal
from contramind.models.contract import Contract
from contramind.models.enums import ContractStatus
from contramind.models.user import User
from contramind.services import contracts as contract_service
from contramind.services import document_parser
from contramind.services.ai_service import AIService
from contramind.services.email import EmailClient, analysis_complete_email
from contramind.services.storage import StorageClient
from contramind.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)

STALLED_MESSAGE = "Analysis did not finish. Please upload the contract again."


def enqueue_contract_analysis(contract_id: int) -> None:
    """Enqueue the Celery task for a freshly created contract."""
    analyze_contract.delay(contract_id)


@celery_app.task(name="contramind.tasks.analyze_contract")
def analyze_contract(contract_id: int) -> None:
    """Celery entry point that downloads, extracts and analyzes a contract."""
    asyncio.run(
        run_contract_analysis(
            contract_id,
            session_factory=SessionLocal,
            storage=StorageClient.from_settings(settings),
            ai=AIService.from_settings(settings),
            mailer=EmailClient.from_settings(settings),
        )
    )


async def run_contract_analysis(
    contract_id: int,
    *,
    session_factory: sessionmaker,
    storage: StorageClient,
    ai: AIService,
    mailer: EmailClient | None = None,
) -> None:
    """
    Move a ``processing`` contract to ``analyzed`` or ``error``.

    Each outcome is written in a single commit. Any failure while downloading,
    extracting or analyzing is recorded on the row rather than raised.
    """
    session: Session = session_factory()
    try:
        contract = session.get(Contract, contract_id)
        if contract is None:
            logger.error("Contract %s not found; skipping analysis", contract_id)
            return
        if contract.status != ContractStatus.PROCESSING:
            logger.info(
                "Contract %s is %s, not processing; skipping analysis",
                contract_id,
                contract.status.value,
            )
            return

        try:
            content = await storage.fetch(contract.file_url)
            text = document_parser.extract_text(content, contract.mime_type, contract.filename)
            result = await ai.analyze_contract(text)
            applied = contract_service.mark_analyzed(
                session, contract_id, extracted_text=text, result=result
            )
            session.commit()
        except Exception:  # pylint: disable=broad-except
            logger.exception("Analysis failed for contract %s", contract_id)
            session.rollback()
            _mark_contract_failed(session, contract_id)
            return

        if not applied:
            logger.warning(
                "Contract %s left processing during analysis; result discarded", contract_id
            )
            return

        logger.info(
            "Contract %s analyzed (risk=%s, sharia=%s, ksa=%s, language=%s)",
            contract_id,
            result.risk_score.value,
            result.sharia_compliance.value,
            result.ksa_compliance.value,
            result.detected_language.value,
        )
        if mailer is not None:
            await _notify_owner(session, contract, mailer)
    finally:
        session.close()


def _mark_contract_failed(session: Session, contract_id: int) -> None:
    if not contract_service.mark_failed(session, contract_id):
        logger.warning("Contract %s is no longer processing; failure not recorded", contract_id)
        return
    session.commit()


async def _notify_owner(session: Session, contract: Contract, mailer: EmailClient) -> None:
    owner = session.get(User, contract.user_id)
    if owner is None or not owner.email:
        return
    await mailer.send_quietly(
        analysis_complete_email(
            owner.email,
            owner.name or "there",
            contract.filename,
            contract.risk_score.value if contract.risk_score else "unknown",
        )
    )


@celery_app.task(name="contramind.tasks.sweep_stalled_contracts")
def sweep_stalled_contracts() -> int:
    """Fail contracts stuck in ``processing``; returns how many were moved."""
    return fail_stalled_contracts(
        SessionLocal, older_than=timedelta(minutes=settings.ANALYSIS_STALE_AFTER_MINUTES)
    )


def fail_stalled_contracts(session_factory: sessionmaker, *, older_than: timedelta) -> int:
    session: Session = session_factory()
    try:
        moved = 0
        for contract_id in contract_service.list_stalled_contract_ids(session, older_than=older_than):
            if contract_service.mark_failed(session, contract_id, STALLED_MESSAGE):
                moved += 1
                logger.warning("Contract %s stalled in processing; marked as error", contract_id)
        session.commit()
        return moved
    finally:
        session.close()
