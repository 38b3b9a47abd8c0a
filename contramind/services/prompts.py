from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from contramind.models.admin import PromptLibraryEntry
from contramind.models.enums import DetectedLanguage

STARTER_QUESTIONS_EN = [
    "What are the main risks in this contract?",
    "Is this contract Sharia compliant?",
    "What are my obligations under this contract?",
    "Are there any unfair terms?",
    "What are the termination conditions?",
    "Explain the payment terms",
    "What are the legal liabilities?",
]

STARTER_QUESTIONS_AR = [
    "ما هي أهم المخاطر في هذا العقد؟",
    "هل هذا العقد متوافق مع الشريعة الإسلامية؟",
    "ما هي التزاماتي بموجب هذا العقد؟",
    "هل هناك أي بنود غير عادلة؟",
    "ما هي شروط الإنهاء؟",
    "اشرح شروط الدفع",
    "ما هي المسؤوليات القانونية؟",
]


def starter_questions(language: DetectedLanguage | str | None) -> list[str]:
    if language == DetectedLanguage.AR:
        return list(STARTER_QUESTIONS_AR)
    return list(STARTER_QUESTIONS_EN)


def list_active_prompts(db: Session) -> list[PromptLibraryEntry]:
    stmt = (
        select(PromptLibraryEntry)
        .where(PromptLibraryEntry.is_active.is_(True))
        .order_by(PromptLibraryEntry.display_order, PromptLibraryEntry.id)
    )
    return list(db.scalars(stmt))


def list_prompts_by_category(db: Session, category: str) -> list[PromptLibraryEntry]:
    stmt = (
        select(PromptLibraryEntry)
        .where(PromptLibraryEntry.is_active.is_(True), PromptLibraryEntry.category == category)
        .order_by(PromptLibraryEntry.display_order, PromptLibraryEntry.id)
    )
    return list(db.scalars(stmt))
