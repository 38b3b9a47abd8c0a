from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contramind.db.base_class import Base
from contramind.models.enums import (
    ComplianceStatus,
    ContractStatus,
    DetectedLanguage,
    FeedbackRating,
    MessageRole,
    RiskScore,
    str_enum,
)


class Contract(Base):
    """A user-uploaded document tracked through the analysis lifecycle."""

    __tablename__ = "contracts"
    __table_args__ = (
        Index("ix_contracts_user_id", "user_id"),
        Index("ix_contracts_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    filename: Mapped[str] = mapped_column(String(length=500), nullable=False)
    file_key: Mapped[str] = mapped_column(String(length=500), nullable=False)
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(length=100), nullable=False)

    extracted_text: Mapped[str | None] = mapped_column(Text)
    detected_language: Mapped[DetectedLanguage | None] = mapped_column(
        str_enum(DetectedLanguage)
    )

    status: Mapped[ContractStatus] = mapped_column(
        str_enum(ContractStatus), nullable=False, default=ContractStatus.UPLOADING
    )
    error_message: Mapped[str | None] = mapped_column(Text)

    risk_score: Mapped[RiskScore | None] = mapped_column(str_enum(RiskScore))
    sharia_compliance: Mapped[ComplianceStatus | None] = mapped_column(
        str_enum(ComplianceStatus)
    )
    ksa_compliance: Mapped[ComplianceStatus | None] = mapped_column(
        str_enum(ComplianceStatus)
    )
    analysis: Mapped[dict[str, Any] | None] = mapped_column(JSON)

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    analyzed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    user: Mapped["User"] = relationship("User", back_populates="contracts")
    messages: Mapped[list["AiMessage"]] = relationship(
        "AiMessage",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="AiMessage.id",
    )

    @property
    def is_chat_enabled(self) -> bool:
        return self.status == ContractStatus.ANALYZED and bool(self.extracted_text)


class AiMessage(Base):
    """One immutable turn of the chat transcript attached to a contract."""

    __tablename__ = "ai_messages"
    __table_args__ = (
        Index("ix_ai_messages_contract_id", "contract_id"),
        Index("ix_ai_messages_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contract_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[MessageRole] = mapped_column(str_enum(MessageRole), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    tokens_used: Mapped[int | None] = mapped_column(Integer)
    prompt_type: Mapped[str | None] = mapped_column(String(length=100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    contract: Mapped[Contract] = relationship("Contract", back_populates="messages")
    feedback: Mapped[Optional["AiFeedback"]] = relationship(
        "AiFeedback",
        back_populates="message",
        cascade="all, delete-orphan",
        uselist=False,
    )


class AiFeedback(Base):
    """Thumbs up/down on an assistant message; one row per message."""

    __tablename__ = "ai_feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("ai_messages.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rating: Mapped[FeedbackRating] = mapped_column(str_enum(FeedbackRating), nullable=False)
    comment: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    message: Mapped[AiMessage] = relationship("AiMessage", back_populates="feedback")
