from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from contramind.db.base_class import Base


class AdminAuditLog(Base):
    """Record of an action an administrator performed."""

    __tablename__ = "admin_audit_log"
    __table_args__ = (
        Index("ix_admin_audit_log_admin_user_id", "admin_user_id"),
        Index("ix_admin_audit_log_action", "action"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    admin_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    action: Mapped[str] = mapped_column(String(length=100), nullable=False)
    resource_type: Mapped[str | None] = mapped_column(String(length=50))
    resource_id: Mapped[int | None] = mapped_column(Integer)
    details: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class PromptLibraryEntry(Base):
    """Pre-built question offered in the chat panel."""

    __tablename__ = "prompt_library"
    __table_args__ = (Index("ix_prompt_library_category", "category"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String(length=100), nullable=False)
    title: Mapped[str] = mapped_column(String(length=200), nullable=False)
    title_ar: Mapped[str | None] = mapped_column(String(length=200))
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    prompt_ar: Mapped[str | None] = mapped_column(Text)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class RumMetric(Base):
    """Web-Vitals sample reported by a browser."""

    __tablename__ = "rum_metrics"
    __table_args__ = (Index("ix_rum_metrics_metric_name", "metric_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    metric_name: Mapped[str] = mapped_column(String(length=16), nullable=False)
    metric_value: Mapped[int] = mapped_column(Integer, nullable=False)
    metric_rating: Mapped[str] = mapped_column(String(length=32), nullable=False)
    metric_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    metric_id: Mapped[str] = mapped_column(String(length=255), nullable=False)
    navigation_type: Mapped[str | None] = mapped_column(String(length=64))
    url: Mapped[str] = mapped_column(Text, nullable=False)
    user_agent: Mapped[str | None] = mapped_column(Text)
    ip_address: Mapped[str | None] = mapped_column(String(length=64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
