from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contramind.db.base_class import Base
from contramind.models.enums import (
    AccountStatus,
    Language,
    SubscriptionTier,
    UserRole,
    str_enum,
)


class User(Base):
    """Account authenticated through the external OAuth portal."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    open_id: Mapped[str] = mapped_column(String(length=64), unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(Text)
    email: Mapped[str | None] = mapped_column(String(length=320))
    login_method: Mapped[str | None] = mapped_column(String(length=64))
    role: Mapped[UserRole] = mapped_column(
        str_enum(UserRole), nullable=False, default=UserRole.USER
    )
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        str_enum(SubscriptionTier), nullable=False, default=SubscriptionTier.FREE_TRIAL
    )
    subscription_status: Mapped[AccountStatus] = mapped_column(
        str_enum(AccountStatus), nullable=False, default=AccountStatus.TRIAL
    )
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    language: Mapped[Language] = mapped_column(
        str_enum(Language), nullable=False, default=Language.EN
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    last_signed_in: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    contracts: Mapped[list["Contract"]] = relationship(
        "Contract",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="desc(Contract.uploaded_at)",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
