from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr

from contramind.models.enums import AccountStatus, Language, SubscriptionTier, UserRole


class UserRead(BaseModel):
    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    role: UserRole
    subscription_tier: SubscriptionTier
    subscription_status: AccountStatus
    trial_ends_at: datetime | None = None
    language: Language
    created_at: datetime
    last_signed_in: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    language: Language | None = None
