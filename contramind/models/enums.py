"""Enumerations persisted as plain strings."""
from __future__ import annotations

import enum

from sqlalchemy import Enum as SAEnum


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class SubscriptionTier(str, enum.Enum):
    FREE_TRIAL = "free_trial"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    BUSINESS = "business"


class AccountStatus(str, enum.Enum):
    ACTIVE = "active"
    TRIAL = "trial"
    CANCELED = "canceled"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class Language(str, enum.Enum):
    EN = "en"
    AR = "ar"


class DetectedLanguage(str, enum.Enum):
    EN = "en"
    AR = "ar"
    MIXED = "mixed"


class ContractStatus(str, enum.Enum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    ANALYZED = "analyzed"
    ERROR = "error"


class RiskScore(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ComplianceStatus(str, enum.Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    REQUIRES_REVIEW = "requires_review"


class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class FeedbackRating(str, enum.Enum):
    THUMBS_UP = "thumbs_up"
    THUMBS_DOWN = "thumbs_down"


class BillingCycle(str, enum.Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    REFUNDED = "refunded"


class TicketStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SenderType(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


def str_enum(enum_cls: type[enum.Enum]) -> SAEnum:
    """Column type storing the enum *value* in a VARCHAR."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
