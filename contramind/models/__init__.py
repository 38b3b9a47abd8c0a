"""ORM models."""

# Import all models so they are registered with SQLAlchemy
from contramind.models.admin import AdminAuditLog, PromptLibraryEntry, RumMetric  # noqa
from contramind.models.billing import Payment, Subscription  # noqa
from contramind.models.contract import AiFeedback, AiMessage, Contract  # noqa
from contramind.models.knowledge import KnowledgeBaseDocument  # noqa
from contramind.models.support import SupportTicket, TicketMessage  # noqa
from contramind.models.user import User  # noqa

__all__ = [
    "AdminAuditLog",
    "AiFeedback",
    "AiMessage",
    "Contract",
    "KnowledgeBaseDocument",
    "Payment",
    "PromptLibraryEntry",
    "RumMetric",
    "Subscription",
    "SupportTicket",
    "TicketMessage",
    "User",
]
