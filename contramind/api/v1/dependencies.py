from collections.abc import Callable
import logging

from fastapi import BackgroundTasks, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from contramind.core.config import settings
from contramind.core.security import InvalidTokenError, decode_access_token
from contramind.db.session import get_db
from contramind.models.user import User
from contramind.services import users as user_service
from contramind.services.ai_service import AIService
from contramind.services.email import EmailClient, welcome_email
from contramind.services.payment_gateway import TapPaymentClient
from contramind.services.storage import StorageClient

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_ai_service() -> AIService:
    return AIService.from_settings(settings)


def get_storage_client() -> StorageClient:
    return StorageClient.from_settings(settings)


def get_email_client() -> EmailClient:
    return EmailClient.from_settings(settings)


def get_payment_gateway() -> TapPaymentClient:
    return TapPaymentClient.from_settings(settings)


def get_analysis_dispatcher() -> Callable[[int], None]:
    """Return the callable that schedules analysis of a freshly created contract."""
    from contramind.tasks.contract_analysis import enqueue_contract_analysis

    return enqueue_contract_analysis


def get_current_user(
    background_tasks: BackgroundTasks,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    mailer: EmailClient = Depends(get_email_client),
) -> User:
    """Resolve the bearer token to a user, provisioning the account on first sight."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        identity = decode_access_token(credentials.credentials)
    except InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication token"
        ) from exc

    user, created = user_service.upsert_user(
        db,
        identity,
        owner_open_id=settings.OWNER_OPEN_ID,
        trial_days=settings.TRIAL_DAYS,
    )
    db.commit()
    db.refresh(user)
    if created and user.email:
        background_tasks.add_task(mailer.send_quietly, welcome_email(user.email, user.name or "there"))
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


__all__ = [
    "get_db",
    "get_current_user",
    "require_admin",
    "get_ai_service",
    "get_storage_client",
    "get_email_client",
    "get_payment_gateway",
    "get_analysis_dispatcher",
]
