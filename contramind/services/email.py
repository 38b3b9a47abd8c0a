"""Transactional email delivery and the message templates the app sends."""
import html
import logging
from dataclasses import dataclass

import httpx

from contramind.core.config import Settings
from contramind.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str | None = None


class EmailClient:
    """Thin wrapper over an HTTP email API (``POST {api_url}`` with a bearer key)."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailClient":
        return cls(
            api_url=settings.EMAIL_API_URL,
            api_key=settings.EMAIL_API_KEY,
            sender=settings.EMAIL_FROM,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    async def send(self, message: EmailMessage) -> bool:
        """
        Deliver ``message``. Returns False when no provider is configured.

        Raises:
            EmailDeliveryError: the provider rejected the message.
        """
        if not self.is_configured:
            logger.info(
                "Email provider not configured; skipping %r to %s", message.subject, message.to
            )
            return False

        payload = {
            "from": self.sender,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(f"Failed to send email: {exc}") from exc
        logger.info("Sent email %r to %s", message.subject, message.to)
        return True

    async def send_quietly(self, message: EmailMessage) -> bool:
        """Like :meth:`send` but logs delivery failures instead of raising."""
        try:
            return await self.send(message)
        except EmailDeliveryError:
            logger.exception("Email delivery failed for %r", message.subject)
            return False


def welcome_email(email: str, name: str) -> EmailMessage:
    safe_name = html.escape(name)
    return EmailMessage(
        to=email,
        subject="Welcome to ContraMind.ai",
        html=(
            f"<h1>Welcome to ContraMind.ai, {safe_name}!</h1>"
            "<p>Thank you for joining ContraMind.ai, the AI-powered contract analysis platform "
            "for Saudi Arabian businesses.</p>"
            "<p>Get started by uploading your first contract and experience the power of "
            "AI-driven analysis.</p>"
            "<p>Best regards,<br>The ContraMind.ai Team</p>"
        ),
        text=(
            f"Welcome to ContraMind.ai, {name}! Thank you for joining our platform. "
            "Get started by uploading your first contract."
        ),
    )


def analysis_complete_email(email: str, name: str, contract_name: str, risk_score: str) -> EmailMessage:
    return EmailMessage(
        to=email,
        subject=f"Contract Analysis Complete: {contract_name}",
        html=(
            "<h1>Your Contract Analysis is Ready</h1>"
            f"<p>Hi {html.escape(name)},</p>"
            "<p>We've completed the analysis of your contract: "
            f"<strong>{html.escape(contract_name)}</strong></p>"
            f"<p>Risk Score: <strong>{html.escape(risk_score.upper())}</strong></p>"
            "<p>Log in to ContraMind.ai to view the full analysis and chat with our AI assistant "
            "about your contract.</p>"
            "<p>Best regards,<br>The ContraMind.ai Team</p>"
        ),
        text=(
            f'Hi {name}, your contract analysis for "{contract_name}" is complete. '
            f"Risk Score: {risk_score}. Log in to view the full analysis."
        ),
    )


def ticket_reply_email(email: str, name: str, ticket_number: str, message: str) -> EmailMessage:
    return EmailMessage(
        to=email,
        subject=f"New Reply on Support Ticket #{ticket_number}",
        html=(
            "<h1>New Reply on Your Support Ticket</h1>"
            f"<p>Hi {html.escape(name)},</p>"
            "<p>You have a new reply on your support ticket "
            f"<strong>#{html.escape(ticket_number)}</strong>:</p>"
            '<blockquote style="border-left: 4px solid #3b82f6; padding-left: 16px; margin: 16px 0;">'
            f"{html.escape(message)}</blockquote>"
            "<p>Log in to ContraMind.ai to view the full conversation and reply.</p>"
            "<p>Best regards,<br>The ContraMind.ai Support Team</p>"
        ),
        text=(
            f"Hi {name}, you have a new reply on support ticket #{ticket_number}. "
            "Log in to view and respond."
        ),
    )


def subscription_confirmation_email(email: str, name: str, tier: str, amount: int) -> EmailMessage:
    return EmailMessage(
        to=email,
        subject="Subscription Confirmed - ContraMind.ai",
        html=(
            "<h1>Subscription Confirmed</h1>"
            f"<p>Hi {html.escape(name)},</p>"
            "<p>Thank you for subscribing to ContraMind.ai!</p>"
            f"<p><strong>Plan:</strong> {html.escape(tier)}</p>"
            f"<p><strong>Amount:</strong> {amount} SAR</p>"
            "<p>Your subscription is now active. Enjoy unlimited access to our AI-powered "
            "contract analysis platform.</p>"
            "<p>Best regards,<br>The ContraMind.ai Team</p>"
        ),
        text=(
            f"Hi {name}, your {tier} subscription ({amount} SAR) is now active. "
            "Thank you for subscribing to ContraMind.ai!"
        ),
    )
