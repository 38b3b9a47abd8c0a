"""
Tap Payments client.

Only the two calls the billing flow needs: create a charge and retrieve it.
Documentation: https://developers.tap.company/reference/api-endpoint
"""
import logging
from typing import Any, Dict

import httpx
from pydantic import BaseModel, ConfigDict, Field

from contramind.core.config import Settings
from contramind.core.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

# Statuses the gateway reports for a settled, successful charge.
SUCCESS_STATUSES = frozenset({"CAPTURED", "AUTHORIZED"})
# Statuses that are still moving and must not settle a payment.
PENDING_STATUSES = frozenset({"INITIATED", "IN_PROGRESS", "PENDING"})


class ChargeCustomer(BaseModel):
    email: str | None = None
    first_name: str | None = None


class ChargeRequest(BaseModel):
    amount: int
    currency: str = "SAR"
    customer: ChargeCustomer
    source_id: str
    redirect_url: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "currency": self.currency,
            "customer": self.customer.model_dump(exclude_none=True),
            "source": {"id": self.source_id},
            "redirect": {"url": self.redirect_url},
            "metadata": {k: str(v) for k, v in self.metadata.items()},
        }


class Charge(BaseModel):
    id: str
    status: str
    amount: float | None = None
    currency: str | None = None
    redirect_url: str | None = None
    payment_method: str | None = None
    last4: str | None = None
    brand: str | None = None
    response_message: str | None = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    @property
    def succeeded(self) -> bool:
        return self.status.upper() in SUCCESS_STATUSES

    @property
    def pending(self) -> bool:
        return self.status.upper() in PENDING_STATUSES

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Charge":
        source = data.get("source") or {}
        card = data.get("card") or {}
        transaction = data.get("transaction") or {}
        response = data.get("response") or {}
        return cls(
            id=data["id"],
            status=data.get("status", "UNKNOWN"),
            amount=data.get("amount"),
            currency=data.get("currency"),
            redirect_url=transaction.get("url"),
            payment_method=source.get("payment_method"),
            last4=card.get("last_four"),
            brand=card.get("brand"),
            response_message=response.get("message"),
            metadata=data.get("metadata") or {},
        )


class TapPaymentClient:
    def __init__(
        self,
        secret_key: str,
        api_url: str = "https://api.tap.company/v2",
        public_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.public_key = public_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "TapPaymentClient":
        return cls(
            secret_key=settings.TAP_SECRET_KEY,
            public_key=settings.TAP_PUBLIC_KEY,
            api_url=settings.TAP_API_URL,
        )

    def _client(self) -> httpx.AsyncClient:
        if not self.secret_key:
            logger.error("Tap secret key not configured")
            raise PaymentGatewayError("Payment system not configured. Please contact support.")
        return httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.secret_key}"},
        )

    async def create_charge(self, request: ChargeRequest) -> Charge:
        async with self._client() as client:
            try:
                response = await client.post("/charges", json=request.to_payload())
            except httpx.HTTPError as exc:
                logger.error("Tap charge creation failed: %s", exc)
                raise PaymentGatewayError("Payment system error. Please try again later.") from exc
        data = _json_or_empty(response)
        if response.is_error:
            logger.error("Tap charge creation rejected (%s): %s", response.status_code, data)
            raise PaymentGatewayError(_error_message(data, "Failed to create charge"))
        return Charge.from_api(data)

    async def retrieve_charge(self, charge_id: str) -> Charge:
        async with self._client() as client:
            try:
                response = await client.get(f"/charges/{charge_id}")
            except httpx.HTTPError as exc:
                logger.error("Tap charge retrieval failed: %s", exc)
                raise PaymentGatewayError("Payment system error. Please try again later.") from exc
        data = _json_or_empty(response)
        if response.is_error:
            logger.error("Tap charge %s retrieval rejected (%s)", charge_id, response.status_code)
            raise PaymentGatewayError(_error_message(data, "Failed to retrieve charge"))
        return Charge.from_api(data)


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(data: Dict[str, Any], default: str) -> str:
    if data.get("message"):
        return str(data["message"])
    errors = data.get("errors") or []
    if errors and isinstance(errors[0], dict) and errors[0].get("description"):
        return str(errors[0]["description"])
    return default
