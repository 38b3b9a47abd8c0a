import json
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("OWNER_OPEN_ID", "owner-open-id")
os.environ.setdefault("EMAIL_API_URL", "")
os.environ.setdefault("EMAIL_API_KEY", "")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from contramind.api.v1.dependencies import (  # noqa: E402
    get_ai_service,
    get_analysis_dispatcher,
    get_db,
    get_email_client,
    get_payment_gateway,
)
from contramind.core.security import create_access_token  # noqa: E402
from contramind.db.base import Base  # noqa: E402
from contramind.main import app  # noqa: E402
from contramind.models.contract import Contract  # noqa: E402
from contramind.models.enums import (  # noqa: E402
    ComplianceStatus,
    ContractStatus,
    DetectedLanguage,
    RiskScore,
)
from contramind.models.user import User  # noqa: E402
from contramind.services.ai_service import AIService  # noqa: E402
from contramind.services.email import EmailClient  # noqa: E402
from contramind.services.payment_gateway import TapPaymentClient  # noqa: E402

OWNER_OPEN_ID = "owner-open-id"

ANALYSIS_JSON = {
    "summary": "A one-year services agreement between two Saudi companies.",
    "riskScore": "medium",
    "riskFactors": ["Unlimited liability for the provider"],
    "shariaCompliance": "requires_review",
    "shariaIssues": ["Late payment penalty may constitute riba"],
    "ksaCompliance": "compliant",
    "ksaIssues": [],
    "keyTerms": [
        {"term": "Term", "definition": "Twelve months", "importance": "Fixes the commitment"}
    ],
    "recommendations": ["Cap the provider's liability"],
    "detectedLanguage": "en",
}


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class FakeGemini:
    """Stands in for the Gemini REST endpoint; records every request body."""

    def __init__(self) -> None:
        self.reply = "ContraMind AI recommends to: review clause 4."
        self.status_code = 200
        self.requests: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "boom"}})
        return httpx.Response(200, json=gemini_body(self.reply))

    def service(self) -> AIService:
        return AIService(api_key="test-key", transport=httpx.MockTransport(self.handler))


class FakeTap:
    """Stands in for the Tap charges API."""

    def __init__(self) -> None:
        self.charge_status = "CAPTURED"
        self.created: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path.endswith("/charges"):
            body = json.loads(request.content)
            self.created.append(body)
            return httpx.Response(
                200,
                json={
                    "id": f"chg_test_{len(self.created)}",
                    "status": "INITIATED",
                    "amount": body["amount"],
                    "currency": body["currency"],
                    "transaction": {"url": "https://checkout.tap.example/pay"},
                },
            )
        charge_id = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(
            200,
            json={
                "id": charge_id,
                "status": self.charge_status,
                "source": {"payment_method": "VISA"},
                "card": {"last_four": "4242", "brand": "VISA"},
                "response": {"message": "Declined" if self.charge_status != "CAPTURED" else "Captured"},
            },
        )

    def client(self) -> TapPaymentClient:
        return TapPaymentClient(secret_key="sk_test", transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fake_gemini():
    return FakeGemini()


@pytest.fixture()
def fake_tap():
    return FakeTap()


@pytest.fixture()
def dispatched():
    return []


@pytest.fixture()
def client(session_factory, fake_gemini, fake_tap, dispatched):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = fake_gemini.service
    app.dependency_overrides[get_payment_gateway] = fake_tap.client
    app.dependency_overrides[get_email_client] = lambda: EmailClient(api_url="", api_key="", sender="test")
    app.dependency_overrides[get_analysis_dispatcher] = lambda: dispatched.append
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(open_id: str = "user-1", **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(open_id, **claims)}"}


@pytest.fixture()
def user_headers():
    return auth_headers("user-1", name="Sara", email="sara@example.com")


@pytest.fixture()
def other_headers():
    return auth_headers("user-2", name="Omar", email="omar@example.com")


@pytest.fixture()
def admin_headers():
    return auth_headers(OWNER_OPEN_ID, name="Owner", email="owner@example.com")


def make_user(db, open_id: str = "user-1", **fields) -> User:
    user = User(open_id=open_id, **fields)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_contract(db, user: User, *, status=ContractStatus.PROCESSING, analyzed=False, **fields) -> Contract:
    values = {
        "filename": "services-agreement.txt",
        "file_key": "contracts/services-agreement.txt",
        "file_url": "https://storage.example/contracts/services-agreement.txt",
        "file_size": 2048,
        "mime_type": "text/plain",
    }
    values.update(fields)
    contract = Contract(user_id=user.id, status=status, **values)
    if analyzed:
        contract.status = ContractStatus.ANALYZED
        contract.extracted_text = contract.extracted_text or "This services agreement is made between..."
        contract.detected_language = contract.detected_language or DetectedLanguage.EN
        contract.risk_score = RiskScore.MEDIUM
        contract.sharia_compliance = ComplianceStatus.REQUIRES_REVIEW
        contract.ksa_compliance = ComplianceStatus.COMPLIANT
    db.add(contract)
    db.commit()
    db.refresh(contract)
    return contract
