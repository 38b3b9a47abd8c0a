from conftest import make_contract, make_user

from contramind.models.contract import AiFeedback, AiMessage, Contract
from contramind.models.enums import ContractStatus, FeedbackRating, MessageRole

CONTRACT_PAYLOAD = {
    "filename": "lease.pdf",
    "file_key": "user-1/contracts/lease.pdf",
    "file_url": "https://storage.example/user-1/contracts/lease.pdf",
    "file_size": 524_288,
    "mime_type": "application/pdf",
}


def test_create_contract_returns_processing_and_dispatches(client, user_headers, dispatched, db_session):
    response = client.post("/api/v1/contracts", json=CONTRACT_PAYLOAD, headers=user_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "processing"
    assert dispatched == [body["id"]]

    contract = db_session.get(Contract, body["id"])
    assert contract.status == ContractStatus.PROCESSING
    assert contract.risk_score is None
    assert contract.extracted_text is None


def test_create_contract_survives_dispatch_failure(client, user_headers, db_session):
    from contramind.api.v1.dependencies import get_analysis_dispatcher
    from contramind.main import app

    def broken_dispatch(contract_id: int) -> None:
        raise ConnectionError("broker unavailable")

    app.dependency_overrides[get_analysis_dispatcher] = lambda: broken_dispatch
    response = client.post("/api/v1/contracts", json=CONTRACT_PAYLOAD, headers=user_headers)

    assert response.status_code == 201
    assert db_session.get(Contract, response.json()["id"]).status == ContractStatus.PROCESSING


def test_create_contract_rejects_unsupported_type(client, user_headers, dispatched):
    payload = dict(CONTRACT_PAYLOAD, mime_type="image/png", filename="scan.png")
    response = client.post("/api/v1/contracts", json=payload, headers=user_headers)

    assert response.status_code == 422
    assert dispatched == []


def test_create_contract_rejects_oversized_file(client, user_headers):
    payload = dict(CONTRACT_PAYLOAD, file_size=10 * 1024 * 1024 + 1)
    response = client.post("/api/v1/contracts", json=payload, headers=user_headers)

    assert response.status_code == 422


def test_create_contract_accepts_exact_size_limit(client, user_headers):
    payload = dict(CONTRACT_PAYLOAD, file_size=10 * 1024 * 1024)
    response = client.post("/api/v1/contracts", json=payload, headers=user_headers)

    assert response.status_code == 201


def test_requests_without_token_are_rejected(client):
    assert client.get("/api/v1/contracts").status_code == 401
    assert client.get(
        "/api/v1/contracts", headers={"Authorization": "Bearer not-a-jwt"}
    ).status_code == 401


def test_list_contracts_only_returns_own_newest_first(client, user_headers, db_session):
    owner = make_user(db_session, "user-1")
    stranger = make_user(db_session, "user-2")
    first = make_contract(db_session, owner, filename="first.txt")
    second = make_contract(db_session, owner, filename="second.txt")
    make_contract(db_session, stranger, filename="theirs.txt")

    response = client.get("/api/v1/contracts", headers=user_headers)

    assert response.status_code == 200
    ids = [c["id"] for c in response.json()]
    assert ids == [second.id, first.id]


def test_list_contracts_validates_pagination(client, user_headers):
    assert client.get("/api/v1/contracts?limit=0", headers=user_headers).status_code == 422
    assert client.get("/api/v1/contracts?limit=101", headers=user_headers).status_code == 422
    assert client.get("/api/v1/contracts?offset=-1", headers=user_headers).status_code == 422


def test_get_contract_enforces_ownership(client, user_headers, other_headers, admin_headers, db_session):
    owner = make_user(db_session, "user-1")
    contract = make_contract(db_session, owner, analyzed=True)

    assert client.get(f"/api/v1/contracts/{contract.id}", headers=user_headers).status_code == 200
    assert client.get(f"/api/v1/contracts/{contract.id}", headers=other_headers).status_code == 403
    assert client.get(f"/api/v1/contracts/{contract.id}", headers=admin_headers).status_code == 200
    assert client.get("/api/v1/contracts/9999", headers=user_headers).status_code == 404


def test_get_contract_includes_analysis_fields(client, user_headers, db_session):
    owner = make_user(db_session, "user-1")
    contract = make_contract(db_session, owner, analyzed=True)

    body = client.get(f"/api/v1/contracts/{contract.id}", headers=user_headers).json()

    assert body["status"] == "analyzed"
    assert body["risk_score"] == "medium"
    assert body["sharia_compliance"] == "requires_review"
    assert body["ksa_compliance"] == "compliant"
    assert body["detected_language"] == "en"
    assert body["extracted_text"].startswith("This services agreement")


def test_delete_contract_cascades_messages_and_feedback(client, user_headers, other_headers, db_session):
    owner = make_user(db_session, "user-1")
    contract = make_contract(db_session, owner, analyzed=True)
    message = AiMessage(contract_id=contract.id, user_id=owner.id, role=MessageRole.ASSISTANT, content="hi")
    db_session.add(message)
    db_session.flush()
    db_session.add(AiFeedback(message_id=message.id, user_id=owner.id, rating=FeedbackRating.THUMBS_UP))
    db_session.commit()

    assert client.delete(f"/api/v1/contracts/{contract.id}", headers=other_headers).status_code == 403
    response = client.delete(f"/api/v1/contracts/{contract.id}", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    db_session.expire_all()
    assert db_session.get(Contract, contract.id) is None
    assert db_session.query(AiMessage).count() == 0
    assert db_session.query(AiFeedback).count() == 0


def test_search_matches_filename_and_text_case_insensitively(client, user_headers, db_session):
    owner = make_user(db_session, "user-1")
    lease = make_contract(db_session, owner, filename="Office-LEASE.pdf")
    nda = make_contract(db_session, owner, filename="nda.txt", analyzed=True,
                        extracted_text="Mutual non-disclosure covering Riyadh operations")
    make_contract(db_session, owner, filename="other.txt")

    lease_hits = client.get("/api/v1/contracts/search?query=lease", headers=user_headers).json()
    text_hits = client.get("/api/v1/contracts/search?query=RIYADH", headers=user_headers).json()

    assert [c["id"] for c in lease_hits] == [lease.id]
    assert [c["id"] for c in text_hits] == [nda.id]
