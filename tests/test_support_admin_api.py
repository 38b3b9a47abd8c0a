import json
import re
from datetime import datetime

from conftest import make_contract, make_user

from contramind.models.admin import AdminAuditLog
from contramind.models.billing import Payment, Subscription
from contramind.models.enums import (
    BillingCycle,
    PaymentStatus,
    SubscriptionStatus,
    SubscriptionTier,
    TicketStatus,
)
from contramind.models.support import SupportTicket, TicketMessage
from contramind.services.support import generate_ticket_number

TICKET_NUMBER = re.compile(r"^TKT-\d{13}-[A-Z0-9]{5}$")


def open_ticket(client, headers, subject="Cannot download analysis"):
    return client.post(
        "/api/v1/support/tickets",
        json={"subject": subject, "message": "The export button does nothing."},
        headers=headers,
    )


def test_ticket_number_format():
    numbers = {generate_ticket_number() for _ in range(20)}

    assert all(TICKET_NUMBER.match(n) for n in numbers)
    assert len(numbers) == 20


def test_create_ticket_stores_first_message(client, user_headers, db_session):
    response = open_ticket(client, user_headers)

    assert response.status_code == 201
    body = response.json()
    assert TICKET_NUMBER.match(body["ticket_number"])
    ticket = db_session.get(SupportTicket, body["id"])
    assert ticket.status == TicketStatus.OPEN
    assert ticket.priority.value == "medium"
    assert [m.message for m in ticket.messages] == ["The export button does nothing."]


def test_ticket_access_is_limited_to_owner_and_admin(client, user_headers, other_headers, admin_headers):
    ticket_id = open_ticket(client, user_headers).json()["id"]

    assert client.get(f"/api/v1/support/tickets/{ticket_id}", headers=user_headers).status_code == 200
    assert client.get(f"/api/v1/support/tickets/{ticket_id}", headers=other_headers).status_code == 403
    assert client.get(f"/api/v1/support/tickets/{ticket_id}", headers=admin_headers).status_code == 200
    assert client.get("/api/v1/support/tickets/9999", headers=user_headers).status_code == 404

    mine = client.get("/api/v1/support/tickets", headers=user_headers).json()
    theirs = client.get("/api/v1/support/tickets", headers=other_headers).json()
    assert [t["id"] for t in mine] == [ticket_id]
    assert theirs == []


def test_admin_reply_moves_open_ticket_in_progress(client, user_headers, admin_headers, db_session):
    ticket_id = open_ticket(client, user_headers).json()["id"]

    response = client.post(
        "/api/v1/support/replies",
        json={"ticket_id": ticket_id, "message": "We are looking into it."},
        headers=admin_headers,
    )

    assert response.status_code == 201
    detail = client.get(f"/api/v1/support/tickets/{ticket_id}", headers=user_headers).json()
    assert detail["ticket"]["status"] == "in_progress"
    assert [m["sender_type"] for m in detail["messages"]] == ["user", "admin"]


def test_reply_does_not_reopen_resolved_ticket(client, user_headers, db_session):
    ticket_id = open_ticket(client, user_headers).json()["id"]
    ticket = db_session.get(SupportTicket, ticket_id)
    ticket.status = TicketStatus.RESOLVED
    db_session.commit()

    client.post(
        "/api/v1/support/replies",
        json={"ticket_id": ticket_id, "message": "Thanks!"},
        headers=user_headers,
    )

    db_session.expire_all()
    assert db_session.get(SupportTicket, ticket_id).status == TicketStatus.RESOLVED
    assert db_session.query(TicketMessage).filter_by(ticket_id=ticket_id).count() == 2


def test_admin_routes_require_admin_role(client, user_headers):
    for path in ("/dashboard", "/users", "/tickets", "/audit-logs", "/users/1"):
        assert client.get(f"/api/v1/admin{path}", headers=user_headers).status_code == 403


def test_dashboard_counts(client, user_headers, admin_headers, db_session):
    open_ticket(client, user_headers)
    client.get("/api/v1/auth/me", headers=admin_headers)
    user = make_user(db_session, "user-3")
    db_session.add(
        Subscription(
            user_id=user.id,
            tier=SubscriptionTier.STARTER,
            status=SubscriptionStatus.ACTIVE,
            billing_cycle=BillingCycle.MONTHLY,
            current_period_start=datetime(2026, 1, 1),
            current_period_end=datetime(2026, 1, 31),
        )
    )
    db_session.add(Payment(user_id=user.id, amount=299, status=PaymentStatus.SUCCESS, transaction_id="t1"))
    db_session.add(Payment(user_id=user.id, amount=799, status=PaymentStatus.FAILED, transaction_id="t2"))
    db_session.commit()

    stats = client.get("/api/v1/admin/dashboard", headers=admin_headers).json()

    assert stats == {"total_users": 3, "active_subscriptions": 1, "open_tickets": 1, "revenue": 299}


def test_admin_user_detail_lists_recent_contracts(client, admin_headers, db_session):
    user = make_user(db_session, "user-3", name="Lina")
    for i in range(12):
        make_contract(db_session, user, filename=f"contract-{i}.txt")

    detail = client.get(f"/api/v1/admin/users/{user.id}", headers=admin_headers).json()

    assert detail["user"]["name"] == "Lina"
    assert detail["subscription"] is None
    assert len(detail["contracts"]) == 10
    assert detail["contracts"][0]["filename"] == "contract-11.txt"
    assert client.get("/api/v1/admin/users/9999", headers=admin_headers).status_code == 404


def test_update_ticket_writes_audit_log(client, user_headers, admin_headers, db_session):
    ticket_id = open_ticket(client, user_headers).json()["id"]

    response = client.patch(
        f"/api/v1/admin/tickets/{ticket_id}",
        json={"status": "resolved", "priority": "high"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "resolved"
    assert response.json()["priority"] == "high"

    logs = client.get("/api/v1/admin/audit-logs", headers=admin_headers).json()
    assert len(logs) == 1
    assert logs[0]["action"] == "ticket_updated"
    assert logs[0]["resource_type"] == "ticket"
    assert logs[0]["resource_id"] == ticket_id
    assert json.loads(logs[0]["details"]) == {"priority": "high", "status": "resolved"}
    assert db_session.query(AdminAuditLog).count() == 1


def test_update_missing_ticket_is_404(client, admin_headers):
    response = client.patch("/api/v1/admin/tickets/9999", json={"status": "closed"}, headers=admin_headers)

    assert response.status_code == 404


def test_admin_lists_all_tickets_and_users(client, user_headers, other_headers, admin_headers):
    open_ticket(client, user_headers, subject="First")
    open_ticket(client, other_headers, subject="Second")

    tickets = client.get("/api/v1/admin/tickets", headers=admin_headers).json()
    users = client.get("/api/v1/admin/users", headers=admin_headers).json()

    assert {t["subject"] for t in tickets} == {"First", "Second"}
    assert {u["open_id"] for u in users} == {"user-1", "user-2", "owner-open-id"}


def test_admin_can_assign_and_unassign_ticket(client, user_headers, admin_headers):
    ticket_id = open_ticket(client, user_headers).json()["id"]
    admin_id = client.get("/api/v1/auth/me", headers=admin_headers).json()["id"]
    url = f"/api/v1/admin/tickets/{ticket_id}"

    assigned = client.patch(url, json={"assigned_to": admin_id}, headers=admin_headers)
    cleared = client.patch(url, json={"assigned_to": None}, headers=admin_headers)

    assert assigned.json()["assigned_to"] == admin_id
    assert cleared.status_code == 200
    assert cleared.json()["assigned_to"] is None
    assert cleared.json()["status"] == "open"
    logs = client.get("/api/v1/admin/audit-logs", headers=admin_headers).json()
    assert {"assigned_to": None} in [json.loads(log["details"]) for log in logs]


def test_ticket_status_cannot_be_nulled(client, user_headers, admin_headers):
    ticket_id = open_ticket(client, user_headers).json()["id"]

    response = client.patch(f"/api/v1/admin/tickets/{ticket_id}", json={"status": None}, headers=admin_headers)

    assert response.status_code == 422
