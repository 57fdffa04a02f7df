"""
Tests for the audit log endpoints.
"""

from datetime import timedelta, timezone

from fintrack.models.base import utcnow


def create_and_validate(client, comptable, manager, auth_headers):
    txn_id = client.post("/api/transactions", headers=auth_headers(comptable), json={
        "amount": "42.00",
        "transaction_type": "EXPENSE",
        "category": "TRAVEL",
        "transaction_date": "2024-03-01",
    }).json()["data"]["id"]
    client.patch(f"/api/transactions/{txn_id}/validate", headers=auth_headers(manager))
    return txn_id


class TestAuditAccess:

    def test_manager_forbidden(self, client, manager, auth_headers):
        response = client.get("/api/audit-logs", headers=auth_headers(manager))
        assert response.status_code == 403

    def test_anonymous_rejected(self, client):
        assert client.get("/api/audit-logs").status_code == 401

    def test_no_write_routes(self, client, admin, auth_headers):
        response = client.post("/api/audit-logs", headers=auth_headers(admin), json={})
        assert response.status_code == 405
        assert response.json()["error"]["kind"] == "MethodNotAllowed"


class TestAuditQueries:

    def test_entity_history(self, client, admin, manager, comptable, auth_headers):
        txn_id = create_and_validate(client, comptable, manager, auth_headers)

        response = client.get(
            f"/api/audit-logs/entity/Transaction/{txn_id}", headers=auth_headers(admin)
        )
        assert response.status_code == 200

        entries = response.json()["data"]
        assert [e["action"] for e in entries] == ["VALIDATE_TRANSACTION", "CREATE_TRANSACTION"]
        assert entries[0]["user_email"] == manager.email
        assert entries[0]["ip_address"] == "testclient"

    def test_by_user_and_action(self, client, admin, manager, comptable, auth_headers):
        create_and_validate(client, comptable, manager, auth_headers)
        headers = auth_headers(admin)

        by_user = client.get(f"/api/audit-logs/user/{manager.id}", headers=headers).json()
        assert [e["action"] for e in by_user["data"]] == ["VALIDATE_TRANSACTION"]

        by_action = client.get(
            "/api/audit-logs/action/CREATE_TRANSACTION", headers=headers
        ).json()
        assert len(by_action["data"]) == 1

    def test_recent_limit(self, client, admin, manager, comptable, auth_headers):
        create_and_validate(client, comptable, manager, auth_headers)

        response = client.get(
            "/api/audit-logs", headers=auth_headers(admin), params={"limit": 1}
        )
        assert [e["action"] for e in response.json()["data"]] == ["VALIDATE_TRANSACTION"]

    def test_limit_out_of_bounds(self, client, admin, auth_headers):
        response = client.get(
            "/api/audit-logs", headers=auth_headers(admin), params={"limit": 500}
        )
        assert response.status_code == 400

    def test_time_range(self, client, admin, manager, comptable, auth_headers):
        create_and_validate(client, comptable, manager, auth_headers)
        now = utcnow()

        response = client.get("/api/audit-logs/range", headers=auth_headers(admin), params={
            "start": (now - timedelta(minutes=5)).isoformat(),
            "end": (now + timedelta(minutes=5)).isoformat(),
        })
        actions = [e["action"] for e in response.json()["data"]]
        assert "CREATE_TRANSACTION" in actions
        assert "VALIDATE_TRANSACTION" in actions

    def test_time_range_with_offsets(self, client, admin, manager, comptable, auth_headers):
        create_and_validate(client, comptable, manager, auth_headers)
        plus_five = timezone(timedelta(hours=5))
        now_local = utcnow().replace(tzinfo=timezone.utc).astimezone(plus_five)

        response = client.get("/api/audit-logs/range", headers=auth_headers(admin), params={
            "start": (now_local - timedelta(minutes=5)).isoformat(),
            "end": (now_local + timedelta(minutes=5)).isoformat(),
        })
        assert response.status_code == 200
        assert "VALIDATE_TRANSACTION" in [e["action"] for e in response.json()["data"]]

    def test_time_range_with_one_aware_bound(self, client, admin, manager, comptable, auth_headers):
        create_and_validate(client, comptable, manager, auth_headers)
        now = utcnow()

        response = client.get("/api/audit-logs/range", headers=auth_headers(admin), params={
            "start": (now - timedelta(minutes=5)).isoformat() + "Z",
            "end": (now + timedelta(minutes=5)).isoformat(),
        })
        assert response.status_code == 200
        assert len(response.json()["data"]) >= 2
