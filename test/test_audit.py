from datetime import datetime

import pytest

from revops.models import AdminAuditLog


@pytest.fixture
def audit_logs(db_session):
    db_session.add_all(
        [
            AdminAuditLog(
                table_name="services",
                record_id="svc-1",
                action="create",
                changed_by="jane",
                changed_at=datetime(2024, 1, 10, 12, 0),
            ),
            AdminAuditLog(
                table_name="packages",
                record_id="pkg-1",
                action="update",
                changed_by="sam",
                changed_at=datetime(2024, 2, 10, 12, 0),
            ),
            AdminAuditLog(
                table_name="services",
                record_id="svc-1",
                action="delete",
                changed_by="jane",
                changed_at=datetime(2024, 3, 10, 12, 0),
            ),
        ]
    )
    db_session.commit()


class TestAuditLogs:
    """Admin audit log queries."""

    def test_newest_first_with_meta(self, client, admin_headers, audit_logs):
        body = client.get("/api/admin/audit-logs", headers=admin_headers).json()

        assert [log["action"] for log in body["data"]] == ["delete", "update", "create"]
        assert body["meta"]["count"] == 3
        assert body["meta"]["limit"] == 100
        assert body["meta"]["filters"]["tableName"] is None

    def test_filters(self, client, admin_headers, audit_logs):
        body = client.get(
            "/api/admin/audit-logs",
            headers=admin_headers,
            params={"tableName": "services", "changedBy": "jane", "action": "create"},
        ).json()

        assert body["meta"]["count"] == 1
        assert body["data"][0]["recordId"] == "svc-1"

    def test_date_range(self, client, admin_headers, audit_logs):
        body = client.get(
            "/api/admin/audit-logs",
            headers=admin_headers,
            params={"startDate": "2024-02-01T00:00:00Z", "endDate": "2024-02-28T00:00:00Z"},
        ).json()

        assert [log["tableName"] for log in body["data"]] == ["packages"]

    @pytest.mark.parametrize("raw, expected", [("2", 2), ("0", 100), ("abc", 100), ("9999", 500)])
    def test_limit_normalization(self, client, admin_headers, audit_logs, raw, expected):
        body = client.get(
            "/api/admin/audit-logs", headers=admin_headers, params={"limit": raw}
        ).json()

        assert body["meta"]["limit"] == expected

    def test_invalid_action(self, client, admin_headers):
        response = client.get(
            "/api/admin/audit-logs", headers=admin_headers, params={"action": "purge"}
        )

        assert response.status_code == 400

    def test_invalid_date(self, client, admin_headers):
        response = client.get(
            "/api/admin/audit-logs", headers=admin_headers, params={"startDate": "yesterday"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid date format. Use ISO 8601"

    def test_admin_writes_are_logged_with_request_details(self, client, admin_headers):
        client.post(
            "/api/admin/services",
            headers={**admin_headers, "User-Agent": "pytest-agent"},
            json={"name": "Audit me", "slug": "audit-me", "basePrice": 1, "category": "misc"},
        )

        log = client.get("/api/admin/audit-logs", headers=admin_headers).json()["data"][0]
        assert log["changedBy"] == "jane@revelateops.com"
        assert log["userAgent"] == "pytest-agent"
        assert log["ipAddress"] == "testclient"
