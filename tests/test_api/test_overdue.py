"""
Tests for the overdue roster endpoints.
"""
from fastapi.testclient import TestClient

from app.core.exceptions import ExternalServiceError


class TestOverdueEndpoints:
    """Test cases for the overdue roster API."""

    def test_roster(self, client: TestClient, api_prefix: str):
        response = client.get(f"{api_prefix}/overdue")

        assert response.status_code == 200
        data = response.json()
        assert [t["tenantId"] for t in data] == ["t-critical", "t-high", "t-medium", "t-warning"]
        assert data[0]["severity"] == "critical"
        assert data[0]["display"]["color"] == "#dc2626"
        assert data[0]["outstandingBalance"] == 900.0

    def test_stats(self, client: TestClient, api_prefix: str):
        data = client.get(f"{api_prefix}/overdue/stats").json()

        assert data == {
            "totalOverdue": 4,
            "critical": 1,
            "high": 1,
            "medium": 1,
            "warning": 1,
            "totalOutstanding": 1500.0,
            "averageDaysOverdue": 17,
        }

    def test_roster_provider_failure(self, client: TestClient, api_prefix: str, overdue_provider):
        overdue_provider.get_overdue_tenants.side_effect = ExternalServiceError("overdue", "HTTP 500", 500)

        response = client.get(f"{api_prefix}/overdue")

        assert response.status_code == 503
        data = response.json()
        assert data["error_code"] == "TLV_002"
        assert data["details"] == "HTTP 500"

    def test_check(self, client: TestClient, api_prefix: str):
        response = client.post(f"{api_prefix}/overdue/check")

        assert response.status_code == 200
        data = response.json()
        assert data["result"]["checked"] == 12
        assert data["result"]["overdue"] == 4
        assert data["refreshError"] is False
        assert data["overview"]["stats"]["totalOverdue"] == 4
