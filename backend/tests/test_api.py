"""
Tests for the HTTP surface: auth, brand CRUD and the report endpoints.
"""

import httpx
from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_report_aggregator
from app.main import app
from app.services.reamaze import ReamazeClient
from app.services.reports import ReportAggregator

from conftest import ADMIN_PASSWORD

API = "/api/v1"


class TestAuth:
    def test_login_returns_a_usable_token(self, client):
        response = client.post(f"{API}/auth/login", data={"username": "admin", "password": ADMIN_PASSWORD})

        assert response.status_code == 200
        token = response.json()["access_token"]
        verify = client.get(f"{API}/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert verify.json() == {"valid": True, "username": "admin"}

    def test_wrong_password_is_rejected(self, client):
        response = client.post(f"{API}/auth/login", data={"username": "admin", "password": "nope"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid credentials"}

    def test_unknown_user_is_rejected(self, client):
        response = client.post(f"{API}/auth/login", data={"username": "root", "password": ADMIN_PASSWORD})

        assert response.status_code == 400

    def test_missing_token_is_401(self, client):
        assert client.get(f"{API}/brands").status_code == 401

    def test_invalid_token_is_403(self, client):
        response = client.get(f"{API}/brands", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 403
        assert response.json() == {"detail": "Invalid token"}

    def test_rejected_requests_never_build_an_aggregator(self, client, make_brand):
        brand = make_brand("Acme", "acme")
        opened = []

        async def _aggregator():
            opened.append(True)
            yield None

        app.dependency_overrides[get_report_aggregator] = _aggregator

        for path in ("/reports/tags", "/analytics/dashboard", f"/brands/{brand.id}/reports/tags"):
            assert client.get(f"{API}{path}").status_code == 401
            assert client.get(f"{API}{path}", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 403
        assert opened == []


class TestBrands:
    def test_create_list_delete(self, client, auth_headers):
        created = client.post(
            f"{API}/brands",
            json={"name": "Acme", "url": "https://Acme.reamaze.io/", "email": "ops@acme.io", "api_token": "secret"},
            headers=auth_headers,
        )

        assert created.status_code == 200
        body = created.json()
        assert body["url"] == "acme"
        assert body["has_api_token"] is True
        assert "api_token" not in body

        listed = client.get(f"{API}/brands", headers=auth_headers).json()
        assert [b["name"] for b in listed] == ["Acme"]

        deleted = client.delete(f"{API}/brands/{body['id']}", headers=auth_headers)
        assert deleted.json() == {"status": "deleted", "id": body["id"]}
        assert client.get(f"{API}/brands", headers=auth_headers).json() == []

    def test_delete_unknown_brand_is_404(self, client, auth_headers):
        response = client.delete(f"{API}/brands/999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Brand not found"}

    def test_rejects_invalid_subdomain_and_email(self, client, auth_headers):
        bad_url = client.post(f"{API}/brands", json={"name": "X", "url": "not a host!"}, headers=auth_headers)
        bad_email = client.post(f"{API}/brands", json={"name": "X", "url": "x", "email": "nope"}, headers=auth_headers)

        assert bad_url.status_code == 422
        assert bad_email.status_code == 422

    def test_single_brand_report_passthrough(self, client, auth_headers, make_brand, reamaze):
        brand = make_brand("Acme", "acme")
        reamaze.add("acme", "tags", {"tags": {"billing": 3}})

        response = client.get(
            f"{API}/brands/{brand.id}/reports/tags",
            params={"start_date": "2024-03-01", "end_date": "2024-03-07"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"tags": {"billing": 3}}
        assert reamaze.requests[0].url.params["start_date"] == "2024-03-01"

    def test_single_brand_report_errors(self, client, auth_headers, make_brand, reamaze):
        brand = make_brand("Acme", "acme")
        reamaze.add("acme", "staff", 503)

        missing = client.get(f"{API}/brands/999/reports/staff", headers=auth_headers)
        upstream = client.get(f"{API}/brands/{brand.id}/reports/staff", headers=auth_headers)
        unknown_metric = client.get(f"{API}/brands/{brand.id}/reports/nonsense", headers=auth_headers)

        assert missing.status_code == 404
        assert upstream.status_code == 502
        assert "HTTP 503" in upstream.json()["detail"]
        assert unknown_metric.status_code == 422

    def test_single_brand_report_rejects_reversed_range(self, client, auth_headers, make_brand, reamaze):
        brand = make_brand("Acme", "acme")

        response = client.get(
            f"{API}/brands/{brand.id}/reports/tags",
            params={"start_date": "2024-03-07", "end_date": "2024-03-01"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert reamaze.requests == []


class TestAggregateReports:
    def test_tags_scenario(self, client, auth_headers, make_brand, reamaze):
        make_brand("Brand A", "a")
        make_brand("Brand B", "b")
        reamaze.add("a", "tags", {"tags": {"billing": 3}})
        reamaze.add("b", "tags", {"tags": {"billing": 2, "shipping": 1}})

        body = client.get(f"{API}/reports/tags", headers=auth_headers).json()

        assert body["tags"] == {"billing": 5, "shipping": 1}
        assert body["start_date"] is None
        assert body["brands"] == [
            {"brand": "Brand A", "data": {"tags": {"billing": 3}}},
            {"brand": "Brand B", "data": {"tags": {"billing": 2, "shipping": 1}}},
        ]

    def test_errored_brand_has_error_and_no_data(self, client, auth_headers, make_brand, reamaze):
        make_brand("Good", "good")
        make_brand("Bad", "bad")
        reamaze.add("good", "staff", {"report": {"Kari": {"response_count": 2, "response_time_seconds": 30}}})
        reamaze.add("bad", "staff", 500)

        body = client.get(f"{API}/reports/staff", headers=auth_headers).json()

        assert body["report"]["Kari"] == {"response_count": 2, "response_time_seconds": 30, "appreciations_count": 0}
        bad = body["brands"][1]
        assert bad == {"brand": "Bad", "error": "Re:amaze returned HTTP 500 for staff"}

    def test_volume_echoes_and_filters_the_range(self, client, auth_headers, make_brand, reamaze):
        make_brand("A", "a")
        reamaze.add("a", "volume", {"conversation_counts": {"2024-03-01": 2, "2024-03-09": 7}})

        body = client.get(
            f"{API}/reports/volume",
            params={"start_date": "2024-03-01", "end_date": "2024-03-07"},
            headers=auth_headers,
        ).json()

        assert body["conversation_counts"] == {"2024-03-01": 2}
        assert (body["start_date"], body["end_date"]) == ("2024-03-01", "2024-03-07")

    def test_empty_channel_summary(self, client, auth_headers, reamaze):
        body = client.get(f"{API}/reports/channel-summary", headers=auth_headers).json()

        assert body["channels"] == {}
        assert body["aggregated"] == {
            "active_conversations": 0,
            "average_satisfaction_rating": None,
            "total_satisfaction_ratings": 0,
        }
        assert body["brands"] == []
        assert reamaze.requests == []

    def test_response_time_summary_shape(self, client, auth_headers, make_brand, reamaze):
        make_brand("A", "a")
        reamaze.add("a", "response_time", {"response_times": {"2024-03-02": 45}, "summary": {"averages": {"in_range": 45}}})

        body = client.get(f"{API}/reports/response-time", headers=auth_headers).json()

        assert body["response_times"] == {"2024-03-02": 45}
        assert body["summary"] == {"averages": {"in_range": 45}}

    def test_reversed_range_is_400(self, client, auth_headers):
        response = client.get(
            f"{API}/reports/tags",
            params={"start_date": "2024-03-07", "end_date": "2024-03-01"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_store_failure_is_a_generic_500(self, client, auth_headers, reamaze):
        def broken():
            raise RuntimeError("connection pool exhausted")

        async def _aggregator(db: Session = Depends(get_db)):
            async with httpx.AsyncClient(transport=reamaze.transport()) as http:
                yield ReportAggregator(ReamazeClient(http), broken)

        app.dependency_overrides[get_report_aggregator] = _aggregator

        response = client.get(f"{API}/reports/volume", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"detail": "Server error"}


class TestDashboardEndpoint:
    def test_dashboard_shape(self, client, auth_headers):
        response = client.get(f"{API}/analytics/dashboard", params={"range": "30d"}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["range"] == "30d"
        assert set(body["kpis"]) == {"avg_response_time_seconds", "total_tickets", "csat", "active_tickets"}
        assert body["charts"] == {"volume": [], "response_time": [], "top_tags": [], "staff": []}

    def test_unknown_range_is_422(self, client, auth_headers):
        assert client.get(f"{API}/analytics/dashboard", params={"range": "1y"}, headers=auth_headers).status_code == 422


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "x-request-id" in response.headers
