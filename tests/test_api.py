"""API endpoint tests.

Runs the FastAPI app in-process against the SQLite test database.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from hrms_engine.api.app import create_app
from hrms_engine.api.dependencies import get_session_factory
from hrms_engine.verification import REQUIRED_DOCUMENTS


@pytest.fixture
async def client(session_factory):
    """HTTP client bound to an app using the test session factory."""
    app = create_app()
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def headers(test_company):
    return {"X-Company-ID": str(test_company.company_id)}


class TestHealthEndpoints:
    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should report the database."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "healthy"

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.json()["status"] == "alive"


class TestPayrollEndpoints:
    """Payroll preview, configuration and runs."""

    async def test_preview(self, client: AsyncClient):
        """POST /payroll/preview computes without storing anything."""
        response = await client.post(
            "/api/v1/payroll/preview",
            json={
                "employee": {
                    "worker_type": "Hourly",
                    "hourly_rate": 50,
                    "hours_worked": 160,
                    "overtime": 200,
                    "allowances": 100,
                },
                "config": {"rules": [{"code": "STATUTORY", "rate": "0.10"}]},
            },
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert Decimal(data["gross_pay"]) == Decimal("8200")
        assert Decimal(data["total_deductions"]) == Decimal("820")
        assert Decimal(data["net_pay"]) == Decimal("7480")
        assert data["is_negative"] is False
        assert data["statutory_lines"][0]["code"] == "STATUTORY"

    async def test_preview_rejects_negative_adjustment(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payroll/preview",
            json={
                "employee": {"worker_type": "Salaried", "salary": 1000, "bonus": -1},
                "config": {"rules": []},
            },
        )

        assert response.status_code == 422

    async def test_preview_requires_hourly_fields(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payroll/preview",
            json={
                "employee": {"worker_type": "Hourly", "hourly_rate": 20},
                "config": {"rules": []},
            },
        )

        assert response.status_code == 422

    async def test_preview_rejects_bad_config(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/payroll/preview",
            json={
                "employee": {"worker_type": "Salaried", "salary": 1000},
                "config": {"rules": [{"code": "X", "rate": "0.1", "brackets": [{"min": 0, "rate": 0}]}]},
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_CONFIG"

    @pytest.mark.parametrize("rate", ["Infinity", "NaN"])
    async def test_preview_rejects_non_finite_rate(self, client: AsyncClient, rate):
        """A non-finite rate is a config error, not a server error."""
        response = await client.post(
            "/api/v1/payroll/preview",
            json={
                "employee": {"worker_type": "Salaried", "salary": 1000},
                "config": {"rules": [{"code": "X", "rate": rate}]},
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_CONFIG"

    async def test_config_round_trip(self, client: AsyncClient, headers):
        put = await client.put(
            "/api/v1/payroll/config",
            headers=headers,
            json={"rules": [{"code": "NAPSA", "name": "NAPSA", "rate": "0.05"}]},
        )
        assert put.status_code == 200, put.text

        response = await client.get("/api/v1/payroll/config", headers=headers)
        assert response.status_code == 200
        assert [r["code"] for r in response.json()["rules"]] == ["NAPSA"]

    async def test_config_requires_company_header(self, client: AsyncClient):
        response = await client.get("/api/v1/payroll/config")

        assert response.status_code == 400

    async def test_unknown_company(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/payroll/config", headers={"X-Company-ID": str(uuid4())}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "COMPANY_NOT_FOUND"

    async def test_run_payroll(self, client: AsyncClient, headers, employee_factory):
        await employee_factory("Alice Banda")

        response = await client.post(
            "/api/v1/payroll/runs", headers=headers, json={"actor": "admin"}
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["success"] is True
        assert data["employee_count"] == 1
        assert data["ach_file_name"].startswith("ACH-PAYROLL-")


class TestVerificationEndpoints:
    """Document upload and review over HTTP."""

    async def _upload(self, client, headers, doc_type):
        return await client.post(
            f"/api/v1/verification/documents/{doc_type.value}",
            headers=headers,
            json={
                "name": f"{doc_type.value}.pdf",
                "url": f"https://files.example/{doc_type.value}.pdf",
                "content_type": "application/pdf",
                "size_bytes": 50_000,
            },
        )

    async def test_get_lists_every_required_document(self, client: AsyncClient, headers):
        response = await client.get("/api/v1/verification", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Not Started"
        assert len(data["documents"]) == len(REQUIRED_DOCUMENTS)
        assert {d["status"] for d in data["documents"]} == {"Not Uploaded"}

    async def test_upload_and_verify(self, client: AsyncClient, headers):
        for doc_type in REQUIRED_DOCUMENTS:
            response = await self._upload(client, headers, doc_type)
            assert response.status_code == 200, response.text
        assert response.json()["status"] == "Pending Review"

        for doc_type in REQUIRED_DOCUMENTS:
            response = await client.post(
                f"/api/v1/verification/documents/{doc_type.value}/approve",
                headers=headers,
                json={"reviewer": "admin", "expected_version": 1},
            )
            assert response.status_code == 200, response.text

        data = response.json()
        assert data["status"] == "Verified"
        assert data["progress"] == 100

    async def test_reject_requires_reason(self, client: AsyncClient, headers):
        doc_type = next(iter(REQUIRED_DOCUMENTS))
        await self._upload(client, headers, doc_type)

        response = await client.post(
            f"/api/v1/verification/documents/{doc_type.value}/reject",
            headers=headers,
            json={"reviewer": "admin", "reason": "  ", "expected_version": 1},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "REASON_REQUIRED"

    async def test_stale_review_conflict(self, client: AsyncClient, headers):
        doc_type = next(iter(REQUIRED_DOCUMENTS))
        await self._upload(client, headers, doc_type)
        await self._upload(client, headers, doc_type)

        response = await client.post(
            f"/api/v1/verification/documents/{doc_type.value}/approve",
            headers=headers,
            json={"reviewer": "admin", "expected_version": 1},
        )

        assert response.status_code == 409
        assert response.json()["code"] == "STALE_DOCUMENT"

    async def test_review_without_upload(self, client: AsyncClient, headers):
        response = await client.post(
            "/api/v1/verification/documents/director_id/approve",
            headers=headers,
            json={"reviewer": "admin", "expected_version": 1},
        )

        assert response.status_code == 404

    async def test_upload_rejects_unsupported_type(self, client: AsyncClient, headers):
        response = await client.post(
            "/api/v1/verification/documents/director_id",
            headers=headers,
            json={
                "name": "id.gif",
                "url": "https://files.example/id.gif",
                "content_type": "image/gif",
                "size_bytes": 100,
            },
        )

        assert response.status_code == 422
        assert response.json()["field"] == "content_type"

    async def test_unknown_document_type(self, client: AsyncClient, headers):
        response = await client.post(
            "/api/v1/verification/documents/passport_photo/approve",
            headers=headers,
            json={"reviewer": "admin", "expected_version": 1},
        )
        assert response.status_code == 422


class TestJobEndpoints:
    """Job posting against the subscription quota."""

    async def test_post_until_exhausted(self, client: AsyncClient, headers):
        """The company has one posting left: 201 then 409."""
        first = await client.post("/api/v1/jobs", headers=headers, json={"title": "Accountant"})
        assert first.status_code == 201, first.text
        assert first.json()["job_postings_remaining"] == 0

        second = await client.post("/api/v1/jobs", headers=headers, json={"title": "Clerk"})
        assert second.status_code == 409

    async def test_activate_subscription_replenishes(self, client: AsyncClient, headers):
        response = await client.post(
            "/api/v1/subscription/job-postings",
            headers=headers,
            json={"job_postings": 5, "plan": "premium"},
        )
        assert response.status_code == 200

        response = await client.get("/api/v1/subscription/job-postings", headers=headers)
        assert response.json()["job_postings_remaining"] == 5

    async def test_activate_unknown_company(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/subscription/job-postings",
            headers={"X-Company-ID": str(uuid4())},
            json={"job_postings": 5},
        )

        assert response.status_code == 404
