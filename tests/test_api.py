"""Tests for FastAPI endpoints."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from conftest import FakeOpenAIClient, FakeStorage

from app.backend.main import app
from app.backend.models_db import JobStatus, ProcessingJob
from app.backend.services.llm_extraction import StructuredExtractor
from app.backend.services.orchestrator import JobOrchestrator, get_orchestrator
from app.backend.services.outcomes import ExtractedText, StageOutcome
from app.backend.services.repository import JobRepository, get_repository

REPORT_TEXT = "ACME COLLECTIONS LLC  Account #XXXX1234  Balance: $50.00  Reported by Experian\n" * 3


class StaticTextExtractor:
    def __init__(self, text: str = REPORT_TEXT):
        self.text = text

    async def extract(self, pdf_bytes: bytes) -> StageOutcome:
        return StageOutcome.success(ExtractedText(text=self.text, method="native"))


@pytest.fixture
def llm_responses() -> list:
    return [
        {
            "items": [
                {"creditor": "Acme Collections", "type": "COLLECTION", "amount": 5000, "isNegative": True},
                {"creditor": "Big Bank", "type": "CREDIT_CARD", "amount": 125000, "isNegative": False},
            ]
        }
    ]


@pytest.fixture
def orchestrator(
    repository: JobRepository,
    queued_job: ProcessingJob,
    sample_pdf_bytes: bytes,
    llm_responses: list,
) -> JobOrchestrator:
    return JobOrchestrator(
        storage=FakeStorage({("credit-reports", queued_job.file_path): sample_pdf_bytes}),
        repository=repository,
        text_extractor=StaticTextExtractor(),
        structured_extractor=StructuredExtractor(client=FakeOpenAIClient(llm_responses)),
    )


@pytest.fixture
def client(
    orchestrator: JobOrchestrator, repository: JobRepository
) -> Generator[TestClient, None, None]:
    """Create a test client wired to in-memory collaborators."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_repository] = lambda: repository
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _body(job: ProcessingJob, **overrides) -> dict:
    body = {
        "jobId": job.id,
        "profileId": job.profile_id,
        "filePath": job.file_path,
        "fileName": job.file_name,
    }
    body.update(overrides)
    return body


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_endpoint(self, client: TestClient):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "T" in data["timestamp"]


class TestProcessEndpoint:
    """Tests for POST /process."""

    def test_process_success(self, client: TestClient, queued_job: ProcessingJob, repository: JobRepository):
        response = client.post("/process", json=_body(queued_job))

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "jobId": "job-1",
            "totalItems": 2,
            "negativeItems": 1,
        }
        assert repository.get_job("job-1").status == JobStatus.COMPLETED

    def test_process_download_failure_returns_500(
        self, client: TestClient, queued_job: ProcessingJob, repository: JobRepository
    ):
        response = client.post("/process", json=_body(queued_job, filePath="profile-1/missing.pdf"))

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["error"].startswith("Failed to download file")
        assert repository.get_job("job-1").status == JobStatus.FAILED

    def test_process_accepts_snake_case(self, client: TestClient, queued_job: ProcessingJob):
        response = client.post(
            "/process",
            json={
                "job_id": queued_job.id,
                "profile_id": queued_job.profile_id,
                "file_path": queued_job.file_path,
            },
        )
        assert response.status_code == 200

    def test_process_rejects_missing_fields(self, client: TestClient):
        """Test that an invalid body is reported with the success flag."""
        response = client.post("/process", json={"jobId": "job-1"})

        assert response.status_code == 422
        data = response.json()
        assert data["success"] is False
        assert "profileId" in data["error"]
        assert "filePath" in data["error"]


class TestJobsEndpoint:
    """Tests for GET /jobs/{job_id}."""

    def test_get_queued_job(self, client: TestClient, queued_job: ProcessingJob):
        response = client.get(f"/jobs/{queued_job.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "job-1"
        assert data["status"] == "queued"
        assert data["started_at"] is None
        assert data["result_json"] is None

    def test_get_completed_job(self, client: TestClient, queued_job: ProcessingJob):
        client.post("/process", json=_body(queued_job))

        data = client.get(f"/jobs/{queued_job.id}").json()

        assert data["status"] == "completed"
        assert data["started_at"] is not None
        assert data["completed_at"] is not None
        assert data["result_json"]["total_items"] == 2
        assert data["result_json"]["negative_accounts"][0]["creditor"] == "Acme Collections"

    def test_get_unknown_job_returns_404(self, client: TestClient):
        response = client.get("/jobs/does-not-exist")
        assert response.status_code == 404
        assert "not found" in response.json()["detail"]
