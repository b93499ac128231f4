"""Pytest configuration and fixtures."""

import json
from types import SimpleNamespace
from typing import Any, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.backend.database import init_db
from app.backend.models_db import JobStatus, ProcessingJob
from app.backend.services.exceptions import DownloadError
from app.backend.services.repository import JobRepository


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions``.

    Each call pops the next scripted response: a string is returned as the
    message content, an exception is raised.
    """

    def __init__(self, responses: list[Any]):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if not isinstance(response, str):
            response = json.dumps(response)
        message = SimpleNamespace(content=response)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAIClient:
    def __init__(self, responses: list[Any]):
        self.chat = SimpleNamespace(completions=FakeCompletions(responses))

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.chat.completions.calls


class FakeStorage:
    """In-memory object storage keyed by (bucket, path)."""

    def __init__(self, objects: dict[tuple[str, str], bytes] | None = None):
        self.objects = objects or {}
        self.requests: list[tuple[str, str]] = []

    async def download(self, bucket: str, path: str) -> bytes:
        self.requests.append((bucket, path))
        try:
            return self.objects[(bucket, path)]
        except KeyError:
            raise DownloadError(f"Failed to download file: Object not found: {path}") from None


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """In-memory SQLite database shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def repository(session_factory: sessionmaker) -> JobRepository:
    return JobRepository(session_factory)


@pytest.fixture
def queued_job(session_factory: sessionmaker) -> ProcessingJob:
    """Insert a queued job and return it."""
    job = ProcessingJob(
        id="job-1",
        profile_id="profile-1",
        file_path="profile-1/report.pdf",
        file_name="report.pdf",
        status=JobStatus.QUEUED,
    )
    with session_factory() as session:
        session.add(job)
        session.commit()
        session.refresh(job)
        session.expunge(job)
    return job


@pytest.fixture
def report_text() -> str:
    """Text resembling a digital credit report's account section."""
    lines = [
        "CREDIT REPORT - PREPARED FOR JANE DOE",
        "Experian | Equifax | TransUnion",
        "",
        "ACME COLLECTIONS LLC  Account #XXXX1234",
        "Type: Collection  Balance: $50.00  Opened: 03/2019  Reported: 01/2023",
        "",
        "BIG BANK VISA  Account #XXXX9876",
        "Type: Revolving  Balance: $1,250.00  Status: Pays as agreed",
    ]
    return "\n".join(lines)


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """
    Create a minimal valid PDF for testing.

    This is a minimal PDF structure that should be recognized as a valid PDF.
    """
    # Minimal valid PDF structure
    pdf_content = b"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R >>
endobj
4 0 obj
<< /Length 44 >>
stream
BT
/F1 12 Tf
100 700 Td
(Test) Tj
ET
endstream
endobj
xref
0 5
0000000000 65535 f
0000000009 00000 n
0000000058 00000 n
0000000115 00000 n
0000000214 00000 n
trailer
<< /Size 5 /Root 1 0 R >>
startxref
306
%%EOF"""
    return pdf_content


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"
