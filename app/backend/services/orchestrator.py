"""
Job orchestration for credit report processing.

Drives one job through download, text extraction, chunking, structured
extraction, deduplication and persistence, and records exactly one
terminal status (completed or failed) on the job.
"""

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from ..models import CreditItem, JobSummary, NegativeAccount, ProcessRequest
from .chunker import DEFAULT_CHUNK_SIZE, chunk_text
from .dedup import deduplicate_items
from .exceptions import InsufficientTextError, ItemPersistenceError, JobError, UnitError
from .llm_extraction import StructuredExtractor
from .outcomes import ExtractedText, StageOutcome
from .repository import JobRepository
from .storage import StorageService
from .text_extractor import MIN_TEXT_LENGTH, TextExtractor

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class JobOutcome:
    """
    Final result of one job run.

    Attributes:
        job_id: The job that was processed.
        success: True if the job ended in the completed state.
        summary: Item totals, set on success.
        error: Error message, set on failure.
        warnings: Pages, chunks and items that were skipped.
    """

    job_id: str
    success: bool
    summary: JobSummary | None = None
    error: str | None = None
    warnings: list[UnitError] = field(default_factory=list)


def build_summary(items: list[CreditItem], items_saved: bool = True) -> JobSummary:
    """Summarize items, projecting negative ones for the job record."""
    negative = [item for item in items if item.is_negative]
    return JobSummary(
        total_items=len(items),
        negative_items=len(negative),
        items_saved=items_saved,
        negative_accounts=[
            NegativeAccount(
                creditor=item.creditor,
                type=item.type,
                amount_cents=item.amount,
                bureaus=item.bureaus,
            )
            for item in negative
        ],
    )


class JobOrchestrator:
    """
    Runs the extraction pipeline for a single job.

    All collaborators are injected, so fakes can stand in for storage,
    the database and the language model.
    """

    def __init__(
        self,
        storage: StorageService,
        repository: JobRepository,
        text_extractor: TextExtractor,
        structured_extractor: StructuredExtractor,
        bucket: str = "credit-reports",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        min_text_length: int = MIN_TEXT_LENGTH,
    ):
        self.storage = storage
        self.repository = repository
        self.text_extractor = text_extractor
        self.structured_extractor = structured_extractor
        self.bucket = bucket
        self.chunk_size = chunk_size
        self.min_text_length = min_text_length

    async def _stage(self, name: str, step: Awaitable[StageOutcome[T]]) -> StageOutcome[T]:
        """Await a stage, turning anything it raises into a failed outcome."""
        try:
            return await step
        except JobError as e:
            return StageOutcome.failure(e)
        except Exception as e:
            logger.exception("Unexpected error during %s", name)
            return StageOutcome.failure(JobError(f"{name} failed: {e}"))

    async def _download(self, request: ProcessRequest) -> StageOutcome[bytes]:
        data = await self.storage.download(self.bucket, request.file_path)
        return StageOutcome.success(data)

    def _check_text(self, extracted: ExtractedText) -> StageOutcome[str]:
        text = extracted.text
        if not text or len(text.strip()) < self.min_text_length:
            return StageOutcome.failure(
                InsufficientTextError("Could not extract sufficient text from PDF")
            )
        logger.info("Extracted %d characters from PDF (%s)", len(text), extracted.method)
        return StageOutcome.success(text)

    async def _chunk(self, text: str) -> StageOutcome[list[str]]:
        chunks = chunk_text(text, self.chunk_size)
        logger.info("Split text into %d chunks", len(chunks))
        return StageOutcome.success(chunks)

    async def _extract_items(self, request: ProcessRequest, warnings: list[UnitError]) -> StageOutcome[list[CreditItem]]:
        """Steps 2-4: download, text, chunks, items. Stops at the first fatal outcome."""
        downloaded = await self._stage("download", self._download(request))
        if not downloaded.ok:
            return StageOutcome.failure(downloaded.error)

        extracted = await self._stage("text extraction", self.text_extractor.extract(downloaded.value))
        warnings.extend(extracted.warnings)
        if not extracted.ok:
            return StageOutcome.failure(extracted.error)

        checked = self._check_text(extracted.value)
        if not checked.ok:
            return StageOutcome.failure(checked.error)

        chunked = await self._stage("chunking", self._chunk(checked.value))
        if not chunked.ok:
            return StageOutcome.failure(chunked.error)

        structured = await self._stage(
            "structured extraction", self.structured_extractor.extract_items(chunked.value)
        )
        warnings.extend(structured.warnings)
        if not structured.ok:
            return StageOutcome.failure(structured.error)

        items = deduplicate_items(structured.value)
        logger.info("Found %d credit items", len(items))
        return StageOutcome.success(items)

    async def _persist(self, profile_id: str, items: list[CreditItem]) -> list[UnitError]:
        """Save items one by one; failures are returned, not raised."""
        failures: list[UnitError] = []
        for index, item in enumerate(items, start=1):
            try:
                await self.repository.save_item(profile_id, item)
            except ItemPersistenceError as e:
                logger.warning("Error saving item: %s", e)
                e.unit = index
                failures.append(e)
            except Exception as e:
                logger.exception("Error saving item %s", item.creditor)
                failures.append(ItemPersistenceError(f"Error saving item {item.creditor}: {e}", unit=index))
        return failures

    async def _fail(self, job_id: str, error: JobError, warnings: list[UnitError]) -> JobOutcome:
        message = str(error)
        logger.error("Processing error for job %s: %s", job_id, message)
        try:
            await self.repository.mark_failed(job_id, message)
        except Exception:
            logger.exception("Could not record failure for job %s", job_id)
        return JobOutcome(job_id=job_id, success=False, error=message, warnings=warnings)

    async def run(self, request: ProcessRequest) -> JobOutcome:
        """
        Process one job end to end.

        Returns:
            JobOutcome describing the terminal state written to the job.
        """
        job_id = request.job_id
        logger.info("Processing job %s for profile %s", job_id, request.profile_id)
        logger.info("File: %s at %s", request.file_name, request.file_path)
        warnings: list[UnitError] = []

        try:
            previous = await self.repository.mark_processing(job_id)
        except Exception as e:
            logger.exception("Could not mark job %s as processing", job_id)
            return await self._fail(job_id, JobError(f"Could not start job: {e}"), warnings)

        if previous is not None and previous.is_terminal:
            logger.warning("Job %s was already %s, processing it again", job_id, previous.value)

        outcome = await self._extract_items(request, warnings)
        if not outcome.ok:
            return await self._fail(job_id, outcome.error, warnings)

        items = outcome.value
        failures = await self._persist(request.profile_id, items)
        warnings.extend(failures)

        summary = build_summary(items, items_saved=not failures)
        try:
            await self.repository.mark_completed(job_id, summary.model_dump(mode="json"))
        except Exception as e:
            logger.exception("Could not record completion for job %s", job_id)
            return await self._fail(job_id, JobError(f"Could not record job completion: {e}"), warnings)

        logger.info(
            "Job %s completed: %d items, %d negative, %d warning(s)",
            job_id,
            summary.total_items,
            summary.negative_items,
            len(warnings),
        )
        return JobOutcome(job_id=job_id, success=True, summary=summary, warnings=warnings)


# =============================================================================
# Singleton Factory
# =============================================================================

_orchestrator: JobOrchestrator | None = None


def get_orchestrator() -> JobOrchestrator:
    """Get or create the orchestrator wired from application settings."""
    global _orchestrator
    if _orchestrator is None:
        from ..config import get_settings
        from .ocr_service import OCRService
        from .pdf_service import PDFService
        from .repository import get_repository

        settings = get_settings()
        pdf_service = PDFService(
            dpi=settings.ocr_dpi,
            max_width=settings.ocr_max_width,
            max_height=settings.ocr_max_height,
        )
        ocr_service = OCRService(
            pdf_service,
            max_pages=settings.ocr_max_pages,
            language=settings.ocr_language,
        )
        _orchestrator = JobOrchestrator(
            storage=StorageService(
                region_name=settings.aws_region,
                endpoint_url=settings.s3_endpoint_url,
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
            ),
            repository=get_repository(),
            text_extractor=TextExtractor(
                pdf_service,
                ocr_service,
                min_text_length=settings.min_text_length,
            ),
            structured_extractor=StructuredExtractor(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                temperature=settings.openai_temperature,
                max_concurrency=settings.llm_max_concurrency,
                item_confidence=settings.item_confidence,
            ),
            bucket=settings.storage_bucket,
            chunk_size=settings.chunk_size,
            min_text_length=settings.min_text_length,
        )
    return _orchestrator
