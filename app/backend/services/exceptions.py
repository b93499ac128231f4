"""
Exceptions shared by the extraction pipeline services.

``JobError`` subclasses are fatal to a job. ``UnitError`` subclasses
describe the failure of a single page, chunk or item and are collected as
warnings while the pipeline carries on.
"""


class CreditWorkerError(Exception):
    """Base class for credit report worker errors."""

    pass


class JobError(CreditWorkerError):
    """Raised when a pipeline stage fails and the job cannot complete."""

    pass


class DownloadError(JobError):
    """Raised when the report cannot be fetched from object storage."""

    pass


class ExtractionError(JobError):
    """Raised when neither the text layer nor OCR produced any text."""

    pass


class InsufficientTextError(JobError):
    """Raised when the extracted text is too short to contain a report."""

    pass


class UnitError(CreditWorkerError):
    """A recoverable failure of one unit of work."""

    def __init__(self, message: str, unit: int | None = None):
        super().__init__(message)
        self.unit = unit


class OCRPageError(UnitError):
    """OCR failed for one page."""

    pass


class ChunkExtractionError(UnitError):
    """The language model call or response parsing failed for one chunk."""

    pass


class ItemPersistenceError(UnitError):
    """One credit item could not be written to the store."""

    pass


class LLMServiceError(CreditWorkerError):
    """Raised when the language model client is unavailable or misconfigured."""

    pass
