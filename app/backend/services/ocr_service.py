"""
OCR fallback for PDFs without a usable text layer.

Pages are rendered with pdf2image and recognised with Tesseract via
pytesseract. One worker is acquired per extraction call and terminated
on every exit path.
"""

import asyncio
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import pytesseract
from PIL import Image

from .exceptions import ExtractionError, OCRPageError, UnitError
from .outcomes import ExtractedText, StageOutcome
from .pdf_service import PDFConversionError, PDFService

logger = logging.getLogger(__name__)


class TesseractWorker:
    """A Tesseract recognition session for one extraction call."""

    def __init__(self, language: str = "eng"):
        self.language = language
        self.active = False

    def start(self) -> None:
        """Check that the tesseract binary is available and mark the worker live."""
        version = pytesseract.get_tesseract_version()
        logger.debug("Tesseract %s worker started (lang=%s)", version, self.language)
        self.active = True

    def recognize(self, image: Image.Image) -> str:
        if not self.active:
            raise RuntimeError("OCR worker is not running")
        return pytesseract.image_to_string(image, lang=self.language)

    def terminate(self) -> None:
        self.active = False
        logger.debug("Tesseract worker terminated")


class OCRService:
    """
    Rasterizes PDF pages and runs OCR over each one.

    Only the first ``max_pages`` pages are read; the useful part of a
    credit report is at the front.
    """

    def __init__(
        self,
        pdf_service: PDFService | None = None,
        max_pages: int = 10,
        language: str = "eng",
        worker_factory: Callable[[str], TesseractWorker] = TesseractWorker,
    ):
        self.pdf_service = pdf_service or PDFService()
        self.max_pages = max_pages
        self.language = language
        self.worker_factory = worker_factory

    @contextmanager
    def _worker(self) -> Iterator[TesseractWorker]:
        worker = self.worker_factory(self.language)
        try:
            worker.start()
            yield worker
        finally:
            worker.terminate()

    async def extract_text(self, pdf_bytes: bytes) -> StageOutcome[ExtractedText]:
        """
        OCR the first pages of a PDF.

        Args:
            pdf_bytes: Raw PDF content.

        Returns:
            StageOutcome with the page texts joined by a blank line, plus one
            OCRPageError warning per skipped page. Fails with ExtractionError
            when the document cannot be rasterized at all or no page yields text.
        """
        logger.info("Starting OCR extraction...")
        warnings: list[UnitError] = []

        try:
            page_count = await asyncio.to_thread(self.pdf_service.get_page_count, pdf_bytes)
        except PDFConversionError as e:
            return StageOutcome.failure(ExtractionError(f"OCR could not read PDF: {e}"))

        pages = min(page_count, self.max_pages)
        page_texts: list[str] = []

        try:
            with self._worker() as worker:
                for page_number in range(1, pages + 1):
                    try:
                        image = await asyncio.to_thread(
                            self.pdf_service.convert_page, pdf_bytes, page_number
                        )
                        text = await asyncio.to_thread(worker.recognize, image)
                    except Exception as e:
                        if isinstance(e, pytesseract.TesseractNotFoundError):
                            raise
                        logger.warning("Could not process page %d, continuing: %s", page_number, e)
                        warnings.append(OCRPageError(f"Page {page_number}: {e}", unit=page_number))
                        continue
                    page_texts.append(text)
                    logger.info("OCR processed page %d", page_number)
        except Exception as e:
            logger.exception("OCR extraction failed")
            return StageOutcome.failure(ExtractionError(f"OCR extraction failed: {e}"), warnings)

        text = "\n\n".join(page_texts)
        if not text.strip():
            return StageOutcome.failure(
                ExtractionError("OCR produced no text"), warnings
            )
        return StageOutcome.success(ExtractedText(text=text, method="ocr", pages=pages), warnings)

