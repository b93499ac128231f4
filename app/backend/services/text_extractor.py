"""
Text extraction with OCR fallback.

Tries the PDF's embedded text layer first. Scanned reports have no text
layer (or only a few stray characters), so short or failed native
extraction falls back to OCR.
"""

import asyncio
import logging

from .exceptions import ExtractionError
from .ocr_service import OCRService
from .outcomes import ExtractedText, StageOutcome
from .pdf_service import PDFConversionError, PDFService

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 100


class TextExtractor:
    """Produces raw text from PDF bytes, native layer first, OCR second."""

    def __init__(
        self,
        pdf_service: PDFService | None = None,
        ocr_service: OCRService | None = None,
        min_text_length: int = MIN_TEXT_LENGTH,
    ):
        self.pdf_service = pdf_service or PDFService()
        self.ocr_service = ocr_service or OCRService(self.pdf_service)
        self.min_text_length = min_text_length

    async def extract(self, pdf_bytes: bytes) -> StageOutcome[ExtractedText]:
        """
        Extract text from a PDF.

        Returns:
            StageOutcome holding the extracted text, or an ExtractionError when
            both the text layer and OCR failed.
        """
        native_error: Exception | None = None
        try:
            text, pages = await asyncio.to_thread(self.pdf_service.extract_text_layer, pdf_bytes)
        except PDFConversionError as e:
            native_error = e
            logger.warning("Standard PDF extraction failed, attempting OCR: %s", e)
        else:
            if len(text.strip()) >= self.min_text_length:
                logger.info("Successfully extracted text from PDF")
                return StageOutcome.success(ExtractedText(text=text, method="native", pages=pages))
            logger.info("PDF has no extractable text, attempting OCR...")

        outcome = await self.ocr_service.extract_text(pdf_bytes)
        if outcome.ok:
            return outcome

        if native_error is not None:
            message = f"Text extraction failed: {native_error}; {outcome.error}"
        else:
            message = str(outcome.error)
        return StageOutcome.failure(ExtractionError(message), outcome.warnings)
