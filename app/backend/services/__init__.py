"""
Services package for the credit report worker.

Contains:
- pdf_service: Text layer extraction and page rasterization
- ocr_service: Tesseract OCR fallback
- text_extractor: Native-then-OCR text extraction
- chunker: Line-bounded text chunking
- llm_extraction: OpenAI structured extraction of credit items
- dedup: Duplicate item removal
- storage: Object storage downloads
- repository: Job and credit item persistence
- orchestrator: Job state machine driving the pipeline
"""

from .llm_extraction import StructuredExtractor
from .ocr_service import OCRService
from .orchestrator import JobOrchestrator, JobOutcome
from .pdf_service import PDFService
from .text_extractor import TextExtractor

__all__ = [
    "JobOrchestrator",
    "JobOutcome",
    "OCRService",
    "PDFService",
    "StructuredExtractor",
    "TextExtractor",
]
