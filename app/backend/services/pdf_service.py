"""
PDF processing service.

Reads the embedded text layer with pypdf and rasterizes pages to PIL
Images with pdf2image (poppler) for OCR.
"""

import io
import logging
from typing import BinaryIO

from PIL import Image

logger = logging.getLogger(__name__)


class PDFConversionError(Exception):
    """Raised when a PDF cannot be read or converted."""

    pass


def _ensure_pdf_bytes(file_bytes: bytes | BinaryIO) -> bytes:
    """Read file-like input and check the PDF header."""
    if hasattr(file_bytes, "read"):
        pdf_bytes = file_bytes.read()
    else:
        pdf_bytes = file_bytes

    if not pdf_bytes:
        raise PDFConversionError("Empty PDF file provided")

    # Validate PDF magic bytes
    if not pdf_bytes[:4] == b"%PDF":
        raise PDFConversionError(
            "Invalid PDF file: does not start with PDF header"
        )
    return pdf_bytes


class PDFService:
    """
    Service for PDF processing operations.

    Uses pypdf for the text layer and pdf2image (backed by poppler) to
    convert PDF pages to images.
    """

    def __init__(
        self,
        dpi: int = 200,
        max_width: int = 2000,
        max_height: int = 2800,
        image_format: str = "PNG",
    ):
        """
        Initialize the PDF service.

        Args:
            dpi: Resolution for PDF to image conversion.
            max_width: Maximum width in pixels of a rendered page.
            max_height: Maximum height in pixels of a rendered page.
            image_format: Output image format (PNG recommended for OCR).
        """
        self.dpi = dpi
        self.max_width = max_width
        self.max_height = max_height
        self.image_format = image_format

    def extract_text_layer(self, file_bytes: bytes | BinaryIO) -> tuple[str, int]:
        """
        Extract the embedded text layer of a PDF.

        Args:
            file_bytes: PDF file as bytes or file-like object.

        Returns:
            Tuple of (text of all pages joined by newlines, page count).

        Raises:
            PDFConversionError: If the PDF cannot be parsed.
        """
        from pypdf import PdfReader
        from pypdf.errors import PdfReadError

        pdf_bytes = _ensure_pdf_bytes(file_bytes)

        try:
            reader = PdfReader(io.BytesIO(pdf_bytes))
            page_texts = []
            for page in reader.pages:
                page_texts.append(page.extract_text() or "")
        except PdfReadError as e:
            logger.error("PDF read error: %s", e)
            raise PDFConversionError(f"Invalid or corrupted PDF file: {e}") from e
        except Exception as e:
            logger.exception("Unexpected error during text extraction")
            raise PDFConversionError(f"PDF text extraction failed: {e}") from e

        text = "\n".join(page_texts)
        logger.info(
            "Extracted %d characters from text layer of %d page(s)",
            len(text),
            len(page_texts),
        )
        return text, len(page_texts)

    def convert_pdf_to_images(
        self,
        file_bytes: bytes | BinaryIO,
        first_page: int | None = None,
        last_page: int | None = None,
    ) -> list[Image.Image]:
        """
        Convert PDF pages to PIL Images bounded to max_width x max_height.

        Args:
            file_bytes: PDF file as bytes or file-like object.
            first_page: First page to convert (1-indexed, inclusive). None for first page.
            last_page: Last page to convert (1-indexed, inclusive). None for last page.

        Returns:
            List of PIL Image objects, one per page.

        Raises:
            PDFConversionError: If conversion fails for any reason.
        """
        from pdf2image import convert_from_bytes
        from pdf2image.exceptions import (
            PDFInfoNotInstalledError,
            PDFPageCountError,
            PDFSyntaxError,
        )

        pdf_bytes = _ensure_pdf_bytes(file_bytes)

        try:
            logger.debug(
                "Converting PDF to images (dpi=%d, pages=%s-%s)",
                self.dpi,
                first_page or "first",
                last_page or "last",
            )

            images = convert_from_bytes(
                pdf_bytes,
                dpi=self.dpi,
                fmt=self.image_format.lower(),
                first_page=first_page,
                last_page=last_page,
            )

        except PDFInfoNotInstalledError as e:
            logger.error("Poppler not installed: %s", e)
            raise PDFConversionError(
                "Poppler not installed. Install poppler-utils: "
                "brew install poppler (macOS) or apt-get install poppler-utils (Linux)"
            ) from e

        except PDFPageCountError as e:
            logger.error("Could not get PDF page count: %s", e)
            raise PDFConversionError(
                f"Could not determine PDF page count: {e}"
            ) from e

        except PDFSyntaxError as e:
            logger.error("PDF syntax error: %s", e)
            raise PDFConversionError(f"Invalid or corrupted PDF file: {e}") from e

        except Exception as e:
            logger.exception("Unexpected error during PDF conversion")
            raise PDFConversionError(f"PDF conversion failed: {e}") from e

        for image in images:
            image.thumbnail((self.max_width, self.max_height))
        return images

    def convert_page(self, file_bytes: bytes, page_number: int) -> Image.Image:
        """
        Convert a single page (1-indexed) to an image.

        Raises:
            PDFConversionError: If the page cannot be rendered.
        """
        images = self.convert_pdf_to_images(
            file_bytes, first_page=page_number, last_page=page_number
        )
        if not images:
            raise PDFConversionError(f"Page {page_number} not found in PDF")
        return images[0]

    def get_page_count(self, file_bytes: bytes | BinaryIO) -> int:
        """
        Get the total number of pages in a PDF.

        Raises:
            PDFConversionError: If page count cannot be determined.
        """
        from pdf2image import pdfinfo_from_bytes

        pdf_bytes = _ensure_pdf_bytes(file_bytes)

        try:
            info = pdfinfo_from_bytes(pdf_bytes)
            return info.get("Pages", 0)
        except Exception as e:
            logger.error("Could not get page count: %s", e)
            raise PDFConversionError(f"Could not get page count: {e}") from e
