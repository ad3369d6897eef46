"""PDF text extraction for imported credit memos."""

import importlib.util
import io
import logging
from dataclasses import dataclass
from typing import Optional

from ..utils.errors import (
    EXTRACTION_FAILED_MESSAGE,
    INVALID_FILE_MESSAGE,
    ErrorType,
)

logger = logging.getLogger(__name__)

PDF_HEADER = b"%PDF-"


@dataclass
class DocumentExtractionResult:
    """
    Outcome of extracting text from an uploaded document.

    Attributes:
        success: Whether non-empty text was extracted
        text: Extracted text when successful
        error: Neutral, user-facing message on failure
        error_type: DOCUMENT_* error type on failure
    """
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None

    @classmethod
    def failure(cls, error_type: ErrorType) -> "DocumentExtractionResult":
        return cls(success=False, error=EXTRACTION_FAILED_MESSAGE, error_type=error_type)


def validate_pdf_filename(filename: str) -> Optional[str]:
    """Return a validation message for non-PDF file names, None when acceptable."""
    if not (filename or "").lower().endswith(".pdf"):
        return INVALID_FILE_MESSAGE
    return None


def is_pdf_header(data: bytes) -> bool:
    return bool(data) and data[:len(PDF_HEADER)] == PDF_HEADER


class PDFExtractorPlugin:
    """
    Extracts text from credit memo PDFs.

    Uses PyPDF2 as primary extractor with pdfplumber as fallback
    for better handling of complex layouts. Never validates anything
    beyond the %PDF- header; parsing failures are reported as typed
    results rather than raised.
    """

    def __init__(self):
        self._validate_dependencies()
        logger.info("Initialized PDFExtractorPlugin")

    def _validate_dependencies(self):
        self.has_pypdf2 = importlib.util.find_spec("PyPDF2") is not None
        if not self.has_pypdf2:
            logger.warning("PyPDF2 not available")

        self.has_pdfplumber = importlib.util.find_spec("pdfplumber") is not None
        if not self.has_pdfplumber:
            logger.warning("pdfplumber not available")

        if not self.has_pypdf2 and not self.has_pdfplumber:
            raise ImportError(
                "Neither PyPDF2 nor pdfplumber is available. "
                "Install at least one: pip install PyPDF2 pdfplumber"
            )

    def extract(
        self,
        pdf_bytes: Optional[bytes],
        filename: str = "document.pdf",
        include_page_numbers: bool = False
    ) -> DocumentExtractionResult:
        """
        Extract text from PDF bytes.

        Args:
            pdf_bytes: Raw PDF bytes
            filename: Name used for logging
            include_page_numbers: Whether to include page number markers

        Returns:
            DocumentExtractionResult with text, or a typed failure reason:
            DOCUMENT_INVALID_FORMAT (no %PDF- header), DOCUMENT_UNREADABLE,
            DOCUMENT_UNPARSEABLE or DOCUMENT_EMPTY_TEXT
        """
        if pdf_bytes is None:
            logger.warning(f"No bytes supplied for {filename}")
            return DocumentExtractionResult.failure(ErrorType.DOCUMENT_UNREADABLE)

        if not is_pdf_header(pdf_bytes):
            logger.warning(f"{filename} does not start with a PDF header")
            return DocumentExtractionResult.failure(ErrorType.DOCUMENT_INVALID_FORMAT)

        text = None
        parse_failed = False

        # Try PyPDF2 first (faster)
        if self.has_pypdf2:
            try:
                text = self._extract_with_pypdf2(pdf_bytes, include_page_numbers)
                if text and text.strip():
                    logger.info(f"Extracted {len(text)} characters using PyPDF2 from {filename}")
                    return DocumentExtractionResult(success=True, text=text)
                logger.warning("PyPDF2 returned empty text, trying pdfplumber")
            except Exception as e:
                parse_failed = True
                logger.warning(f"PyPDF2 extraction failed: {str(e)}, trying pdfplumber")

        # Fallback to pdfplumber (better for complex layouts)
        if self.has_pdfplumber:
            try:
                text = self._extract_with_pdfplumber(pdf_bytes, include_page_numbers)
                parse_failed = False
                logger.info(f"Extracted {len(text)} characters using pdfplumber from {filename}")
            except Exception as e:
                logger.error(f"pdfplumber extraction failed: {str(e)}")
                parse_failed = True

        if parse_failed:
            return DocumentExtractionResult.failure(ErrorType.DOCUMENT_UNPARSEABLE)

        if not text or not text.strip():
            logger.warning(f"No text found in {filename}")
            return DocumentExtractionResult.failure(ErrorType.DOCUMENT_EMPTY_TEXT)

        return DocumentExtractionResult(success=True, text=text)

    def _extract_with_pypdf2(self, pdf_bytes: bytes, include_page_numbers: bool) -> str:
        import PyPDF2

        reader = PyPDF2.PdfReader(io.BytesIO(pdf_bytes))
        text_parts = []

        for page_num, page in enumerate(reader.pages, start=1):
            page_text = page.extract_text()

            if page_text:
                if include_page_numbers:
                    text_parts.append(f"--- Page {page_num} ---\n{page_text}")
                else:
                    text_parts.append(page_text)

        return "\n\n".join(text_parts)

    def _extract_with_pdfplumber(self, pdf_bytes: bytes, include_page_numbers: bool) -> str:
        import pdfplumber

        text_parts = []

        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                page_text = page.extract_text()

                if page_text:
                    if include_page_numbers:
                        text_parts.append(f"--- Page {page_num} ---\n{page_text}")
                    else:
                        text_parts.append(page_text)

        return "\n\n".join(text_parts)
