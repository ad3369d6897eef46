"""Document text and rationale extraction plugins."""

from .pdf_extractor import DocumentExtractionResult, PDFExtractorPlugin
from .rationale_extractor import (
    ExtractionResult,
    LoanMetadata,
    RationaleExtractor,
    extract_loan_metadata,
    mock_extract_rationales,
    parse_approval_date,
)

__all__ = [
    'DocumentExtractionResult',
    'PDFExtractorPlugin',
    'ExtractionResult',
    'LoanMetadata',
    'RationaleExtractor',
    'extract_loan_metadata',
    'mock_extract_rationales',
    'parse_approval_date',
]
