"""Heuristic extraction of approval rationales and loan metadata from credit memo text."""

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from dateutil import parser as date_parser

from ..models.loan import PendingRationale
from ..services.staleness import utc_now
from ..utils.errors import ErrorType, ExtractionError

logger = logging.getLogger(__name__)

DESCRIPTION_PREVIEW_LENGTH = 350
KEYWORD_CONTEXT_LENGTH = 300
GENERIC_CONTENT_LENGTH = 500
MIN_SECTION_LENGTH = 20
MIN_CONTEXT_LENGTH = 30
MIN_YEAR = 1900
MAX_YEAR = 2100

MONTHS = {
    'january': 1, 'february': 2, 'march': 3, 'april': 4,
    'may': 5, 'june': 6, 'july': 7, 'august': 8,
    'september': 9, 'october': 10, 'november': 11, 'december': 12,
}

# Header -> headers that may follow it in a credit memo
SECTION_DEFINITIONS = [
    ("Cash Flow Predictability",
     ["Asset Coverage", "Collateral", "Operational", "Risk Factors", "Approval Recommendation"]),
    ("Asset Coverage",
     ["Operational", "Risk Factors", "Approval Recommendation", "Cash Flow"]),
    ("Operational Track Record",
     ["Risk Factors", "Approval Recommendation", "Prepared By"]),
    ("Risk Factors and Mitigants",
     ["Approval Recommendation", "Prepared By", "Reviewed By"]),
    ("Executive Summary",
     ["Key Approval", "Cash Flow", "Collateral", "Risk Factors"]),
]

SECTION_TITLES = [
    ("Cash Flow Predictability", "Cash Flow Predictability"),
    ("Asset Coverage", "Asset Coverage / Collateral"),
    ("Operational Track Record", "Operational Track Record"),
    ("Risk Factors and Mitigants", "Risk Factors and Mitigants"),
]

KEYWORD_TITLES = [
    ("cash flow", "Cash Flow Analysis"),
    ("collateral", "Collateral Evaluation"),
    ("management", "Management Assessment"),
    ("operational", "Operational Assessment"),
    ("risk", "Risk Assessment"),
]

GENERIC_TITLE = "Approval Rationale"

BORROWER_PATTERN = re.compile(
    r"Borrower[:\s]+([A-Za-z][^\n\r]+?)(?=\s*(?:Facility|Loan|$))", re.IGNORECASE
)
FACILITY_TYPE_PATTERN = re.compile(r"Facility Type[:\s]+([^\n\r]+)", re.IGNORECASE)
FACILITY_AMOUNT_PATTERN = re.compile(r"Facility Amount[:\s]+([^\n\r]+)", re.IGNORECASE)
TENOR_PATTERN = re.compile(r"Tenor[:\s]+([^\n\r]+)", re.IGNORECASE)
APPROVAL_DATE_PATTERNS = [
    re.compile(r"Approval Date[:\s]+([A-Za-z]+\s+\d{1,2},?\s+\d{4})", re.IGNORECASE),
    re.compile(r"Approval Date[:\s]+(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})", re.IGNORECASE),
    re.compile(r"Approval Date[:\s]+([^\n\r]+)", re.IGNORECASE),
]
MONTH_DAY_YEAR_PATTERN = re.compile(r"^([A-Za-z]+)\s+(\d{1,2})\s+(\d{4})$")


@dataclass
class LoanMetadata:
    """Labeled fields found in a credit memo; every field is optional."""
    borrower: Optional[str] = None
    facility_type: Optional[str] = None
    facility_amount: Optional[str] = None
    tenor: Optional[str] = None
    approval_date: Optional[str] = None


@dataclass
class ExtractionResult:
    """
    Outcome of running rationale extraction over document text.

    Attributes:
        success: True when at least one rationale was produced
        rationales: Extracted pending rationales, in document order
        metadata: Loan metadata found in the same text
        error: Neutral, user-facing message on failure
        error_type: EXTRACTION_* error type on failure
    """
    success: bool
    rationales: List[PendingRationale] = field(default_factory=list)
    metadata: LoanMetadata = field(default_factory=LoanMetadata)
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None


def generate_rationale_id() -> str:
    return f"rat-{uuid.uuid4().hex}"


def _first_group(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    if match:
        return match.group(1).strip()
    return None


def extract_loan_metadata(text: str) -> LoanMetadata:
    """
    Pull labeled loan fields out of credit memo text.

    Approval date patterns are tried in order: "Month D, YYYY", numeric
    D/M/Y, then the rest of the line. The date is returned raw; see
    parse_approval_date().
    """
    metadata = LoanMetadata(
        borrower=_first_group(BORROWER_PATTERN, text),
        facility_type=_first_group(FACILITY_TYPE_PATTERN, text),
        facility_amount=_first_group(FACILITY_AMOUNT_PATTERN, text),
        tenor=_first_group(TENOR_PATTERN, text),
    )

    for pattern in APPROVAL_DATE_PATTERNS:
        value = _first_group(pattern, text)
        if value is not None:
            metadata.approval_date = value
            break

    return metadata


def parse_approval_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a raw approval date such as "July 8, 2023".

    Tries an explicit "Month Day Year" form first, then generic parsing
    limited to years 1900 through 2100.

    Returns:
        The parsed date, or None when the value is not a usable date
    """
    if not value:
        return None

    cleaned = value.strip().replace(",", "")

    match = MONTH_DAY_YEAR_PATTERN.match(cleaned)
    if match:
        month = MONTHS.get(match.group(1).lower())
        day = int(match.group(2))
        year = int(match.group(3))
        if month is not None and 1 <= day <= 31 and year >= MIN_YEAR:
            try:
                return date(year, month, day)
            except ValueError:
                logger.debug(f"Invalid calendar date: {value}")

    try:
        parsed = date_parser.parse(value.strip())
    except (ValueError, OverflowError):
        return None

    if MIN_YEAR <= parsed.year <= MAX_YEAR:
        return parsed.date()
    return None


def _header_regex(name: str) -> re.Pattern:
    return re.compile(r"\s*".join(re.escape(word) for word in name.split()), re.IGNORECASE)


def extract_sections(text: str) -> Dict[str, str]:
    """
    Split credit memo text into known sections.

    PDF text often loses its line breaks, so headers are matched with
    flexible whitespace. An end marker bounds a section only when it
    starts more than 20 characters after the header.
    """
    sections = {}

    for name, end_markers in SECTION_DEFINITIONS:
        header = _header_regex(name).search(text)
        if not header:
            continue

        start = header.end()
        end = len(text)
        remainder = text[start:]

        for marker in end_markers:
            marker_match = _header_regex(marker).search(remainder)
            if marker_match:
                potential_end = start + marker_match.start()
                if start + MIN_SECTION_LENGTH < potential_end < end:
                    end = potential_end

        content = re.sub(r"\s+", " ", text[start:end].strip())
        content = re.sub(r"^\s*[:\-]\s*", "", content).strip()

        if len(content) > MIN_SECTION_LENGTH:
            sections[name] = content

    return sections


def _preview(content: str) -> str:
    suffix = "..." if len(content) > DESCRIPTION_PREVIEW_LENGTH else ""
    return content[:DESCRIPTION_PREVIEW_LENGTH].strip() + suffix


def _keyword_context(text: str, keyword: str) -> Optional[str]:
    match = re.search(re.escape(keyword), text, re.IGNORECASE)
    if not match:
        return None

    index = match.start()
    sentence_start = text.rfind(".", 0, index + 1) + 1
    sentence_end = text.find(".", index + len(keyword))
    if sentence_end != -1:
        end = min(sentence_end + 1, index + KEYWORD_CONTEXT_LENGTH)
    else:
        end = index + KEYWORD_CONTEXT_LENGTH

    return text[sentence_start:end].strip()


def mock_extract_rationales(text: str, now: Optional[datetime] = None) -> List[PendingRationale]:
    """
    Deterministic, offline rationale extraction.

    Known credit memo sections are preferred. When none are present,
    the sentence around the first occurrence of each keyword is used.
    As a last resort one generic rationale is built from the executive
    summary or the start of the text.

    Args:
        text: Document text
        now: Extraction time stamped on every candidate, defaults to now

    Returns:
        Pending rationales in document order; empty for blank text
    """
    if now is None:
        now = utc_now()

    rationales = []
    sections = extract_sections(text)

    for section_name, title in SECTION_TITLES:
        content = sections.get(section_name)
        if content and len(content) > MIN_SECTION_LENGTH:
            rationales.append(PendingRationale(
                id=generate_rationale_id(),
                title=title,
                description=_preview(content),
                extracted_at=now,
                source_text=content,
            ))

    if not rationales:
        for keyword, title in KEYWORD_TITLES:
            context = _keyword_context(text, keyword)
            if context and len(context) > MIN_CONTEXT_LENGTH:
                suffix = "..." if len(context) > DESCRIPTION_PREVIEW_LENGTH else ""
                rationales.append(PendingRationale(
                    id=generate_rationale_id(),
                    title=title,
                    description=context[:DESCRIPTION_PREVIEW_LENGTH] + suffix,
                    extracted_at=now,
                    source_text=context,
                ))

    if not rationales and text.strip():
        content = sections.get("Executive Summary") or text[:GENERIC_CONTENT_LENGTH]
        if not content.strip():
            # Leading whitespace longer than the window
            content = text.strip()[:GENERIC_CONTENT_LENGTH]
        rationales.append(PendingRationale(
            id=generate_rationale_id(),
            title=GENERIC_TITLE,
            description=_preview(content),
            extracted_at=now,
            source_text=content,
        ))

    return rationales


class RationaleExtractor:
    """
    Extracts approval rationales and loan metadata from document text.

    Wraps the offline heuristics with logging and a typed result so the
    cockpit session never has to inspect raw lists.
    """

    def __init__(self):
        logger.info("Initialized RationaleExtractor")

    def extract(
        self,
        text: str,
        filename: str = "document.pdf",
        now: Optional[datetime] = None
    ) -> ExtractionResult:
        """
        Extract pending rationales and loan metadata.

        Args:
            text: Document text
            filename: Source document name, used for logging
            now: Extraction time, defaults to now

        Returns:
            ExtractionResult; success is False when no rationale was found
        """
        logger.info(f"Extracting rationales from {filename} ({len(text)} characters)")

        metadata = extract_loan_metadata(text)
        rationales = mock_extract_rationales(text, now)

        if not rationales:
            error = ExtractionError.no_rationales(filename)
            logger.warning(f"No rationales identified in {filename}: {error}")
            return ExtractionResult(
                success=False,
                metadata=metadata,
                error=error.user_message,
                error_type=error.error_type,
            )

        logger.info(
            f"Extracted {len(rationales)} rationales from {filename}: "
            f"{', '.join(r.title for r in rationales)}"
        )
        return ExtractionResult(success=True, rationales=rationales, metadata=metadata)
