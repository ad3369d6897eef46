"""Tests for credit memo metadata and rationale extraction."""

from datetime import date, datetime, timezone

import pytest
from hypothesis import given, strategies as st

from rationale_tracker.plugins.rationale_extractor import (
    RationaleExtractor,
    extract_loan_metadata,
    extract_sections,
    mock_extract_rationales,
    parse_approval_date,
)
from rationale_tracker.utils.errors import NO_RATIONALES_MESSAGE, ErrorType

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)

CREDIT_MEMO = """CREDIT MEMO
Borrower: Acme Manufacturing Ltd
Facility Type: Term Loan
Facility Amount: USD 5,000,000
Tenor: 5 years
Approval Date: July 8, 2023

Executive Summary
The committee recommends approval of a senior secured term loan to support plant expansion.

Key Approval Rationales

Cash Flow Predictability
Operating cash flow has been stable for five consecutive years with DSCR above 1.8x.

Asset Coverage
First-lien charge over plant and machinery valued at 1.6x the facility amount.

Operational Track Record
Management has operated the core facility for over 20 years without material disruption.

Risk Factors and Mitigants
Customer concentration is mitigated by long-term offtake contracts with three anchors.

Approval Recommendation
Approve.
Prepared By: Credit Analyst
"""


def test_extract_loan_metadata():
    metadata = extract_loan_metadata(CREDIT_MEMO)

    assert metadata.borrower == "Acme Manufacturing Ltd"
    assert metadata.facility_type == "Term Loan"
    assert metadata.facility_amount == "USD 5,000,000"
    assert metadata.tenor == "5 years"
    assert metadata.approval_date == "July 8, 2023"


def test_metadata_numeric_and_free_form_dates():
    assert extract_loan_metadata("Approval Date: 03/15/2024").approval_date == "03/15/2024"
    assert extract_loan_metadata("APPROVAL DATE:   August 1 2022").approval_date == "August 1 2022"
    assert extract_loan_metadata("Approval Date: pending committee").approval_date == "pending committee"


def test_metadata_missing_fields():
    metadata = extract_loan_metadata("Nothing labeled here.")

    assert metadata.borrower is None
    assert metadata.facility_type is None
    assert metadata.approval_date is None


@pytest.mark.parametrize("raw, expected", [
    ("July 8, 2023", date(2023, 7, 8)),
    ("  march 3 2022 ", date(2022, 3, 3)),
    ("03/15/2024", date(2024, 3, 15)),
    ("2024-03-15", date(2024, 3, 15)),
    ("February 30, 2024", None),
    ("January 5, 1850", None),
    ("TBD", None),
    ("", None),
    (None, None),
])
def test_parse_approval_date(raw, expected):
    assert parse_approval_date(raw) == expected


def test_extract_sections():
    sections = extract_sections(CREDIT_MEMO)

    assert sections["Cash Flow Predictability"] == (
        "Operating cash flow has been stable for five consecutive years with DSCR above 1.8x."
    )
    assert sections["Asset Coverage"] == (
        "First-lien charge over plant and machinery valued at 1.6x the facility amount."
    )
    assert sections["Executive Summary"] == (
        "The committee recommends approval of a senior secured term loan to support plant expansion."
    )


def test_sections_tolerate_missing_line_breaks():
    text = (
        "CashFlow Predictability: Recurring contracted revenue covers debt service twice. "
        "Asset Coverage - Property valued well above the facility amount."
    )

    sections = extract_sections(text)

    assert sections["Cash Flow Predictability"] == (
        "Recurring contracted revenue covers debt service twice."
    )
    assert sections["Asset Coverage"] == "Property valued well above the facility amount."


def test_short_sections_are_dropped():
    assert "Asset Coverage" not in extract_sections("Asset Coverage: adequate.")


def test_section_rationales():
    rationales = mock_extract_rationales(CREDIT_MEMO, NOW)

    assert [r.title for r in rationales] == [
        "Cash Flow Predictability",
        "Asset Coverage / Collateral",
        "Operational Track Record",
        "Risk Factors and Mitigants",
    ]
    assert all(r.extracted_at == NOW for r in rationales)
    assert all(r.description == r.source_text for r in rationales)
    assert len({r.id for r in rationales}) == 4
    assert all(r.id.startswith("rat-") for r in rationales)


def test_long_section_is_truncated_for_display():
    body = "Contracted revenue is stable. " * 20
    rationales = mock_extract_rationales(f"Cash Flow Predictability\n{body}", NOW)

    assert len(rationales) == 1
    assert rationales[0].description.endswith("...")
    assert len(rationales[0].description) <= 353
    assert rationales[0].source_text == body.strip()


def test_keyword_fallback():
    text = (
        "The borrower has strong cash flow from diversified contracts. "
        "Collateral includes real estate valued at twice the loan. Minor risk."
    )

    rationales = mock_extract_rationales(text, NOW)

    assert [r.title for r in rationales] == ["Cash Flow Analysis", "Collateral Evaluation"]
    assert rationales[0].description == "The borrower has strong cash flow from diversified contracts."
    assert rationales[1].source_text == "Collateral includes real estate valued at twice the loan."


def test_generic_rationale_when_nothing_matches():
    rationales = mock_extract_rationales("Approved by committee on standard terms.", NOW)

    assert len(rationales) == 1
    assert rationales[0].title == "Approval Rationale"
    assert rationales[0].description == "Approved by committee on standard terms."


def test_empty_text_yields_nothing():
    assert mock_extract_rationales("", NOW) == []
    assert mock_extract_rationales("   \n  ", NOW) == []


@given(st.text(max_size=800))
def test_every_rationale_is_complete(text):
    rationales = mock_extract_rationales(text, NOW)

    if not text.strip():
        assert rationales == []
    else:
        assert rationales
    assert all(r.title and r.description for r in rationales)
    assert len({r.id for r in rationales}) == len(rationales)


def test_extractor_reports_success():
    result = RationaleExtractor().extract(CREDIT_MEMO, "acme.pdf", NOW)

    assert result.success
    assert len(result.rationales) == 4
    assert result.metadata.borrower == "Acme Manufacturing Ltd"
    assert result.error is None


def test_extractor_reports_no_rationales():
    result = RationaleExtractor().extract("", "blank.pdf", NOW)

    assert not result.success
    assert result.rationales == []
    assert result.error == NO_RATIONALES_MESSAGE
    assert result.error_type == ErrorType.EXTRACTION_NO_RATIONALES
