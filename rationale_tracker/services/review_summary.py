"""Plain-text annual review summaries for rationales needing attention."""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..models.loan import Rationale, RationaleStatus, ReviewItem, ReviewSummary
from .staleness import days_since_review, utc_now

NEEDS_REVIEW = (RationaleStatus.REVIEW_DUE, RationaleStatus.STALE)

TITLE = "ANNUAL REVIEW SUMMARY"
SECTION_TITLE = "RATIONALES REQUIRING REVIEW"
ALL_CURRENT_TEXT = "All approval rationales are current. No review required at this time."


def get_rationales_needing_review(rationales: Iterable[Rationale]) -> List[Rationale]:
    return [r for r in rationales if r.status in NEEDS_REVIEW]


def generate_review_summary(
    rationales: Iterable[Rationale],
    loan_id: str,
    now: Optional[datetime] = None
) -> ReviewSummary:
    """
    Build a review summary for the Review Due and Stale rationales of a loan.

    Args:
        rationales: All confirmed rationales of the loan
        loan_id: Loan identifier, echoed verbatim in the text
        now: Generation time, defaults to now

    Returns:
        ReviewSummary with entries ordered most stale first
    """
    if now is None:
        now = utc_now()

    items = [
        ReviewItem(
            title=r.title,
            status=r.status,
            days_since_review=max(0, days_since_review(r.last_reviewed_at, now)),
        )
        for r in get_rationales_needing_review(rationales)
    ]
    items.sort(key=lambda item: item.days_since_review, reverse=True)

    return ReviewSummary(
        generated_at=now,
        loan_id=loan_id,
        rationales_needing_review=tuple(items),
        summary_text=render_summary_text(loan_id, items, now),
    )


def render_summary_text(loan_id: str, items: Sequence[ReviewItem], generated_at: datetime) -> str:
    lines = [
        TITLE,
        "=" * len(TITLE),
        "",
        f"Loan ID: {loan_id}",
        f"Generated: {format_summary_date(generated_at)}",
        "",
    ]

    if not items:
        lines.append(ALL_CURRENT_TEXT)
        return "\n".join(lines)

    lines.append(SECTION_TITLE)
    lines.append("-" * len(SECTION_TITLE))
    lines.append("")

    for item in sorted(items, key=lambda i: i.days_since_review, reverse=True):
        lines.append(f"• {item.title}")
        lines.append(f"  Status: {item.status.value}")
        lines.append(f"  Days since last review: {item.days_since_review}")
        lines.append("")

    lines.append("-" * len(SECTION_TITLE))
    lines.append(f"Total rationales requiring review: {len(items)}")

    return "\n".join(lines)


def format_summary_date(value: datetime) -> str:
    """Format as "June 1, 2024"."""
    return f"{value:%B} {value.day}, {value.year}"
