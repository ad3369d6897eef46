"""Deterministic demo loan and rationales covering all three staleness tiers."""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from ..models.loan import ContextualSignal, LoanInfo, Rationale
from .staleness import calculate_status, utc_now

DEMO_LOAN_ID = "CML-2024-00847"
DEMO_APPROVAL_DATE = date(2024, 3, 15)
DEMO_BORROWER_REFERENCE = "REF-ACME-2024"
DEMO_CREATED_AT = datetime(2024, 3, 15, tzinfo=timezone.utc)

FRESH_REVIEW_AGE_DAYS = 15
REVIEW_DUE_AGE_DAYS = 45
STALE_REVIEW_AGE_DAYS = 120


def create_demo_loan() -> LoanInfo:
    return LoanInfo(
        id=DEMO_LOAN_ID,
        approval_date=DEMO_APPROVAL_DATE,
        borrower_reference=DEMO_BORROWER_REFERENCE,
    )


def _days_ago(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)


def _create_contextual_signals(now: datetime) -> Dict[str, Tuple[ContextualSignal, ...]]:
    return {
        "revenue": (
            ContextualSignal(
                id="sig-001",
                description="Industry revenue data updated 2 weeks ago",
                updated_at=_days_ago(now, 14),
            ),
        ),
        "collateral": (
            ContextualSignal(
                id="sig-002",
                description="Regional property index updated 6 weeks ago",
                updated_at=_days_ago(now, 42),
            ),
        ),
        "management": (
            ContextualSignal(
                id="sig-003",
                description="Executive team composition unchanged",
                updated_at=_days_ago(now, 30),
            ),
            ContextualSignal(
                id="sig-004",
                description="Industry leadership benchmark updated 4 months ago",
                updated_at=_days_ago(now, 120),
            ),
        ),
    }


def create_demo_rationales(now: Optional[datetime] = None) -> List[Rationale]:
    """
    Three rationales reviewed 15, 45 and 120 days before ``now``.

    Yields one Fresh, one Review Due and one Stale rationale.
    """
    if now is None:
        now = utc_now()
    signals = _create_contextual_signals(now)

    fresh_review = _days_ago(now, FRESH_REVIEW_AGE_DAYS)
    review_due_review = _days_ago(now, REVIEW_DUE_AGE_DAYS)
    stale_review = _days_ago(now, STALE_REVIEW_AGE_DAYS)

    created_at = DEMO_CREATED_AT
    if now.tzinfo is None:
        created_at = created_at.replace(tzinfo=None)

    return [
        Rationale(
            id="rat-001",
            title="Revenue Stability Assessment",
            description=(
                "Borrower demonstrated 3 consecutive years of stable revenue "
                "growth with diversified customer base."
            ),
            created_at=created_at,
            last_reviewed_at=fresh_review,
            status=calculate_status(fresh_review, now),
            contextual_signals=signals["revenue"],
        ),
        Rationale(
            id="rat-002",
            title="Collateral Valuation Basis",
            description=(
                "Property valuation based on Q1 2024 appraisal with 15% haircut "
                "applied per policy."
            ),
            created_at=created_at,
            last_reviewed_at=review_due_review,
            status=calculate_status(review_due_review, now),
            contextual_signals=signals["collateral"],
        ),
        Rationale(
            id="rat-003",
            title="Management Experience Consideration",
            description=(
                "CEO has 20+ years industry experience; CFO previously at "
                "Fortune 500 company."
            ),
            created_at=created_at,
            last_reviewed_at=stale_review,
            status=calculate_status(stale_review, now),
            contextual_signals=signals["management"],
        ),
    ]


def load_demo_data(now: Optional[datetime] = None) -> Tuple[LoanInfo, List[Rationale]]:
    return create_demo_loan(), create_demo_rationales(now)
