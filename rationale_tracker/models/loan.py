"""Loan, rationale and cockpit state data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 250
MAX_DISPLAY_SIGNALS = 2


class RationaleStatus(str, Enum):
    """
    Staleness of a rationale, derived from time since its last human review.

    - Fresh: 30 days or fewer
    - Review Due: 31 to 90 days
    - Stale: more than 90 days
    """
    FRESH = "Fresh"
    REVIEW_DUE = "Review Due"
    STALE = "Stale"


class DataSource(str, Enum):
    """Provenance of the loan currently shown in the cockpit."""
    NONE = "none"
    DEMO = "demo"
    EXTRACTED = "extracted"


@dataclass(frozen=True)
class LoanInfo:
    """
    Identifies the loan under governance.

    Attributes:
        id: Opaque loan identifier (e.g., "CML-2024-00847")
        approval_date: Calendar date the loan was approved
        borrower_reference: Anonymized borrower reference, no PII
    """
    id: str
    approval_date: date
    borrower_reference: str


@dataclass(frozen=True)
class ContextualSignal:
    """
    A passive, read-only data point attached to a rationale.

    Attributes:
        id: Signal identifier
        description: Neutral description (e.g., "Industry revenue data updated 2 weeks ago")
        updated_at: When the signal was last updated
    """
    id: str
    description: str
    updated_at: datetime


@dataclass(frozen=True)
class Rationale:
    """
    A confirmed, time-aware approval-logic record.

    Attributes:
        id: Unique identifier
        title: Short title, at most 100 characters
        description: One or two lines, at most 250 characters
        created_at: When the rationale was confirmed
        last_reviewed_at: When a human last reviewed it
        status: Cached staleness, always recomputable from last_reviewed_at
        contextual_signals: Attached signals, at most two are displayed
    """
    id: str
    title: str
    description: str
    created_at: datetime
    last_reviewed_at: datetime
    status: RationaleStatus
    contextual_signals: Tuple[ContextualSignal, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "status", RationaleStatus(self.status))
        object.__setattr__(self, "contextual_signals", tuple(self.contextual_signals))


@dataclass(frozen=True)
class PendingRationale:
    """
    An extraction candidate awaiting human confirmation.

    Attributes:
        id: Unique identifier
        title: Extracted title
        description: Extracted (possibly truncated) description
        extracted_at: When extraction ran
        source_text: Verbatim excerpt the candidate was built from
    """
    id: str
    title: str
    description: str
    extracted_at: datetime
    source_text: str


@dataclass(frozen=True)
class ReviewItem:
    """One entry of a review summary."""
    title: str
    status: RationaleStatus
    days_since_review: int


@dataclass(frozen=True)
class ReviewSummary:
    """
    Point-in-time plain-text report of rationales needing review.

    Attributes:
        generated_at: When the summary was generated
        loan_id: Loan the summary covers
        rationales_needing_review: Review Due and Stale entries, most stale first
        summary_text: Canonical plain-text rendering
    """
    generated_at: datetime
    loan_id: str
    rationales_needing_review: Tuple[ReviewItem, ...]
    summary_text: str

    def __post_init__(self):
        object.__setattr__(self, "rationales_needing_review", tuple(self.rationales_needing_review))


@dataclass(frozen=True)
class LoanCockpitState:
    """
    Aggregate root for the single-screen cockpit.

    Attributes:
        loan: Loan currently in view, None when nothing is loaded
        rationales: Confirmed rationales in display order
        pending_rationales: Extraction candidates awaiting resolution
        is_extracting: True only while an extraction is outstanding
        show_confirmation: Whether the confirmation panel is visible
        data_source: Provenance of the current loan
    """
    loan: Optional[LoanInfo] = None
    rationales: Tuple[Rationale, ...] = field(default_factory=tuple)
    pending_rationales: Tuple[PendingRationale, ...] = field(default_factory=tuple)
    is_extracting: bool = False
    show_confirmation: bool = False
    data_source: DataSource = DataSource.NONE

    def __post_init__(self):
        object.__setattr__(self, "rationales", tuple(self.rationales))
        object.__setattr__(self, "pending_rationales", tuple(self.pending_rationales))
        object.__setattr__(self, "data_source", DataSource(self.data_source))

    def find_rationale(self, rationale_id: str) -> Optional[Rationale]:
        for rationale in self.rationales:
            if rationale.id == rationale_id:
                return rationale
        return None

    def find_pending(self, rationale_id: str) -> Optional[PendingRationale]:
        for pending in self.pending_rationales:
            if pending.id == rationale_id:
                return pending
        return None
