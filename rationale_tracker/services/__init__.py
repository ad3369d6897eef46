"""Pure domain calculations: staleness, approval age, confirmation, review and summaries."""

from .approval_age import calculate_approval_logic_age
from .confirmation import (
    confirm_all_pending_rationales,
    confirm_pending_rationale,
    edit_pending_rationale,
    reject_pending_rationale,
)
from .review_action import mark_rationale_as_reviewed
from .review_summary import generate_review_summary, get_rationales_needing_review
from .staleness import StalenessCalculator, calculate_status, days_since_review

__all__ = [
    'calculate_approval_logic_age',
    'confirm_all_pending_rationales',
    'confirm_pending_rationale',
    'edit_pending_rationale',
    'reject_pending_rationale',
    'mark_rationale_as_reviewed',
    'generate_review_summary',
    'get_rationales_needing_review',
    'StalenessCalculator',
    'calculate_status',
    'days_since_review',
]
