"""
Staleness calculation for confirmed rationales.

Status is a pure function of whole days elapsed since the last human review:

- Fresh: 30 days or fewer
- Review Due: 31 to 90 days
- Stale: more than 90 days
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..models.loan import RationaleStatus

FRESH_THRESHOLD_DAYS = 30
REVIEW_DUE_THRESHOLD_DAYS = 90

ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _now_like(reference: datetime) -> datetime:
    """Wall-clock time with the same awareness as ``reference``."""
    if getattr(reference, "tzinfo", None) is None:
        return datetime.now()
    return utc_now()


def days_since_review(last_reviewed_at: datetime, now: Optional[datetime] = None) -> int:
    """
    Whole days elapsed since the last review, floored.

    A review timestamp in the future yields a negative count; callers
    that display the value decide how to present it.

    Args:
        last_reviewed_at: When the rationale was last reviewed
        now: Current time, defaults to the wall clock

    Returns:
        floor((now - last_reviewed_at) / 1 day)
    """
    if now is None:
        now = _now_like(last_reviewed_at)
    return (now - last_reviewed_at) // ONE_DAY


def calculate_status(last_reviewed_at: datetime, now: Optional[datetime] = None) -> RationaleStatus:
    """
    Classify a rationale by time since its last human review.

    Args:
        last_reviewed_at: When the rationale was last reviewed
        now: Current time, defaults to the wall clock

    Returns:
        RationaleStatus.FRESH, REVIEW_DUE or STALE
    """
    days = days_since_review(last_reviewed_at, now)

    if days <= FRESH_THRESHOLD_DAYS:
        return RationaleStatus.FRESH

    if days <= REVIEW_DUE_THRESHOLD_DAYS:
        return RationaleStatus.REVIEW_DUE

    return RationaleStatus.STALE


class StalenessCalculator:
    """Staleness calculator bound to an injectable clock."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def calculate_status(self, last_reviewed_at: datetime) -> RationaleStatus:
        return calculate_status(last_reviewed_at, self.clock())

    def days_since_review(self, last_reviewed_at: datetime) -> int:
        return days_since_review(last_reviewed_at, self.clock())
