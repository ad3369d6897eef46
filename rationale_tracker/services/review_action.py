"""Mark confirmed rationales as reviewed."""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..models.loan import Rationale
from .staleness import calculate_status, utc_now


def mark_rationale_as_reviewed(
    rationale: Rationale,
    review_time: Optional[datetime] = None
) -> Rationale:
    """
    Record a human review of ``rationale``.

    Only last_reviewed_at and status change; the status is Fresh
    immediately after a review.
    """
    if review_time is None:
        review_time = utc_now()

    return replace(
        rationale,
        last_reviewed_at=review_time,
        status=calculate_status(review_time, review_time),
    )
