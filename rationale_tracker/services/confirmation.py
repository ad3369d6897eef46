"""Confirm, reject and edit pending rationales."""

from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from ..models.loan import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    PendingRationale,
    Rationale,
)
from .staleness import calculate_status, utc_now


def confirm_pending_rationale(
    pending: PendingRationale,
    confirm_time: Optional[datetime] = None
) -> Rationale:
    """
    Promote a pending rationale to a confirmed, time-aware rationale.

    Args:
        pending: The extraction candidate being confirmed
        confirm_time: Confirmation timestamp, defaults to now

    Returns:
        Rationale whose created_at and last_reviewed_at both equal
        confirm_time, with Fresh status and no contextual signals
    """
    if confirm_time is None:
        confirm_time = utc_now()

    return Rationale(
        id=pending.id,
        title=pending.title,
        description=pending.description,
        created_at=confirm_time,
        last_reviewed_at=confirm_time,
        status=calculate_status(confirm_time, confirm_time),
        contextual_signals=(),
    )


def reject_pending_rationale(
    pending_list: Iterable[PendingRationale],
    rationale_id: str
) -> List[PendingRationale]:
    """Drop the pending rationale with ``rationale_id``; unknown ids are a no-op."""
    return [pending for pending in pending_list if pending.id != rationale_id]


def confirm_all_pending_rationales(
    pending_list: Iterable[PendingRationale],
    confirm_time: Optional[datetime] = None
) -> List[Rationale]:
    if confirm_time is None:
        confirm_time = utc_now()
    return [confirm_pending_rationale(pending, confirm_time) for pending in pending_list]


def edit_pending_rationale(
    pending: PendingRationale,
    title: Optional[str] = None,
    description: Optional[str] = None
) -> PendingRationale:
    """
    Apply a human edit to a pending rationale before it is resolved.

    Title and description are truncated to 100 and 250 characters.
    Fields left as None keep their current value.
    """
    changes = {}
    if title is not None:
        changes["title"] = title[:TITLE_MAX_LENGTH]
    if description is not None:
        changes["description"] = description[:DESCRIPTION_MAX_LENGTH]
    return replace(pending, **changes)
