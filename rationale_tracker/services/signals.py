"""Display helpers for contextual signals."""

from datetime import datetime
from typing import List, Optional

from ..models.loan import MAX_DISPLAY_SIGNALS, ContextualSignal, Rationale
from .staleness import days_since_review


def display_signals(rationale: Rationale) -> List[ContextualSignal]:
    """At most two signals are ever shown, whatever the rationale carries."""
    return list(rationale.contextual_signals[:MAX_DISPLAY_SIGNALS])


def format_time_since(updated_at: datetime, now: Optional[datetime] = None) -> str:
    """
    Neutral wording for the age of a signal.

    Examples: "today", "yesterday", "3 days ago", "2 weeks ago", "4 months ago".
    """
    days = days_since_review(updated_at, now)

    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        weeks = days // 7
        return "1 week ago" if weeks == 1 else f"{weeks} weeks ago"
    months = days // 30
    return "1 month ago" if months == 1 else f"{months} months ago"
