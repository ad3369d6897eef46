"""Approval logic age: whole calendar months since the loan was approved."""

from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime]


def calculate_approval_logic_age(approval_date: DateLike, now: Optional[DateLike] = None) -> int:
    """
    Count complete calendar months between approval and now.

    The month difference is reduced by one while the anniversary day of
    the current month has not been reached yet. Approval dates in the
    future give 0.

    Args:
        approval_date: Date the loan was approved
        now: Current date, defaults to today

    Returns:
        Non-negative number of complete months
    """
    if now is None:
        now = date.today()

    months = (now.year - approval_date.year) * 12 + (now.month - approval_date.month)

    if now.day < approval_date.day:
        months -= 1

    return max(0, months)
