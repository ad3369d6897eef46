"""
Cockpit state transitions.

Every change to the cockpit goes through reduce(), a pure function of
the current state, one typed event and the current time. Events are
frozen dataclasses; the store owns the single state instance and is
the only caller of the reducer.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple

from ..models.loan import (
    DataSource,
    LoanCockpitState,
    LoanInfo,
    PendingRationale,
)
from ..services.confirmation import (
    confirm_all_pending_rationales,
    confirm_pending_rationale,
    edit_pending_rationale,
    reject_pending_rationale,
)
from ..services.demo_data import load_demo_data
from ..services.review_action import mark_rationale_as_reviewed
from ..services.staleness import calculate_status, utc_now

INITIAL_STATE = LoanCockpitState()


@dataclass(frozen=True)
class LoadDemo:
    pass


@dataclass(frozen=True)
class StartExtraction:
    """Replace the loan in view with freshly extracted, unconfirmed rationales."""
    loan: LoanInfo
    pending_rationales: Tuple[PendingRationale, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "pending_rationales", tuple(self.pending_rationales))


@dataclass(frozen=True)
class ExtractionFailed:
    pass


@dataclass(frozen=True)
class AddPendingRationales:
    rationales: Tuple[PendingRationale, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rationales", tuple(self.rationales))


@dataclass(frozen=True)
class ConfirmRationale:
    pending: PendingRationale


@dataclass(frozen=True)
class RejectRationale:
    rationale_id: str


@dataclass(frozen=True)
class ConfirmAllRationales:
    pass


@dataclass(frozen=True)
class EditPendingRationale:
    rationale_id: str
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class MarkReviewed:
    rationale_id: str


@dataclass(frozen=True)
class SetExtracting:
    value: bool


@dataclass(frozen=True)
class SetShowConfirmation:
    value: bool


@dataclass(frozen=True)
class ClearState:
    pass


@dataclass(frozen=True)
class RestoreState:
    state: LoanCockpitState


@dataclass(frozen=True)
class RefreshStatuses:
    """Recompute cached statuses from last_reviewed_at, e.g. after the clock advanced."""
    pass


def _show_after_resolution(remaining: Tuple[PendingRationale, ...]) -> bool:
    # Closes once fewer than two candidates are outstanding.
    return len(remaining) > 1


def reduce(state: LoanCockpitState, event, now: Optional[datetime] = None) -> LoanCockpitState:
    """
    Apply one event to the cockpit state.

    Args:
        state: Current state, never mutated
        event: One of the event dataclasses of this module
        now: Time of the transition, defaults to now

    Returns:
        The next state

    Raises:
        TypeError: If the event type is not known
    """
    if now is None:
        now = utc_now()

    if isinstance(event, LoadDemo):
        loan, rationales = load_demo_data(now)
        return replace(
            state,
            loan=loan,
            rationales=rationales,
            pending_rationales=(),
            show_confirmation=False,
            data_source=DataSource.DEMO,
        )

    if isinstance(event, StartExtraction):
        return replace(
            state,
            loan=event.loan,
            rationales=(),
            pending_rationales=event.pending_rationales,
            show_confirmation=len(event.pending_rationales) > 0,
            is_extracting=False,
            data_source=DataSource.EXTRACTED,
        )

    if isinstance(event, (ExtractionFailed, ClearState)):
        return INITIAL_STATE

    if isinstance(event, AddPendingRationales):
        return replace(
            state,
            pending_rationales=state.pending_rationales + event.rationales,
            show_confirmation=len(event.rationales) > 0,
        )

    if isinstance(event, ConfirmRationale):
        remaining = tuple(reject_pending_rationale(state.pending_rationales, event.pending.id))
        return replace(
            state,
            rationales=state.rationales + (confirm_pending_rationale(event.pending, now),),
            pending_rationales=remaining,
            show_confirmation=_show_after_resolution(remaining),
        )

    if isinstance(event, RejectRationale):
        remaining = tuple(reject_pending_rationale(state.pending_rationales, event.rationale_id))
        return replace(
            state,
            pending_rationales=remaining,
            show_confirmation=_show_after_resolution(remaining),
        )

    if isinstance(event, ConfirmAllRationales):
        confirmed = confirm_all_pending_rationales(state.pending_rationales, now)
        return replace(
            state,
            rationales=state.rationales + tuple(confirmed),
            pending_rationales=(),
            show_confirmation=False,
        )

    if isinstance(event, EditPendingRationale):
        return replace(
            state,
            pending_rationales=tuple(
                edit_pending_rationale(p, event.title, event.description)
                if p.id == event.rationale_id else p
                for p in state.pending_rationales
            ),
        )

    if isinstance(event, MarkReviewed):
        return replace(
            state,
            rationales=tuple(
                mark_rationale_as_reviewed(r, now) if r.id == event.rationale_id else r
                for r in state.rationales
            ),
        )

    if isinstance(event, SetExtracting):
        return replace(state, is_extracting=event.value)

    if isinstance(event, SetShowConfirmation):
        return replace(state, show_confirmation=event.value)

    if isinstance(event, RestoreState):
        return event.state

    if isinstance(event, RefreshStatuses):
        return replace(
            state,
            rationales=tuple(
                replace(r, status=calculate_status(r.last_reviewed_at, now))
                for r in state.rationales
            ),
        )

    raise TypeError(f"Unknown cockpit event: {type(event).__name__}")
