"""
Serialized snapshot of the cockpit state.

The snapshot is a JSON document with camelCase keys and ISO 8601
dates. Loading goes through a pydantic schema so a truncated or
hand-edited snapshot is rejected as a whole instead of producing a
half-built state.
"""

import logging
from datetime import date, datetime, timezone
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..models.loan import (
    ContextualSignal,
    DataSource,
    LoanCockpitState,
    LoanInfo,
    PendingRationale,
    Rationale,
    RationaleStatus,
)
from ..services.staleness import calculate_status, utc_now
from ..utils.errors import PersistenceError

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Snapshots written without an offset are read as UTC
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LoanSnapshot(_SnapshotModel):
    id: str
    approval_date: date = Field(alias="approvalDate")
    borrower_reference: str = Field(alias="borrowerReference")


class SignalSnapshot(_SnapshotModel):
    id: str
    description: str
    updated_at: UtcDatetime = Field(alias="updatedAt")


class RationaleSnapshot(_SnapshotModel):
    id: str
    title: str
    description: str
    created_at: UtcDatetime = Field(alias="createdAt")
    last_reviewed_at: UtcDatetime = Field(alias="lastReviewedAt")
    status: RationaleStatus
    contextual_signals: List[SignalSnapshot] = Field(default_factory=list, alias="contextualSignals")


class PendingSnapshot(_SnapshotModel):
    id: str
    title: str
    description: str
    extracted_at: UtcDatetime = Field(alias="extractedAt")
    source_text: str = Field(alias="sourceText")


class StateSnapshot(_SnapshotModel):
    """Top-level snapshot document."""

    loan: Optional[LoanSnapshot] = None
    rationales: List[RationaleSnapshot]
    pending_rationales: List[PendingSnapshot] = Field(alias="pendingRationales")
    is_extracting: bool = Field(default=False, alias="isExtracting")
    show_confirmation: bool = Field(default=False, alias="showConfirmation")
    data_source: DataSource = Field(default=DataSource.NONE, alias="dataSource")

    @field_validator("data_source", mode="before")
    @classmethod
    def _default_data_source(cls, value):
        return value or DataSource.NONE

    @classmethod
    def from_state(cls, state: LoanCockpitState) -> "StateSnapshot":
        loan = None
        if state.loan is not None:
            loan = LoanSnapshot(
                id=state.loan.id,
                approval_date=state.loan.approval_date,
                borrower_reference=state.loan.borrower_reference,
            )

        return cls(
            loan=loan,
            rationales=[
                RationaleSnapshot(
                    id=r.id,
                    title=r.title,
                    description=r.description,
                    created_at=r.created_at,
                    last_reviewed_at=r.last_reviewed_at,
                    status=r.status,
                    contextual_signals=[
                        SignalSnapshot(id=s.id, description=s.description, updated_at=s.updated_at)
                        for s in r.contextual_signals
                    ],
                )
                for r in state.rationales
            ],
            pending_rationales=[
                PendingSnapshot(
                    id=p.id,
                    title=p.title,
                    description=p.description,
                    extracted_at=p.extracted_at,
                    source_text=p.source_text,
                )
                for p in state.pending_rationales
            ],
            is_extracting=state.is_extracting,
            show_confirmation=state.show_confirmation,
            data_source=state.data_source,
        )

    def to_state(self, now: Optional[datetime] = None) -> LoanCockpitState:
        """Rebuild domain objects; cached statuses are recomputed against ``now``."""
        if now is None:
            now = utc_now()

        loan = None
        if self.loan is not None:
            loan = LoanInfo(
                id=self.loan.id,
                approval_date=self.loan.approval_date,
                borrower_reference=self.loan.borrower_reference,
            )

        return LoanCockpitState(
            loan=loan,
            rationales=[
                Rationale(
                    id=r.id,
                    title=r.title,
                    description=r.description,
                    created_at=r.created_at,
                    last_reviewed_at=r.last_reviewed_at,
                    status=calculate_status(r.last_reviewed_at, now),
                    contextual_signals=[
                        ContextualSignal(id=s.id, description=s.description, updated_at=s.updated_at)
                        for s in r.contextual_signals
                    ],
                )
                for r in self.rationales
            ],
            pending_rationales=[
                PendingRationale(
                    id=p.id,
                    title=p.title,
                    description=p.description,
                    extracted_at=p.extracted_at,
                    source_text=p.source_text,
                )
                for p in self.pending_rationales
            ],
            is_extracting=self.is_extracting,
            show_confirmation=self.show_confirmation,
            data_source=self.data_source,
        )


def serialize_state(state: LoanCockpitState) -> str:
    """Encode the whole state as a JSON snapshot with camelCase keys."""
    return StateSnapshot.from_state(state).model_dump_json(by_alias=True)


def deserialize_state(raw: str, now: Optional[datetime] = None) -> LoanCockpitState:
    """
    Decode a JSON snapshot.

    Args:
        raw: Snapshot text as produced by serialize_state()
        now: Time used to recompute rationale statuses, defaults to now

    Returns:
        Restored LoanCockpitState

    Raises:
        PersistenceError: SNAPSHOT_CORRUPTED if the text is not valid JSON
            or does not match the snapshot schema
    """
    try:
        snapshot = StateSnapshot.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Rejected stored snapshot: {e.error_count()} validation error(s)")
        raise PersistenceError.snapshot_corrupted(e) from e

    return snapshot.to_state(now)
