"""Tests for confirming, rejecting and editing pending rationales."""

from datetime import datetime, timezone

from rationale_tracker.models.loan import PendingRationale, RationaleStatus
from rationale_tracker.services.confirmation import (
    confirm_all_pending_rationales,
    confirm_pending_rationale,
    edit_pending_rationale,
    reject_pending_rationale,
)

EXTRACTED_AT = datetime(2024, 5, 1, tzinfo=timezone.utc)
CONFIRMED_AT = datetime(2024, 5, 2, 10, 30, tzinfo=timezone.utc)


def _pending(rationale_id, title="Cash Flow Predictability"):
    return PendingRationale(
        id=rationale_id,
        title=title,
        description="Stable operating cash flows over five years.",
        extracted_at=EXTRACTED_AT,
        source_text="Stable operating cash flows over five years, DSCR 1.8x.",
    )


def test_confirm_creates_fresh_rationale():
    rationale = confirm_pending_rationale(_pending("rat-1"), CONFIRMED_AT)

    assert rationale.id == "rat-1"
    assert rationale.title == "Cash Flow Predictability"
    assert rationale.description == "Stable operating cash flows over five years."
    assert rationale.created_at == CONFIRMED_AT
    assert rationale.last_reviewed_at == rationale.created_at
    assert rationale.status == RationaleStatus.FRESH
    assert rationale.contextual_signals == ()


def test_confirm_defaults_to_now():
    rationale = confirm_pending_rationale(_pending("rat-1"))

    assert rationale.created_at.tzinfo is not None
    assert rationale.last_reviewed_at == rationale.created_at


def test_reject_removes_only_that_id():
    pending = [_pending("rat-1"), _pending("rat-2"), _pending("rat-3")]

    remaining = reject_pending_rationale(pending, "rat-2")

    assert [p.id for p in remaining] == ["rat-1", "rat-3"]
    assert len(pending) == 3


def test_reject_unknown_id_is_noop():
    pending = [_pending("rat-1")]

    assert reject_pending_rationale(pending, "missing") == pending


def test_confirm_all_preserves_order_and_time():
    pending = [_pending("rat-1", "A"), _pending("rat-2", "B"), _pending("rat-3", "C")]

    confirmed = confirm_all_pending_rationales(pending, CONFIRMED_AT)

    assert [r.title for r in confirmed] == ["A", "B", "C"]
    assert all(r.created_at == CONFIRMED_AT for r in confirmed)
    assert all(r.status == RationaleStatus.FRESH for r in confirmed)


def test_confirm_all_of_nothing():
    assert confirm_all_pending_rationales([], CONFIRMED_AT) == []


def test_edit_truncates_title_and_description():
    edited = edit_pending_rationale(_pending("rat-1"), title="T" * 150, description="D" * 400)

    assert edited.title == "T" * 100
    assert edited.description == "D" * 250
    assert edited.id == "rat-1"
    assert edited.source_text.startswith("Stable operating")
    assert edited.extracted_at == EXTRACTED_AT


def test_edit_keeps_fields_left_as_none():
    original = _pending("rat-1")

    edited = edit_pending_rationale(original, description="Updated view")

    assert edited.title == original.title
    assert edited.description == "Updated view"
