"""Cockpit state events, reducer and store."""

from .state import (
    INITIAL_STATE,
    AddPendingRationales,
    ClearState,
    ConfirmAllRationales,
    ConfirmRationale,
    EditPendingRationale,
    ExtractionFailed,
    LoadDemo,
    MarkReviewed,
    RefreshStatuses,
    RejectRationale,
    RestoreState,
    SetExtracting,
    SetShowConfirmation,
    StartExtraction,
    reduce,
)
from .store import CockpitStore

__all__ = [
    'INITIAL_STATE',
    'AddPendingRationales',
    'ClearState',
    'ConfirmAllRationales',
    'ConfirmRationale',
    'EditPendingRationale',
    'ExtractionFailed',
    'LoadDemo',
    'MarkReviewed',
    'RefreshStatuses',
    'RejectRationale',
    'RestoreState',
    'SetExtracting',
    'SetShowConfirmation',
    'StartExtraction',
    'reduce',
    'CockpitStore',
]
