"""Data models for loans, rationales and cockpit state."""

from .loan import (
    ContextualSignal,
    DataSource,
    LoanCockpitState,
    LoanInfo,
    PendingRationale,
    Rationale,
    RationaleStatus,
    ReviewItem,
    ReviewSummary,
)

__all__ = [
    'ContextualSignal',
    'DataSource',
    'LoanCockpitState',
    'LoanInfo',
    'PendingRationale',
    'Rationale',
    'RationaleStatus',
    'ReviewItem',
    'ReviewSummary',
]
