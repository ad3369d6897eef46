"""Approval Rationale Tracker: time-aware governance of loan approval rationales."""

__version__ = "0.1.0"
