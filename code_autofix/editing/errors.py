"""
Engine errors and per-proposal outcome statuses.

Only caller-contract violations are raised.  Everything that can go wrong
with an individual proposal is reported as an :class:`OutcomeStatus`.
"""

from __future__ import annotations

from enum import Enum


class AutofixError(Exception):
    """Base class for code_autofix errors."""


class EngineUsageError(AutofixError, ValueError):
    """Raised when the engine is called with invalid arguments (e.g. no document)."""


class OutcomeStatus(str, Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    SKIPPED_OVERLAP = "skipped_overlap"
    FAILED = "failed"
    CANCELLED = "cancelled"
