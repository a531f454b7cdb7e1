"""Patch location & batch application — applies proposed edits to a live document."""

from .document import Span, TextDocument, HostEditor, InMemoryHost, save_document
from .errors import AutofixError, EngineUsageError, OutcomeStatus
from .proposal import Proposal, Severity, Category, parse_proposals
from .locator import PatchLocator, Location, LocateMethod
from .overlap import OverlapTracker
from .batch_applier import BatchApplier, BatchResult, ProposalOutcome
from .single_applier import (
    SingleApplier, SingleResult, SingleOutcome,
    ConfirmationPolicy, ConfirmationRequest, ConfirmationKind,
    AutoApprovePolicy, DenyAllPolicy,
)
from .metrics import log_batch_metric, read_batch_stats

__all__ = [
    "Span", "TextDocument", "HostEditor", "InMemoryHost", "save_document",
    "AutofixError", "EngineUsageError", "OutcomeStatus",
    "Proposal", "Severity", "Category", "parse_proposals",
    "PatchLocator", "Location", "LocateMethod",
    "OverlapTracker",
    "BatchApplier", "BatchResult", "ProposalOutcome",
    "SingleApplier", "SingleResult", "SingleOutcome",
    "ConfirmationPolicy", "ConfirmationRequest", "ConfirmationKind",
    "AutoApprovePolicy", "DenyAllPolicy",
    "log_batch_metric", "read_batch_stats",
]
