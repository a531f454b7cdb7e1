"""
Single applier — interactive, one-proposal-at-a-time application.

Whether an edit goes ahead is decided by a :class:`ConfirmationPolicy`
supplied by the caller.  Exact anchor matches ask for a normal
confirmation; the line-range fallback asks for a distinct, approximate
confirmation because its location is only a guess.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from ..diff_display import compute_text_diff
from .document import HostEditor, Span, TextDocument
from .errors import EngineUsageError
from .locator import Location, PatchLocator
from .proposal import Proposal

logger = logging.getLogger(__name__)


class ConfirmationKind(str, Enum):
    EXACT = "exact"
    APPROXIMATE = "approximate"


@dataclass(frozen=True)
class ConfirmationRequest:
    """Everything a policy needs to decide on one edit."""
    kind: ConfirmationKind
    proposal: Proposal
    span: Span
    original_text: str
    replacement_text: str
    preview: str
    clamped: bool = False

    @property
    def is_approximate(self) -> bool:
        return self.kind is ConfirmationKind.APPROXIMATE


class ConfirmationPolicy(ABC):
    """Caller-provided decision on whether a located edit may be applied."""

    @abstractmethod
    def confirm(self, request: ConfirmationRequest) -> bool:
        """Return True to apply the edit described by *request*."""


class AutoApprovePolicy(ConfirmationPolicy):
    """Approve exact matches; approximate ones only when explicitly allowed."""

    def __init__(self, allow_approximate: bool = False) -> None:
        self.allow_approximate = allow_approximate

    def confirm(self, request: ConfirmationRequest) -> bool:
        if request.is_approximate:
            return self.allow_approximate
        return True


class DenyAllPolicy(ConfirmationPolicy):
    def confirm(self, request: ConfirmationRequest) -> bool:
        return False


class SingleOutcome(str, Enum):
    APPLIED = "applied"
    APPLIED_APPROXIMATE = "applied_approximate"
    DECLINED = "declined"
    NOT_FOUND_REQUIRES_CONFIRMATION = "not_found_requires_confirmation"
    FAILED = "failed"


@dataclass
class SingleResult:
    outcome: SingleOutcome
    proposal_id: str
    message: str
    span: Span | None = None

    @property
    def applied(self) -> bool:
        return self.outcome in (SingleOutcome.APPLIED,
                                SingleOutcome.APPLIED_APPROXIMATE)


class SingleApplier:
    """Apply one proposal at a time, gated by a confirmation policy."""

    def __init__(self, host: HostEditor, policy: ConfirmationPolicy,
                 locator: PatchLocator | None = None) -> None:
        self._host = host
        self._policy = policy
        self._locator = locator or PatchLocator()

    def apply_one(
        self,
        document: TextDocument,
        proposal: Proposal,
        allow_line_fallback: bool = False,
    ) -> SingleResult:
        """Locate, confirm and apply *proposal*.

        Parameters
        ----------
        document:
            The target document.
        proposal:
            The proposal to apply.
        allow_line_fallback:
            When the anchor cannot be found, use the advisory line range.
            The edit is then confirmed as approximate.
        """
        if document is None:
            raise EngineUsageError("apply_one requires a document")
        if not isinstance(proposal, Proposal):
            raise EngineUsageError("apply_one requires a Proposal")

        location = self._locator.locate(
            document, proposal, allow_line_fallback=allow_line_fallback,
        )
        if location is None:
            return SingleResult(
                SingleOutcome.NOT_FOUND_REQUIRES_CONFIRMATION,
                proposal.id,
                f"Could not find an exact match for '{proposal.description}'. "
                f"Allow line fallback to apply it at lines "
                f"{proposal.line_start}-{proposal.line_end}.",
            )

        request = self._build_request(document, proposal, location)
        if not self._policy.confirm(request):
            logger.info("[Autofix] %s declined (%s)", proposal.id,
                        request.kind.value)
            return SingleResult(
                SingleOutcome.DECLINED, proposal.id,
                f"Fix not applied: {proposal.description}", location.span,
            )

        try:
            ok = self._host.replace(document, location.span,
                                    request.replacement_text)
        except Exception as exc:
            logger.warning("[Autofix] Host edit for %s raised: %s",
                           proposal.id, exc)
            ok = False
        if not ok:
            return SingleResult(
                SingleOutcome.FAILED, proposal.id,
                f"The editor rejected the fix '{proposal.description}'. "
                f"Review the document and retry.", location.span,
            )

        if request.is_approximate:
            return SingleResult(
                SingleOutcome.APPLIED_APPROXIMATE, proposal.id,
                f"Fix applied at approximate lines "
                f"{proposal.line_start}-{proposal.line_end}: "
                f"{proposal.description}",
                location.span,
            )
        return SingleResult(
            SingleOutcome.APPLIED, proposal.id,
            f"Fix applied: {proposal.description}", location.span,
        )

    @staticmethod
    def _build_request(document: TextDocument, proposal: Proposal,
                       location: Location) -> ConfirmationRequest:
        text = document.get_text()
        span = location.span
        original = text[span.start:span.end]
        replacement = proposal.replacement_text

        if location.is_exact:
            kind = ConfirmationKind.EXACT
        else:
            kind = ConfirmationKind.APPROXIMATE
            # Whole lines were selected; keep the line break that ended them
            if original.endswith("\n") and not replacement.endswith("\n"):
                replacement += "\n"

        after = text[:span.start] + replacement + text[span.end:]
        return ConfirmationRequest(
            kind=kind,
            proposal=proposal,
            span=span,
            original_text=original,
            replacement_text=replacement,
            preview=compute_text_diff(text, after, document.uri) or "",
            clamped=location.clamped,
        )
