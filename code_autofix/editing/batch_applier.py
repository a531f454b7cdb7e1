"""
Batch applier — applies a whole proposal set to a document without
corrupting it, and reports what happened to every proposal.

Edits shift the offsets of everything after them, so:

* proposals are processed bottom-up (descending ``line_start``), and
* every proposal is re-resolved against the *current* text right before it
  is applied, never against a frozen snapshot.

Overlap is tracked in two coordinate spaces:

* **slots** — each proposal's first anchor occurrence in the text as it was
  when the batch started.  Applied proposals commit their slot, so two
  proposals whose anchors intersected at batch start can never both apply,
  even when a later re-resolution finds the anchor somewhere else.
* **live regions** — the text written by this batch, in current-document
  coordinates.  Regions after an edit are shifted by the edit's length
  delta, so a re-resolved span is always compared in the same coordinate
  space.  An anchor that now sits inside text this batch wrote is skipped,
  and so is one reaching across the point where a deletion joined two
  pieces of text.

The batch never aborts early and never rolls back.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable

from .document import HostEditor, Span, TextDocument
from .errors import EngineUsageError, OutcomeStatus
from .locator import PatchLocator, find_anchor
from .overlap import OverlapTracker
from .proposal import Proposal

logger = logging.getLogger(__name__)


@dataclass
class ProposalOutcome:
    """What happened to one proposal in a batch."""
    proposal_id: str
    status: OutcomeStatus
    span: Span | None = None
    error: str = ""


@dataclass
class BatchResult:
    """Per-batch counts plus the individual outcomes, in processing order."""
    applied: int = 0
    not_found: int = 0
    skipped_overlap: int = 0
    failed: int = 0
    cancelled: bool = False
    outcomes: list[ProposalOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def record(self, outcome: ProposalOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is OutcomeStatus.APPLIED:
            self.applied += 1
        elif outcome.status is OutcomeStatus.NOT_FOUND:
            self.not_found += 1
        elif outcome.status is OutcomeStatus.SKIPPED_OVERLAP:
            self.skipped_overlap += 1
        elif outcome.status is OutcomeStatus.FAILED:
            self.failed += 1

    def outcome_for(self, proposal_id: str) -> ProposalOutcome | None:
        for outcome in self.outcomes:
            if outcome.proposal_id == proposal_id:
                return outcome
        return None

    def summary(self) -> str:
        """One-line terminal summary, e.g. ``Applied 2 fixes. 1 skipped (overlapping).``"""
        message = f"Applied {self.applied} fix{'es' if self.applied != 1 else ''}."
        if self.not_found:
            message += f" {self.not_found} could not be located."
        if self.failed:
            message += f" {self.failed} could not be applied."
        if self.skipped_overlap:
            message += f" {self.skipped_overlap} skipped (overlapping)."
        if self.cancelled:
            message += " Cancelled before completion."
        return message

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "not_found": self.not_found,
            "skipped_overlap": self.skipped_overlap,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "total": self.total,
        }


class BatchApplier:
    """Apply a set of proposals to a document through the host primitive."""

    def __init__(self, host: HostEditor,
                 locator: PatchLocator | None = None) -> None:
        self._host = host
        self._locator = locator or PatchLocator()

    @staticmethod
    def order(proposals: Iterable[Proposal]) -> list[Proposal]:
        """Bottom-up processing order (stable for equal ``line_start``)."""
        return sorted(proposals, key=lambda p: p.line_start, reverse=True)

    def apply_batch(
        self,
        document: TextDocument,
        proposals: Iterable[Proposal],
        cancel_event: threading.Event | None = None,
    ) -> BatchResult:
        """Apply *proposals* to *document*.

        Parameters
        ----------
        document:
            The target document.  Mutated only through the host.
        proposals:
            The proposal set.  Only exact anchor matches are applied; the
            line-range fallback is never taken in a batch.
        cancel_event:
            Checked between proposals.  Once set, the remaining proposals
            are recorded as cancelled; edits already made stay applied.

        Returns
        -------
        BatchResult
            Counts and per-proposal outcomes.  Per-proposal problems never
            raise.
        """
        if document is None:
            raise EngineUsageError("apply_batch requires a document")
        if proposals is None:
            raise EngineUsageError("apply_batch requires a proposal list")
        try:
            items = list(proposals)
        except TypeError as exc:
            raise EngineUsageError(f"Invalid proposal list: {exc}") from exc
        ordered = self.order(
            p if isinstance(p, Proposal) else Proposal.from_dict(p, i)
            for i, p in enumerate(items)
        )

        result = BatchResult()
        slots = OverlapTracker()
        live = OverlapTracker()

        initial_text = document.get_text()
        start_slots = [find_anchor(initial_text, p.anchor_text) for p in ordered]

        for proposal, slot in zip(ordered, start_slots):
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                result.record(ProposalOutcome(proposal.id, OutcomeStatus.CANCELLED))
                continue

            outcome = self._apply_proposal(
                document, proposal, slot, slots, live,
            )
            result.record(outcome)

        logger.info(
            "[Autofix] Batch on %s: %s", getattr(document, "uri", "?"),
            result.summary(),
        )
        return result

    def _apply_proposal(
        self,
        document: TextDocument,
        proposal: Proposal,
        slot: Span | None,
        slots: OverlapTracker,
        live: OverlapTracker,
    ) -> ProposalOutcome:
        # 1. Re-resolve against the current text (anchor only)
        location = self._locator.locate(document, proposal,
                                        allow_line_fallback=False)
        if location is None:
            logger.debug("[Autofix] %s: anchor not found", proposal.id)
            return ProposalOutcome(proposal.id, OutcomeStatus.NOT_FOUND)
        span = location.span

        # 2. Overlap, in batch-start and in current coordinates
        if (slot is not None and slots.would_overlap(slot)) or live.would_overlap(span):
            logger.debug("[Autofix] %s: overlaps an applied edit at %s",
                         proposal.id, span)
            return ProposalOutcome(proposal.id, OutcomeStatus.SKIPPED_OVERLAP, span)

        # 3. Host write
        try:
            ok = self._host.replace(document, span, proposal.replacement_text)
        except Exception as exc:
            logger.warning("[Autofix] Host edit for %s raised: %s",
                           proposal.id, exc)
            return ProposalOutcome(proposal.id, OutcomeStatus.FAILED, span,
                                   error=str(exc))
        if not ok:
            logger.warning("[Autofix] Host rejected edit for %s at %s",
                           proposal.id, span)
            return ProposalOutcome(proposal.id, OutcomeStatus.FAILED, span,
                                   error="host rejected the edit")

        # A deletion commits an empty span: the join point
        written = Span(span.start, span.start + len(proposal.replacement_text))
        live.shift(span.end, written.length - span.length)
        live.commit(written)
        if slot is not None:
            slots.commit(slot)
        return ProposalOutcome(proposal.id, OutcomeStatus.APPLIED, span)
