"""
Review session — wires a document, a proposal source and an applier
together for one file.  The CLI drives one session per file.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field

from ..agents.fixer import (
    FixerAgent, FixSuggestions, parse_fix_response, suggestions_from_data,
)
from ..cli_display import log
from ..diff_display import compute_text_diff
from ..editing.batch_applier import BatchApplier, BatchResult
from ..editing.document import HostEditor, InMemoryHost, TextDocument
from ..editing.metrics import log_batch_metric
from ..editing.proposal import Proposal
from ..editing.single_applier import (
    ConfirmationPolicy, SingleApplier, SingleResult,
)


def load_proposals_file(path: str) -> FixSuggestions:
    """Read proposals from a JSON file shaped like the service reply
    (``{"fixes": [...], "summary": "..."}``) or a bare list of fixes."""
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return parse_fix_response(raw)
    return suggestions_from_data(data)


@dataclass
class SessionReport:
    path: str
    summary: str = ""
    batch: BatchResult | None = None
    single_results: list[SingleResult] = field(default_factory=list)
    preview: str = ""

    @property
    def changed(self) -> bool:
        if self.batch is not None:
            return self.batch.applied > 0
        return any(r.applied for r in self.single_results)


class ReviewSession:
    """Apply a set of proposals to one document."""

    def __init__(self, document: TextDocument,
                 host: HostEditor | None = None,
                 metrics_dir: str | None = None) -> None:
        self.document = document
        self.host = host or InMemoryHost()
        self.metrics_dir = metrics_dir

    def fetch(self, agent: FixerAgent) -> FixSuggestions:
        """Ask the generation service for proposals on the current text."""
        return agent.process(self.document.get_text(),
                             self.document.language_id)

    def apply_all(self, proposals: list[Proposal],
                  cancel_event: threading.Event | None = None) -> BatchResult:
        result = BatchApplier(self.host).apply_batch(
            self.document, proposals, cancel_event=cancel_event,
        )
        if self.metrics_dir:
            log_batch_metric(
                {"file": self.document.uri, **result.to_dict()},
                metrics_dir=self.metrics_dir,
            )
        return result

    def apply_interactively(
        self,
        proposals: list[Proposal],
        policy: ConfirmationPolicy,
        allow_line_fallback: bool = False,
    ) -> list[SingleResult]:
        """Walk proposals top to bottom, one confirmation each."""
        applier = SingleApplier(self.host, policy)
        results: list[SingleResult] = []
        for proposal in sorted(proposals, key=lambda p: p.line_start):
            result = applier.apply_one(self.document, proposal,
                                       allow_line_fallback=allow_line_fallback)
            log.info(f"[Session] {proposal.id}: {result.outcome.value}")
            results.append(result)
        return results

    def preview_all(self, proposals: list[Proposal]) -> tuple[str, BatchResult]:
        """Dry run: apply the batch to a copy and return the diff."""
        before = self.document.get_text()
        scratch = TextDocument(before, uri=self.document.uri,
                               language_id=self.document.language_id)
        result = BatchApplier(InMemoryHost()).apply_batch(scratch, proposals)
        diff = compute_text_diff(before, scratch.get_text(), self.document.uri)
        return diff or "", result
