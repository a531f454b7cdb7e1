"""
code_autofix — locate and apply AI-proposed edits without corrupting the document.

Public API for library usage::

    from code_autofix import BatchApplier, InMemoryHost, TextDocument, parse_proposals

    doc = TextDocument(source, uri="app.js", language_id="javascript")
    result = BatchApplier(InMemoryHost()).apply_batch(doc, parse_proposals(fixes))
    print(result.summary())
"""

from .editing import (
    BatchApplier, BatchResult, SingleApplier, SingleResult, SingleOutcome,
    PatchLocator, OverlapTracker, Proposal, Span, TextDocument,
    HostEditor, InMemoryHost, ConfirmationPolicy, parse_proposals,
)

__all__ = [
    "BatchApplier", "BatchResult", "SingleApplier", "SingleResult",
    "SingleOutcome", "PatchLocator", "OverlapTracker", "Proposal", "Span",
    "TextDocument", "HostEditor", "InMemoryHost", "ConfirmationPolicy",
    "parse_proposals",
]
