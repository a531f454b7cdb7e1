"""
Overlap tracker — the spans already committed in the current batch.
"""

from __future__ import annotations

from .document import Span


class OverlapTracker:
    """Reject spans that share a character with a committed span.

    One tracker lives for one batch.  :meth:`shift` keeps committed spans
    valid when the document they index into is edited.

    An empty committed span marks a join point left by a deletion; a span
    reaching across it (``start < point < end``) counts as overlapping.
    """

    def __init__(self) -> None:
        self._spans: list[Span] = []

    def would_overlap(self, span: Span) -> bool:
        for committed in self._spans:
            if committed.length:
                if span.overlaps(committed):
                    return True
            elif span.start < committed.start < span.end:
                return True
        return False

    def commit(self, span: Span) -> None:
        self._spans.append(span)

    def shift(self, at: int, delta: int) -> None:
        """Move every committed span starting at or after *at* by *delta*."""
        if not delta:
            return
        self._spans = [
            s.shifted(delta) if s.start >= at else s for s in self._spans
        ]

    @property
    def spans(self) -> tuple[Span, ...]:
        return tuple(self._spans)

    def __len__(self) -> int:
        return len(self._spans)
