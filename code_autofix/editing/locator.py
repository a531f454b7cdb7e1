"""
Patch locator — resolves a proposal to a concrete span of the current
document text.

Resolution is exact: the first verbatim occurrence of the anchor text wins.
There is no fuzzy or whitespace-normalised matching, so an anchor altered by
an earlier edit is indistinguishable from one that never existed.  The
advisory line range is only used when the caller explicitly allows it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .document import Span, TextDocument, line_start_offsets
from .proposal import Proposal

logger = logging.getLogger(__name__)


class LocateMethod(str, Enum):
    ANCHOR = "anchor"
    LINE_FALLBACK = "line_fallback"


@dataclass(frozen=True)
class Location:
    """A resolved span plus how it was found."""
    span: Span
    method: LocateMethod
    clamped: bool = False

    @property
    def is_exact(self) -> bool:
        return self.method is LocateMethod.ANCHOR


def find_anchor(text: str, anchor: str) -> Span | None:
    """Span of the first exact occurrence of *anchor* in *text*."""
    if not anchor:
        return None
    index = text.find(anchor)
    if index == -1:
        return None
    return Span(index, index + len(anchor))


def line_range_span(text: str, line_start: int,
                    line_end: int) -> tuple[Span, bool]:
    """Span covering whole lines ``line_start..line_end`` (1-indexed, inclusive).

    The span runs from the start of ``line_start`` to the start of
    ``line_end + 1`` (end of text on the last line).  Out-of-range lines are
    clamped into the document; the second return value reports whether any
    clamping happened.
    """
    offsets = line_start_offsets(text)
    count = len(offsets)

    start_line = min(max(line_start, 1), count)
    end_line = min(max(line_end, start_line), count)
    clamped = (start_line, end_line) != (line_start, line_end)

    start = offsets[start_line - 1]
    end = offsets[end_line] if end_line < count else len(text)
    return Span(start, end), clamped


class PatchLocator:
    """Resolve proposals against the current document text."""

    def locate(
        self,
        document: TextDocument | str,
        proposal: Proposal,
        allow_line_fallback: bool = False,
    ) -> Location | None:
        """Resolve *proposal* to a :class:`Location`, or ``None`` if not found.

        Parameters
        ----------
        document:
            The document (or its raw text) to search.  Always the current
            text; callers re-resolve after every mutation.
        proposal:
            The proposal to resolve.
        allow_line_fallback:
            Fall back to the advisory line range when the anchor is empty
            or absent.  The resulting location is approximate and must be
            confirmed by the caller before it is applied.
        """
        text = document if isinstance(document, str) else document.get_text()

        span = find_anchor(text, proposal.anchor_text)
        if span is not None:
            return Location(span, LocateMethod.ANCHOR)

        if not allow_line_fallback:
            logger.debug(
                "[Autofix] Anchor for %s not found, line fallback disabled",
                proposal.id,
            )
            return None

        span, clamped = line_range_span(
            text, proposal.line_start, proposal.line_end,
        )
        if clamped:
            logger.warning(
                "[Autofix] Lines %d-%d of %s clamped to document bounds %s",
                proposal.line_start, proposal.line_end, proposal.id, span,
            )
        return Location(span, LocateMethod.LINE_FALLBACK, clamped=clamped)
