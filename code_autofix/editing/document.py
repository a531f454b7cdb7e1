"""
Document model — spans, an in-memory text buffer, and the host edit
primitive through which every mutation goes.
"""

from __future__ import annotations

import bisect
import logging
import os
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Span:
    """Half-open ``[start, end)`` character range in a document."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Span") -> bool:
        """True when both spans share at least one character.

        Touching spans (``a.end == b.start``) and empty spans never overlap.
        """
        if not self.length or not other.length:
            return False
        return self.start < other.end and other.start < self.end

    def shifted(self, delta: int) -> "Span":
        return Span(self.start + delta, self.end + delta)

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


def line_start_offsets(text: str) -> list[int]:
    """Offsets at which each line begins.  A trailing newline opens an empty
    last line, so ``"a\\n"`` has two lines."""
    offsets = [0]
    pos = text.find("\n")
    while pos != -1:
        offsets.append(pos + 1)
        pos = text.find("\n", pos + 1)
    return offsets


class TextDocument:
    """In-memory text buffer addressed by character offsets.

    The engine never mutates it directly; edits go through a
    :class:`HostEditor`.
    """

    def __init__(self, text: str, uri: str = "untitled",
                 language_id: str = "plaintext") -> None:
        self.uri = uri
        self.language_id = language_id
        self.version = 1
        self._text = text
        self._line_offsets: list[int] | None = None

    @classmethod
    def from_file(cls, path: str) -> "TextDocument":
        from ..language import detect_language_id

        # newline="" keeps \r\n intact so the file is written back unchanged.
        # Strict decoding: a file that is not UTF-8 is refused, not rewritten.
        with open(path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
        return cls(text, uri=path, language_id=detect_language_id(path))

    def get_text(self) -> str:
        return self._text

    def get_text_in(self, span: Span) -> str:
        return self._text[span.start:span.end]

    @property
    def line_count(self) -> int:
        return len(self._offsets())

    def line_start_offset(self, line: int) -> int:
        """Offset of the first character of 1-indexed *line*.

        ``line_count + 1`` maps to the end of the text.
        """
        offsets = self._offsets()
        if line < 1 or line > len(offsets) + 1:
            raise IndexError(f"Line {line} out of range 1..{len(offsets) + 1}")
        if line == len(offsets) + 1:
            return len(self._text)
        return offsets[line - 1]

    def position_at(self, offset: int) -> tuple[int, int]:
        """Return ``(line, character)`` for *offset*; line is 1-indexed."""
        offset = max(0, min(offset, len(self._text)))
        offsets = self._offsets()
        index = bisect.bisect_right(offsets, offset) - 1
        return index + 1, offset - offsets[index]

    def _set_text(self, text: str) -> None:
        self._text = text
        self._line_offsets = None
        self.version += 1

    def _offsets(self) -> list[int]:
        if self._line_offsets is None:
            self._line_offsets = line_start_offsets(self._text)
        return self._line_offsets

    def __repr__(self) -> str:
        return (f"TextDocument(uri={self.uri!r}, language_id={self.language_id!r}, "
                f"version={self.version}, length={len(self._text)})")


class HostEditor(ABC):
    """The host's edit primitive.

    Implementations replace the text covered by *span* with *text* and
    return ``True`` on success.  Returning ``False`` or raising both count
    as a failed write for the proposal being applied.
    """

    @abstractmethod
    def replace(self, document: TextDocument, span: Span, text: str) -> bool:
        """Replace ``document[span]`` with *text*."""


class InMemoryHost(HostEditor):
    """Host that edits a :class:`TextDocument` in place."""

    def replace(self, document: TextDocument, span: Span, text: str) -> bool:
        current = document.get_text()
        if span.end > len(current):
            logger.warning(
                "[Autofix] Rejected edit %s beyond end of %s (length %d)",
                span, document.uri, len(current),
            )
            return False
        document._set_text(current[:span.start] + text + current[span.end:])
        return True


def save_document(document: TextDocument, path: str | None = None) -> None:
    """Write the document text atomically via temp file + rename."""
    abs_path = os.path.abspath(path or document.uri)
    tmp_path = abs_path + ".autofix_tmp"

    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(document.get_text())

        # On Windows, os.rename fails if destination exists
        if os.path.exists(abs_path):
            shutil.move(tmp_path, abs_path)
        else:
            os.rename(tmp_path, abs_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
