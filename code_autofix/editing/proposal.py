"""
Proposals — one suggested edit as returned by the generation service.

The service output is untrusted: fields may be missing, of the wrong type,
or use either the camelCase keys of the JSON prompt or snake_case.  Every
field falls back to a safe default instead of raising, so one malformed
entry cannot abort a whole review.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Category(str, Enum):
    BUG = "bug"
    SECURITY = "security"
    PERFORMANCE = "performance"
    STYLE = "style"
    FEATURE = "feature"


# Accepted keys per field, first match wins
_ANCHOR_KEYS = ("anchorText", "anchor_text", "originalCode", "original_code")
_REPLACEMENT_KEYS = (
    "replacementText", "replacement_text", "fixedCode", "fixed_code",
)
_LINE_START_KEYS = ("lineStart", "line_start")
_LINE_END_KEYS = ("lineEnd", "line_end")
_CATEGORY_KEYS = ("category", "type")


@dataclass(frozen=True)
class Proposal:
    """A single suggested edit.

    ``anchor_text`` is the exact text the edit claims to replace, as it
    appeared when the proposal was generated.  ``line_start``/``line_end``
    are 1-indexed and inclusive; they are only consulted when the anchor
    cannot be found.
    """
    id: str
    description: str = "No description"
    anchor_text: str = ""
    replacement_text: str = ""
    line_start: int = 1
    line_end: int = 1
    severity: Severity = Severity.INFO
    category: Category = Category.STYLE

    @property
    def has_anchor(self) -> bool:
        return bool(self.anchor_text)

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "Proposal":
        """Build a proposal from untrusted structured data."""
        if not isinstance(data, dict):
            logger.debug(
                "[Autofix] Proposal %d is not a mapping (%s), using defaults",
                index, type(data).__name__,
            )
            return cls(id=f"fix_{index}")

        raw_id = data.get("id")
        proposal_id = str(raw_id) if raw_id not in (None, "") else f"fix_{index}"

        line_start = _as_line(_first(data, _LINE_START_KEYS))
        line_end = max(_as_line(_first(data, _LINE_END_KEYS)), line_start)

        return cls(
            id=proposal_id,
            description=_as_text(data.get("description")) or "No description",
            anchor_text=_as_text(_first(data, _ANCHOR_KEYS)),
            replacement_text=_as_text(_first(data, _REPLACEMENT_KEYS)),
            line_start=line_start,
            line_end=line_end,
            severity=_as_enum(Severity, data.get("severity"), Severity.INFO),
            category=_as_enum(
                Category, _first(data, _CATEGORY_KEYS), Category.STYLE,
            ),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "anchorText": self.anchor_text,
            "replacementText": self.replacement_text,
            "lineStart": self.line_start,
            "lineEnd": self.line_end,
            "severity": self.severity.value,
            "category": self.category.value,
        }


def parse_proposals(items: Any) -> list[Proposal]:
    """Convert a list of raw proposal dicts into :class:`Proposal` objects.

    Anything that is not a list yields an empty result.
    """
    if not isinstance(items, list):
        if items is not None:
            logger.warning(
                "[Autofix] Expected a list of proposals, got %s",
                type(items).__name__,
            )
        return []
    return [Proposal.from_dict(item, i) for i, item in enumerate(items)]


# ------------------------------------------------------------------
# Field coercion
# ------------------------------------------------------------------

def _first(data: dict, keys: Iterable[str]) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_line(value: Any) -> int:
    # bool is an int subclass; true/false are not line numbers
    if isinstance(value, bool):
        return 1
    try:
        line = int(value)
    except (TypeError, ValueError):
        return 1
    return line if line >= 1 else 1


def _as_enum(enum_cls, value: Any, default):
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    return default
