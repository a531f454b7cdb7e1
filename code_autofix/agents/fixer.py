"""
Fixer agent — asks the chat-completion service for structured fix
proposals and turns its (untrusted) reply into :class:`Proposal` objects.
"""

import json
import re
from dataclasses import dataclass, field

from ..cli_display import log
from ..editing.proposal import Proposal, parse_proposals
from ..language import get_language_name
from .base import Agent

_FENCE_RE = re.compile(r"```[\w-]*\n?")


@dataclass
class FixSuggestions:
    """Proposal set plus the service's free-text summary."""
    proposals: list[Proposal] = field(default_factory=list)
    summary: str = ""
    parse_error: str = ""


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model wrapped around its answer."""
    return _FENCE_RE.sub("", text).strip()


def parse_fix_response(raw: str) -> FixSuggestions:
    """Parse the service reply.  Malformed replies yield no proposals."""
    cleaned = strip_code_fences(raw or "")
    if not cleaned:
        return FixSuggestions(parse_error="empty response")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        # Models sometimes wrap the JSON in prose; try the outermost object
        start, end = cleaned.find("{"), cleaned.rfind("}")
        try:
            if start == -1 or end <= start:
                raise ValueError("no JSON object in response")
            data = json.loads(cleaned[start:end + 1])
        except ValueError as exc:
            log.error(f"[Fixer] Failed to parse AI response: {exc}")
            return FixSuggestions(parse_error=str(exc))

    return suggestions_from_data(data)


def suggestions_from_data(data) -> FixSuggestions:
    """Build suggestions from decoded JSON: the reply object or a bare list."""
    if isinstance(data, list):
        data = {"fixes": data}
    if not isinstance(data, dict):
        log.error(f"[Fixer] Expected a JSON object, got {type(data).__name__}")
        return FixSuggestions(parse_error="response is not a JSON object")

    summary = data.get("summary")
    return FixSuggestions(
        proposals=parse_proposals(data.get("fixes")),
        summary=summary if isinstance(summary, str) else "",
    )


class FixerAgent(Agent):
    """Review a source file and propose anchored fixes."""

    def __init__(self, llm_client, name: str = "Fixer",
                 role: str = "an expert code reviewer and fixer"):
        super().__init__(name, role, llm_client)

    def process(self, source_text: str, language_id: str) -> FixSuggestions:
        """Return fix proposals for *source_text*.

        Transport failures propagate as :class:`~code_autofix.llm.LLMError`;
        an unparseable reply is logged and yields an empty proposal set.
        """
        prompt = self._fix_prompt(source_text, language_id)
        raw = self.llm_client.generate_response(
            prompt, system=self._system_prompt(),
        )
        suggestions = parse_fix_response(raw)
        log.info(f"[Fixer] {len(suggestions.proposals)} proposals for "
                 f"{get_language_name(language_id)} source")
        return suggestions

    def quick_fix(self, snippet: str, language_id: str) -> str:
        """Return a fixed version of *snippet*, or the snippet unchanged
        when the model returns nothing usable."""
        lang = get_language_name(language_id)
        prompt = f"""Fix any issues in this {lang} code and improve it:

```{language_id}
{snippet}
```

Return ONLY the fixed code, no explanations or markdown."""
        raw = self.llm_client.generate_response(
            prompt,
            system="You are an expert code fixer. Return only the fixed code, nothing else.",
            temperature=0.2,
            max_tokens=2000,
        )
        fixed = strip_code_fences(raw or "")
        return fixed or snippet

    @staticmethod
    def _fix_prompt(source_text: str, language_id: str) -> str:
        lang = get_language_name(language_id)
        return f"""Analyze the following {lang} code and provide specific fixes.

For each issue found, provide a JSON response in this exact format:
{{
    "fixes": [
        {{
            "id": "unique_id_1",
            "description": "Brief description of the issue and fix",
            "severity": "error|warning|info",
            "type": "bug|security|performance|style|feature",
            "lineStart": 1,
            "lineEnd": 5,
            "originalCode": "the exact original code snippet",
            "fixedCode": "the corrected code snippet"
        }}
    ],
    "summary": "Overall summary of issues found"
}}

IMPORTANT RULES:
1. Only suggest fixes for real issues, not stylistic preferences
2. The originalCode must EXACTLY match code from the input
3. Provide complete, working fixedCode that can replace the original
4. Include line numbers (1-indexed)
5. Focus on: bugs, security vulnerabilities, performance issues, missing error handling
6. Return valid JSON only, no markdown formatting

CODE TO ANALYZE:
```{language_id}
{source_text}
```

Respond with JSON only:"""
