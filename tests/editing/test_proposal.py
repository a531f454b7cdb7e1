"""Tests for proposal parsing and safe defaults."""

from code_autofix.editing.proposal import (
    Category, Proposal, Severity, parse_proposals,
)


class TestFromDict:
    def test_service_keys(self):
        p = Proposal.from_dict({
            "id": "sec_1",
            "description": "Avoid eval",
            "severity": "error",
            "type": "security",
            "lineStart": 3,
            "lineEnd": 4,
            "originalCode": "eval(input)",
            "fixedCode": "JSON.parse(input)",
        })
        assert p.id == "sec_1"
        assert p.anchor_text == "eval(input)"
        assert p.replacement_text == "JSON.parse(input)"
        assert (p.line_start, p.line_end) == (3, 4)
        assert p.severity is Severity.ERROR
        assert p.category is Category.SECURITY

    def test_snake_case_keys(self):
        p = Proposal.from_dict({
            "anchor_text": "a", "replacement_text": "b",
            "line_start": 2, "line_end": 2, "category": "bug",
        })
        assert p.anchor_text == "a"
        assert p.replacement_text == "b"
        assert p.category is Category.BUG

    def test_missing_fields_get_defaults(self):
        p = Proposal.from_dict({}, index=4)
        assert p.id == "fix_4"
        assert p.description == "No description"
        assert p.anchor_text == ""
        assert p.replacement_text == ""
        assert (p.line_start, p.line_end) == (1, 1)
        assert p.severity is Severity.INFO
        assert p.category is Category.STYLE
        assert not p.has_anchor

    def test_wrong_types_get_defaults(self):
        p = Proposal.from_dict({
            "originalCode": 42,
            "fixedCode": ["not", "text"],
            "lineStart": "abc",
            "lineEnd": None,
            "severity": "catastrophic",
            "type": 7,
        })
        assert p.anchor_text == ""
        assert p.replacement_text == ""
        assert (p.line_start, p.line_end) == (1, 1)
        assert p.severity is Severity.INFO
        assert p.category is Category.STYLE

    def test_numeric_strings_and_bad_ranges(self):
        p = Proposal.from_dict({"lineStart": "5", "lineEnd": 2})
        assert (p.line_start, p.line_end) == (5, 5)
        p = Proposal.from_dict({"lineStart": -3, "lineEnd": True})
        assert (p.line_start, p.line_end) == (1, 1)

    def test_severity_is_case_insensitive(self):
        assert Proposal.from_dict({"severity": "Warning"}).severity is Severity.WARNING

    def test_non_mapping(self):
        p = Proposal.from_dict("garbage", index=2)
        assert p.id == "fix_2"

    def test_round_trip_keys(self):
        p = Proposal(id="x", anchor_text="a", replacement_text="b")
        assert Proposal.from_dict(p.to_dict()) == p


class TestParseProposals:
    def test_list(self):
        proposals = parse_proposals([{"id": "a"}, None, {"id": "c"}])
        assert [p.id for p in proposals] == ["a", "fix_1", "c"]

    def test_not_a_list(self):
        assert parse_proposals({"id": "a"}) == []
        assert parse_proposals(None) == []
