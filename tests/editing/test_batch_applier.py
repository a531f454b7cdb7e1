"""Tests for the BatchApplier."""

import threading

import pytest

from code_autofix.editing.batch_applier import BatchApplier, BatchResult
from code_autofix.editing.document import InMemoryHost, Span, TextDocument
from code_autofix.editing.errors import EngineUsageError, OutcomeStatus
from code_autofix.editing.proposal import Proposal


def _p(pid, anchor, replacement, line=1, line_end=None):
    return Proposal(id=pid, anchor_text=anchor, replacement_text=replacement,
                    line_start=line, line_end=line_end or line)


class RejectingHost(InMemoryHost):
    """Host that refuses to write the given replacement texts."""

    def __init__(self, rejected=(), raising=()):
        self.rejected = set(rejected)
        self.raising = set(raising)
        self.calls = []

    def replace(self, document, span, text):
        self.calls.append((span, text))
        if text in self.raising:
            raise RuntimeError("editor is read-only")
        if text in self.rejected:
            return False
        return super().replace(document, span, text)


class TestScenarios:
    def test_single_security_fix(self):
        doc = TextDocument("let x = eval(input);\nconsole.log(x);")
        result = BatchApplier(InMemoryHost()).apply_batch(
            doc, [_p("f1", "eval(input)", "JSON.parse(input)")],
        )
        assert result.applied == 1
        assert result.not_found == result.skipped_overlap == result.failed == 0
        assert doc.get_text() == "let x = JSON.parse(input);\nconsole.log(x);"

    def test_duplicate_anchor_second_is_not_found(self):
        doc = TextDocument("a = foo();\nb = 1;\n")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("first", "foo()", "bar()"),
            _p("second", "foo()", "baz()"),
        ])
        assert result.applied == 1
        assert result.not_found == 1
        assert result.outcome_for("first").status is OutcomeStatus.APPLIED
        assert result.outcome_for("second").status is OutcomeStatus.NOT_FOUND
        assert doc.get_text() == "a = bar();\nb = 1;\n"

    def test_duplicate_anchor_kept_by_replacement_is_skipped(self):
        doc = TextDocument("a = foo();\n")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("first", "foo()", "foo() or 0"),
            _p("second", "foo()", "baz()"),
        ])
        assert result.applied == 1
        assert result.skipped_overlap == 1
        assert doc.get_text() == "a = foo() or 0;\n"

    def test_empty_anchor_is_not_found_and_document_unchanged(self):
        text = "one\ntwo\nthree\n"
        doc = TextDocument(text)
        result = BatchApplier(InMemoryHost()).apply_batch(
            doc, [_p("f1", "", "TWO\n", line=2)],
        )
        assert result.not_found == 1
        assert result.applied == 0
        assert doc.get_text() == text
        assert doc.version == 1


class TestOverlap:
    def test_intersecting_anchors_apply_at_most_once(self):
        doc = TextDocument("x = alpha beta gamma;\n")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("p1", "alpha beta", "ALPHA beta"),
            _p("p2", "beta gamma", "BETA GAMMA"),
        ])
        assert result.applied == 1
        assert result.skipped_overlap == 1
        assert doc.get_text() == "x = ALPHA beta gamma;\n"

    def test_same_anchor_not_applied_at_another_occurrence(self):
        doc = TextDocument("call(a)\ncall(a)\n")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("p1", "call(a)", "call(b)"),
            _p("p2", "call(a)", "call(c)"),
        ])
        assert result.applied == 1
        assert result.skipped_overlap == 1
        assert doc.get_text() == "call(b)\ncall(a)\n"

    def test_anchor_created_by_earlier_edit_is_skipped(self):
        doc = TextDocument("one two three")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("p1", "one", "1111111", line=2),
            _p("p2", "11", "22", line=1),
        ])
        assert result.outcome_for("p1").status is OutcomeStatus.APPLIED
        assert result.outcome_for("p2").status is OutcomeStatus.SKIPPED_OVERLAP
        assert doc.get_text() == "1111111 two three"

    def test_anchor_joined_by_deletion_is_skipped(self):
        doc = TextDocument("a-Zb\nab\n")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("p0", "-Z", "", line=2),
            _p("p1", "ab", "AB", line=1),
        ])
        assert result.outcome_for("p0").status is OutcomeStatus.APPLIED
        assert result.outcome_for("p1").status is OutcomeStatus.SKIPPED_OVERLAP
        assert doc.get_text() == "ab\nab\n"

    def test_edit_touching_a_deletion_still_applies(self):
        doc = TextDocument("abc-Zdef")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("p0", "-Z", "", line=2),
            _p("p1", "abc", "ABC", line=1),
        ])
        assert result.applied == 2
        assert doc.get_text() == "ABCdef"

    def test_adjacent_edits_both_apply(self):
        doc = TextDocument("abcdef")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("p1", "abc", "ABC"),
            _p("p2", "def", "DEF"),
        ])
        assert result.applied == 2
        assert doc.get_text() == "ABCDEF"


class TestReResolution:
    def test_stale_line_numbers_still_apply_correctly(self):
        doc = TextDocument("aaa\nbbb\nccc\n")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("top", "aaa", "AAAAAA", line=3),
            _p("bottom", "ccc", "C", line=1),
        ])
        assert result.applied == 2
        assert doc.get_text() == "AAAAAA\nbbb\nC\n"

    def test_later_edits_use_shifted_offsets(self):
        doc = TextDocument("one two three")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            _p("p1", "one", "1111111", line=2),
            _p("p2", "three", "3", line=1),
        ])
        assert result.applied == 2
        assert doc.get_text() == "1111111 two 3"
        assert result.outcome_for("p2").span == Span(12, 17)

    def test_rerun_is_idempotent(self):
        doc = TextDocument("let a = eval(x);\nlet b = eval(y);\n")
        proposals = [
            _p("p1", "eval(x)", "JSON.parse(x)", line=1),
            _p("p2", "eval(y)", "JSON.parse(y)", line=2),
        ]
        applier = BatchApplier(InMemoryHost())
        first = applier.apply_batch(doc, proposals)
        after_first = doc.get_text()
        second = applier.apply_batch(doc, proposals)

        assert first.applied == 2
        assert second.applied == 0
        assert second.not_found == 2
        assert doc.get_text() == after_first


class TestFailures:
    def test_host_failure_does_not_abort_batch(self):
        doc = TextDocument("l1 = a\nl2 = b\nl3 = c\n")
        host = RejectingHost(rejected={"C"})
        result = BatchApplier(host).apply_batch(doc, [
            _p("p1", "a", "A", line=1),
            _p("p2", "b", "B", line=2),
            _p("p3", "c", "C", line=3),
        ])
        assert [o.proposal_id for o in result.outcomes] == ["p3", "p2", "p1"]
        assert result.failed == 1
        assert result.applied == 2
        assert doc.get_text() == "l1 = A\nl2 = B\nl3 = c\n"

    def test_host_exception_counts_as_failed(self):
        doc = TextDocument("x = 1\ny = 2\n")
        host = RejectingHost(raising={"X = 1"})
        result = BatchApplier(host).apply_batch(doc, [
            _p("p1", "x = 1", "X = 1", line=1),
            _p("p2", "y = 2", "Y = 2", line=2),
        ])
        assert result.failed == 1
        assert result.applied == 1
        assert "read-only" in result.outcome_for("p1").error
        assert doc.get_text() == "x = 1\nY = 2\n"

    def test_failed_edit_is_not_committed(self):
        doc = TextDocument("value = old\n")
        host = RejectingHost(rejected={"new"})
        result = BatchApplier(host).apply_batch(doc, [
            _p("p1", "old", "new"),
            _p("p2", "value = old", "value = newer"),
        ])
        assert result.failed == 1
        assert result.applied == 1
        assert doc.get_text() == "value = newer\n"


class TestCancellation:
    def test_cancelled_before_start(self):
        doc = TextDocument("a b c")
        cancel = threading.Event()
        cancel.set()
        result = BatchApplier(InMemoryHost()).apply_batch(
            doc, [_p("p1", "a", "A"), _p("p2", "b", "B")], cancel_event=cancel,
        )
        assert result.cancelled is True
        assert result.applied == 0
        assert all(o.status is OutcomeStatus.CANCELLED for o in result.outcomes)
        assert doc.get_text() == "a b c"

    def test_cancel_mid_batch_keeps_applied_edits(self):
        cancel = threading.Event()

        class CancellingHost(InMemoryHost):
            def replace(self, document, span, text):
                ok = super().replace(document, span, text)
                cancel.set()
                return ok

        doc = TextDocument("a\nb\n")
        result = BatchApplier(CancellingHost()).apply_batch(
            doc, [_p("p1", "a", "A", line=1), _p("p2", "b", "B", line=2)],
            cancel_event=cancel,
        )
        assert result.applied == 1
        assert result.cancelled is True
        assert result.outcome_for("p1").status is OutcomeStatus.CANCELLED
        assert doc.get_text() == "a\nB\n"


class TestMisuse:
    def test_none_document_raises(self):
        with pytest.raises(EngineUsageError):
            BatchApplier(InMemoryHost()).apply_batch(None, [])

    def test_none_proposals_raises(self):
        with pytest.raises(EngineUsageError):
            BatchApplier(InMemoryHost()).apply_batch(TextDocument(""), None)

    def test_non_iterable_proposals_raises(self):
        with pytest.raises(EngineUsageError):
            BatchApplier(InMemoryHost()).apply_batch(TextDocument(""), 5)

    def test_raw_dicts_are_coerced(self):
        doc = TextDocument("print(x)")
        result = BatchApplier(InMemoryHost()).apply_batch(doc, [
            {"originalCode": "print(x)", "fixedCode": "print(x!r)"},
            "not a proposal",
        ])
        assert result.applied == 1
        assert result.not_found == 1
        assert doc.get_text() == "print(x!r)"

    def test_empty_batch(self):
        result = BatchApplier(InMemoryHost()).apply_batch(TextDocument("x"), [])
        assert result.total == 0
        assert result.summary() == "Applied 0 fixes."


class TestBatchResult:
    def test_default_result(self):
        result = BatchResult()
        assert result.applied == 0
        assert result.outcomes == []
        assert result.cancelled is False

    def test_summary_lists_every_non_zero_count(self):
        result = BatchResult(applied=1, not_found=2, skipped_overlap=1, failed=3)
        assert result.summary() == (
            "Applied 1 fix. 2 could not be located. 3 could not be applied. "
            "1 skipped (overlapping)."
        )

    def test_order_is_bottom_up_and_stable(self):
        proposals = [_p("a", "x", "y", line=1), _p("b", "x", "y", line=5),
                     _p("c", "x", "y", line=1)]
        assert [p.id for p in BatchApplier.order(proposals)] == ["b", "a", "c"]
