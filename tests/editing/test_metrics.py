"""Tests for batch metrics logging and stats."""

import json
import os

import pytest

from code_autofix.editing.metrics import log_batch_metric, read_batch_stats


@pytest.fixture
def tmp_project(tmp_path):
    """Create a temp project root."""
    return str(tmp_path)


def _metrics_file(root):
    return os.path.join(root, ".autofix", "metrics", "apply_metrics.jsonl")


class TestLogBatchMetric:
    def test_creates_file_and_writes_entry(self, tmp_project):
        log_batch_metric(
            {"file": "src/app.js", "applied": 2, "not_found": 1},
            project_root=tmp_project,
        )

        path = _metrics_file(tmp_project)
        assert os.path.isfile(path)

        with open(path) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["file"] == "src/app.js"
        assert entry["applied"] == 2
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, tmp_project):
        log_batch_metric({"file": "a.py"}, project_root=tmp_project)
        log_batch_metric({"file": "b.py"}, project_root=tmp_project)
        log_batch_metric({"file": "c.py"}, project_root=tmp_project)

        with open(_metrics_file(tmp_project)) as f:
            lines = f.readlines()
        assert len(lines) == 3

    def test_custom_metrics_dir(self, tmp_project):
        log_batch_metric({"file": "a.py"}, project_root=tmp_project,
                         metrics_dir="stats")
        assert os.path.isfile(
            os.path.join(tmp_project, "stats", "apply_metrics.jsonl"))


class TestReadBatchStats:
    def test_empty_stats(self, tmp_project):
        stats = read_batch_stats(project_root=tmp_project)

        assert stats["total_batches"] == 0
        assert stats["total_proposals"] == 0
        assert stats["apply_rate"] == 0.0
        assert stats["failure_rate"] == 0.0

    def test_stats_from_entries(self, tmp_project):
        entries = [
            {"file": "a.py", "applied": 3, "not_found": 1,
             "skipped_overlap": 0, "failed": 0},
            {"file": "b.py", "applied": 1, "not_found": 0,
             "skipped_overlap": 2, "failed": 1},
        ]
        for e in entries:
            log_batch_metric(e, project_root=tmp_project)

        stats = read_batch_stats(last_n=50, project_root=tmp_project)

        assert stats["total_batches"] == 2
        assert stats["total_proposals"] == 8
        assert stats["apply_rate"] == 50.0
        assert stats["not_found_rate"] == 12.5
        assert stats["overlap_rate"] == 25.0
        assert stats["failure_rate"] == 12.5

    def test_skips_corrupt_lines(self, tmp_project):
        log_batch_metric({"applied": 1}, project_root=tmp_project)
        with open(_metrics_file(tmp_project), "a") as f:
            f.write("{not json\n")
        stats = read_batch_stats(project_root=tmp_project)
        assert stats["total_batches"] == 1

    def test_last_n_limits(self, tmp_project):
        for i in range(10):
            log_batch_metric({"file": f"f{i}.py", "applied": 1},
                             project_root=tmp_project)

        stats = read_batch_stats(last_n=5, project_root=tmp_project)
        assert stats["total_batches"] == 5
        assert stats["total_proposals"] == 5
