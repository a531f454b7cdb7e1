"""
Apply metrics — records batch outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".autofix/metrics"
_METRICS_FILE = "apply_metrics.jsonl"


def _metrics_path(project_root: str | None = None,
                  metrics_dir: str = _METRICS_DIR) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir, _METRICS_FILE)


def log_batch_metric(data: dict, project_root: str | None = None,
                     metrics_dir: str = _METRICS_DIR) -> None:
    """Append a single batch entry to the JSONL log.

    Parameters
    ----------
    data:
        Fields to log (file, applied, not_found, skipped_overlap, failed...).
        ``BatchResult.to_dict()`` plus a ``file`` key is the usual shape.
    project_root:
        Optional project root directory. Defaults to CWD.
    """
    path = _metrics_path(project_root, metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Autofix] Failed to write metrics: %s", exc)


def read_batch_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str = _METRICS_DIR,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_batches``, ``total_proposals`` and the apply / not-found /
        overlap / failure rates as percentages of all proposals.
    """
    path = _metrics_path(project_root, metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError:
            pass

    entries = entries[-last_n:]

    applied = sum(e.get("applied", 0) for e in entries)
    not_found = sum(e.get("not_found", 0) for e in entries)
    overlap = sum(e.get("skipped_overlap", 0) for e in entries)
    failed = sum(e.get("failed", 0) for e in entries)
    total = applied + not_found + overlap + failed

    def _rate(count: int) -> float:
        return count / total * 100 if total else 0.0

    return {
        "total_batches": len(entries),
        "total_proposals": total,
        "apply_rate": _rate(applied),
        "not_found_rate": _rate(not_found),
        "overlap_rate": _rate(overlap),
        "failure_rate": _rate(failed),
    }
