"""Resume support: which block ranges earlier runs already committed.

Ranges are `(from_block, to_block)` tuples, inclusive on both ends.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def merge_intervals(intervals: list[tuple[int, int]]) -> list[tuple[int, int]]:
    """Collapse inclusive block ranges that overlap or touch; result is sorted."""
    merged: list[tuple[int, int]] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1] + 1:
            prev_start, prev_end = merged[-1]
            merged[-1] = (prev_start, max(prev_end, end))
        else:
            merged.append((start, end))
    return merged


def load_done_coverage(manifests_dir: Path, exclude_basename: str | None = None) -> list[tuple[int, int]]:
    """Merged ranges of every `done` batch in `manifests_dir`.

    `exclude_basename` names the current run's own manifest, which is skipped.
    """
    intervals: list[tuple[int, int]] = []
    if not manifests_dir.is_dir():
        raise ValueError("manifests_dir should be a directory")
    for name in sorted(os.listdir(manifests_dir)):
        if not name.endswith(".jsonl"):
            continue
        if exclude_basename and name == exclude_basename:
            continue
        path = manifests_dir / name
        with open(path) as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    rec = json.loads(line)
                except json.JSONDecodeError:
                    # A torn final line from an interrupted run; the batch was not committed.
                    logger.warning("Ignoring unreadable manifest line %s:%d", path, lineno)
                    continue
                if rec.get("status") == "done":
                    intervals.append((int(rec["from_block"]), int(rec["to_block"])))
    return merge_intervals(intervals)


def resume_height(start_block: int, covered: list[tuple[int, int]]) -> int:
    """Return the first block above every committed batch, but not below `start_block`.

    Batches are committed strictly in order, so everything below the highest
    committed block has been processed.
    """
    if not covered:
        return start_block
    return max(start_block, max(e for _, e in covered) + 1)
