"""Orchestration for resumable transfer indexing.

This package provides:
- Main orchestrator (run_indexer) wiring source, service and sink
- Interval utilities for coverage tracking and resumability
"""

from trind.orchestration.orchestrator import IndexOutput, OutputLayout, open_parquet_outputs, run_indexer, setup_layout
from trind.orchestration.utils import load_done_coverage, merge_intervals, resume_height

__all__ = [
    "IndexOutput",
    "OutputLayout",
    "open_parquet_outputs",
    "run_indexer",
    "setup_layout",
    "load_done_coverage",
    "merge_intervals",
    "resume_height",
]
