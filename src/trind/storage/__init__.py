"""Storage components for manifest tracking and transfer persistence.

This package provides:
- LiveManifest: append-only JSONL journal of batch status
- ParquetTransferSink: atomic, deduplicating Parquet shard writer
- MemoryTransferSink: staged in-memory sink
"""

from trind.storage.manifest import LiveManifest
from trind.storage.sinks import MemoryTransferSink, ParquetTransferSink, ShardsDir

__all__ = [
    "LiveManifest",
    "MemoryTransferSink",
    "ParquetTransferSink",
    "ShardsDir",
]
