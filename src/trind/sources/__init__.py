"""Block sources feeding the indexing pipeline.

- NdjsonBlockSource: reads an archive-style NDJSON block dump
- MemoryBlockSource: serves pre-built blocks (tests, embedding)
"""

from trind.sources.blocks import MemoryBlockSource, NdjsonBlockSource, block_from_wire

__all__ = [
    "MemoryBlockSource",
    "NdjsonBlockSource",
    "block_from_wire",
]
