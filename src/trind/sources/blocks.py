"""Block sources.

The NDJSON format is one block per line, shaped like a Tron archive response:

    {"header": {"height": 1, "hash": "00..", "timestamp": 1700000000000},
     "logs": [{"logIndex": 0, "transactionIndex": 0, "address": "a614..",
               "topics": ["ddf2..", ..], "data": "00.."}],
     "transactions": [{"transactionIndex": 0, "hash": "ab.."}]}

Hex fields are bare (no ``0x``); they are lowercased on load.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from trind.core.models import Block, BlockHeader, RawLog, Transaction, format_log_id


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class HeaderWire(_Wire):
    height: int = Field(ge=0)
    hash: str
    timestamp: int


class LogWire(_Wire):
    log_index: int = Field(alias="logIndex", ge=0)
    transaction_index: int = Field(alias="transactionIndex", ge=0)
    address: str
    topics: list[str] | None = None
    data: str | None = None


class TransactionWire(_Wire):
    transaction_index: int = Field(alias="transactionIndex", ge=0)
    hash: str


class BlockWire(_Wire):
    header: HeaderWire
    logs: list[LogWire] = Field(default_factory=list)
    transactions: list[TransactionWire] = Field(default_factory=list)


def _bare(h: str) -> str:
    h = h.lower()
    return h[2:] if h.startswith("0x") else h


def block_from_wire(wire: BlockWire) -> Block:
    """Convert a validated wire block into the domain `Block`."""
    header = BlockHeader(height=wire.header.height, hash=_bare(wire.header.hash), timestamp=wire.header.timestamp)
    logs = [
        RawLog(
            id=format_log_id(header.height, header.hash, lw.log_index),
            block_number=header.height,
            log_index=lw.log_index,
            transaction_index=lw.transaction_index,
            address=_bare(lw.address),
            topics=tuple(_bare(t) for t in lw.topics or ()),
            data=_bare(lw.data) if lw.data else None,
        )
        for lw in sorted(wire.logs, key=lambda lw: lw.log_index)
    ]
    txs = [Transaction(transaction_index=tw.transaction_index, hash=_bare(tw.hash)) for tw in wire.transactions]
    return Block(header=header, logs=logs, transactions=txs)


class NdjsonBlockSource:
    """Serve batches of `batch_blocks` blocks from an NDJSON dump."""

    def __init__(self, path: str | Path, *, batch_blocks: int = 100) -> None:
        if batch_blocks < 1:
            raise ValueError("batch_blocks must be >= 1")
        self.path = Path(path)
        self.batch_blocks = batch_blocks

    def _iter_blocks(self, from_block: int) -> Iterable[Block]:
        last: int | None = None
        with open(self.path) as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    wire = BlockWire.model_validate_json(line)
                except ValidationError as e:
                    raise ValueError(f"{self.path}:{lineno}: invalid block: {e}") from e
                height = wire.header.height
                if last is not None and height <= last:
                    raise ValueError(f"{self.path}:{lineno}: block {height} is not above previous block {last}")
                last = height
                if height < from_block:
                    continue
                yield block_from_wire(wire)

    async def batches(self, *, from_block: int = 0) -> AsyncIterator[list[Block]]:
        batch: list[Block] = []
        for block in self._iter_blocks(from_block):
            batch.append(block)
            if len(batch) >= self.batch_blocks:
                yield batch
                batch = []
        if batch:
            yield batch


class MemoryBlockSource:
    """Serve pre-built batches, dropping blocks below `from_block`."""

    def __init__(self, batches: Iterable[list[Block]]) -> None:
        self._batches = [list(b) for b in batches]

    async def batches(self, *, from_block: int = 0) -> AsyncIterator[list[Block]]:
        for batch in self._batches:
            kept = [b for b in batch if b.header.height >= from_block]
            if kept:
                yield kept
