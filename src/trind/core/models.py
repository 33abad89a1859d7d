"""Core data models and the columnar transfer buffer.

This module defines:
- `RawLog`, `Transaction`, `BlockHeader`, `Block`: source feed records.
- `DecodedTransfer`: typed result of decoding one Transfer log.
- `TransferRecord`: the persisted entity.
- `BatchRecord`: manifest entry used for resumability.
- `TransferColumns`: append-only columnar buffer convertible to Arrow.

Design notes
------------
- Tron feeds deliver addresses, topics and data as bare lowercase hex.
- Amounts are stored as strings in Arrow to preserve uint256 exactness.
- Row order is preserved exactly as appended; nothing is re-sorted.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Literal

import pyarrow as pa

Status = Literal["started", "done", "failed"]

TRANSFER_SCHEMA = pa.schema(
    [
        pa.field("id", pa.string()),
        pa.field("block_number", pa.uint64()),
        pa.field("timestamp", pa.timestamp("ms", tz="UTC")),
        pa.field("tx", pa.string()),
        pa.field("from", pa.string()),
        pa.field("to", pa.string()),
        pa.field("amount", pa.string()),
    ]
)


def format_log_id(height: int, block_hash: str | None, log_index: int) -> str:
    """Position-derived log id; lexicographic order follows chain order."""
    h = (block_hash or "").lower()
    if h.startswith("0x"):
        h = h[2:]
    h = h[:5]
    if h:
        return f"{height:010d}-{h}-{log_index:06d}"
    return f"{height:010d}-{log_index:06d}"


# === Source feed records ===


@dataclass(slots=True, frozen=True)
class RawLog:
    """Raw log as delivered by the source feed."""

    id: str
    block_number: int
    log_index: int
    transaction_index: int
    address: str  # bare 40-hex, lowercased
    topics: tuple[str, ...]  # bare 64-hex, lowercased
    data: str | None  # bare hex


@dataclass(slots=True, frozen=True)
class Transaction:
    transaction_index: int
    hash: str


@dataclass(slots=True, frozen=True)
class BlockHeader:
    height: int
    hash: str
    timestamp: int  # milliseconds


@dataclass(slots=True)
class Block:
    """One block with the logs and transactions selected by the feed."""

    header: BlockHeader
    logs: list[RawLog] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)

    def get_transaction(self, log: RawLog) -> Transaction:
        """Resolve the transaction that emitted `log`."""
        for tx in self.transactions:
            if tx.transaction_index == log.transaction_index:
                return tx
        raise LookupError(
            f"Transaction {log.transaction_index} of log {log.id} is missing from block {self.header.height}"
        )


# === Decoded / persisted records ===


@dataclass(slots=True, frozen=True)
class DecodedTransfer:
    """Transfer fields as decoded from the ABI (EVM hex addresses)."""

    from_: str
    to: str
    value: int


@dataclass(slots=True, frozen=True)
class TransferRecord:
    """One persisted transfer, identified by its log position."""

    id: str
    block_number: int
    timestamp: datetime
    tx: str
    from_: str
    to: str
    amount: int

    @staticmethod
    def timestamp_from_ms(ms: int) -> datetime:
        return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


# === Manifest record ===


@dataclass(slots=True)
class BatchRecord:
    """A single batch execution record persisted to the live manifest."""

    from_block: int
    to_block: int
    status: Status
    records: int
    skipped: int
    error: str | None
    updated_at: float

    def to_json_line(self) -> str:
        """Serialize as a compact JSON line."""
        return json.dumps(asdict(self), separators=(",", ":")) + "\n"


# === Column buffer ===


@dataclass(slots=True)
class TransferColumns:
    """Columnar buffer of transfer records."""

    id: list[str] = field(default_factory=list)
    block_number: list[int] = field(default_factory=list)
    timestamp: list[datetime] = field(default_factory=list)
    tx: list[str] = field(default_factory=list)
    from_: list[str] = field(default_factory=list)
    to: list[str] = field(default_factory=list)
    amount: list[str] = field(default_factory=list)

    @staticmethod
    def from_records(records: list[TransferRecord]) -> TransferColumns:
        cols = TransferColumns()
        for r in records:
            cols.append(r)
        return cols

    def size(self) -> int:
        return len(self.id)

    def append(self, r: TransferRecord) -> None:
        self.id.append(r.id)
        self.block_number.append(r.block_number)
        self.timestamp.append(r.timestamp)
        self.tx.append(r.tx)
        self.from_.append(r.from_)
        self.to.append(r.to)
        self.amount.append(str(r.amount))

    def to_arrow_table(self) -> pa.Table:
        """Convert the buffer to an Arrow table (insertion order kept)."""
        arrays = [
            pa.array(self.id, type=pa.string()),
            pa.array(self.block_number, type=pa.uint64()),
            pa.array(self.timestamp, type=pa.timestamp("ms", tz="UTC")),
            pa.array(self.tx, type=pa.string()),
            pa.array(self.from_, type=pa.string()),
            pa.array(self.to, type=pa.string()),
            pa.array(self.amount, type=pa.string()),
        ]
        return pa.Table.from_arrays(arrays, schema=TRANSFER_SCHEMA)
