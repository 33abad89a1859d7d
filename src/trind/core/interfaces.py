from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import List, Protocol, runtime_checkable

from trind.core.models import BatchRecord, Block, TransferRecord


# ---------------------------------------------------------------------------
# IBlockSource
# ---------------------------------------------------------------------------

@runtime_checkable
class IBlockSource(Protocol):
    """
    Source feed of blocks, already filtered by contract address and topic0.

    Domain expectations:
    - Batches arrive in ascending height order, logs in log-index order.
    - Retry / backoff / reorg handling happen behind this interface.
    """

    def batches(self, *, from_block: int = 0) -> AsyncIterator[List[Block]]:
        """
        Yield ordered batches of blocks starting at `from_block`.

        Implementations:
        - NDJSON dump reader (`NdjsonBlockSource`)
        - In-memory provider for testing (`MemoryBlockSource`)
        - Archive / gateway client
        """
        ...


# ---------------------------------------------------------------------------
# ITransferSink
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransferSink(Protocol):
    """
    Durable store for transfer records.

    Domain expectations:
    - `insert` is transactional per call: either every record of the batch
      becomes visible or none does.
    - Records are stored in the order given; no reordering on insert.
    - Deduplication by `TransferRecord.id` is the sink's responsibility.
    """

    async def insert(self, records: Sequence[TransferRecord]) -> int:
        """Persist one batch; return the number of newly stored rows."""
        ...


# ---------------------------------------------------------------------------
# IManifestRepository
# ---------------------------------------------------------------------------

@runtime_checkable
class IManifestRepository(Protocol):
    """Append-only journal of batch executions (started/done/failed)."""

    async def append(self, record: BatchRecord) -> None:
        ...


# ---------------------------------------------------------------------------
# IBalanceClient
# ---------------------------------------------------------------------------

@runtime_checkable
class IBalanceClient(Protocol):
    """
    Read-only token contract client.

    Only the current chain head can be queried; historical heights are not
    supported by the underlying transport.
    """

    async def balance_of(self, address: str) -> int:
        """Return the token balance of a native (base58) address at head."""
        ...


# ---------------------------------------------------------------------------
# ITransferObserver
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransferObserver(Protocol):
    """
    Optional best-effort consumer of persisted batches.

    Failures are logged by the caller and never affect indexing.
    """

    async def on_batch(self, records: Sequence[TransferRecord]) -> None:
        ...
