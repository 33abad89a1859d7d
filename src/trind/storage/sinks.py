"""Transfer sinks.

- `ParquetTransferSink`: one Parquet shard per batch, written atomically
- `MemoryTransferSink`: in-process store with staged commit

Both deduplicate by record id, so re-processing a block range is idempotent.
"""

from __future__ import annotations

import asyncio
import glob
import logging
import os
from collections.abc import Sequence
from pathlib import Path

import pyarrow.parquet as pq

from trind.core.errors import SinkError
from trind.core.models import TransferColumns, TransferRecord

logger = logging.getLogger(__name__)


class ShardsDir:
    """Directory of ``shard_NNNNN.parquet`` files."""

    def __init__(self, shards_dir: Path):
        self.shards_dir = Path(shards_dir)
        self.shards_dir.mkdir(exist_ok=True, parents=True)

    def shards_files_pattern(self) -> str:
        return (self.shards_dir / "shard_*.parquet").as_posix()

    def list_shards(self) -> list[str]:
        return sorted(glob.glob(self.shards_files_pattern()))

    def shard_path(self, idx: int) -> Path:
        return self.shards_dir / f"shard_{idx:05d}.parquet"


def _dedup(records: Sequence[TransferRecord], seen: set[str]) -> list[TransferRecord]:
    out: list[TransferRecord] = []
    batch_ids: set[str] = set()
    for r in records:
        if r.id in seen or r.id in batch_ids:
            continue
        batch_ids.add(r.id)
        out.append(r)
    return out


class ParquetTransferSink:
    """
    Parquet sink: every `insert` call writes exactly one new shard.

    - The shard is written to a temp file and renamed into place, so a failed
      batch leaves no visible rows.
    - Ids already stored in existing shards are skipped.
    """

    def __init__(self, shards_dir: ShardsDir | Path, *, codec: str = "zstd") -> None:
        self.shards_dir = shards_dir if isinstance(shards_dir, ShardsDir) else ShardsDir(shards_dir)
        self.codec = codec
        self._ids: set[str] = set()
        self.shard_idx = self._init_from_existing()
        self._lock = asyncio.Lock()

    def _init_from_existing(self) -> int:
        """Load stored ids and return the next free shard index."""
        existing = self.shards_dir.list_shards()
        for path in existing:
            self._ids.update(pq.read_table(path, columns=["id"]).column("id").to_pylist())
        if not existing:
            return 0
        last_idx = int(os.path.basename(existing[-1]).split("_")[1].split(".")[0])
        return last_idx + 1

    @property
    def stored_ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def _atomic_write(self, out_path: Path, cols: TransferColumns) -> Path:
        """Write Parquet atomically (tmp + replace)."""
        tmp = out_path.with_suffix(".tmp")
        try:
            pq.write_table(cols.to_arrow_table(), tmp, compression=self.codec)
            os.replace(tmp, out_path)
        except Exception as e:
            tmp.unlink(missing_ok=True)
            raise SinkError(f"Failed to write shard {out_path}: {e}") from e
        return out_path

    async def insert(self, records: Sequence[TransferRecord]) -> int:
        async with self._lock:
            fresh = _dedup(records, self._ids)
            if not fresh:
                return 0
            out_path = self.shards_dir.shard_path(self.shard_idx)
            cols = TransferColumns.from_records(fresh)
            await asyncio.to_thread(self._atomic_write, out_path, cols)
            self.shard_idx += 1
            self._ids.update(r.id for r in fresh)
            logger.debug("wrote %s (rows=%d)", out_path, len(fresh))
            return len(fresh)


class MemoryTransferSink:
    """
    In-memory sink with staged commit.

    Records are staged and only published once the whole batch is staged.
    `fail_after` makes the n-th staged record raise, to exercise atomicity.
    """

    def __init__(self, *, fail_after: int | None = None) -> None:
        self.rows: list[TransferRecord] = []
        self.batches: int = 0
        self._ids: set[str] = set()
        self._fail_after = fail_after

    async def insert(self, records: Sequence[TransferRecord]) -> int:
        staged: list[TransferRecord] = []
        for r in _dedup(records, self._ids):
            if self._fail_after is not None and len(staged) >= self._fail_after:
                raise SinkError(f"insert failed after {len(staged)} staged rows")
            staged.append(r)
        self.rows.extend(staged)
        self._ids.update(r.id for r in staged)
        self.batches += 1
        return len(staged)
