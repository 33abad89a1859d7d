"""JSONL journal of batch outcomes, read back by the resume logic."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from trind.core.models import BatchRecord


class LiveManifest:
    """One run's batch journal; each `append` is a single fsync'd line."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.touch(exist_ok=True)
        self._lock = asyncio.Lock()

    async def append(self, rec: BatchRecord) -> None:
        async with self._lock:
            await asyncio.to_thread(self._append_durable, rec.to_json_line())

    def _append_durable(self, line: str) -> None:
        with self.path.open("a") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
