"""Indexing orchestrator: source → decode → build → sink.

`run_indexer(...)` is the application entry point:
   - Resolves where to resume from the manifest directory.
   - Wires the domain service with the injected source, sink and observers.
   - Does NOT instantiate sources or sinks; `open_parquet_outputs(...)`
     builds the standard on-disk layout for CLI usage.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from trind.core.config import IndexerConfig
from trind.core.interfaces import IBalanceClient, IBlockSource, ITransferObserver, ITransferSink
from trind.core.use_cases.index_transfers import IndexStats, TransferIndexService
from trind.observers import BalanceObserver
from trind.orchestration.utils import load_done_coverage, resume_height
from trind.storage.manifest import LiveManifest
from trind.storage.sinks import ParquetTransferSink, ShardsDir

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class OutputLayout:
    """On-disk layout for one contract/topic pair.

    <out_root>/<contract>__<topic0[:10]>/
        manifests/run_*.jsonl
        shards/shard_*.parquet
    """

    key_dir: Path
    manifests_dir: Path
    shards_dir: ShardsDir
    run_basename: str


@dataclass(kw_only=True)
class IndexOutput:
    """High-level output of the orchestrator."""

    stats: IndexStats
    from_block: int


def setup_layout(config: IndexerConfig) -> OutputLayout:
    key_dir = config.out_root / f"{config.contract_address}__{config.topic0[:10]}"
    manifests_dir = key_dir / "manifests"
    manifests_dir.mkdir(exist_ok=True, parents=True)
    timestamp = time.strftime('%Y%m%d_%H%M%S', time.gmtime())
    return OutputLayout(
        key_dir=key_dir,
        manifests_dir=manifests_dir,
        shards_dir=ShardsDir(key_dir / "shards"),
        run_basename=f"run_{timestamp}_{config.start_block}.jsonl",
    )


def open_parquet_outputs(layout: OutputLayout) -> tuple[ParquetTransferSink, LiveManifest]:
    """Create the Parquet sink and this run's live manifest."""
    sink = ParquetTransferSink(layout.shards_dir)
    manifest = LiveManifest(layout.manifests_dir / layout.run_basename)
    return sink, manifest


async def run_indexer(
    *,
    config: IndexerConfig,
    source: IBlockSource,
    sink: ITransferSink,
    layout: OutputLayout | None = None,
    manifest: LiveManifest | None = None,
    observers: Sequence[ITransferObserver] = (),
    balance_client: IBalanceClient | None = None,
) -> IndexOutput:
    """Resume from previous runs' manifests (if a layout is given) and index.

    A `balance_client` adds a `BalanceObserver` bounded by
    `config.observer_timeout_s`.
    """
    from_block = config.start_block
    if layout is not None:
        covered = load_done_coverage(layout.manifests_dir, exclude_basename=layout.run_basename)
        from_block = resume_height(config.start_block, covered)
        if from_block > config.start_block:
            logger.info("Resuming at block %d (configured start %d)", from_block, config.start_block)

    observers = list(observers)
    if balance_client is not None:
        observers.append(BalanceObserver.from_config(balance_client, config))

    service = TransferIndexService(config, observers=observers)
    stats = await service.run(source=source, sink=sink, manifest=manifest, from_block=from_block)
    return IndexOutput(stats=stats, from_block=from_block)
