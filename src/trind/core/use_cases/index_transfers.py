from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from trind.address import to_native
from trind.core.config import IndexerConfig
from trind.core.errors import DecodeError, FilterMismatchError, TopicMismatchError
from trind.core.interfaces import (
    IBlockSource,
    IManifestRepository,
    ITransferObserver,
    ITransferSink,
)
from trind.core.models import BatchRecord, Block, RawLog, TransferRecord
from trind.decoding.decoder import TRANSFER_SPEC, decode_transfer
from trind.decoding.specs import EventSpec
from trind.decoding.utils import strip_0x

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IndexStats:
    """
    Aggregated counters for the indexing pipeline.

    - how many batches were persisted / failed
    - how many logs were seen, turned into records, or skipped
    - how many rows the sink actually stored (after dedup)
    """

    batches_ok: int = 0
    batches_failed: int = 0
    total_logs: int = 0
    records: int = 0
    stored: int = 0
    skipped_malformed: int = 0
    skipped_mismatch: int = 0
    last_block: int | None = None


@dataclass(kw_only=True)
class BuildResult:
    records: list[TransferRecord] = field(default_factory=list)
    logs: int = 0
    skipped_malformed: int = 0
    skipped_mismatch: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_malformed + self.skipped_mismatch


# ---------------------------------------------------------------------------
# Record builder
# ---------------------------------------------------------------------------


class RecordBuilder:
    """
    Turn a batch of blocks into ordered `TransferRecord` rows.

    Logs are visited in delivery order (block order, then log order within a
    block), which is the order records are returned in.
    """

    def __init__(self, config: IndexerConfig, spec: EventSpec = TRANSFER_SPEC) -> None:
        if spec.topic0 != config.topic0:
            raise ValueError(f"Event spec {spec.name} topic0 {spec.topic0} differs from configured {config.topic0}")
        self._config = config
        self._spec = spec
        self._contract = strip_0x(config.contract_hex)

    def _check_filter(self, log: RawLog) -> None:
        address = strip_0x(log.address).lower()
        if address != self._contract:
            raise FilterMismatchError(
                f"log address {address} is not the subscribed contract {self._contract}",
                log_id=log.id,
            )
        topic0 = "0x" + strip_0x(log.topics[0]).lower() if log.topics else None
        if topic0 != self._spec.topic0:
            raise TopicMismatchError(
                f"log topic0 {topic0} is not the subscribed {self._spec.name} topic {self._spec.topic0}",
                log_id=log.id,
            )

    def build_record(self, block: Block, log: RawLog) -> TransferRecord:
        """Decode one log and assemble its record; raises on any fault.

        The decoder checks topic0 before looking at data, so a foreign event
        without data is a topic mismatch, not a malformed Transfer.
        """
        if self._config.revalidate_filter:
            self._check_filter(log)

        decoded = decode_transfer(topics=log.topics, data=log.data, spec=self._spec, log_id=log.id)
        tx = block.get_transaction(log)

        return TransferRecord(
            id=log.id,
            block_number=block.header.height,
            timestamp=TransferRecord.timestamp_from_ms(block.header.timestamp),
            tx=tx.hash,
            from_=to_native(decoded.from_),
            to=to_native(decoded.to),
            amount=decoded.value,
        )

    def build(self, blocks: Sequence[Block]) -> BuildResult:
        """Build every record of the batch, applying the per-log error policy."""
        out = BuildResult()
        for block in blocks:
            for log in block.logs:
                out.logs += 1
                try:
                    out.records.append(self.build_record(block, log))
                except TopicMismatchError as e:
                    logger.error(
                        "Dropping log %s: %s (address=%s topics=%s)",
                        log.id,
                        e,
                        log.address,
                        list(log.topics),
                        extra={"log_id": log.id, "block_number": block.header.height},
                    )
                    out.skipped_mismatch += 1
                except DecodeError as e:
                    if not self._config.skip_malformed:
                        raise
                    logger.warning(
                        "Skipping malformed log %s: %s",
                        log.id,
                        e,
                        extra={"log_id": log.id, "block_number": block.header.height},
                    )
                    out.skipped_malformed += 1
        return out


# ---------------------------------------------------------------------------
# Batch record helpers
# ---------------------------------------------------------------------------


def _block_span(blocks: Sequence[Block]) -> tuple[int, int]:
    return blocks[0].header.height, blocks[-1].header.height


def _create_done_record(a: int, b: int, records: int, skipped: int) -> BatchRecord:
    return BatchRecord(
        from_block=a,
        to_block=b,
        status="done",
        records=records,
        skipped=skipped,
        error=None,
        updated_at=time.time(),
    )


def _create_failed_record(a: int, b: int, error: str) -> BatchRecord:
    return BatchRecord(
        from_block=a,
        to_block=b,
        status="failed",
        records=0,
        skipped=0,
        error=error,
        updated_at=time.time(),
    )


# ---------------------------------------------------------------------------
# Domain service – TransferIndexService
# ---------------------------------------------------------------------------


class TransferIndexService:
    """
    Domain service for the source → decode → build → sink pipeline.

    It depends only on abstract sources, sinks and observers. One batch is
    fully built before it is handed to the sink; batches never overlap.
    """

    def __init__(
        self,
        config: IndexerConfig,
        *,
        builder: RecordBuilder | None = None,
        observers: Sequence[ITransferObserver] = (),
    ) -> None:
        self._config = config
        self._builder = builder or RecordBuilder(config)
        self._observers = tuple(observers)

    async def _notify(self, records: Sequence[TransferRecord]) -> None:
        for observer in self._observers:
            try:
                await observer.on_batch(records)
            except Exception:
                logger.exception("Observer %s failed; ignoring", type(observer).__name__)

    async def process_batch(
        self,
        blocks: Sequence[Block],
        sink: ITransferSink,
        stats: IndexStats,
        manifest: IManifestRepository | None = None,
    ) -> list[TransferRecord]:
        """Build and persist one batch. Sink errors are recorded and re-raised."""
        if not blocks:
            return []
        a, b = _block_span(blocks)

        try:
            result = self._builder.build(blocks)
            stored = await sink.insert(result.records)
        except Exception as e:
            stats.batches_failed += 1
            logger.error("Batch %d-%d failed: %s", a, b, e, extra={"block_number": a})
            if manifest is not None:
                await manifest.append(_create_failed_record(a, b, f"{type(e).__name__}: {e}"))
            raise

        stats.batches_ok += 1
        stats.total_logs += result.logs
        stats.records += len(result.records)
        stats.stored += stored
        stats.skipped_malformed += result.skipped_malformed
        stats.skipped_mismatch += result.skipped_mismatch
        stats.last_block = b
        logger.info(
            "Blocks %d-%d: %d logs, %d transfers, %d stored, %d skipped",
            a, b, result.logs, len(result.records), stored, result.skipped,
        )

        if manifest is not None:
            await manifest.append(_create_done_record(a, b, len(result.records), result.skipped))

        if result.records:
            await self._notify(result.records)
        return result.records

    async def run(
        self,
        *,
        source: IBlockSource,
        sink: ITransferSink,
        manifest: IManifestRepository | None = None,
        from_block: int | None = None,
    ) -> IndexStats:
        """
        Consume the source until exhausted.

        Notes
        -----
        - No retries: source and sink failures surface to the caller.
        - A failed batch leaves nothing visible in the sink.
        """
        stats = IndexStats()
        start = self._config.start_block if from_block is None else from_block
        async for blocks in source.batches(from_block=start):
            await self.process_batch(blocks, sink, stats, manifest)
        return stats
