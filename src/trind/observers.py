"""Best-effort observers of persisted transfer batches."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from trind.core.config import IndexerConfig
from trind.core.interfaces import IBalanceClient
from trind.core.models import TransferRecord

logger = logging.getLogger(__name__)


class BalanceObserver:
    """Log the head balance of each transfer recipient.

    Every query is bounded by `timeout_s`; errors and timeouts are logged and
    dropped. Balances are read at the chain head, not at the transfer's block.
    """

    def __init__(self, client: IBalanceClient, *, timeout_s: float = 5.0) -> None:
        self._client = client
        self._timeout_s = timeout_s

    @classmethod
    def from_config(cls, client: IBalanceClient, config: IndexerConfig) -> BalanceObserver:
        return cls(client, timeout_s=config.observer_timeout_s)

    async def _query(self, record: TransferRecord) -> int | None:
        try:
            return await asyncio.wait_for(self._client.balance_of(record.to), self._timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                "balanceOf(%s) timed out after %.1fs", record.to, self._timeout_s,
                extra={"log_id": record.id, "address": record.to},
            )
        except Exception as e:
            logger.warning(
                "balanceOf(%s) failed: %s", record.to, e,
                extra={"log_id": record.id, "address": record.to},
            )
        return None

    async def on_batch(self, records: Sequence[TransferRecord]) -> None:
        for record in records:
            balance = await self._query(record)
            if balance is not None:
                logger.info(
                    "Transfer %s: %s received %d, head balance %d",
                    record.id, record.to, record.amount, balance,
                    extra={"log_id": record.id, "address": record.to},
                )
