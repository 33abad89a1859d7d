import asyncio
import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from trind.core.config import IndexerConfig
from trind.core.models import TransferRecord
from trind.observers import BalanceObserver

RECORD = TransferRecord(
    id="0000000010-00000-000000",
    block_number=10,
    timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    tx="ab" * 32,
    from_="T9yD14Nj9j7xAB4dbGeiX9h8unkKHxuWwb",
    to="TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t",
    amount=100,
)


@pytest.mark.asyncio
async def test_logs_balance(mock_balance_client, caplog):
    with caplog.at_level(logging.INFO, logger="trind"):
        await BalanceObserver(mock_balance_client).on_batch([RECORD])

    mock_balance_client.balance_of.assert_awaited_once_with(RECORD.to)
    assert "head balance 1000" in caplog.text


@pytest.mark.asyncio
async def test_errors_are_swallowed(caplog):
    client = AsyncMock()
    client.balance_of = AsyncMock(side_effect=ConnectionError("down"))

    with caplog.at_level(logging.WARNING, logger="trind"):
        await BalanceObserver(client).on_batch([RECORD, RECORD])

    assert client.balance_of.await_count == 2
    assert "failed: down" in caplog.text


@pytest.mark.asyncio
async def test_slow_query_is_bounded_by_timeout(caplog):
    async def _slow(_address):
        await asyncio.sleep(10)
        return 1

    client = AsyncMock()
    client.balance_of = _slow

    with caplog.at_level(logging.WARNING, logger="trind"):
        await asyncio.wait_for(BalanceObserver(client, timeout_s=0.05).on_batch([RECORD]), 2)

    assert "timed out" in caplog.text


@pytest.mark.asyncio
async def test_from_config_applies_configured_timeout(caplog):
    async def _slow(_address):
        await asyncio.sleep(10)
        return 1

    client = AsyncMock()
    client.balance_of = _slow
    observer = BalanceObserver.from_config(client, IndexerConfig(observer_timeout_s=0.3))

    with caplog.at_level(logging.WARNING, logger="trind"):
        await asyncio.wait_for(observer.on_batch([RECORD]), 5)

    assert "timed out after 0.3s" in caplog.text
