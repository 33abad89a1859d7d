from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from trind.constants import TRANSFER_T0, USDT_ADDRESS_HEX
from trind.core.config import IndexerConfig
from trind.core.models import Block, BlockHeader, RawLog, Transaction, format_log_id

ADDR_A = "0x" + "aa" * 20
ADDR_B = "0x" + "bb" * 20


def pad_topic(hex_address: str) -> str:
    return "0" * 24 + hex_address.removeprefix("0x")


def uint_word(value: int) -> str:
    return value.to_bytes(32, "big").hex()


@pytest.fixture
def config(tmp_path) -> IndexerConfig:
    return IndexerConfig(out_root=tmp_path / "data")


@pytest.fixture
def make_log() -> Callable[..., RawLog]:
    def _make(
        height: int,
        log_index: int,
        *,
        value: int = 100,
        from_: str = ADDR_A,
        to: str = ADDR_B,
        tx_index: int = 0,
        address: str = USDT_ADDRESS_HEX,
        topic0: str = TRANSFER_T0,
        data: str | None = None,
    ) -> RawLog:
        return RawLog(
            id=format_log_id(height, f"{height:064x}", log_index),
            block_number=height,
            log_index=log_index,
            transaction_index=tx_index,
            address=address.removeprefix("0x"),
            topics=(topic0.removeprefix("0x"), pad_topic(from_), pad_topic(to)),
            data=uint_word(value) if data is None else data,
        )

    return _make


@pytest.fixture
def make_block() -> Callable[..., Block]:
    def _make(height: int, logs: list[RawLog], *, timestamp: int | None = None) -> Block:
        txs = sorted({log.transaction_index for log in logs})
        return Block(
            header=BlockHeader(
                height=height,
                hash=f"{height:064x}",
                timestamp=timestamp if timestamp is not None else 1_700_000_000_000 + height * 3_000,
            ),
            logs=logs,
            transactions=[Transaction(transaction_index=i, hash=f"{height:04x}{i:060x}") for i in txs],
        )

    return _make


@pytest.fixture
def mock_balance_client():
    client = AsyncMock()
    client.balance_of = AsyncMock(return_value=1_000)
    return client
