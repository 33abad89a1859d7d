import json

import pytest

from conftest import ADDR_A, ADDR_B, pad_topic, uint_word
from trind.constants import TRANSFER_T0, USDT_ADDRESS_HEX
from trind.sources.blocks import NdjsonBlockSource


def _wire_block(height: int, n_logs: int = 1) -> dict:
    return {
        "header": {"height": height, "hash": f"{height:064X}", "timestamp": 1_700_000_000_000 + height},
        "logs": [
            {
                "logIndex": i,
                "transactionIndex": 0,
                "address": USDT_ADDRESS_HEX[2:].upper(),
                "topics": [TRANSFER_T0[2:], pad_topic(ADDR_A), pad_topic(ADDR_B)],
                "data": uint_word(i + 1),
            }
            for i in reversed(range(n_logs))
        ],
        "transactions": [{"transactionIndex": 0, "hash": "0x" + "ab" * 32}],
    }


def _write(path, blocks):
    path.write_text("\n".join(json.dumps(b) for b in blocks) + "\n\n")
    return path


async def _collect(source, **kw):
    return [batch async for batch in source.batches(**kw)]


@pytest.mark.asyncio
async def test_batches_group_blocks(tmp_path):
    path = _write(tmp_path / "blocks.ndjson", [_wire_block(h) for h in (10, 11, 12, 20, 25)])

    batches = await _collect(NdjsonBlockSource(path, batch_blocks=2))

    assert [[b.header.height for b in batch] for batch in batches] == [[10, 11], [12, 20], [25]]


@pytest.mark.asyncio
async def test_wire_fields_are_normalized(tmp_path):
    path = _write(tmp_path / "blocks.ndjson", [_wire_block(10, n_logs=2)])

    (batch,) = await _collect(NdjsonBlockSource(path))
    block = batch[0]

    assert block.header.hash == f"{10:064x}"
    assert [log.log_index for log in block.logs] == [0, 1]
    assert block.logs[0].address == USDT_ADDRESS_HEX[2:]
    assert block.logs[0].id == f"0000000010-{block.header.hash[:5]}-000000"
    assert block.transactions[0].hash == "ab" * 32
    assert block.get_transaction(block.logs[1]).hash == "ab" * 32


@pytest.mark.asyncio
async def test_from_block_skips_lower_heights(tmp_path):
    path = _write(tmp_path / "blocks.ndjson", [_wire_block(h) for h in (10, 11, 12)])

    batches = await _collect(NdjsonBlockSource(path, batch_blocks=10), from_block=11)

    assert [b.header.height for b in batches[0]] == [11, 12]


@pytest.mark.asyncio
async def test_non_ascending_heights_are_rejected(tmp_path):
    path = _write(tmp_path / "blocks.ndjson", [_wire_block(11), _wire_block(10)])

    with pytest.raises(ValueError, match="not above"):
        await _collect(NdjsonBlockSource(path))


@pytest.mark.asyncio
async def test_invalid_block_line(tmp_path):
    path = tmp_path / "blocks.ndjson"
    path.write_text('{"header": {"height": "x"}}\n')

    with pytest.raises(ValueError, match="blocks.ndjson:1"):
        await _collect(NdjsonBlockSource(path))


def test_batch_blocks_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        NdjsonBlockSource(tmp_path / "x.ndjson", batch_blocks=0)
