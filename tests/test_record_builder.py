import logging
from datetime import datetime, timezone

import pytest

from trind.address import to_native
from trind.core.config import IndexerConfig
from trind.core.errors import DecodeError, FilterMismatchError, InvalidAddressError, TopicMismatchError
from trind.core.use_cases.index_transfers import RecordBuilder
from trind.decoding.registry_builder import event_spec_from_signature

from conftest import ADDR_A, ADDR_B


def test_end_to_end_single_transfer(config, make_log, make_block):
    block = make_block(10, [make_log(10, 2, value=100)], timestamp=1_700_000_000_000)

    result = RecordBuilder(config).build([block])

    assert len(result.records) == 1
    rec = result.records[0]
    assert rec.amount == 100
    assert rec.from_ == to_native(ADDR_A)
    assert rec.to == to_native(ADDR_B)
    assert rec.from_.startswith("T")
    assert rec.block_number == 10
    assert rec.id == block.logs[0].id
    assert rec.tx == block.transactions[0].hash
    assert rec.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


def test_records_keep_delivery_order(config, make_log, make_block):
    blocks = [
        make_block(10, [make_log(10, 2, value=1), make_log(10, 5, value=2)]),
        make_block(11, [make_log(11, 0, value=3)]),
    ]

    records = RecordBuilder(config).build(blocks).records

    assert [(r.block_number, r.amount) for r in records] == [(10, 1), (10, 2), (11, 3)]
    assert [r.id for r in records] == sorted(r.id for r in records)


def test_malformed_log_aborts_batch_by_default(config, make_log, make_block):
    block = make_block(10, [make_log(10, 0), make_log(10, 1, data="00" * 10)])

    with pytest.raises(DecodeError) as exc:
        RecordBuilder(config).build([block])
    assert exc.value.log_id == block.logs[1].id


def test_missing_data_aborts_batch(config, make_log, make_block):
    block = make_block(10, [make_log(10, 0, data="")])
    with pytest.raises(DecodeError):
        RecordBuilder(config).build([block])


def test_malformed_log_skipped_when_configured(make_log, make_block, caplog):
    config = IndexerConfig(skip_malformed=True)
    block = make_block(10, [make_log(10, 0, value=5), make_log(10, 1, data="00" * 10), make_log(10, 2, value=6)])

    with caplog.at_level(logging.WARNING, logger="trind"):
        result = RecordBuilder(config).build([block])

    assert [r.amount for r in result.records] == [5, 6]
    assert result.skipped_malformed == 1
    assert "Skipping malformed log" in caplog.text


def test_topic_mismatch_is_logged_and_skipped(config, make_log, make_block, caplog):
    block = make_block(10, [make_log(10, 0, topic0="0x" + "11" * 32), make_log(10, 1, value=9)])

    with caplog.at_level(logging.ERROR, logger="trind"):
        result = RecordBuilder(config).build([block])

    assert [r.amount for r in result.records] == [9]
    assert result.skipped_mismatch == 1
    assert block.logs[0].id in caplog.text


@pytest.mark.parametrize("revalidate", [True, False])
def test_foreign_topic_without_data_is_skipped_not_malformed(revalidate, make_log, make_block):
    config = IndexerConfig(revalidate_filter=revalidate, skip_malformed=True)
    block = make_block(10, [make_log(10, 0, topic0="0x" + "11" * 32, data=""), make_log(10, 1, value=9)])

    result = RecordBuilder(config).build([block])

    assert [r.amount for r in result.records] == [9]
    assert result.skipped_mismatch == 1
    assert result.skipped_malformed == 0


def test_foreign_topic_without_data_does_not_abort_batch(config, make_log, make_block):
    block = make_block(10, [make_log(10, 0, topic0="0x" + "11" * 32, data=""), make_log(10, 1, value=9)])

    result = RecordBuilder(config).build([block])

    assert len(result.records) == 1
    assert result.skipped_mismatch == 1


def test_revalidation_raises_topic_mismatch(config, make_log, make_block):
    block = make_block(10, [make_log(10, 0, topic0="0x" + "11" * 32)])

    with pytest.raises(TopicMismatchError) as exc:
        RecordBuilder(config).build_record(block, block.logs[0])
    assert not isinstance(exc.value, FilterMismatchError)
    assert exc.value.log_id == block.logs[0].id


def test_foreign_contract_is_filtered_when_revalidating(config, make_log, make_block):
    block = make_block(10, [make_log(10, 0, address="0x" + "cc" * 20), make_log(10, 1)])

    result = RecordBuilder(config).build([block])

    assert len(result.records) == 1
    assert result.skipped_mismatch == 1


def test_foreign_contract_is_trusted_without_revalidation(make_log, make_block):
    config = IndexerConfig(revalidate_filter=False)
    block = make_block(10, [make_log(10, 0, address="0x" + "cc" * 20)])

    assert len(RecordBuilder(config).build([block]).records) == 1


def test_missing_transaction_is_fatal(config, make_log, make_block):
    block = make_block(10, [make_log(10, 0)])
    block.transactions.clear()

    with pytest.raises(LookupError):
        RecordBuilder(config).build([block])


def test_invalid_address_propagates(config, make_log, make_block, monkeypatch):
    def _bad(_hex):
        raise InvalidAddressError("corrupt")

    monkeypatch.setattr("trind.core.use_cases.index_transfers.to_native", _bad)
    block = make_block(10, [make_log(10, 0)])

    with pytest.raises(InvalidAddressError):
        RecordBuilder(config).build([block])


def test_spec_must_match_configured_topic(config):
    spec = event_spec_from_signature("Approval(address indexed owner, address indexed spender, uint256 value)")
    with pytest.raises(ValueError):
        RecordBuilder(config, spec)


def test_empty_batch(config):
    result = RecordBuilder(config).build([])
    assert result.records == []
    assert result.logs == 0
