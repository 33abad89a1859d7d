import pytest

from trind.abi_events import (
    get_event_spec_from_abi,
    get_event_topic0,
    get_events_from_abi,
    load_bundled_abi,
    make_event_registry_from_abi,
)
from trind.constants import TRANSFER_SIGNATURE, TRANSFER_T0
from trind.decoding.decoder import TRANSFER_SPEC
from trind.decoding.registry_builder import event_spec_from_signature, make_registry


def test_make_registry_from_signatures():
    registry = make_registry([
        TRANSFER_SIGNATURE,
        "Approval(address indexed owner, address indexed spender, uint256 value)",
    ])
    assert len(registry) == 2
    assert TRANSFER_T0 in registry


def test_signature_fields_are_split_by_indexed():
    spec = event_spec_from_signature(TRANSFER_SIGNATURE)
    assert [(f.name, f.index, f.type) for f in spec.topic_fields] == [("from", 1, "address"), ("to", 2, "address")]
    assert [(f.name, f.word_index) for f in spec.data_fields] == [("value", 0)]
    assert spec.data_words == 1


def test_uint_alias_hashes_as_uint256():
    spec = event_spec_from_signature("Transfer(address indexed from, address indexed to, uint value)")
    assert spec.topic0 == TRANSFER_T0


def test_dynamic_types_are_rejected():
    with pytest.raises(ValueError):
        event_spec_from_signature("Memo(address indexed who, string text)")


def test_invalid_signature():
    with pytest.raises(ValueError):
        event_spec_from_signature("Transfer address from")


def test_bundled_erc20_abi_registry():
    abi = load_bundled_abi("erc20")
    registry = make_event_registry_from_abi(abi)
    events = get_events_from_abi(abi)

    assert len(registry) == 2  # Approval + Transfer; functions are ignored
    assert set(registry) == {get_event_topic0(e) for e in events.values()}


def test_transfer_spec_is_loaded_from_bundled_abi():
    assert get_event_spec_from_abi(load_bundled_abi("erc20"), "Transfer") == TRANSFER_SPEC
    assert TRANSFER_SPEC.topic0 == TRANSFER_T0
    assert TRANSFER_SPEC.field_names == ["from", "to", "value"]


def test_abi_transfer_spec_equals_signature_spec():
    assert event_spec_from_signature(TRANSFER_SIGNATURE) == TRANSFER_SPEC


def test_abi_unknown_event():
    with pytest.raises(KeyError):
        get_event_spec_from_abi(load_bundled_abi("erc20"), "Mint")


def test_abi_from_path(tmp_path):
    import json

    path = tmp_path / "erc20.json"
    path.write_text(json.dumps(load_bundled_abi("erc20")))
    assert TRANSFER_T0 in make_event_registry_from_abi(path)
