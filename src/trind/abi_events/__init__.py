import json
from collections.abc import Iterable, Sequence
from importlib import resources
from pathlib import Path
from typing import Any, Literal

from eth_utils.abi import event_signature_to_log_topic
from pydantic import BaseModel

from trind.decoding.specs import DataFieldSpec, EventRegistry, EventSpec, TopicFieldSpec


class AbiInput(BaseModel):
    indexed: bool
    internalType: str | None = None
    name: str
    type: str


class AbiEvent(BaseModel):
    anonymous: bool = False
    inputs: Sequence[AbiInput]
    name: str
    type: Literal["event"]


def get_event_signature(event: AbiEvent):
    return f"{event.name}({','.join(event_input.type for event_input in event.inputs)})"


def get_event_topic0(event: AbiEvent):
    return "0x" + event_signature_to_log_topic(get_event_signature(event)).hex()


def get_event_spec(event: AbiEvent) -> EventSpec:
    indexed = [i for i in event.inputs if i.indexed]
    not_indexed = [i for i in event.inputs if not i.indexed]
    return EventSpec(
        topic0=get_event_topic0(event),
        name=event.name,
        topic_fields=tuple(TopicFieldSpec(i.name, idx + 1, i.type) for idx, i in enumerate(indexed)),
        data_fields=tuple(DataFieldSpec(i.name, idx, i.type) for idx, i in enumerate(not_indexed)),
    )


AbiJson = Iterable[dict[str, Any]]
AbiSpec = AbiJson | Path


def _load_abi(abi: AbiSpec) -> AbiJson:
    if isinstance(abi, Path):
        return json.loads(abi.read_text())
    return abi


def load_bundled_abi(name: str) -> AbiJson:
    """Load an ABI shipped in ``trind/abi`` (e.g. ``"erc20"``)."""
    return json.loads(resources.files("trind.abi").joinpath(f"{name}.json").read_text())


def get_events_from_abi(abi: AbiSpec) -> dict[str, AbiEvent]:
    abi = _load_abi(abi)
    return {entry["name"]: AbiEvent.model_validate(entry) for entry in abi if entry["type"] == "event"}


def make_event_registry_from_abi(abi: AbiSpec) -> EventRegistry:
    reg: EventRegistry = {}
    for event in get_events_from_abi(abi).values():
        spec = get_event_spec(event)
        reg[spec.topic0] = spec
    return reg


def get_event_spec_from_abi(abi: AbiSpec, name: str) -> EventSpec:
    events = get_events_from_abi(abi)
    if name not in events:
        raise KeyError(f"ABI declares no event named {name!r}")
    return get_event_spec(events[name])
