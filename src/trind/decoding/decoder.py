"""Event decoder.

Translates one raw log (topics + data) into named, typed values according to
a static `EventSpec`, and into a `DecodedTransfer` for Transfer events.

The decoder is pure: it never logs and never skips. Every problem is raised:
- `TopicMismatchError` when topic0 is not the EventSpec's signature hash
- `DecodeError` when topics or data are missing, malformed or too short
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from trind.abi_events import get_event_spec_from_abi, load_bundled_abi
from trind.core.errors import DecodeError, TopicMismatchError
from trind.core.models import DecodedTransfer
from trind.decoding.specs import EventSpec
from trind.decoding.utils import WORD, hex_to_bytes, parse_topic_field, parse_word, strip_0x, word_at

TRANSFER_SPEC: EventSpec = get_event_spec_from_abi(load_bundled_abi("erc20"), "Transfer")


def _normalize_topic(t: str) -> str:
    return "0x" + strip_0x(t).lower()


def decode_event(
    *,
    topics: Sequence[str],
    data: str | bytes | None,
    spec: EventSpec,
    log_id: str | None = None,
) -> dict[str, Any]:
    """Decode raw log fields into ``{param_name: value}`` in declaration order."""
    if not topics:
        raise TopicMismatchError(f"{spec.name}: log has no topics", log_id=log_id)
    topic0 = _normalize_topic(topics[0])
    if topic0 != spec.topic0:
        raise TopicMismatchError(
            f"{spec.name}: topic0 {topic0} does not match {spec.topic0}", log_id=log_id
        )

    if isinstance(data, bytes):
        data_bytes = data
    else:
        try:
            data_bytes = hex_to_bytes(data)
        except ValueError as e:
            raise DecodeError(f"{spec.name}: malformed data hex: {e}", log_id=log_id) from e

    need = WORD * spec.data_words
    if spec.data_words and len(data_bytes) < need:
        raise DecodeError(
            f"{spec.name}: data holds {len(data_bytes)} bytes, {need} required", log_id=log_id
        )

    values: dict[str, Any] = {}
    for tf in spec.topic_fields:
        if tf.index >= len(topics):
            raise DecodeError(
                f"{spec.name}: missing topic {tf.index} for indexed field {tf.name!r}", log_id=log_id
            )
        topic = strip_0x(topics[tf.index])
        if len(topic) != 2 * WORD:
            raise DecodeError(f"{spec.name}: topic {tf.index} is not a 32-byte word", log_id=log_id)
        try:
            values[tf.name] = parse_topic_field(topic, tf.type)
        except ValueError as e:
            raise DecodeError(f"{spec.name}.{tf.name}: {e}", log_id=log_id) from e

    for df in spec.data_fields:
        values[df.name] = parse_word(word_at(data_bytes, df.word_index), df.type)

    return values


def decode_transfer(
    *,
    topics: Sequence[str],
    data: str | bytes | None,
    spec: EventSpec = TRANSFER_SPEC,
    log_id: str | None = None,
) -> DecodedTransfer:
    """Decode a Transfer(from, to, value) log into a typed `DecodedTransfer`."""
    values = decode_event(topics=topics, data=data, spec=spec, log_id=log_id)
    names = spec.field_names
    if len(names) != 3:
        raise DecodeError(f"{spec.name}: expected 3 parameters, spec declares {len(names)}", log_id=log_id)
    from_, to, value = (values[n] for n in names)

    if not isinstance(from_, str) or not isinstance(to, str):
        raise DecodeError(f"{spec.name}: from/to must decode to addresses", log_id=log_id)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise DecodeError(f"{spec.name}: value must decode to an unsigned integer", log_id=log_id)

    return DecodedTransfer(from_=from_, to=to, value=value)
