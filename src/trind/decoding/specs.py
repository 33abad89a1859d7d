"""Event specification primitives.

Defines lightweight dataclasses describing how to decode one event:
- `TopicFieldSpec` / `DataFieldSpec`: typed sources for indexed topics / data words
- `EventSpec`: the static descriptor (topic0 + ordered parameters)
"""

from __future__ import annotations

from dataclasses import dataclass

# Types that fit in a single 32-byte word; dynamic types are not supported.
_STATIC_PREFIXES = ("uint", "int", "bytes")
_STATIC_TYPES = ("address", "bool")


def is_static_type(typ: str) -> bool:
    if typ in _STATIC_TYPES:
        return True
    if typ == "bytes":
        return False
    return typ.startswith(_STATIC_PREFIXES) and "[" not in typ


@dataclass(frozen=True)
class TopicFieldSpec:
    """Describe one indexed topic field (by 0-based topic index and ABI type)."""

    name: str
    index: int
    type: str  # e.g., "address", "uint256", "bytes32"


@dataclass(frozen=True)
class DataFieldSpec:
    """Describe one 32-byte ABI word in the data section (0-based word index)."""

    name: str
    word_index: int
    type: str  # e.g., "address", "uint256"


@dataclass(frozen=True)
class EventSpec:
    """Static event descriptor: signature hash and ordered parameters."""

    topic0: str
    name: str
    topic_fields: tuple[TopicFieldSpec, ...]
    data_fields: tuple[DataFieldSpec, ...]

    def __post_init__(self) -> None:
        t0 = self.topic0.lower()
        if not t0.startswith("0x"):
            t0 = "0x" + t0
        if len(t0) != 66:
            raise ValueError(f"topic0 must be 32 bytes: {self.topic0!r}")
        object.__setattr__(self, "topic0", t0)
        object.__setattr__(self, "topic_fields", tuple(self.topic_fields))
        object.__setattr__(self, "data_fields", tuple(self.data_fields))

        for f in (*self.topic_fields, *self.data_fields):
            if not is_static_type(f.type):
                raise ValueError(f"{self.name}.{f.name}: dynamic type {f.type!r} is not supported")
        for tf in self.topic_fields:
            if not 1 <= tf.index <= 3:
                raise ValueError(f"{self.name}.{tf.name}: topic index must be in [1, 3]")

    @property
    def data_words(self) -> int:
        """Number of 32-byte words the data section must hold."""
        if not self.data_fields:
            return 0
        return max(df.word_index for df in self.data_fields) + 1

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in (*self.topic_fields, *self.data_fields)]


# Registry keyed by topic0 (lowercased 0x-hex).
EventRegistry = dict[str, EventSpec]
