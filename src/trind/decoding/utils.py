"""Decoding utilities: strict ABI word access and typed parsers."""

from __future__ import annotations

from typing import Any

WORD = 32


def strip_0x(h: str) -> str:
    return h[2:] if h[:2].lower() == "0x" else h


def hex_to_bytes(h: str | None) -> bytes:
    """Decode bare or 0x-prefixed hex; raises ValueError on malformed input."""
    if not h:
        return b""
    return bytes.fromhex(strip_0x(h))


def word_at(data: bytes, i: int) -> bytes:
    """Return the i-th 32-byte ABI word; raises IndexError if out of range."""
    start = WORD * i
    end = start + WORD
    if end > len(data):
        raise IndexError(f"word {i} out of range for {len(data)} bytes of data")
    return data[start:end]


def parse_word(word: bytes, typ: str) -> Any:
    """Parse one 32-byte ABI word according to the declared static type."""
    if len(word) != WORD:
        raise ValueError(f"ABI word must be {WORD} bytes, got {len(word)}")
    if typ == "address":
        return "0x" + word[-20:].hex()
    if typ == "bool":
        return int.from_bytes(word, "big") != 0
    if typ.startswith("uint"):
        return int.from_bytes(word, "big", signed=False)
    if typ.startswith("int"):
        return int.from_bytes(word, "big", signed=True)
    if typ.startswith("bytes"):
        n = int(typ[5:])
        return "0x" + word[:n].hex()
    raise ValueError(f"Unsupported ABI type: {typ}")


def parse_topic_field(topic_hex: str, typ: str) -> Any:
    """Parse one indexed topic (a 32-byte word in hex) according to its type."""
    word = bytes.fromhex(strip_0x(topic_hex))
    return parse_word(word, typ)
