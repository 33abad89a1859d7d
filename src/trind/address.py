"""Tron address codec.

Tron accounts are 20-byte ids, same as EVM accounts, but the chain-native
form is base58check over ``0x41 || account_id``. The ABI decoder works with
the EVM form (``0x`` + 40 lowercase hex). This module converts between the two:

- `to_internal("T...")` → ``"0x..."``
- `to_native("0x...")` → ``"T..."``
"""

from __future__ import annotations

import base58
from eth_utils import is_hex, remove_0x_prefix

from trind.constants import TRON_ADDRESS_PREFIX
from trind.core.errors import InvalidAddressError

ACCOUNT_ID_BYTES = 20


def normalize_hex_address(hex_address: str) -> str:
    """Return ``0x`` + 40 lowercase hex, accepting bare or checksum-cased input."""
    if not isinstance(hex_address, str):
        raise InvalidAddressError(f"Expected a hex string, got {type(hex_address).__name__}")
    body = remove_0x_prefix(hex_address.strip())
    if not body or not is_hex(body) or len(body) % 2:
        raise InvalidAddressError(f"Malformed hex address: {hex_address!r}")
    if len(body) != 2 * ACCOUNT_ID_BYTES:
        raise InvalidAddressError(
            f"Hex address must be {ACCOUNT_ID_BYTES} bytes, got {len(body) // 2}: {hex_address!r}"
        )
    return "0x" + body.lower()


def to_native(hex_address: str) -> str:
    """Encode a 20-byte hex address as a Tron base58check address."""
    account_id = bytes.fromhex(normalize_hex_address(hex_address)[2:])
    return base58.b58encode_check(TRON_ADDRESS_PREFIX + account_id).decode("ascii")


def to_internal(native_address: str) -> str:
    """Decode a Tron base58check address into ``0x``-prefixed lowercase hex."""
    if not isinstance(native_address, str) or not native_address:
        raise InvalidAddressError(f"Malformed Tron address: {native_address!r}")
    try:
        raw = base58.b58decode_check(native_address)
    except ValueError as e:
        raise InvalidAddressError(f"Malformed Tron address {native_address!r}: {e}") from e

    if len(raw) != ACCOUNT_ID_BYTES + 1:
        raise InvalidAddressError(f"Tron address must decode to 21 bytes, got {len(raw)}: {native_address!r}")
    if raw[:1] != TRON_ADDRESS_PREFIX:
        raise InvalidAddressError(f"Unexpected version byte 0x{raw[0]:02x} in {native_address!r}")
    return "0x" + raw[1:].hex()


def is_native_address(value: str) -> bool:
    try:
        to_internal(value)
    except InvalidAddressError:
        return False
    return True
