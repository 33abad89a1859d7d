from __future__ import annotations

# Tron USDT (TRC-20) contract
USDT_ADDRESS = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"
USDT_ADDRESS_HEX = "0xa614f803b6fd780986a42c78ec9c7f77e6ded13c"

# topic0 constants (lowercase, 0x-prefixed)
TRANSFER_T0 = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
TRANSFER_SIGNATURE = "Transfer(address indexed from, address indexed to, uint256 value)"

# Subsquid Network gateway for Tron mainnet
TRON_GATEWAY_URL = "https://v2.archive.subsquid.io/network/tron-mainnet"

# Version byte prepended to 20-byte account ids in base58check addresses
TRON_ADDRESS_PREFIX = b"\x41"
