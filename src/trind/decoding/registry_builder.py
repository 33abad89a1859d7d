"""Build event specs from Solidity event signatures.

- `event_spec_from_signature()` parses e.g.
  ``"Transfer(address indexed from, address indexed to, uint256 value)"``
- `make_registry()` builds an `EventRegistry` from one or many signatures
"""

from __future__ import annotations

from eth_utils import keccak

from .specs import DataFieldSpec, EventRegistry, EventSpec, TopicFieldSpec


def _split_params(params_str: str) -> list[str]:
    """Top-level comma split of a parameter list; parenthesised tuples stay whole."""
    parts: list[str] = []
    depth = start = 0
    for pos, ch in enumerate(params_str):
        depth += {"(": 1, ")": -1}.get(ch, 0)
        if ch == "," and depth == 0:
            parts.append(params_str[start:pos])
            start = pos + 1
    parts.append(params_str[start:])
    return [p.strip() for p in parts if p.strip()]


def _parse_param(p: str, fallback_name: str) -> tuple[str, str, bool]:
    """Parse one parameter fragment into (name, abi_type, indexed)."""
    s = ' '.join(p.strip().split())
    indexed = False
    if ' indexed ' in f' {s} ':
        indexed = True
        s = f' {s} '.replace(' indexed ', ' ').strip()
    tokens = s.split()
    if len(tokens) == 1:
        return (fallback_name, tokens[0], indexed)
    # Last token is the name, the rest is the type
    return (tokens[-1], ' '.join(tokens[:-1]), indexed)


def canonical_type(abi_type: str) -> str:
    """Expand ABI aliases (`uint` → `uint256`) for topic0 hashing."""
    if abi_type == "uint":
        return "uint256"
    if abi_type == "int":
        return "int256"
    return abi_type


def event_topic0(canonical_signature: str) -> str:
    return "0x" + keccak(text=canonical_signature).hex()


def event_spec_from_signature(signature: str) -> EventSpec:
    """Build an EventSpec from a Solidity event signature string."""
    sig = signature.strip()
    open_paren = sig.find('(')
    close_paren = sig.rfind(')')
    if open_paren <= 0 or close_paren == -1 or close_paren < open_paren:
        raise ValueError(f"Invalid event signature: {signature}")
    name = sig[:open_paren].strip()
    params_str = sig[open_paren + 1 : close_paren].strip()

    parsed = [
        _parse_param(part, fallback_name=f"arg{i}")
        for i, part in enumerate(_split_params(params_str))
    ]
    indexed_params = [(n, canonical_type(t)) for (n, t, ix) in parsed if ix]
    data_params = [(n, canonical_type(t)) for (n, t, ix) in parsed if not ix]

    canonical_types = ','.join(canonical_type(t) for (_, t, _) in parsed)
    topic0 = event_topic0(f"{name}({canonical_types})")

    return EventSpec(
        topic0=topic0,
        name=name,
        topic_fields=tuple(TopicFieldSpec(n, idx + 1, t) for idx, (n, t) in enumerate(indexed_params)),
        data_fields=tuple(DataFieldSpec(n, idx, t) for idx, (n, t) in enumerate(data_params)),
    )


def make_registry(signatures: str | list[str]) -> EventRegistry:
    """Create a registry from one or multiple event signatures."""
    sig_list = [signatures] if isinstance(signatures, str) else signatures
    reg: EventRegistry = {}
    for signature in sig_list:
        spec = event_spec_from_signature(signature)
        reg[spec.topic0] = spec
    return reg
