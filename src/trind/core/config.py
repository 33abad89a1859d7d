from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from trind.address import to_internal
from trind.constants import TRANSFER_T0, TRON_GATEWAY_URL, USDT_ADDRESS
from trind.core.errors import ConfigError, InvalidAddressError


@dataclass(frozen=True)
class IndexerConfig:
    """Static configuration, loaded once at process start."""

    contract_address: str = USDT_ADDRESS  # Tron base58check
    topic0: str = TRANSFER_T0
    start_block: int = 0
    data_source: str = TRON_GATEWAY_URL
    batch_blocks: int = 100
    out_root: Path = Path("./data")
    skip_malformed: bool = False  # skip-and-log DecodeError instead of failing the batch
    revalidate_filter: bool = True  # re-check address/topic0 of every delivered log
    observer_timeout_s: float = 5.0

    def __post_init__(self) -> None:
        try:
            to_internal(self.contract_address)
        except InvalidAddressError as e:
            raise ConfigError(f"contract_address: {e}") from e

        t0 = self.topic0.lower()
        if not t0.startswith("0x"):
            t0 = "0x" + t0
        if len(t0) != 66 or any(c not in "0123456789abcdef" for c in t0[2:]):
            raise ConfigError(f"topic0 must be a 32-byte hex string: {self.topic0!r}")
        object.__setattr__(self, "topic0", t0)

        if self.start_block < 0:
            raise ConfigError("start_block must be >= 0")
        if self.batch_blocks < 1:
            raise ConfigError("batch_blocks must be >= 1")
        if self.observer_timeout_s <= 0:
            raise ConfigError("observer_timeout_s must be > 0")
        object.__setattr__(self, "out_root", Path(self.out_root))

    @property
    def contract_hex(self) -> str:
        """Contract address in the decoder's ``0x`` hex form."""
        return to_internal(self.contract_address)

    def with_overrides(self, **overrides: Any) -> IndexerConfig:
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if v is not None and k in known}
        return replace(self, **changes) if changes else self


class IndexerSettings(BaseModel):
    """On-disk JSON configuration; every key is optional."""

    model_config = ConfigDict(extra="forbid")

    contract_address: str | None = None
    topic0: str | None = None
    start_block: int | None = None
    data_source: str | None = None
    batch_blocks: int | None = None
    out_root: Path | None = None
    skip_malformed: bool | None = None
    revalidate_filter: bool | None = None
    observer_timeout_s: float | None = None


def load_config(path: str | Path | None = None, **overrides: Any) -> IndexerConfig:
    """Build the config from an optional JSON file, then apply overrides."""
    base = IndexerConfig()
    if path is not None:
        p = Path(path)
        try:
            raw = json.loads(p.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read config file {p}: {e}") from e
        try:
            settings = IndexerSettings.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {p}:\n{e}") from e
        base = base.with_overrides(**settings.model_dump(exclude_none=True))
    return base.with_overrides(**overrides)
