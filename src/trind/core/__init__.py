"""Core data models, errors and interfaces.

This package provides:
- Data models (RawLog, Block, DecodedTransfer, TransferRecord, BatchRecord)
- Error hierarchy (DecodeError, InvalidAddressError, TopicMismatchError, ...)

`IndexerConfig` lives in `trind.core.config`.
"""

from trind.core.errors import (
    ConfigError,
    DecodeError,
    FilterMismatchError,
    InvalidAddressError,
    SinkError,
    TopicMismatchError,
    TrindError,
)
from trind.core.models import (
    BatchRecord,
    Block,
    BlockHeader,
    DecodedTransfer,
    RawLog,
    Transaction,
    TransferColumns,
    TransferRecord,
    format_log_id,
)

__all__ = [
    "ConfigError",
    "DecodeError",
    "FilterMismatchError",
    "InvalidAddressError",
    "SinkError",
    "TopicMismatchError",
    "TrindError",
    "BatchRecord",
    "Block",
    "BlockHeader",
    "DecodedTransfer",
    "RawLog",
    "Transaction",
    "TransferColumns",
    "TransferRecord",
    "format_log_id",
]
