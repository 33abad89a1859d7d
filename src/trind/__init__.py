from __future__ import annotations

from .address import to_internal, to_native
from .constants import TRANSFER_T0, USDT_ADDRESS
from .core.config import IndexerConfig, load_config
from .core.errors import DecodeError, InvalidAddressError, TopicMismatchError
from .core.models import DecodedTransfer, TransferRecord
from .core.use_cases.index_transfers import RecordBuilder, TransferIndexService
from .decoding.decoder import TRANSFER_SPEC, decode_event, decode_transfer

__all__ = [
    "to_internal",
    "to_native",
    "TRANSFER_T0",
    "USDT_ADDRESS",
    "IndexerConfig",
    "load_config",
    "DecodeError",
    "InvalidAddressError",
    "TopicMismatchError",
    "DecodedTransfer",
    "TransferRecord",
    "RecordBuilder",
    "TransferIndexService",
    "TRANSFER_SPEC",
    "decode_event",
    "decode_transfer",
]
