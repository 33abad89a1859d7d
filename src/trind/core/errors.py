"""Error hierarchy for the transfer indexing pipeline."""

from __future__ import annotations


class TrindError(Exception):
    """Base class for all indexer errors."""


class ConfigError(TrindError):
    """Invalid configuration file or value."""


class DecodeError(TrindError):
    """Raw log could not be decoded against its event spec."""

    def __init__(self, message: str, *, log_id: str | None = None) -> None:
        self.log_id = log_id
        if log_id is not None:
            message = f"{message} (log {log_id})"
        super().__init__(message)


class InvalidAddressError(TrindError, ValueError):
    """Address is malformed or fails its checksum."""


class TopicMismatchError(TrindError):
    """Log does not carry the expected topic0 (upstream filter fault)."""

    def __init__(self, message: str, *, log_id: str | None = None) -> None:
        self.log_id = log_id
        super().__init__(message)


class FilterMismatchError(TopicMismatchError):
    """Log was emitted by a contract other than the subscribed one."""


class SinkError(TrindError):
    """Batch could not be persisted; nothing from the batch is visible."""
