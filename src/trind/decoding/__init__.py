"""Event decoding.

This package provides:
- Event specification system (EventSpec, TopicFieldSpec, DataFieldSpec)
- Registry helpers building specs from Solidity signatures
- `trind.decoding.decoder`: strict decoder translating raw logs into typed
  values / DecodedTransfer
"""

from trind.decoding.registry_builder import event_spec_from_signature, make_registry
from trind.decoding.specs import DataFieldSpec, EventRegistry, EventSpec, TopicFieldSpec

__all__ = [
    "event_spec_from_signature",
    "make_registry",
    "DataFieldSpec",
    "EventRegistry",
    "EventSpec",
    "TopicFieldSpec",
]
