"""Snapshot serialization and key-value persistence."""

from .snapshot import deserialize_state, serialize_state
from .state_store import JsonFileStore, KeyValueStore, MemoryStore, create_store

__all__ = [
    'deserialize_state',
    'serialize_state',
    'JsonFileStore',
    'KeyValueStore',
    'MemoryStore',
    'create_store',
]
