"""
SignalDesk Common Module

Shared configuration, storage and error types.
"""

from .config import SignalDeskConfig, load_config
from .errors import SignalDeskError, StorageWriteError
from .storage import KeyValueStore, MemoryStore, JsonFileStore

__all__ = [
    "SignalDeskConfig",
    "load_config",
    "SignalDeskError",
    "StorageWriteError",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
]
