"""
SignalDesk error types.
"""


class SignalDeskError(Exception):
    """Base class for SignalDesk failures surfaced to callers."""


class StorageWriteError(SignalDeskError):
    """A key-value store could not persist a value (quota, permissions, missing volume)."""

    def __init__(self, key: str, message: str):
        super().__init__(f"Failed to write '{key}': {message}")
        self.key = key
