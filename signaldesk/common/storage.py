"""
Key-Value Stores

String-keyed storage for JSON blobs. The engine never touches a store
directly; only the session and reviewer boundary functions in
``signaldesk.engine.persistence`` read and write through this interface.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

from .errors import StorageWriteError

logger = logging.getLogger("signaldesk.common.storage")


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal storage surface: get(key) -> str | None, set(key, value)"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """
    In-process store backed by a dict.

    Args:
        quota_bytes: Optional cap on the total size of stored values. Writes
            that would exceed it raise StorageWriteError, mirroring a full
            browser storage quota.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self._quota_bytes:
                raise StorageWriteError(key, f"quota of {self._quota_bytes} bytes exceeded")
        self._data[key] = value


class JsonFileStore:
    """
    Store persisted as a single JSON object of string values on disk.

    Reads tolerate a missing or corrupt file (treated as empty). Writes go to
    a temp file first and replace the target, so a failed write never leaves
    a truncated file behind.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except (ValueError, OSError) as e:
            logger.warning("Ignoring unreadable store file %s: %s", self._path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring store file %s: expected a JSON object", self._path)
            return {}

        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageWriteError(key, str(e)) from e
