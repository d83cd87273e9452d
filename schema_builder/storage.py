"""
Key-value storage backends for the schema store.

A backend only needs ``get(key)`` returning raw bytes (or None when the key
is absent) and ``set(key, data)``. The schema store keeps its whole
collection under a single key.
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r'^[A-Za-z0-9_.-]+$')


class KeyValueStore(Protocol):
    """Synchronous raw-bytes key-value store."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, data: bytes) -> None:
        ...


class MemoryKeyValueStore:
    """In-process store, used for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)


class FileKeyValueStore:
    """
    Store each key as ``<directory>/<key>.json``.

    Writes go to a temporary file first and are then moved over the target,
    so readers never see a half-written collection.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            return path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read storage file {path}: {e}")
            raise

    def set(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        temp_path = path.with_suffix(f"{path.suffix}.tmp")
        try:
            with open(temp_path, 'wb') as f:
                f.write(data)
            os.replace(temp_path, path)
            logger.debug(f"Wrote {len(data)} bytes to {path}")
        except OSError as e:
            logger.error(f"Failed to write storage file {path}: {e}")
            raise
        finally:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError as e:
                    logger.warning(f"Could not remove temp file {temp_path}: {e}")
