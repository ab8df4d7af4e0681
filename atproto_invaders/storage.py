"""
Key/value stores for the identity client's counters
"""

from __future__ import annotations

import json
from pathlib import Path

from atproto_invaders.utils import logger


class MemoryStore:
    """
    Volatile string store.
    """

    def __init__(self, data: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        """
        Look up a value

        :param key: Store key
        :type key: str

        :return: The stored string, or None when the key is unknown
        :rtype: str | None
        """
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """
        Store a value; non-strings are kept as their ``str()``

        :param key: Store key
        :type key: str

        :param value: Value to keep
        :type value: str
        """
        self._data[key] = str(value)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore(MemoryStore):
    """
    String store persisted to a single JSON file.

    The file is rewritten on every ``set``; memory only changes once the
    write succeeded. A missing or unreadable file starts an empty store.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        super().__init__(self._load())

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store {self._path}: not a JSON object")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def set(self, key: str, value: str) -> None:
        """
        Store a value and rewrite the file

        :raise OSError: If the file cannot be written; the store is unchanged
        """
        data = dict(self._data)
        data[key] = str(value)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(data, indent=2, sort_keys=True), encoding="utf-8"
        )
        self._data = data
