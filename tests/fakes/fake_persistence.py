"""In-memory persistence backend for testing."""

from __future__ import annotations


class FakePersistenceBackend:
    """Dict-backed storage for tests; no filesystem needed."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    def save(self, key: str, data: str) -> None:
        self._store[key] = data

    def load(self, key: str) -> str:
        if key not in self._store:
            raise KeyError(f"Not found: {key}")
        return self._store[key]

    def exists(self, key: str) -> bool:
        return key in self._store

    def list_keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._store if k.startswith(prefix)]
