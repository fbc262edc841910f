"""File-based persistence backend: one JSON file per key."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from slip_splitter.exceptions import PersistenceError

log = logging.getLogger(__name__)


class FilePersistenceBackend:
    """Stores data as JSON files in a local directory.

    Writes go through a temporary file and ``os.replace`` so a reader never
    sees a half-written manifest.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    def _key_path(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace("\\", "_")
        if not safe_key.endswith(".json"):
            safe_key += ".json"
        return self._base / safe_key

    def save(self, key: str, data: str) -> None:
        path = self._key_path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(data, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise PersistenceError(f"Cannot save {key} to {path}: {exc}") from exc
        log.debug("Saved %s to %s", key, path)

    def load(self, key: str) -> str:
        path = self._key_path(key)
        if not path.is_file():
            raise KeyError(f"Not found: {key} (path: {path})")
        return path.read_text(encoding="utf-8")

    def exists(self, key: str) -> bool:
        return self._key_path(key).is_file()

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(p.stem for p in self._base.glob("*.json") if p.stem.startswith(prefix))
