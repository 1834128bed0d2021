"""JSON-file backed client storage.

The whole store is one JSON object on disk. Every write rewrites the file
through a temporary sibling and an atomic rename, so a crash mid-write
leaves the previous contents intact.
"""

import json
import os
from pathlib import Path

import structlog

from ordering.storage.port import KeyValueStore

logger = structlog.get_logger(__name__)


class JsonFileStore(KeyValueStore):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("Client storage file is corrupt, starting empty", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)

    def keys(self) -> list[str]:
        return list(self._load())
