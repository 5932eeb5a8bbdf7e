"""File-backed key/value store.

Stands in for browser local storage: a single JSON object on disk
mapping string keys to JSON values. The whole document is rewritten on
every write through a temporary file and os.replace(), so a crash
mid-write leaves the previous document intact.

One LocalStore per file. The document is read once and cached; the
process is assumed to be the only writer.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, Mapping

from watchlist.errors import StorageError

logger = logging.getLogger(__name__)


class LocalStore:
    """JSON document of string keys, persisted atomically."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            self._data = {}
            return self._data

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")

        logger.info("Opened local store %s (%d keys)", self.path, len(data))
        self._data = data
        return self._data

    def _flush(self, data: dict[str, Any]) -> None:
        try:
            payload = json.dumps(data, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Could not write {self.path}: {exc}") from exc

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key.

        Raises:
            StorageError: If the value can't be serialized or the file
                can't be written. The cached document is left as it was.
        """
        self.update({key: value})

    def update(self, values: Mapping[str, Any], drop: Iterable[str] = ()) -> None:
        """Set several keys and delete others in one write.

        Either every change lands or none does.

        Raises:
            StorageError: Same as set().
        """
        data = dict(self._load())
        data.update(values)
        for key in drop:
            data.pop(key, None)
        self._flush(data)
        self._data = data

    def remove(self, key: str) -> None:
        data = self._load()
        if key not in data:
            return
        data = {k: v for k, v in data.items() if k != key}
        self._flush(data)
        self._data = data

    def __contains__(self, key: str) -> bool:
        return key in self._load()
