"""File-backed key-value storage for the local record history."""

import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from calorie_snap.services.records import KeyValueStorage

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class JsonFileStorage(KeyValueStorage):
    """Stores each key as ``<directory>/<key>.json``."""

    directory: Path

    def get(self, key: str) -> str | None:
        """Return the file contents for ``key``, or None if it does not exist."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write ``value`` atomically via a temporary file and rename."""
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return Path(self.directory) / f"{key}.json"
