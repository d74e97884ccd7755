"""Local hierarchical file store — the system of record.

Keys are ``/``-separated paths relative to the content root, e.g.
``content/posts/en/hello.md``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from folio.errors import StorageFailure
from folio.storage.models import StorageResult

logger = logging.getLogger(__name__)

BACKEND_NAME = "file"


class FileStore:
    """Reads and writes UTF-8 text files under a root directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root.joinpath(*[part for part in key.split("/") if part])

    def _fail(self, operation: str, key: str, exc: Exception) -> StorageResult:
        return StorageResult.failure(StorageFailure(BACKEND_NAME, operation, key, str(exc)))

    def read(self, key: str) -> StorageResult[str]:
        """Return the file's text, ``None`` when the file does not exist."""
        path = self._path(key)
        if not path.is_file():
            return StorageResult.success(None)
        try:
            return StorageResult.success(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            return self._fail("read", key, exc)

    def write(self, key: str, value: str) -> StorageResult[bool]:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except (OSError, ValueError) as exc:
            return self._fail("write", key, exc)
        return StorageResult.success(True)

    def remove(self, key: str) -> StorageResult[bool]:
        """Delete the file; the value is False when there was nothing to delete."""
        path = self._path(key)
        if not path.is_file():
            return StorageResult.success(False)
        try:
            path.unlink()
        except FileNotFoundError:
            return StorageResult.success(False)
        except (OSError, ValueError) as exc:
            return self._fail("delete", key, exc)
        return StorageResult.success(True)

    def children(self, prefix: str) -> StorageResult[list[str]]:
        """Immediate entries (files and directories) under ``prefix``, sorted."""
        path = self._path(prefix)
        if not path.is_dir():
            return StorageResult.success([])
        try:
            return StorageResult.success(sorted(entry.name for entry in path.iterdir()))
        except OSError as exc:
            return self._fail("list", prefix, exc)

    def contains(self, key: str) -> StorageResult[bool]:
        try:
            return StorageResult.success(self._path(key).is_file())
        except OSError as exc:
            return self._fail("exists", key, exc)
