"""Dual-backend storage adapter with KV-first, file-fallback semantics.

When the KV backend is active every operation targets it first. An absent
result or any operational error sends the identical operation to the
local file store, which is the system of record for committed content.
Failures are logged and collapsed to ``None``/``False``/``[]``; callers
cannot tell "missing" from "temporarily unavailable".
"""

from __future__ import annotations

import logging
from pathlib import Path

from folio.config import FolioConfig
from folio.storage.file_store import FileStore
from folio.storage.kv_client import KVClient
from folio.storage.models import StorageResult

logger = logging.getLogger(__name__)

# Alias to avoid shadowing by StorageAdapter.list method
_list = list


class StorageAdapter:
    """Key-value facade over an optional KV client and a file store.

    The backend choice is fixed by the constructor arguments; nothing is
    re-read per call.
    """

    def __init__(self, file_store: FileStore, kv: KVClient | None = None) -> None:
        self.file_store = file_store
        self.kv = kv

    @property
    def uses_kv(self) -> bool:
        return self.kv is not None

    # ── Private helpers ──────────────────────────────────────────

    @staticmethod
    def _log_failure(result: StorageResult, *, fallback: bool) -> None:
        if result.cause is None:
            return
        if fallback:
            logger.warning("%s; falling back to file store", result.cause)
        else:
            logger.error("%s", result.cause)

    # ── Read operations ──────────────────────────────────────────

    def get(self, key: str) -> str | None:
        """Return the stored text for ``key``, or None when both backends miss."""
        if self.kv is not None:
            remote = self.kv.read(key)
            if remote.found:
                return remote.value
            self._log_failure(remote, fallback=True)

        local = self.file_store.read(key)
        self._log_failure(local, fallback=False)
        if local.found:
            return local.value
        logger.debug("Storage miss for %s", key)
        return None

    def list(self, prefix: str) -> _list[str]:
        """Return the sorted immediate child names under ``prefix``."""
        if not prefix.endswith("/"):
            prefix = f"{prefix}/"

        if self.kv is not None:
            remote = self.kv.keys(prefix)
            if remote.ok and remote.value:
                names = {
                    key[len(prefix):].split("/", 1)[0]
                    for key in remote.value
                    if key.startswith(prefix) and len(key) > len(prefix)
                }
                if names:
                    return sorted(names)
            self._log_failure(remote, fallback=True)

        local = self.file_store.children(prefix)
        self._log_failure(local, fallback=False)
        return local.value or []

    def exists(self, key: str) -> bool:
        if self.kv is not None:
            remote = self.kv.contains(key)
            if remote.ok and remote.value:
                return True
            self._log_failure(remote, fallback=True)

        local = self.file_store.contains(key)
        self._log_failure(local, fallback=False)
        return bool(local.value)

    # ── Write operations ─────────────────────────────────────────

    def set(self, key: str, value: str) -> bool:
        """Store ``value`` under ``key``. Returns False when no backend accepted it."""
        if self.kv is not None:
            remote = self.kv.write(key, value)
            if remote.ok and remote.value:
                return True
            self._log_failure(remote, fallback=True)

        local = self.file_store.write(key, value)
        self._log_failure(local, fallback=False)
        return bool(local.value)

    def delete(self, key: str) -> bool:
        """Remove ``key`` from every backend. True if anything was removed.

        The file copy is removed even after a successful KV delete, since
        reads would otherwise fall back to it.
        """
        removed = False
        if self.kv is not None:
            remote = self.kv.remove(key)
            self._log_failure(remote, fallback=True)
            removed = bool(remote.ok and remote.value)

        local = self.file_store.remove(key)
        self._log_failure(local, fallback=False)
        return removed or bool(local.value)


def create_adapter(config: FolioConfig, root: Path | None = None) -> StorageAdapter:
    """Build the adapter once from process-wide configuration."""
    file_store = FileStore(root if root is not None else config.content_root)
    kv = KVClient(config.kv) if config.use_kv else None
    if kv is not None:
        logger.info("Storage: KV at %s with file fallback under %s", kv.base_url, file_store.root)
    else:
        logger.info("Storage: file store under %s", file_store.root)
    return StorageAdapter(file_store, kv)
