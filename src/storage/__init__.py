"""Storage domain — key-value access over a file store and a remote KV service.

The adapter is the only entry point the content layer uses; backends are
chosen once from configuration via :func:`create_adapter`.
"""

from folio.storage.adapter import StorageAdapter, create_adapter
from folio.storage.file_store import FileStore
from folio.storage.kv_client import KVClient
from folio.storage.models import StorageResult

__all__ = [
    "FileStore",
    "KVClient",
    "StorageAdapter",
    "StorageResult",
    "create_adapter",
]
