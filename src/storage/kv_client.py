"""Remote key-value service client.

Speaks the Redis-over-REST protocol used by Upstash and Vercel KV: each
command is POSTed to the base URL as a JSON array, authenticated with a
bearer token, and answered with ``{"result": ...}`` or ``{"error": ...}``.
"""

from __future__ import annotations

import http.client
import json
import logging
import re
import urllib.error
import urllib.request
from typing import Any

from folio.config import KVSection
from folio.errors import StorageFailure
from folio.storage.models import StorageResult

logger = logging.getLogger(__name__)

BACKEND_NAME = "kv"

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _escape_glob(prefix: str) -> str:
    """Escape Redis glob metacharacters so the prefix matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", prefix)


class KVClient:
    """Client for a Redis-compatible REST key-value service.

    Handles bearer authentication and command encoding via urllib.
    """

    def __init__(self, config: KVSection) -> None:
        self.config = config
        self.base_url = config.url.rstrip("/")

    def _command(self, *args: str) -> Any:
        """Run one command and return its ``result`` field.

        Raises:
            StorageFailure: On transport errors, non-2xx responses, or an
                ``error`` field in the response body.
        """
        operation = args[0].lower()
        key = args[1] if len(args) > 1 else ""
        logger.debug("KV %s %s", args[0], key)
        body = json.dumps(list(args)).encode("utf-8")
        try:
            req = urllib.request.Request(
                self.base_url,
                data=body,
                method="POST",
                headers={
                    "Authorization": f"Bearer {self.config.token}",
                    "Content-Type": "application/json",
                },
            )
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                payload = json.loads(resp.read().decode("utf-8"))
        except urllib.error.HTTPError as exc:
            raise StorageFailure(BACKEND_NAME, operation, key, f"HTTP {exc.code}") from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageFailure(BACKEND_NAME, operation, key, "malformed response") from exc
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as exc:
            # ValueError: unusable URL (missing scheme, bad host)
            detail = str(exc) or type(exc).__name__
            raise StorageFailure(BACKEND_NAME, operation, key, detail) from exc

        if not isinstance(payload, dict):
            raise StorageFailure(BACKEND_NAME, operation, key, "malformed response")
        if payload.get("error"):
            raise StorageFailure(BACKEND_NAME, operation, key, str(payload["error"]))
        return payload.get("result")

    def _run(self, *args: str) -> StorageResult[Any]:
        try:
            return StorageResult.success(self._command(*args))
        except StorageFailure as exc:
            return StorageResult.failure(exc)

    def read(self, key: str) -> StorageResult[str]:
        result = self._run("GET", key)
        if result.found and not isinstance(result.value, str):
            # Values stored as JSON objects by other clients come back decoded.
            return StorageResult.success(json.dumps(result.value))
        return result

    def write(self, key: str, value: str) -> StorageResult[bool]:
        result = self._run("SET", key, value)
        if not result.ok:
            return result
        return StorageResult.success(result.value == "OK")

    def remove(self, key: str) -> StorageResult[bool]:
        result = self._run("DEL", key)
        if not result.ok:
            return result
        return StorageResult.success(bool(result.value))

    def keys(self, prefix: str) -> StorageResult[list[str]]:
        """Full keys starting with ``prefix``."""
        result = self._run("KEYS", f"{_escape_glob(prefix)}*")
        if not result.ok:
            return result
        if not isinstance(result.value, list):
            return StorageResult.success([])
        return StorageResult.success([k for k in result.value if isinstance(k, str)])

    def contains(self, key: str) -> StorageResult[bool]:
        result = self._run("EXISTS", key)
        if not result.ok:
            return result
        return StorageResult.success(bool(result.value))
