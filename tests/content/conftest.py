"""Shared fixtures for content tests: a file-backed resolver over tmp_path."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest
from folio.config import Locale, SiteConfig
from folio.content.resolver import ContentResolver
from folio.storage import FileStore, StorageAdapter

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def site() -> SiteConfig:
    return SiteConfig(
        default_locale="en",
        locales=[
            Locale(code="en", name="English"),
            Locale(code="de", name="Deutsch"),
            Locale(code="fr", name="Français", enabled=False),
        ],
    )


@pytest.fixture()
def storage(tmp_path: Path) -> StorageAdapter:
    return StorageAdapter(FileStore(tmp_path))


@pytest.fixture()
def resolver(storage: StorageAdapter, site: SiteConfig) -> ContentResolver:
    return ContentResolver(storage, site, clock=lambda: FIXED_NOW)


@pytest.fixture()
def put(tmp_path: Path):
    """Write raw content under the store root; dicts are written as JSON."""

    def _put(key: str, value) -> None:
        path = tmp_path / key
        path.parent.mkdir(parents=True, exist_ok=True)
        text = value if isinstance(value, str) else json.dumps(value)
        path.write_text(text, encoding="utf-8")

    return _put
