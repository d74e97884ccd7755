"""Unified configuration loaded from .folio.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.

The resulting :class:`FolioConfig` is built once at process start and
passed down explicitly; storage backend selection in particular is frozen
here and never re-read per call.
"""

from __future__ import annotations

import logging
import os
import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".folio.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "folio" / "config.toml"

DEFAULT_LOCALE_CODE = "en"


class StorageBackend(StrEnum):
    """Which backend the storage adapter targets first."""

    FILE = "file"
    KV = "kv"


class Locale(BaseModel):
    """A content locale such as ``en`` or ``de``."""

    code: str
    name: str = ""
    enabled: bool = True


def _default_locales() -> list[Locale]:
    return [Locale(code=DEFAULT_LOCALE_CODE, name="English", enabled=True)]


class SiteConfig(BaseModel):
    """[site] section — presentation settings plus the locale table.

    Serialized with camelCase keys (``siteTitle``, ``defaultLocale``) to
    match the JSON form used in backups; TOML may use either spelling.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    site_title: str = "My Blog"
    site_subtitle: str = "Welcome to our simple file-based CMS"
    post_route: str = "posts"
    page_route: str = ""
    default_locale: str = ""
    locales: list[Locale] = Field(default_factory=_default_locales)

    @model_validator(mode="after")
    def _repair_locales(self) -> SiteConfig:
        """Older configs may lack locales or a default locale."""
        if not self.locales:
            self.default_locale = self.default_locale or DEFAULT_LOCALE_CODE
            self.locales = _default_locales()
        if not self.default_locale:
            self.default_locale = self.locales[0].code
        return self

    @property
    def enabled_locales(self) -> list[Locale]:
        return [locale for locale in self.locales if locale.enabled]

    def get_locale(self, code: str) -> Locale | None:
        """Return the locale with this code, enabled or not."""
        for locale in self.locales:
            if locale.code == code:
                return locale
        return None


class StorageSection(BaseModel):
    """[storage] section."""

    backend: StorageBackend = StorageBackend.FILE
    content_root: str = "."


class KVSection(BaseModel):
    """[kv] section — remote key-value service credentials."""

    url: str = ""
    token: str = ""
    timeout: float = 5.0

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.token)


class AuthSection(BaseModel):
    """[auth] section — secret for write-token verification."""

    jwt_secret: str = ""
    token_ttl_days: int = 7

    @property
    def is_configured(self) -> bool:
        return bool(self.jwt_secret)


class FolioConfig(BaseModel):
    """Top-level configuration for the content store."""

    storage: StorageSection = Field(default_factory=StorageSection)
    kv: KVSection = Field(default_factory=KVSection)
    auth: AuthSection = Field(default_factory=AuthSection)
    site: SiteConfig = Field(default_factory=SiteConfig)

    @property
    def content_root(self) -> Path:
        return Path(self.storage.content_root).expanduser()

    @property
    def use_kv(self) -> bool:
        """True when the remote KV backend should be consulted first."""
        return self.storage.backend == StorageBackend.KV and self.kv.is_configured


def load_config(path: str | Path | None = None) -> FolioConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .folio.toml in CWD
    3. ~/.config/folio/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged FolioConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = FolioConfig.model_validate(data) if data else FolioConfig()

    config = _apply_env_vars(config)

    if config.storage.backend == StorageBackend.KV and not config.kv.is_configured:
        logger.warning("KV backend requested but KV url/token missing; using file storage only")

    return config


def merge_cli_overrides(config: FolioConfig, **cli_kwargs: object) -> FolioConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``content_root``,
            ``storage_backend``, ``default_locale``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "content_root": ("storage", "content_root"),
        "storage_backend": ("storage", "backend"),
        "kv_url": ("kv", "url"),
        "kv_token": ("kv", "token"),
        "kv_timeout": ("kv", "timeout"),
        "default_locale": ("site", "default_locale"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return FolioConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: FolioConfig) -> FolioConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "FOLIO_STORAGE_BACKEND": ("storage", "backend"),
        "FOLIO_CONTENT_ROOT": ("storage", "content_root"),
        "KV_REST_API_URL": ("kv", "url"),
        "KV_REST_API_TOKEN": ("kv", "token"),
        "JWT_SECRET": ("auth", "jwt_secret"),
        "FOLIO_DEFAULT_LOCALE": ("site", "default_locale"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    timeout_raw = os.environ.get("FOLIO_KV_TIMEOUT")
    if timeout_raw is not None:
        try:
            data["kv"]["timeout"] = float(timeout_raw)
        except ValueError:
            logger.warning("Ignoring non-numeric FOLIO_KV_TIMEOUT=%r", timeout_raw)

    return FolioConfig.model_validate(data)
