"""Storage key layout for content entities.

::

    content/<type>/<locale>/<slug>.<ext>
    content/<type>/<slug>.<ext>            (legacy, locale-less)
"""

from __future__ import annotations

from folio.content.models import ContentFormat, ContentType
from folio.errors import InvalidKeyError

CONTENT_ROOT = "content"

_EXTENSIONS = {fmt.extension: fmt for fmt in ContentFormat}


def _has_control_chars(value: str) -> bool:
    return any(ord(ch) < 32 or ord(ch) == 127 for ch in value)


def _check_segment(value: str, what: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise InvalidKeyError(f"Invalid {what}: {value!r}")
    if _has_control_chars(value):
        raise InvalidKeyError(f"Invalid {what}: {value!r}")
    return value


def prefix_for(content_type: ContentType, locale: str | None = None) -> str:
    """Directory prefix holding entities of one type and locale (trailing ``/``)."""
    if locale is None:
        return f"{CONTENT_ROOT}/{content_type.value}/"
    return f"{CONTENT_ROOT}/{content_type.value}/{_check_segment(locale, 'locale')}/"


def key_for(
    content_type: ContentType,
    slug: str,
    locale: str | None = None,
    fmt: ContentFormat = ContentFormat.JSON,
) -> str:
    """Full storage key for one entity in one format."""
    return f"{prefix_for(content_type, locale)}{_check_segment(slug, 'slug')}{fmt.extension}"


def keys_for(content_type: ContentType, slug: str, locale: str | None = None) -> list[str]:
    """Keys for every format of a slug, in resolution order."""
    return [key_for(content_type, slug, locale, fmt) for fmt in content_type.formats]


def split_name(name: str, content_type: ContentType) -> tuple[str, ContentFormat] | None:
    """Split a listed child name into ``(slug, format)``.

    Returns None for directories and files with an extension this content
    type is not stored in.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return None
    fmt = _EXTENSIONS.get(f".{ext}")
    if fmt is None or fmt not in content_type.formats:
        return None
    return stem, fmt
