"""Content resolver — (type, slug, locale) to a decoded entity.

Resolution walks the locale chain and, within each locale, the format
order of the content type (Markdown before JSON for posts). The first
stored value that decodes wins for that locale. A post rejected by the
lifecycle gate ends the search at that locale; the resolver then moves to
the next locale, never to the next format.

Decoded posts and pages have double-encoded HTML entities repaired before
they are returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from folio.config import SiteConfig
from folio.content import keys
from folio.content.frontmatter import markdown_to_post, post_to_markdown
from folio.content.lifecycle import is_visible
from folio.content.locales import locale_chain
from folio.content.models import (
    ContentFormat,
    ContentType,
    Entity,
    Page,
    Post,
    content_type_of,
    parse_timestamp,
)
from folio.errors import DecodeFailure, InvalidKeyError
from folio.storage import StorageAdapter

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)

# Applied in order, so "&amp;amp;lt;" collapses all the way to "&lt;".
_DOUBLE_ENCODED = (
    ("&amp;amp;", "&amp;"),
    ("&amp;nbsp;", "&nbsp;"),
    ("&amp;lt;", "&lt;"),
    ("&amp;gt;", "&gt;"),
    ("&amp;quot;", "&quot;"),
    ("&amp;#39;", "&#39;"),
    ("&amp;#x27;", "&#x27;"),
    ("&amp;#x2F;", "&#x2F;"),
)


@dataclass(frozen=True)
class Resolved:
    """An entity together with where it was found."""

    entity: Entity
    locale: str | None
    format: ContentFormat


def decode_entity(content_type: ContentType, fmt: ContentFormat, text: str) -> Entity:
    """Decode stored text into the entity model for ``content_type``.

    Raises:
        DecodeFailure: On malformed JSON, bad frontmatter, or a payload
            that does not validate.
    """
    if fmt == ContentFormat.MARKDOWN:
        if content_type != ContentType.POST:
            raise DecodeFailure(f"{content_type.value} cannot be stored as markdown")
        return markdown_to_post(text)
    try:
        return content_type.model.model_validate_json(text)
    except ValueError as exc:
        raise DecodeFailure(f"invalid {content_type.value} JSON: {exc}") from exc


def repair_double_encoded(html: str) -> str:
    """Undo HTML entities escaped twice by an editor (``&amp;lt;`` to ``&lt;``)."""
    for broken, fixed in _DOUBLE_ENCODED:
        html = html.replace(broken, fixed)
    return html


def repair_entity(entity: Entity) -> Entity:
    """Return ``entity`` with double-encoded entities fixed in its HTML fields.

    Applies to post content and excerpt and to page content; other types
    and clean entities come back unchanged.
    """
    if isinstance(entity, Post):
        fields = ("content", "excerpt")
    elif isinstance(entity, Page):
        fields = ("content",)
    else:
        return entity
    update = {}
    for name in fields:
        value = getattr(entity, name)
        if value and "&amp;" in value:
            repaired = repair_double_encoded(value)
            if repaired != value:
                update[name] = repaired
    return entity.model_copy(update=update) if update else entity


def encode_entity(entity: Entity, fmt: ContentFormat) -> str:
    if fmt == ContentFormat.MARKDOWN:
        if not isinstance(entity, Post):
            raise ValueError("Only posts can be stored as markdown")
        return post_to_markdown(entity)
    return entity.to_json()


class ContentResolver:
    """Locale- and format-aware reads and writes over a storage adapter."""

    def __init__(
        self,
        storage: StorageAdapter,
        site: SiteConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.storage = storage
        self.site = site
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    # ── Private helpers ──────────────────────────────────────────

    def _visible(self, entity: Entity, allow_draft: bool, allow_future_scheduled: bool) -> bool:
        if not isinstance(entity, Post):
            return True
        return is_visible(entity, allow_draft, allow_future_scheduled, now=self._clock())

    def _load(
        self, content_type: ContentType, slug: str, locale: str | None
    ) -> Resolved | None:
        """First present, decodable format of ``slug`` at exactly ``locale``."""
        for fmt in content_type.formats:
            key = keys.key_for(content_type, slug, locale, fmt)
            text = self.storage.get(key)
            if text is None:
                continue
            try:
                entity = decode_entity(content_type, fmt, text)
                return Resolved(repair_entity(entity), locale, fmt)
            except DecodeFailure as exc:
                logger.warning("Skipping undecodable %s: %s", key, exc)
        return None

    # ── Read operations ──────────────────────────────────────────

    def resolve(
        self,
        content_type: ContentType,
        slug: str,
        preferred_locale: str | None = None,
        allow_draft: bool = False,
        allow_future_scheduled: bool = False,
    ) -> Resolved | None:
        """Find the visible entity for ``slug``, walking the locale chain.

        Returns None when no locale yields a visible entity.
        """
        try:
            for locale in locale_chain(self.site, preferred_locale):
                found = self._load(content_type, slug, locale)
                if found is None:
                    continue
                if self._visible(found.entity, allow_draft, allow_future_scheduled):
                    return found
                logger.debug(
                    "%s/%s hidden by lifecycle at locale %s", content_type.value, slug, locale
                )
        except InvalidKeyError as exc:
            logger.warning("Cannot resolve %s: %s", content_type.value, exc)
            return None
        logger.debug("No %s found for slug %s", content_type.value, slug)
        return None

    def get_all(
        self,
        content_type: ContentType,
        locale: str | None = None,
        allow_draft: bool = False,
        allow_future_scheduled: bool = False,
    ) -> list[Entity]:
        """All visible entities stored at ``locale`` (or the legacy path).

        Posts come back newest first; other types keep storage-list order.
        """
        try:
            prefix = keys.prefix_for(content_type, locale)
        except InvalidKeyError as exc:
            logger.warning("Cannot list %s: %s", content_type.value, exc)
            return []

        slugs: list[str] = []
        for name in self.storage.list(prefix):
            parsed = keys.split_name(name, content_type)
            if parsed is not None and parsed[0] not in slugs:
                slugs.append(parsed[0])

        entities: list[Entity] = []
        for slug in slugs:
            try:
                found = self._load(content_type, slug, locale)
            except InvalidKeyError:
                continue
            # Deleted between listing and reading.
            if found is None:
                continue
            if self._visible(found.entity, allow_draft, allow_future_scheduled):
                entities.append(found.entity)

        if content_type == ContentType.POST:
            entities.sort(key=_post_sort_key, reverse=True)
        return entities

    # ── Write operations ─────────────────────────────────────────

    def save(
        self,
        entity: Entity,
        locale: str | None = None,
        fmt: ContentFormat = ContentFormat.JSON,
    ) -> bool:
        """Upsert ``entity`` by slug in the requested format."""
        content_type = content_type_of(entity)
        if fmt not in content_type.formats:
            logger.error("%s cannot be saved as %s", content_type.value, fmt.value)
            return False
        try:
            key = keys.key_for(content_type, entity.slug, locale, fmt)
        except InvalidKeyError as exc:
            logger.error("Cannot save %s: %s", content_type.value, exc)
            return False
        saved = self.storage.set(key, encode_entity(entity, fmt))
        if saved:
            logger.info("Saved %s", key)
        return saved

    def delete(self, content_type: ContentType, slug: str, locale: str | None = None) -> bool:
        """Delete every stored format of ``slug``. True if any was removed."""
        try:
            candidates = keys.keys_for(content_type, slug, locale)
        except InvalidKeyError as exc:
            logger.error("Cannot delete %s: %s", content_type.value, exc)
            return False
        results = [self.storage.delete(key) for key in candidates]
        if any(results):
            logger.info("Deleted %s/%s (locale=%s)", content_type.value, slug, locale)
        return any(results)


def _post_sort_key(entity: Entity) -> tuple[bool, datetime]:
    stamp = parse_timestamp(getattr(entity, "date", None))
    return (stamp is not None, stamp or _OLDEST)
