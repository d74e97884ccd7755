"""Content service — the collaborator surface used by handlers and renderers.

Wraps the resolver with per-type convenience methods, the write-token
check, taxonomy queries, and search corpus assembly.
"""

from __future__ import annotations

import dataclasses
import logging
from collections import Counter
from collections.abc import Callable
from pathlib import Path
from typing import Literal

from folio.auth import TokenVerifier
from folio.config import FolioConfig, SiteConfig
from folio.content.lifecycle import PUBLIC, ReadContext
from folio.content.models import (
    Category,
    ContentFormat,
    ContentType,
    Entity,
    Page,
    Post,
    Tag,
)
from folio.content.resolver import ContentResolver, Resolved
from folio.errors import UnauthorizedError
from folio.search import SearchHit, search
from folio.storage import create_adapter

logger = logging.getLogger(__name__)

SearchKind = Literal["all", "post", "page"]


class ContentService:
    """Get-all / get-by-slug / save / delete for every content type, plus search.

    Reads never raise for storage or decode problems. Writes return a bool
    and raise :class:`UnauthorizedError` only when a verifier is installed
    and rejects the token.
    """

    def __init__(
        self,
        resolver: ContentResolver,
        verifier: Callable[[str | None], bool] | None = None,
    ) -> None:
        self.resolver = resolver
        self.verifier = verifier

    @classmethod
    def from_config(cls, config: FolioConfig, root: Path | None = None) -> ContentService:
        """Wire adapter, resolver and verifier from a loaded config."""
        storage = create_adapter(config, root)
        resolver = ContentResolver(storage, config.site)
        return cls(resolver, TokenVerifier.from_config(config.auth))

    @property
    def site(self) -> SiteConfig:
        return self.resolver.site

    def authorize(self, token: str | None) -> None:
        """Raise UnauthorizedError unless the verifier accepts ``token``."""
        if self.verifier is not None and not self.verifier(token):
            raise UnauthorizedError("Write rejected: missing or invalid token")

    # ── Private helpers ──────────────────────────────────────────

    def _save(
        self,
        entity: Entity,
        locale: str | None,
        token: str | None,
        fmt: ContentFormat = ContentFormat.JSON,
    ) -> bool:
        self.authorize(token)
        return self.resolver.save(entity, locale, fmt)

    def _delete(
        self, content_type: ContentType, slug: str, locale: str | None, token: str | None
    ) -> bool:
        self.authorize(token)
        return self.resolver.delete(content_type, slug, locale)

    # ── Posts ────────────────────────────────────────────────────

    def get_posts(self, locale: str | None = None, context: ReadContext = PUBLIC) -> list[Post]:
        allow_draft, allow_future = context.flags()
        return self.resolver.get_all(ContentType.POST, locale, allow_draft, allow_future)

    def get_post(
        self, slug: str, locale: str | None = None, context: ReadContext = PUBLIC
    ) -> Resolved | None:
        allow_draft, allow_future = context.flags()
        return self.resolver.resolve(ContentType.POST, slug, locale, allow_draft, allow_future)

    def save_post(
        self,
        post: Post,
        locale: str | None = None,
        fmt: ContentFormat = ContentFormat.JSON,
        token: str | None = None,
    ) -> bool:
        return self._save(post, locale, token, fmt)

    def delete_post(self, slug: str, locale: str | None = None, token: str | None = None) -> bool:
        return self._delete(ContentType.POST, slug, locale, token)

    def get_posts_by_category(
        self, category_slug: str, locale: str | None = None, context: ReadContext = PUBLIC
    ) -> list[Post]:
        return [p for p in self.get_posts(locale, context) if category_slug in p.categories]

    def get_posts_by_tag(
        self, tag_slug: str, locale: str | None = None, context: ReadContext = PUBLIC
    ) -> list[Post]:
        return [p for p in self.get_posts(locale, context) if tag_slug in p.tags]

    def category_counts(self, locale: str | None = None) -> dict[str, int]:
        """Number of visible posts per category slug."""
        return dict(Counter(c for p in self.get_posts(locale) for c in set(p.categories)))

    def tag_counts(self, locale: str | None = None) -> dict[str, int]:
        """Number of visible posts per tag slug."""
        return dict(Counter(t for p in self.get_posts(locale) for t in set(p.tags)))

    # ── Pages ────────────────────────────────────────────────────

    def get_pages(self, locale: str | None = None) -> list[Page]:
        return self.resolver.get_all(ContentType.PAGE, locale)

    def get_page(self, slug: str, locale: str | None = None) -> Resolved | None:
        return self.resolver.resolve(ContentType.PAGE, slug, locale)

    def save_page(self, page: Page, locale: str | None = None, token: str | None = None) -> bool:
        return self._save(page, locale, token)

    def delete_page(self, slug: str, locale: str | None = None, token: str | None = None) -> bool:
        return self._delete(ContentType.PAGE, slug, locale, token)

    # ── Categories & tags ────────────────────────────────────────

    def get_categories(self, locale: str | None = None) -> list[Category]:
        return self.resolver.get_all(ContentType.CATEGORY, locale)

    def get_category(self, slug: str, locale: str | None = None) -> Resolved | None:
        return self.resolver.resolve(ContentType.CATEGORY, slug, locale)

    def save_category(
        self, category: Category, locale: str | None = None, token: str | None = None
    ) -> bool:
        return self._save(category, locale, token)

    def delete_category(
        self, slug: str, locale: str | None = None, token: str | None = None
    ) -> bool:
        return self._delete(ContentType.CATEGORY, slug, locale, token)

    def get_tags(self, locale: str | None = None) -> list[Tag]:
        return self.resolver.get_all(ContentType.TAG, locale)

    def get_tag(self, slug: str, locale: str | None = None) -> Resolved | None:
        return self.resolver.resolve(ContentType.TAG, slug, locale)

    def save_tag(self, tag: Tag, locale: str | None = None, token: str | None = None) -> bool:
        return self._save(tag, locale, token)

    def delete_tag(self, slug: str, locale: str | None = None, token: str | None = None) -> bool:
        return self._delete(ContentType.TAG, slug, locale, token)

    # ── Search ───────────────────────────────────────────────────

    def search(
        self, query: str, locale: str | None = None, kind: SearchKind = "all"
    ) -> list[SearchHit]:
        """Search visible posts and pages of one locale, or of every enabled locale."""
        locales = [locale] if locale else [loc.code for loc in self.site.enabled_locales]

        corpus: list[Post | Page] = []
        origin: dict[int, str] = {}
        loaders: list[Callable[[str], list]] = []
        if kind in ("all", "post"):
            loaders.append(self.get_posts)
        if kind in ("all", "page"):
            loaders.append(self.get_pages)

        # Posts of every locale first, then pages.
        for load in loaders:
            for code in locales:
                for item in load(code):
                    origin[id(item)] = code
                    corpus.append(item)

        hits = search(query, corpus, locale)
        return [dataclasses.replace(hit, locale=origin.get(id(hit.item))) for hit in hits]
