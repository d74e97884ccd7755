"""Content domain — posts, pages and taxonomy over the storage adapter.

Entities are addressed by (type, locale, slug) and stored as JSON or, for
posts, Markdown with a frontmatter header. The resolver walks the locale
fallback chain; the lifecycle gate hides drafts and not-yet-due posts.
The handler-facing facade lives in :mod:`folio.content.service`.
"""

from folio.content.lifecycle import PUBLIC, ReadContext, is_visible
from folio.content.locales import locale_chain
from folio.content.models import (
    Category,
    ContentFormat,
    ContentType,
    Page,
    Post,
    PostStatus,
    Tag,
)
from folio.content.resolver import ContentResolver, Resolved

__all__ = [
    "PUBLIC",
    "Category",
    "ContentFormat",
    "ContentResolver",
    "ContentType",
    "Page",
    "Post",
    "PostStatus",
    "ReadContext",
    "Resolved",
    "Tag",
    "is_visible",
    "locale_chain",
]
