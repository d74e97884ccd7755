"""Convert JSON posts to Markdown documents with a frontmatter header.

For every ``content/posts/<locale>/<slug>.json`` a sibling ``<slug>.md``
is written whose body is the post's HTML converted to Markdown. The JSON
file is kept; since Markdown is read first, the new copy takes over.
Slugs that already have a Markdown file are skipped, so re-running is
safe. Locale-less posts directly under ``content/posts/`` are left alone.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, Field

from folio.content import keys
from folio.content.models import ContentFormat, ContentType
from folio.content.resolver import decode_entity, repair_entity
from folio.content.service import ContentService
from folio.errors import DecodeFailure, InvalidKeyError

logger = logging.getLogger(__name__)

_SCRIPT_RE = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_HEADING_RE = re.compile(r"<h([1-6])(?:\s[^>]*)?>(.*?)</h\1>", re.IGNORECASE)
_FENCED_RE = re.compile(
    r'<pre[^>]*><code[^>]*class="language-(\w+)"[^>]*>(.*?)</code></pre>',
    re.IGNORECASE | re.DOTALL,
)
_PRE_RE = re.compile(r"<pre(?:\s[^>]*)?>(.*?)</pre>", re.IGNORECASE | re.DOTALL)
_CODE_RE = re.compile(r"<code(?:\s[^>]*)?>(.*?)</code>", re.IGNORECASE)
_STRONG_RE = re.compile(r"<(strong|b)(?:\s[^>]*)?>(.*?)</\1>", re.IGNORECASE)
_EM_RE = re.compile(r"<(em|i)(?:\s[^>]*)?>(.*?)</\1>", re.IGNORECASE)
_LINK_RE = re.compile(r'<a\s[^>]*href="([^"]*)"[^>]*>(.*?)</a>', re.IGNORECASE)
_BLOCKQUOTE_RE = re.compile(
    r"<blockquote(?:\s[^>]*)?>(.*?)</blockquote>", re.IGNORECASE | re.DOTALL
)
_LIST_RE = re.compile(r"<(ul|ol)(?:\s[^>]*)?>(.*?)</\1>", re.IGNORECASE | re.DOTALL)
_ITEM_RE = re.compile(r"<li(?:\s[^>]*)?>(.*?)</li>", re.IGNORECASE | re.DOTALL)
_PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>(.*?)</p>", re.IGNORECASE)
_BREAK_RE = re.compile(r"<br(?:\s[^>]*)?/?>", re.IGNORECASE)
_DIV_RE = re.compile(r"<div(?:\s[^>]*)?>(.*?)</div>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

# Decoded in this order; "&amp;lt;" ends up as "<".
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
)


class MigrationReport(BaseModel):
    """Counts of converted and skipped posts and per-file problems."""

    migrated: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        return (
            f"Migrated {self.migrated} posts, skipped {self.skipped}. "
            f"{len(self.errors)} errors."
        )


def _heading(match: re.Match) -> str:
    return f"{'#' * int(match[1])} {match[2]}\n\n"


def _blockquote(match: re.Match) -> str:
    lines = match[1].strip().split("\n")
    return "\n".join(f"> {line.strip()}" for line in lines) + "\n\n"


def _list(match: re.Match) -> str:
    ordered = match[1].lower() == "ol"
    items = [item.strip() for item in _ITEM_RE.findall(match[2])]
    lines = [
        f"{i}. {text}" if ordered else f"- {text}" for i, text in enumerate(items, start=1)
    ]
    return "\n".join(lines) + "\n\n"


def html_to_markdown(html: str | None) -> str:
    """Best-effort conversion of editor HTML to Markdown.

    Handles headings, code, emphasis, links, blockquotes, lists,
    paragraphs and line breaks; any other tag is dropped and its text kept.
    """
    if not html:
        return ""
    md = _SCRIPT_RE.sub("", html)
    md = _HEADING_RE.sub(_heading, md)
    md = _FENCED_RE.sub(r"```\1\n\2\n```\n\n", md)
    md = _PRE_RE.sub(r"```\n\1\n```\n\n", md)
    md = _CODE_RE.sub(r"`\1`", md)
    md = _STRONG_RE.sub(r"**\2**", md)
    md = _EM_RE.sub(r"*\2*", md)
    md = _LINK_RE.sub(r"[\2](\1)", md)
    md = _BLOCKQUOTE_RE.sub(_blockquote, md)
    md = _LIST_RE.sub(_list, md)
    md = _PARAGRAPH_RE.sub(r"\1\n\n", md)
    md = _BREAK_RE.sub("\n", md)
    md = _DIV_RE.sub(r"\1\n", md)
    md = _TAG_RE.sub("", md)
    for entity, char in _ENTITIES:
        md = md.replace(entity, char)
    md = _BLANK_LINES_RE.sub("\n\n", md)
    return md.strip()


def _locale_dirs(names: list[str]) -> list[str]:
    return [name for name in names if "." not in name]


def _migrate_locale(
    service: ContentService, locale: str, report: MigrationReport, token: str | None
) -> None:
    storage = service.resolver.storage
    names = storage.list(keys.prefix_for(ContentType.POST, locale))
    parsed = [p for p in (keys.split_name(name, ContentType.POST) for name in names) if p]
    json_slugs = [slug for slug, fmt in parsed if fmt == ContentFormat.JSON]
    md_slugs = {slug for slug, fmt in parsed if fmt == ContentFormat.MARKDOWN}
    logger.info("Locale %s: %d JSON post(s)", locale, len(json_slugs))

    for slug in json_slugs:
        if slug in md_slugs:
            logger.info("Skipping %s/%s: markdown already exists", locale, slug)
            report.skipped += 1
            continue
        try:
            key = keys.key_for(ContentType.POST, slug, locale, ContentFormat.JSON)
        except InvalidKeyError as exc:
            report.errors.append(f"Error migrating post in locale {locale}: {exc}")
            continue
        text = storage.get(key)
        if text is None:
            report.errors.append(f"Could not read post {slug} in locale {locale}")
            continue
        try:
            post = repair_entity(decode_entity(ContentType.POST, ContentFormat.JSON, text))
        except DecodeFailure as exc:
            report.errors.append(f"Error migrating post {slug} in locale {locale}: {exc}")
            continue
        converted = post.model_copy(update={"content": html_to_markdown(post.content)})
        if service.save_post(converted, locale, ContentFormat.MARKDOWN, token=token):
            logger.info("Migrated %s -> %s.md", key, slug)
            report.migrated += 1
        else:
            report.errors.append(f"Failed to save post {slug} in locale {locale}")


def migrate_posts(
    service: ContentService, locale: str | None = None, token: str | None = None
) -> MigrationReport:
    """Write a Markdown copy of every JSON post that does not have one yet.

    With ``locale`` only that locale is migrated; otherwise every locale
    directory found under ``content/posts/``.

    Raises:
        UnauthorizedError: If the service has a verifier and ``token`` fails it.
    """
    service.authorize(token)
    report = MigrationReport()
    storage = service.resolver.storage
    root = keys.prefix_for(ContentType.POST)

    if locale is not None:
        try:
            found = storage.list(keys.prefix_for(ContentType.POST, locale))
        except InvalidKeyError as exc:
            report.errors.append(str(exc))
            return report
        if not found:
            report.errors.append(f"No posts found for locale {locale}")
            return report
        locales = [locale]
    else:
        listing = storage.list(root)
        locales = _locale_dirs(listing)
        legacy = [name for name in listing if name.endswith(ContentFormat.JSON.extension)]
        if legacy:
            logger.warning(
                "Skipping %d legacy post file(s) in %s; move them into a locale folder",
                len(legacy),
                root,
            )

    for loc in locales:
        try:
            _migrate_locale(service, loc, report, token)
        except InvalidKeyError as exc:
            report.errors.append(f"Cannot migrate locale {loc!r}: {exc}")
    logger.info(report.summary)
    return report
