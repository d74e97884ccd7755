"""JSON backup export and import.

Import is best-effort: every problem becomes a line in
``ImportReport.errors`` and the remaining items are still processed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from folio.content.lifecycle import ReadContext
from folio.content.models import Page, Post, PostStatus, utc_now_iso
from folio.content.service import ContentService

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0.0"


class ImportReport(BaseModel):
    """Counts of imported entities and per-item problems."""

    posts: int = 0
    pages: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        return (
            f"Imported {self.posts} posts and {self.pages} pages. "
            f"{len(self.errors)} errors."
        )


def export_backup(service: ContentService) -> dict[str, Any]:
    """Snapshot every configured locale, drafts and scheduled posts included."""
    everything = ReadContext.preview_mode()
    backup: dict[str, Any] = {
        "version": BACKUP_VERSION,
        "exportedAt": utc_now_iso(),
        "config": service.site.model_dump(mode="json", by_alias=True),
        "posts": {},
        "pages": {},
    }
    for locale in service.site.locales:
        posts = service.get_posts(locale.code, everything)
        backup["posts"][locale.code] = [post.to_dict() for post in posts]
        pages = service.get_pages(locale.code)
        backup["pages"][locale.code] = [page.to_dict() for page in pages]
    return backup


def _post_from_backup(item: dict[str, Any], locale: str) -> Post:
    data = dict(item)
    data["id"] = item.get("id") or f"{locale}-{item['slug']}"
    data["content"] = item.get("content") or ""
    data["date"] = item.get("date") or utc_now_iso()
    data["status"] = item.get("status") or PostStatus.PUBLISHED
    return Post.model_validate(data)


def _page_from_backup(item: dict[str, Any], locale: str) -> Page:
    return Page(
        id=item.get("id") or f"{locale}-{item['slug']}",
        title=item["title"],
        slug=item["slug"],
        content=item.get("content") or "",
    )


def _import_section(
    section: Any,
    kind: str,
    build: Callable[[dict[str, Any], str], Post | Page],
    save: Callable[..., bool],
    report: ImportReport,
    token: str | None,
) -> int:
    imported = 0
    if not isinstance(section, dict):
        report.errors.append(f"Invalid {kind}s format: expected an object keyed by locale")
        return 0

    for locale, items in section.items():
        if not isinstance(items, list):
            report.errors.append(f"Invalid {kind}s format for locale {locale}")
            continue
        for item in items:
            if not isinstance(item, dict) or not item.get("slug") or not item.get("title"):
                report.errors.append(
                    f"Skipping {kind} with missing slug or title in locale {locale}"
                )
                continue
            slug = item["slug"]
            try:
                entity = build(item, locale)
            except ValidationError as exc:
                report.errors.append(
                    f"Error importing {kind} {slug} in locale {locale}: "
                    f"{exc.error_count()} invalid field(s)"
                )
                continue
            if save(entity, locale, token=token):
                imported += 1
            else:
                report.errors.append(f"Failed to save {kind} {slug} in locale {locale}")
    return imported


def import_backup(
    service: ContentService, payload: dict[str, Any], token: str | None = None
) -> ImportReport:
    """Restore posts and pages from an exported backup payload.

    Raises:
        UnauthorizedError: If the service has a verifier and ``token`` fails it.
    """
    report = ImportReport()
    if not isinstance(payload, dict):
        report.errors.append("Invalid backup format")
        return report

    service.authorize(token)
    report.posts = _import_section(
        payload.get("posts", {}), "post", _post_from_backup, service.save_post, report, token,
    )
    report.pages = _import_section(
        payload.get("pages", {}), "page", _page_from_backup, service.save_page, report, token,
    )
    logger.info(report.summary)
    return report
