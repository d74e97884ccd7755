"""Post lifecycle gate — draft / scheduled / published visibility.

Visibility is a pure function of the post and the wall clock. There is no
publishing job: a scheduled post becomes visible the first time it is read
after its due time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from folio.content.models import Post, PostStatus, parse_timestamp


def due_at(post: Post) -> datetime | None:
    """When a scheduled post goes live: ``scheduledDate``, else ``date``."""
    return parse_timestamp(post.scheduled_date or post.date)


def is_visible(
    post: Post,
    allow_draft: bool = False,
    allow_future_scheduled: bool = False,
    now: datetime | None = None,
) -> bool:
    """Return whether ``post`` may be shown in a read context.

    An unparseable due date on a scheduled post counts as not yet due.
    """
    status = post.status or PostStatus.PUBLISHED
    if status == PostStatus.DRAFT:
        return allow_draft
    if status == PostStatus.SCHEDULED:
        if allow_future_scheduled:
            return True
        due = due_at(post)
        if due is None:
            return False
        return due <= (now or datetime.now(tz=UTC))
    return True


@dataclass(frozen=True)
class ReadContext:
    """Flags a caller passes to reads. Preview forces both flags on."""

    allow_draft: bool = False
    allow_future_scheduled: bool = False
    preview: bool = False

    @classmethod
    def preview_mode(cls) -> ReadContext:
        return cls(preview=True)

    def flags(self) -> tuple[bool, bool]:
        """Effective ``(allow_draft, allow_future_scheduled)``."""
        if self.preview:
            return True, True
        return self.allow_draft, self.allow_future_scheduled

    def admits(self, post: Post, now: datetime | None = None) -> bool:
        allow_draft, allow_future = self.flags()
        return is_visible(post, allow_draft, allow_future, now=now)


PUBLIC = ReadContext()
