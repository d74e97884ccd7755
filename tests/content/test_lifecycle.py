"""Tests for post visibility rules and read contexts."""

from datetime import UTC, datetime, timedelta

from folio.content.lifecycle import PUBLIC, ReadContext, due_at, is_visible
from folio.content.models import Post, PostStatus

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def _post(**kwargs) -> Post:
    data = {"id": "1", "title": "T", "slug": "t", "date": "2024-05-01T00:00:00Z"}
    data.update(kwargs)
    return Post.model_validate(data)


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


class TestIsVisible:
    def test_published_always_visible(self):
        assert is_visible(_post(status="published"), now=NOW) is True

    def test_missing_status_is_published(self):
        assert is_visible(_post(), now=NOW) is True

    def test_draft_hidden_unless_allowed(self):
        draft = _post(status="draft")
        assert is_visible(draft, now=NOW) is False
        assert is_visible(draft, allow_draft=True, now=NOW) is True
        assert is_visible(draft, allow_future_scheduled=True, now=NOW) is False

    def test_future_scheduled_hidden(self):
        post = _post(status="scheduled", scheduled_date=_iso(NOW + timedelta(hours=1)))
        assert is_visible(post, now=NOW) is False
        assert is_visible(post, allow_future_scheduled=True, now=NOW) is True

    def test_scheduled_visible_once_due(self):
        post = _post(status="scheduled", scheduled_date=_iso(NOW + timedelta(hours=1)))
        assert is_visible(post, now=NOW + timedelta(hours=1)) is True
        assert is_visible(post, now=NOW + timedelta(days=1)) is True

    def test_scheduled_without_date_uses_post_date(self):
        post = _post(status="scheduled", date=_iso(NOW - timedelta(minutes=1)))
        assert due_at(post) == NOW - timedelta(minutes=1)
        assert is_visible(post, now=NOW) is True

    def test_unparseable_due_date_stays_hidden(self):
        post = _post(status="scheduled", scheduled_date="someday")
        assert is_visible(post, now=NOW) is False

    def test_defaults_to_wall_clock(self):
        past = _post(status="scheduled", scheduled_date="2000-01-01T00:00:00Z")
        future = _post(status="scheduled", scheduled_date="2999-01-01T00:00:00Z")
        assert is_visible(past) is True
        assert is_visible(future) is False


class TestReadContext:
    def test_public_is_strict(self):
        assert PUBLIC.flags() == (False, False)
        assert PUBLIC.admits(_post(status=PostStatus.DRAFT), now=NOW) is False

    def test_preview_forces_both_flags(self):
        ctx = ReadContext(preview=True)
        assert ctx.flags() == (True, True)
        assert ReadContext.preview_mode() == ctx

    def test_preview_admits_everything(self):
        ctx = ReadContext.preview_mode()
        future = _post(status="scheduled", scheduled_date=_iso(NOW + timedelta(days=3)))
        assert ctx.admits(_post(status="draft"), now=NOW) is True
        assert ctx.admits(future, now=NOW) is True

    def test_individual_flags(self):
        ctx = ReadContext(allow_draft=True)
        future = _post(status="scheduled", scheduled_date=_iso(NOW + timedelta(days=3)))
        assert ctx.admits(_post(status="draft"), now=NOW) is True
        assert ctx.admits(future, now=NOW) is False
