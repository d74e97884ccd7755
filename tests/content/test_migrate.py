"""Tests for the JSON to Markdown post migration."""

from pathlib import Path

import pytest
from folio.auth import TokenVerifier, create_token
from folio.content.migrate import html_to_markdown, migrate_posts
from folio.content.models import ContentFormat, ContentType, PostStatus
from folio.content.service import ContentService
from folio.errors import UnauthorizedError

SECRET = "migrate-secret-long-enough-for-hs256-keys"


@pytest.fixture()
def service(resolver) -> ContentService:
    return ContentService(resolver)


def _post(slug: str, **kwargs) -> dict:
    data = {"id": f"id-{slug}", "title": slug.title(), "slug": slug, "date": "2024-05-01"}
    data.update(kwargs)
    return data


class TestHtmlToMarkdown:
    def test_headings_emphasis_and_links(self):
        html = (
            "<h2>Intro</h2><p>Some <strong>bold</strong> and <em>soft</em> text "
            'with <a href="https://example.com">a link</a>.</p>'
        )
        assert html_to_markdown(html) == (
            "## Intro\n\nSome **bold** and *soft* text with [a link](https://example.com)."
        )

    def test_code(self):
        html = '<pre><code class="language-python">print(1)</code></pre><p>Use <code>x</code></p>'
        assert html_to_markdown(html) == "```python\nprint(1)\n```\n\nUse `x`"

    def test_lists_and_blockquote(self):
        html = (
            "<ul><li>one</li><li>two</li></ul>"
            "<ol><li>first</li><li>second</li></ol>"
            "<blockquote>quoted</blockquote>"
        )
        assert html_to_markdown(html) == "- one\n- two\n\n1. first\n2. second\n\n> quoted"

    def test_short_tag_names_do_not_swallow_longer_ones(self):
        html = '<p><b>x</b><br><i>y</i><img src="a.png"></p><blockquote>q</blockquote>'
        assert html_to_markdown(html) == "**x**\n*y*\n\n> q"

    def test_entities_decoded_and_scripts_dropped(self):
        html = "<script>alert(1)</script><p>1 &lt; 2 &amp;&amp; 3&nbsp;&gt; 0</p>"
        assert html_to_markdown(html) == "1 < 2 && 3 > 0"

    def test_empty(self):
        assert html_to_markdown("") == ""
        assert html_to_markdown(None) == ""


class TestMigratePosts:
    def test_writes_markdown_and_keeps_json(self, service, resolver, put, tmp_path: Path):
        put("content/posts/en/a.json", _post(
            "a",
            content="<h2>Intro</h2><p>Some <strong>bold</strong> text</p>",
            status="draft",
            tags=["python"],
        ))

        report = migrate_posts(service)

        assert (report.migrated, report.skipped, report.errors) == (1, 0, [])
        assert (tmp_path / "content/posts/en/a.json").is_file()
        assert (tmp_path / "content/posts/en/a.md").read_text().startswith("---\nid: id-a\n")

        found = resolver.resolve(ContentType.POST, "a", "en", allow_draft=True)
        assert found.format == ContentFormat.MARKDOWN
        assert found.entity.content == "## Intro\n\nSome **bold** text"
        assert found.entity.status == PostStatus.DRAFT
        assert found.entity.tags == ["python"]

    def test_existing_markdown_is_skipped(self, service, put, tmp_path: Path):
        put("content/posts/en/a.json", _post("a", content="<p>json</p>"))
        put("content/posts/en/a.md", "---\nid: 1\ntitle: A\nslug: a\ndate: 2024-05-01\n---\nkept")
        put("content/posts/en/b.json", _post("b"))

        report = migrate_posts(service)

        assert report.migrated == 1
        assert report.skipped == 1
        assert (tmp_path / "content/posts/en/a.md").read_text().endswith("kept")
        assert (tmp_path / "content/posts/en/b.md").is_file()

    def test_rerun_skips_everything(self, service, put):
        put("content/posts/en/a.json", _post("a"))
        migrate_posts(service)
        report = migrate_posts(service)
        assert (report.migrated, report.skipped) == (0, 1)

    def test_single_locale(self, service, put, tmp_path: Path):
        put("content/posts/en/a.json", _post("a"))
        put("content/posts/de/b.json", _post("b"))

        report = migrate_posts(service, "de")

        assert report.migrated == 1
        assert (tmp_path / "content/posts/de/b.md").is_file()
        assert not (tmp_path / "content/posts/en/a.md").exists()

    def test_unknown_locale(self, service, put):
        put("content/posts/en/a.json", _post("a"))
        report = migrate_posts(service, "xx")
        assert report.migrated == 0
        assert report.errors == ["No posts found for locale xx"]

    def test_legacy_posts_left_alone(self, service, put, tmp_path: Path, caplog):
        put("content/posts/old.json", _post("old"))
        put("content/posts/en/a.json", _post("a"))

        report = migrate_posts(service)

        assert report.migrated == 1
        assert not (tmp_path / "content/posts/old.md").exists()
        assert "legacy post file" in caplog.text

    def test_undecodable_post_reported(self, service, put):
        put("content/posts/en/bad.json", "{not json")
        put("content/posts/en/good.json", _post("good"))

        report = migrate_posts(service)

        assert report.migrated == 1
        assert len(report.errors) == 1
        assert "bad" in report.errors[0]

    def test_double_encoded_entities_repaired_first(self, service, resolver, put):
        put("content/posts/en/a.json", _post("a", content="<p>R&amp;amp;D</p>"))
        migrate_posts(service)
        assert resolver.resolve(ContentType.POST, "a", "en").entity.content == "R&D"

    def test_requires_token_when_verifier_installed(self, resolver, put, tmp_path: Path):
        put("content/posts/en/a.json", _post("a"))
        guarded = ContentService(resolver, TokenVerifier(SECRET))

        with pytest.raises(UnauthorizedError):
            migrate_posts(guarded)
        assert not (tmp_path / "content/posts/en/a.md").exists()

        report = migrate_posts(guarded, token=create_token("admin", SECRET))
        assert report.migrated == 1

    def test_summary(self, service, put):
        put("content/posts/en/a.json", _post("a"))
        assert migrate_posts(service).summary == "Migrated 1 posts, skipped 0. 0 errors."
