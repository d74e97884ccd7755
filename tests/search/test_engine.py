"""Tests for the heuristic search ranker."""

from datetime import UTC, datetime, timedelta

import pytest
from folio.content.models import Page, Post
from folio.search import MAX_RESULTS, score_item, score_text, search, strip_html

NOW = datetime(2024, 6, 1, tzinfo=UTC)


def _page(slug: str, title: str, content: str = "") -> Page:
    return Page(id=slug, title=title, slug=slug, content=content)


def _post(slug: str, title: str, date: str = "2020-01-01", **kwargs) -> Post:
    return Post(id=slug, title=title, slug=slug, date=date, **kwargs)


class TestStripHtml:
    def test_tags_become_spaces(self):
        assert strip_html("<p>Hello</p><p>World</p>") == "Hello World"

    def test_scripts_and_styles_dropped(self):
        html = "<style>p{}</style><p>Text</p><script>alert('x')</script>"
        assert strip_html(html) == "Text"

    def test_empty(self):
        assert strip_html("") == ""
        assert strip_html(None) == ""


class TestScoreText:
    def test_phrase_words_and_bonus(self):
        # phrase 100, "hello" x1 10, "world" x1 10, three matched components 15
        assert score_text("hello world", "Hello World") == 135

    def test_counts_every_occurrence(self):
        # "go" x3 = 30, phrase 100, two components 10
        assert score_text("go go go", "go") == 140

    def test_short_words_ignored(self):
        assert score_text("x marks", "a b") == 0

    def test_no_match(self):
        assert score_text("nothing here", "zebra") == 0
        assert score_text("", "zebra") == 0


class TestScoreItem:
    def test_hello_world(self):
        item = _page("hello-world", "Hello World", "<p>Hello</p>")
        # title 100 + 50, title word 20, body 120 * 0.3, slug 15
        assert score_item(item, "hello", now=NOW) == pytest.approx(221)

    def test_excerpt_weighted(self):
        item = _post("x", "Other", excerpt="<b>zebra</b>")
        # excerpt: phrase 100 + occurrence 10 + two components 10 = 120 * 0.5
        assert score_item(item, "zebra", now=NOW) == pytest.approx(60)

    def test_recent_post_bonus(self):
        recent = _post("r", "Zebra", date=(NOW - timedelta(days=3)).isoformat())
        old = _post("o", "Zebra", date=(NOW - timedelta(days=90)).isoformat())
        assert score_item(recent, "zebra", now=NOW) - score_item(old, "zebra", now=NOW) == 5

    def test_pages_get_no_recency(self):
        page = _page("p", "Zebra")
        assert score_item(page, "zebra", now=NOW) == 170

    def test_unrelated_scores_zero(self):
        assert score_item(_page("p", "About"), "zebra", now=NOW) == 0


class TestSearch:
    def test_single_character_query(self):
        corpus = [_page("a", "a")]
        assert search("a", corpus, now=NOW) == []
        assert search("  a  ", corpus, now=NOW) == []

    def test_two_character_query_is_scored(self):
        corpus = [_page("ab", "ab")]
        hits = search("ab", corpus, now=NOW)
        assert len(hits) == 1
        assert hits[0].score > 0

    def test_title_and_body_match(self):
        corpus = [_page("hello-world", "Hello World", "<p>Hello</p>")]
        hits = search("hello", corpus, now=NOW)
        assert len(hits) == 1
        assert hits[0].kind == "page"
        assert hits[0].score > 0

    def test_sorted_descending_and_filtered(self):
        corpus = [
            _page("body", "Unrelated", "python"),
            _page("none", "Nothing"),
            _page("python", "Python"),
        ]
        hits = search("python", corpus, now=NOW)
        assert [h.item.slug for h in hits] == ["python", "body"]

    def test_ties_keep_corpus_order(self):
        corpus = [_page(f"p{i}", "Same title", "x") for i in range(5)]
        hits = search("same", corpus, now=NOW)
        assert [h.item.slug for h in hits] == ["p0", "p1", "p2", "p3", "p4"]

    def test_capped(self):
        corpus = [_page(f"p{i}", "Zebra") for i in range(MAX_RESULTS + 10)]
        hits = search("zebra", corpus, now=NOW)
        assert len(hits) == MAX_RESULTS
        assert hits[-1].item.slug == f"p{MAX_RESULTS - 1}"

    def test_locale_attached(self):
        hits = search("zebra", [_page("z", "Zebra")], locale="de", now=NOW)
        assert hits[0].locale == "de"
        assert hits[0].kind == "page"

    def test_post_kind(self):
        hits = search("zebra", [_post("z", "Zebra")], now=NOW)
        assert hits[0].kind == "post"
