"""Heuristic relevance search over posts and pages.

Scores are an additive, unbounded rank, not a probability. Components:

- title contains the query: +100, and a further +50
- +20 per query word overlapping (either way) with a title word
- body text, HTML-stripped: ``score_text`` weighted 0.3
- post excerpt, HTML-stripped: ``score_text`` weighted 0.5
- slug contains the query: +15
- posts dated within the last 30 days: +5
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from folio.content.models import Page, Post, parse_timestamp

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 50

TITLE_CONTAINS_BONUS = 100
TITLE_SUBSTRING_BONUS = 50
TITLE_WORD_BONUS = 20
SLUG_BONUS = 15
RECENCY_BONUS = 5
RECENCY_WINDOW = timedelta(days=30)

BODY_WEIGHT = 0.3
EXCERPT_WEIGHT = 0.5

PHRASE_SCORE = 100
OCCURRENCE_SCORE = 10
MATCH_BONUS = 5

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")

Searchable = Post | Page


@dataclass(frozen=True)
class SearchHit:
    """One ranked search result."""

    item: Searchable
    score: float
    locale: str | None = None

    @property
    def kind(self) -> str:
        return "post" if isinstance(self.item, Post) else "page"


def strip_html(html: str | None) -> str:
    """Plain text of an HTML fragment: scripts and styles dropped, tags to spaces."""
    if not html:
        return ""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    return _SPACE_RE.sub(" ", text).strip()


def score_text(text: str, query: str) -> float:
    """Score plain ``text`` against ``query``.

    +100 for the whole phrase, +10 per occurrence of each query word of at
    least two characters, and +5 for every component (phrase or word) that
    matched at all.
    """
    if not text or not query:
        return 0
    lower_text = text.lower()
    lower_query = query.lower()
    words = lower_query.split()
    if not words:
        return 0

    score = 0
    matches = 0
    if lower_query in lower_text:
        score += PHRASE_SCORE
        matches += 1

    for word in words:
        if len(word) < 2:
            continue
        occurrences = len(re.findall(re.escape(word), lower_text))
        if occurrences:
            score += occurrences * OCCURRENCE_SCORE
            matches += 1

    return score + matches * MATCH_BONUS


def score_item(item: Searchable, query: str, now: datetime | None = None) -> float:
    """Relevance of one post or page for ``query``."""
    lower_query = query.lower()
    title = (item.title or "").lower()
    score: float = 0

    if lower_query in title:
        score += TITLE_CONTAINS_BONUS
        score += TITLE_SUBSTRING_BONUS

    title_words = title.split()
    for word in lower_query.split():
        if any(word in t or t in word for t in title_words):
            score += TITLE_WORD_BONUS

    if isinstance(item, Post) and item.excerpt:
        score += score_text(strip_html(item.excerpt), query) * EXCERPT_WEIGHT

    score += score_text(strip_html(item.content), query) * BODY_WEIGHT

    if lower_query in (item.slug or "").lower():
        score += SLUG_BONUS

    if isinstance(item, Post):
        posted = parse_timestamp(item.date)
        if posted is not None and (now or datetime.now(tz=UTC)) - posted < RECENCY_WINDOW:
            score += RECENCY_BONUS

    return score


def search(
    query: str,
    corpus: Iterable[Searchable],
    locale: str | None = None,
    now: datetime | None = None,
) -> list[SearchHit]:
    """Rank ``corpus`` against ``query``.

    Queries shorter than two characters return no results. Only positive
    scores are kept; ties keep corpus order; at most ``MAX_RESULTS``.
    """
    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    now = now or datetime.now(tz=UTC)
    hits = []
    for item in corpus:
        score = score_item(item, query, now=now)
        if score > 0:
            hits.append(SearchHit(item=item, score=score, locale=locale))

    hits.sort(key=lambda hit: hit.score, reverse=True)
    return hits[:MAX_RESULTS]
