"""Search domain — heuristic relevance ranking over stored content."""

from folio.search.engine import (
    MAX_RESULTS,
    MIN_QUERY_LENGTH,
    SearchHit,
    score_item,
    score_text,
    search,
    strip_html,
)

__all__ = [
    "MAX_RESULTS",
    "MIN_QUERY_LENGTH",
    "SearchHit",
    "score_item",
    "score_text",
    "search",
    "strip_html",
]
