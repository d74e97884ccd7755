"""Frontmatter codec for Markdown documents.

The header is a deliberately narrow subset of YAML::

    ---
    id: post-1
    title: "Hello: World"
    date: 2024-05-01T09:00:00Z
    ---
    Body text...

Supported: one ``key: value`` scalar per line, optional single or double
quotes, and ``\\"``, ``\\\\`` and ``\\n`` escapes inside double quotes.
NOT supported: multi-line scalars, block or flow lists, nested maps,
anchors, or typed values. Every value is a string; a line that does not
look like ``key: value`` is ignored rather than guessed at.

An empty header is never written: ``encode({}, body)`` returns ``body``
as is, so a body that starts with a ``---`` line and has another ``---``
line further down decodes back as a header. Posts always have their
required fields, so only direct ``encode`` calls can hit this.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from folio.content.models import Post
from folio.errors import DecodeFailure

logger = logging.getLogger(__name__)

DELIMITER = "---"

REQUIRED_POST_FIELDS = ("id", "title", "slug", "date")

# Order of header fields written for a post
_POST_FIELDS = (
    "id",
    "title",
    "slug",
    "date",
    "excerpt",
    "author",
    "status",
    "scheduledDate",
    "updatedAt",
    "categories",
    "tags",
)
_LIST_FIELDS = ("categories", "tags")


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def _unescape(value: str) -> str:
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        if nxt == "n":
            out.append("\n")
        elif nxt in ('"', "\\"):
            out.append(nxt)
        else:
            out.append(ch + nxt)
    return "".join(out)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _unescape(value[1:-1])
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    return value


def _needs_quotes(value: str) -> bool:
    if not value:
        return False
    if any(ch in value for ch in (":", "\n", '"', "\\")):
        return True
    if value != value.strip():
        return True
    return value[0] in ("'", "#") or value[-1] == "'"


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def decode(text: str) -> tuple[dict[str, str], str]:
    """Split a document into its header fields and body.

    Never raises: input without a complete header is returned as body with
    an empty field mapping.
    """
    lines = text.split("\n")
    if not lines or not _is_delimiter(lines[0]):
        return {}, text

    for end in range(1, len(lines)):
        if _is_delimiter(lines[end]):
            break
    else:
        return {}, text

    fields: dict[str, str] = {}
    for raw in lines[1:end]:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        fields[key] = _unquote(value.strip())

    return fields, "\n".join(lines[end + 1:])


def encode(fields: Mapping[str, object | None], body: str) -> str:
    """Render ``fields`` as a header followed directly by ``body``.

    ``None`` values are omitted. With nothing left to write the body is
    returned unchanged.
    """
    lines: list[str] = []
    for key, value in fields.items():
        if value is None:
            continue
        text = str(value)
        lines.append(f"{key}: {_quote(text) if _needs_quotes(text) else text}")

    if not lines:
        return body
    return "\n".join([DELIMITER, *lines, DELIMITER]) + "\n" + body


# ── Post mapping ─────────────────────────────────────────────────


def post_to_markdown(post: Post, body: str | None = None) -> str:
    """Serialize a post as frontmatter plus Markdown/HTML body.

    List fields are written as comma-separated scalars.
    """
    data = post.to_dict()
    fields: dict[str, object | None] = {}
    for key in _POST_FIELDS:
        value = data.get(key)
        if key in _LIST_FIELDS:
            value = ", ".join(value) if value else None
        fields[key] = value or None
    return encode(fields, post.content if body is None else body)


def markdown_to_post(text: str) -> Post:
    """Build a post from a frontmatter document.

    Raises:
        DecodeFailure: If a required header field is missing or the
            header does not validate as a post.
    """
    fields, body = decode(text)
    missing = [key for key in REQUIRED_POST_FIELDS if not fields.get(key)]
    if missing:
        raise DecodeFailure(f"frontmatter missing required fields: {', '.join(missing)}")

    data: dict[str, object] = dict(fields)
    for key in _LIST_FIELDS:
        raw = fields.get(key, "")
        data[key] = [item.strip() for item in raw.split(",") if item.strip()]
    data["content"] = body.strip()

    try:
        return Post.model_validate(data)
    except ValueError as exc:
        raise DecodeFailure(f"invalid post frontmatter: {exc}") from exc
