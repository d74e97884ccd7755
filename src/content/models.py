"""Content domain models — pure Pydantic v2 data types.

Stored JSON uses camelCase keys (``scheduledDate``, ``updatedAt``,
``parentId``), so every model serializes by alias. Unknown keys in stored
entities are kept so a wholesale save does not drop them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PostStatus(StrEnum):
    """Lifecycle status of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"


class ContentFormat(StrEnum):
    """On-storage encoding of an entity."""

    JSON = "json"
    MARKDOWN = "markdown"

    @property
    def extension(self) -> str:
        return ".md" if self is ContentFormat.MARKDOWN else ".json"


class ContentType(StrEnum):
    """Kind of stored entity; the value doubles as the storage directory."""

    POST = "posts"
    PAGE = "pages"
    CATEGORY = "categories"
    TAG = "tags"

    @property
    def formats(self) -> tuple[ContentFormat, ...]:
        """Formats in resolution order. Markdown wins over JSON for posts."""
        if self is ContentType.POST:
            return (ContentFormat.MARKDOWN, ContentFormat.JSON)
        return (ContentFormat.JSON,)

    @property
    def model(self) -> type[BaseModel]:
        return _MODELS[self]


class _Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_json(self) -> str:
        """Pretty-printed JSON as written to storage."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Post(_Entity):
    """A dated blog post with lifecycle status and taxonomy."""

    id: str
    title: str
    slug: str
    content: str = ""
    excerpt: str | None = None
    date: str
    author: str | None = None
    status: PostStatus = PostStatus.PUBLISHED
    scheduled_date: str | None = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    updated_at: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: Any) -> Any:
        """A missing or empty status means published."""
        return value or PostStatus.PUBLISHED

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def _default_list(cls, value: Any) -> Any:
        return value or []

    @field_validator("scheduled_date", "updated_at", "excerpt", "author", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        return value if value != "" else None


class Page(_Entity):
    """A static page. Pages have no lifecycle fields."""

    id: str
    title: str
    slug: str
    content: str = ""


class Category(_Entity):
    """A post category, optionally nested under a parent category."""

    id: str
    name: str
    slug: str
    description: str = ""
    parent_id: str | None = None
    locale: str | None = None


class Tag(_Entity):
    """A free-form post tag."""

    id: str
    name: str
    slug: str
    description: str = ""
    locale: str | None = None


Entity = Post | Page | Category | Tag

_MODELS: dict[ContentType, type[BaseModel]] = {
    ContentType.POST: Post,
    ContentType.PAGE: Page,
    ContentType.CATEGORY: Category,
    ContentType.TAG: Tag,
}


def content_type_of(entity: Entity) -> ContentType:
    """Return the content type an entity instance is stored under."""
    for content_type, model in _MODELS.items():
        if type(entity) is model:
            return content_type
    raise TypeError(f"Not a content entity: {type(entity).__name__}")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or timestamp; naive values are taken as UTC.

    Returns None for missing or unparseable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def utc_now_iso() -> str:
    """Current time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
