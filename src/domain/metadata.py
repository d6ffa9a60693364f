"""The metadata document stored with every post.

The document is a plain aggregate: tags, optional SEO data and optional
display settings. It is persisted as one JSON value and read back leniently.
A stored value that does not match the shape yields the default document and
a warning log, so one corrupt row never breaks a whole listing.
"""

from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.core.types import JsonValue
from src.domain.dto import (
    CreatePostMetadataDto,
    CreatePostSettingsDto,
    CreateSeoMetadataDto,
    CreateTagDto,
)


class Tag(BaseModel):
    """A tag of a post."""

    model_config = ConfigDict(frozen=True)

    name: str
    color: str | None = None


class SeoMetadata(BaseModel):
    """SEO fields of a post. ``keywords`` is always a list once stored."""

    model_config = ConfigDict(frozen=True)

    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str] = Field(default_factory=list)


class PostSettings(BaseModel):
    """Display settings of a post."""

    model_config = ConfigDict(frozen=True)

    allow_comments: bool = False
    featured: bool = False
    reading_time_minutes: int | None = None


class PostMetadata(BaseModel):
    """The complete metadata document."""

    model_config = ConfigDict(frozen=True)

    tags: list[Tag] = Field(default_factory=list)
    seo: SeoMetadata | None = None
    settings: PostSettings | None = None


def _tag_from_dto(dto: CreateTagDto) -> Tag:
    return Tag(name=dto.name, color=dto.color)


def _seo_from_dto(dto: CreateSeoMetadataDto) -> SeoMetadata:
    return SeoMetadata(
        meta_title=dto.meta_title,
        meta_description=dto.meta_description,
        keywords=list(dto.keywords or []),
    )


def _settings_from_dto(dto: CreatePostSettingsDto) -> PostSettings:
    return PostSettings(
        allow_comments=bool(dto.allow_comments),
        featured=bool(dto.featured),
        reading_time_minutes=dto.reading_time_minutes,
    )


def metadata_from_dto(dto: CreatePostMetadataDto | None) -> PostMetadata:
    """Convert validated request metadata into the stored document.

    Absent tags become an empty list; absent seo and settings stay ``None``.

    Args:
        dto: Validated metadata from the request, or None if it was omitted.

    Returns:
        PostMetadata: The document to persist.
    """
    if dto is None:
        return PostMetadata()
    return PostMetadata(
        tags=[_tag_from_dto(tag) for tag in dto.tags or []],
        seo=_seo_from_dto(dto.seo) if dto.seo is not None else None,
        settings=_settings_from_dto(dto.settings) if dto.settings is not None else None,
    )


def serialize_metadata(metadata: PostMetadata) -> dict[str, Any]:
    """Render the document as a JSON-compatible value for the JSON column."""
    return metadata.model_dump(mode="json")


def deserialize_metadata(value: JsonValue, post_id: int | None = None) -> PostMetadata:
    """Parse a stored JSON value back into the document.

    Args:
        value: Raw value read from the JSON column.
        post_id: Id of the owning post, used for the warning log only.

    Returns:
        PostMetadata: The parsed document, or the default document when the
        value does not match the expected shape.
    """
    if value is None:
        return PostMetadata()
    try:
        return PostMetadata.model_validate(value)
    except ValidationError as e:
        logger.warning(
            "Stored post metadata could not be parsed, using defaults",
            post_id=post_id,
            error_count=e.error_count(),
        )
        return PostMetadata()
