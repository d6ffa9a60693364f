"""Post response models and their construction from stored rows.

Single-post responses carry the whole metadata document. List items are a
lighter projection: a content excerpt and the tags only.
"""

from datetime import datetime

from pydantic import BaseModel

from src.api.schemas.users import AuthorResponse
from src.core.constants import EXCERPT_ELLIPSIS, EXCERPT_LENGTH
from src.domain.metadata import PostMetadata, deserialize_metadata
from src.infrastructure.database.models import Post, User


class TagResponse(BaseModel):
    """A tag as returned by the API."""

    name: str
    color: str | None = None


class SeoMetadataResponse(BaseModel):
    """SEO fields as returned by the API."""

    meta_title: str | None = None
    meta_description: str | None = None
    keywords: list[str]


class PostSettingsResponse(BaseModel):
    """Display settings as returned by the API."""

    allow_comments: bool
    featured: bool
    reading_time_minutes: int | None = None


class PostMetadataResponse(BaseModel):
    """The metadata document as returned by the API."""

    tags: list[TagResponse]
    seo: SeoMetadataResponse | None = None
    settings: PostSettingsResponse | None = None

    @classmethod
    def from_document(cls, metadata: PostMetadata) -> "PostMetadataResponse":
        """Convert the stored document into its response shape."""
        return cls.model_validate(metadata.model_dump())


def make_excerpt(content: str) -> str:
    """First ``EXCERPT_LENGTH`` characters, with an ellipsis if truncated."""
    if len(content) <= EXCERPT_LENGTH:
        return content
    return content[:EXCERPT_LENGTH] + EXCERPT_ELLIPSIS


class PostResponse(BaseModel):
    """A post with its author and full metadata."""

    id: int
    title: str
    content: str
    published: bool
    created_at: datetime
    updated_at: datetime | None
    author: AuthorResponse
    metadata: PostMetadataResponse

    @classmethod
    def from_entity(cls, post: Post, author: User) -> "PostResponse":
        """Build the response for a stored post and its author."""
        metadata = deserialize_metadata(post.metadata_, post_id=post.id)
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            published=post.published,
            created_at=post.created_at,
            updated_at=post.updated_at,
            author=AuthorResponse.model_validate(author),
            metadata=PostMetadataResponse.from_document(metadata),
        )


class PostListItemResponse(BaseModel):
    """A post as shown in collection listings."""

    id: int
    title: str
    excerpt: str
    published: bool
    created_at: datetime
    author: AuthorResponse
    tags: list[TagResponse]

    @classmethod
    def from_entity(cls, post: Post, author: User) -> "PostListItemResponse":
        """Build the list projection for a stored post and its author."""
        metadata = deserialize_metadata(post.metadata_, post_id=post.id)
        return cls(
            id=post.id,
            title=post.title,
            excerpt=make_excerpt(post.content),
            published=post.published,
            created_at=post.created_at,
            author=AuthorResponse.model_validate(author),
            tags=[
                TagResponse.model_validate(tag.model_dump()) for tag in metadata.tags
            ],
        )
