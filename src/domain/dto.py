"""Inbound data transfer objects and their validation rules.

Every nesting level of a request body is its own model, so each level can be
validated on its own and the parent simply declares the child type. Pydantic
walks the whole object graph and reports every failing field at once, which
is what lets the API answer with the complete list of violations instead of
the first one.

Update DTOs make every field optional. ``changes()`` returns only the fields
the caller actually sent with a non-null value, so absent fields leave the
stored entity untouched.

Scalars are strict: a JSON value of the wrong type is rejected instead of
coerced, so ``"1"`` is not an id and ``"yes"`` is not a boolean. Those type
errors, like missing required fields, mean the body does not have the
expected shape and are answered as malformed rather than as violations.
"""

from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
)

MAX_EMAIL_LENGTH = 255
MAX_TAGS = 10
MAX_KEYWORDS = 10


def _check_email_length(value: str) -> str:
    if len(value) > MAX_EMAIL_LENGTH:
        msg = f"Email must be at most {MAX_EMAIL_LENGTH} characters"
        raise ValueError(msg)
    return value


Email = Annotated[EmailStr, AfterValidator(_check_email_length)]


class _Dto(BaseModel):
    model_config = ConfigDict(extra="ignore")


class _UpdateDto(_Dto):
    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller, excluding nulls.

        Returns:
            dict[str, Any]: Field name to validated value.
        """
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class CreateTagDto(_Dto):
    """A tag attached to a post."""

    name: StrictStr = Field(min_length=1, max_length=50)
    color: StrictStr | None = Field(default=None, max_length=7)


class CreateSeoMetadataDto(_Dto):
    """Search engine metadata of a post."""

    meta_title: StrictStr | None = Field(default=None, max_length=70)
    meta_description: StrictStr | None = Field(default=None, max_length=160)
    keywords: list[StrictStr] | None = Field(default=None, max_length=MAX_KEYWORDS)


class CreatePostSettingsDto(_Dto):
    """Display settings of a post."""

    allow_comments: StrictBool | None = None
    featured: StrictBool | None = None
    reading_time_minutes: StrictInt | None = Field(default=None, ge=1, le=60)


class CreatePostMetadataDto(_Dto):
    """Nested metadata document sent with a post."""

    tags: list[CreateTagDto] | None = Field(default=None, max_length=MAX_TAGS)
    seo: CreateSeoMetadataDto | None = None
    settings: CreatePostSettingsDto | None = None


class CreatePostDto(_Dto):
    """Body of a post creation request."""

    title: StrictStr = Field(min_length=3, max_length=255)
    content: StrictStr = Field(min_length=10)
    author_id: StrictInt = Field(ge=1)
    metadata: CreatePostMetadataDto | None = None
    published: StrictBool | None = None


class UpdatePostDto(_UpdateDto):
    """Body of a post update request; the author cannot be changed."""

    title: StrictStr | None = Field(default=None, min_length=3, max_length=255)
    content: StrictStr | None = Field(default=None, min_length=10)
    metadata: CreatePostMetadataDto | None = None
    published: StrictBool | None = None


class CreateUserDto(_Dto):
    """Body of a user creation request."""

    username: StrictStr = Field(min_length=3, max_length=50)
    email: Email


class UpdateUserDto(_UpdateDto):
    """Body of a user update request."""

    username: StrictStr | None = Field(default=None, min_length=3, max_length=50)
    email: Email | None = None
