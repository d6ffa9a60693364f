"""User response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """A user as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: datetime


class AuthorResponse(BaseModel):
    """Reduced view of a user embedded in post responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
