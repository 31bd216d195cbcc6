"""
User models.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BeforeValidator, Field, field_validator

from .base import BackendModel


class User(BackendModel):
    """Authenticated or public user profile."""
    id: str = Field(..., alias="_id")
    username: str
    email: Optional[str] = None
    bio: Optional[str] = None
    profile_pic: Optional[str] = None
    created_at: Optional[datetime] = None


class Author(BackendModel):
    """Author reference embedded in reviews and comments."""
    id: str = Field(..., alias="_id")
    username: str = ""
    profile_pic: Optional[str] = None


class ProfileUpdate(BackendModel):
    """Fields accepted by auth/update-profile. Unset fields are not sent."""
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    profile_pic: Optional[str] = None  # data URL
    password: Optional[str] = Field(None, min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if v is not None and "@" not in v:
            raise ValueError("Invalid email address")
        return v


def coerce_author(value):
    """Backend sends either a populated author or a bare id."""
    if isinstance(value, str):
        return {"_id": value}
    return value


AuthorRef = Annotated[Author, BeforeValidator(coerce_author)]
