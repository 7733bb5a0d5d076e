"""Pydantic schemas for user endpoints.

Responses are serialized in lowerCamelCase; password digests are never part
of any response model.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for response models read straight from ORM rows."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserResponse(CamelModel):
    id: UUID
    username: str
    email: Optional[str] = None
    role: str
    status: str
    note: str = ""
    created_at: datetime


class PendingUserResponse(CamelModel):
    id: UUID
    username: str
    note: str = ""
    created_at: datetime


class DirectoryEntry(CamelModel):
    """Minimal identity used by clients to pick allowed_users."""
    id: UUID
    username: str
    email: Optional[str] = None


class UserCreate(BaseModel):
    """Request schema for POST /users (ADMIN only).

    Blank fields are rejected by the service with 400.
    """
    username: str = Field("", examples=["jdoe"])
    email: Optional[str] = Field(None, examples=["jdoe@example.com"])
    password: str = Field("", examples=["correct horse battery staple"])
    role: str = Field("user", examples=["user"])
