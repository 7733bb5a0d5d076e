"""Pydantic schemas for authentication endpoints"""

from typing import Optional

from pydantic import BaseModel, Field

from ..users.schemas import UserResponse


class LoginRequest(BaseModel):
    """Request schema for user login.

    Attributes:
        email: Login identifier, matched against email or username
        password: User's password (plain text, verified against the digest)
    """
    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class RegisterRequest(BaseModel):
    """Self-registration form. The account stays pending until approved."""
    username: str = Field("", examples=["jdoe"])
    password: str = ""
    note: Optional[str] = Field("", description="Free text shown to the approving admin")
