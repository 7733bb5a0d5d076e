"""Authentication endpoints: login and self-registration.

Both endpoints are public; every other route requires a bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..users import service as user_service
from ..users.schemas import PendingUserResponse, UserResponse
from .schemas import LoginRequest, LoginResponse, RegisterRequest


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Exchange credentials for a 24h session token.

    Raises:
        401: Unknown identifier or wrong password
        403: Account pending approval or disabled
    """
    token, user = user_service.login(db, credentials.email, credentials.password)
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post(
    "/register",
    response_model=PendingUserResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    data: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Create a pending account; an admin must approve it before login."""
    return user_service.register(db, data.username, data.password, data.note or "")
