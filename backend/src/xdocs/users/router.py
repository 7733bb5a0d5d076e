"""User management endpoints.

/users/* is ADMIN only. /me and /user-directory are open to any
authenticated user.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..auth.dependencies import AdminPrincipal, CurrentPrincipal
from ..database import get_db
from ..dependencies import BlobStore
from ..models.user import User
from . import service
from .schemas import DirectoryEntry, PendingUserResponse, UserCreate, UserResponse


router = APIRouter(prefix="/users", tags=["User Management"])
account_router = APIRouter(tags=["Account"])


@router.get("", response_model=List[UserResponse], summary="List all users (ADMIN only)")
def list_users(admin: AdminPrincipal, db: Session = Depends(get_db)):
    return service.list_users(db)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an active user (ADMIN only)",
)
def create_user(data: UserCreate, admin: AdminPrincipal, db: Session = Depends(get_db)):
    """Create a user that can log in immediately.

    Raises:
        400: Invalid role or blank username/password
        409: Email or username already exists
    """
    return service.admin_create(
        db, data.username, data.email, data.password, data.role, actor_id=admin.id
    )


@router.get(
    "/pending",
    response_model=List[PendingUserResponse],
    summary="List registrations awaiting approval (ADMIN only)",
)
def list_pending_users(admin: AdminPrincipal, db: Session = Depends(get_db)):
    return service.list_pending_users(db)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: UUID,
    admin: AdminPrincipal,
    blob_store: BlobStore,
    db: Session = Depends(get_db),
):
    """Delete a user, their documents (rows and blobs) and their ledger rows."""
    service.delete_user(db, user_id, blob_store, actor_id=admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/approve", status_code=status.HTTP_204_NO_CONTENT)
def approve_user(user_id: UUID, admin: AdminPrincipal, db: Session = Depends(get_db)):
    service.approve_user(db, user_id, actor_id=admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{user_id}/disable", status_code=status.HTTP_204_NO_CONTENT)
def disable_user(user_id: UUID, admin: AdminPrincipal, db: Session = Depends(get_db)):
    service.disable_user(db, user_id, actor_id=admin.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@account_router.get("/me", response_model=UserResponse)
def me(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    """The live record of the token's user; 404 once the account is gone."""
    return service.get_user(db, principal.id)


@account_router.get("/user-directory", response_model=List[DirectoryEntry])
def user_directory(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    return list(db.scalars(select(User).order_by(User.created_at.desc())))
