"""User lifecycle manager.

Self-registered accounts start PENDING and cannot log in until an admin
approves them. Admin-created accounts are ACTIVE immediately. Approve and
disable only ever touch role=user rows, so an admin account can never be
locked out through these operations.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth.jwt import create_access_token
from ..auth.password import hash_password, verify_password
from ..auth.roles import UserRole, UserStatus, parse_role
from ..config import DEFAULT_ADMIN_PASSWORD, Settings
from ..errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidInputError,
    NotActiveError,
    NotFoundError,
)
from ..models.document import Document
from ..models.user import User
from ..observability.metrics import record_login
from ..storage.blob_store import BlobStoragePort

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("user not found")
    return user


def list_users(db: Session) -> List[User]:
    return list(db.scalars(select(User).order_by(User.created_at.desc())))


def list_pending_users(db: Session) -> List[User]:
    """Accounts awaiting approval, oldest first."""
    stmt = (
        select(User)
        .where(User.status == UserStatus.PENDING.value)
        .order_by(User.created_at.asc())
    )
    return list(db.scalars(stmt))


def register(db: Session, username: str, password: str, note: str = "") -> User:
    """Create a pending account from the public registration form.

    Raises:
        InvalidInputError: If username or password is blank
        ConflictError: If the username is taken
    """
    username = (username or "").strip()
    password = password or ""
    if not username or not password.strip():
        raise InvalidInputError("missing fields")

    user = User(
        username=username,
        email=None,
        role=UserRole.USER.value,
        status=UserStatus.PENDING.value,
        note=note or "",
        password_hash=hash_password(password),
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("username exists")

    db.refresh(user)
    logger.info("User registered, awaiting approval", extra={"user_id": user.id})
    return user


def admin_create(
    db: Session,
    username: str,
    email: Optional[str],
    password: str,
    role: str,
    actor_id: Optional[UUID] = None,
) -> User:
    """Create an ACTIVE account on behalf of an admin.

    Raises:
        InvalidInputError: If role is not admin/user or a field is blank
        ConflictError: If email or username is already in use
    """
    try:
        parsed_role = parse_role(role or "")
    except ValueError:
        raise InvalidInputError("invalid role")

    username = (username or "").strip()
    email = (email or "").strip() or None
    if not username or not password:
        raise InvalidInputError("missing fields")

    user = User(
        username=username,
        email=email,
        role=parsed_role.value,
        status=UserStatus.ACTIVE.value,
        note="",
        password_hash=hash_password(password),
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        if email is not None and db.scalar(select(User.id).where(User.email == email)):
            raise ConflictError("email exists")
        raise ConflictError("username exists")

    db.refresh(user)
    logger.info(
        "User created by admin",
        extra={"user_id": user.id, "actor_id": actor_id},
    )
    return user


def _set_status(db: Session, user_id: UUID, status: UserStatus) -> None:
    result = db.execute(
        update(User)
        .where(User.id == user_id, User.role == UserRole.USER.value)
        .values(status=status.value)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("user not found")
    db.commit()


def approve_user(db: Session, user_id: UUID, actor_id: Optional[UUID] = None) -> None:
    """pending/disabled → active. Admin rows and unknown ids are not-found."""
    _set_status(db, user_id, UserStatus.ACTIVE)
    logger.info("User approved", extra={"user_id": user_id, "actor_id": actor_id})


def disable_user(db: Session, user_id: UUID, actor_id: Optional[UUID] = None) -> None:
    """Block future logins. Tokens already issued stay valid until expiry."""
    _set_status(db, user_id, UserStatus.DISABLED)
    logger.info("User disabled", extra={"user_id": user_id, "actor_id": actor_id})


def delete_user(
    db: Session,
    user_id: UUID,
    blob_store: BlobStoragePort,
    actor_id: Optional[UUID] = None,
) -> None:
    """Remove an account together with its documents and ledger rows.

    Rows go through the foreign-key cascade; the blobs of the removed
    documents are deleted afterwards on a best-effort basis.
    """
    blob_paths = list(
        db.scalars(select(Document.storage_rel_path).where(Document.owner_id == user_id))
    )

    result = db.execute(delete(User).where(User.id == user_id))
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("user not found")
    db.commit()

    for rel_path in blob_paths:
        blob_store.delete(rel_path)

    logger.warning(
        "User deleted",
        extra={"user_id": user_id, "actor_id": actor_id},
    )


def authenticate(db: Session, identifier: str, password: str) -> User:
    """Resolve login credentials to an active user.

    The account status is checked before the password, so a pending or
    disabled account is reported as such.

    Raises:
        InvalidCredentialsError: Unknown identifier or wrong password
        NotActiveError: Account is pending or disabled
        PasswordVerifierError: Stored digest could not be checked
    """
    identifier = (identifier or "").strip()
    user = None
    if identifier:
        user = db.scalars(
            select(User)
            .where(or_(User.email == identifier, User.username == identifier))
            .order_by(User.created_at.asc())
        ).first()

    if user is None:
        record_login("invalid_credentials")
        logger.info("Login failed: unknown identifier")
        raise InvalidCredentialsError()

    if user.status != UserStatus.ACTIVE.value:
        record_login("not_active")
        logger.info(
            "Login refused: account not active",
            extra={"user_id": user.id, "reason": user.status},
        )
        raise NotActiveError()

    if not verify_password(password, user.password_hash):
        record_login("invalid_credentials")
        logger.info("Login failed: wrong password", extra={"user_id": user.id})
        raise InvalidCredentialsError()

    record_login("success")
    return user


def login(
    db: Session,
    identifier: str,
    password: str,
    now: Optional[datetime] = None,
) -> Tuple[str, User]:
    """Authenticate and issue a session token carrying the stored role."""
    user = authenticate(db, identifier, password)
    token = create_access_token(user.id, user.role, issued_at=now)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return token, user


def ensure_default_admin(db: Session, settings: Settings) -> User:
    """Make sure the configured administrator exists and can log in.

    An existing account matching the configured email or username is
    overwritten (credentials, role and status); otherwise one is created.
    The caller commits.
    """
    email = settings.DEFAULT_ADMIN_EMAIL.strip() or None
    username = settings.DEFAULT_ADMIN_USERNAME.strip()
    password_hash = hash_password(settings.DEFAULT_ADMIN_PASSWORD)

    match = [User.username == username]
    if email is not None:
        match.append(User.email == email)

    user = db.scalars(
        select(User)
        .where(or_(*match))
        .order_by(User.created_at.asc())
        .limit(1)
    ).first()

    if user is None:
        user = User(username=username, email=email, note="")
        db.add(user)
        action = "created"
    else:
        action = "reset"

    user.username = username
    user.email = email
    user.password_hash = password_hash
    user.role = UserRole.ADMIN.value
    user.status = UserStatus.ACTIVE.value
    db.flush()

    logger.info(f"Default admin {action}", extra={"user_id": user.id})
    if settings.DEFAULT_ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
        logger.warning("Default admin uses the built-in password; set DEFAULT_ADMIN_PASSWORD")
    return user
