"""User SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, DateTime, Uuid, CheckConstraint, Index, UniqueConstraint
from sqlalchemy.sql import func, text

from .base import Base, utcnow


class User(Base):
    """An account that can own documents and apply for downloads.

    Self-registered users start out pending and cannot log in until an
    administrator approves them. Passwords are stored as Argon2id digests.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    role = Column(Text, nullable=False, server_default="user")
    status = Column(Text, nullable=False, server_default="pending")
    note = Column(Text, nullable=False, server_default="", default="")
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_users_role"),
        CheckConstraint("status IN ('pending', 'active', 'disabled')", name="ck_users_status"),
        UniqueConstraint("username", name="uq_users_username"),
        Index(
            "uq_users_email",
            "email",
            unique=True,
            postgresql_where=text("email IS NOT NULL"),
            sqlite_where=text("email IS NOT NULL"),
        ),
    )

    def __repr__(self):
        return f"<User {self.username} role={self.role} status={self.status}>"
