"""User roles and lifecycle statuses.

Two roles exist: ADMIN sees and edits everything and manages accounts,
USER owns its own documents. Admin accounts are always ACTIVE.

Status flow:
    PENDING (self-registered) → ACTIVE (admin approve) → DISABLED (admin disable)
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles in xdocs.

    Values are stored as TEXT in the database and must match exactly.
    """
    ADMIN = "admin"
    USER = "user"


class UserStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    DISABLED = "disabled"


def parse_role(value: str) -> UserRole:
    """Parse a role name, raising ValueError for anything but admin/user."""
    return UserRole(value.strip().lower())
