"""Input parsing and validation for document uploads and edits"""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Union
from uuid import UUID

from ..errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "upload.bin"
DEFAULT_MIME_TYPE = "application/octet-stream"


class Permission(str, Enum):
    """Document visibility.

    PUBLIC: every user; PRIVATE: owner (and admins) only;
    SPECIFIC: owner plus the users listed in allowed_users.
    """
    PUBLIC = "public"
    PRIVATE = "private"
    SPECIFIC = "specific"


def parse_permission(value: Optional[str]) -> Permission:
    """Parse a permission name.

    Raises:
        InvalidInputError: If value is not public, private or specific
    """
    try:
        return Permission((value or "").strip())
    except ValueError:
        raise InvalidInputError("invalid permission")


def sanitize_filename(filename: str) -> str:
    """Make a display name safe to use as the last path component.

    Path separators become underscores so the name can never leave the
    document's directory.

    Example:
        >>> sanitize_filename('reports/2024\\q1.pdf')
        'reports_2024_q1.pdf'
    """
    sanitized = filename.replace("/", "_").replace("\\", "_").replace("\x00", "_")
    if sanitized in ("", ".", ".."):
        return DEFAULT_FILENAME
    return sanitized


def parse_allowed_users(raw: Union[str, Iterable[str], None]) -> List[str]:
    """Turn a comma separated list (or a list) of user ids into id strings.

    Blank entries and entries that are not UUIDs are skipped; duplicates are
    dropped keeping first occurrence.
    """
    if raw is None:
        return []
    items = raw.split(",") if isinstance(raw, str) else raw

    result: List[str] = []
    for item in items:
        item = str(item).strip()
        if not item:
            continue
        try:
            user_id = str(UUID(item))
        except ValueError:
            logger.debug("Skipping invalid id in allowed_users", extra={"value": item})
            continue
        if user_id not in result:
            result.append(user_id)
    return result


def parse_flag(raw: Optional[str]) -> bool:
    """Multipart boolean: "1" or "true" (any case) is true, anything else false."""
    if raw is None:
        return False
    value = raw.strip()
    return value == "1" or value.lower() == "true"


def normalize_allowed_users(permission: Permission, allowed_users: List[str]) -> List[str]:
    """allowed_users only survives while the document is 'specific'."""
    if permission != Permission.SPECIFIC:
        return []
    return list(allowed_users)
