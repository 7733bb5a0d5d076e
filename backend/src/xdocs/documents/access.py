"""Authorization kernel.

Pure predicates over already loaded documents; nothing here touches the
database or the blob store. The ledger is consulted through a probe
callable so the download decision stays free of I/O.

- accessible: may see the document's metadata and apply for a download
- editable:   may patch or delete the document
- may_download: may fetch the bytes (a strict subset of accessible)
"""

from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional
from uuid import UUID

from ..auth.dependencies import AuthedPrincipal
from ..auth.roles import UserRole
from ..models.base import as_utc
from ..models.document import Document
from .validation import Permission

# (document_id, requester_id, now) -> True if an unexpired approval exists
LedgerProbe = Callable[[UUID, UUID, datetime], bool]


class DownloadDecision(str, Enum):
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    APPROVAL_REQUIRED = "approval_required"


def _is_owner(doc: Document, principal: AuthedPrincipal) -> bool:
    return doc.owner_id == principal.id


def accessible(doc: Document, principal: AuthedPrincipal) -> bool:
    """Whether the principal may see the document.

    Admins and owners always can; otherwise public documents are visible to
    everyone and specific documents to the listed users. Private documents
    are owner-only.
    """
    if principal.role == UserRole.ADMIN:
        return True
    if _is_owner(doc, principal):
        return True
    if doc.permission == Permission.PUBLIC.value:
        return True
    if doc.permission == Permission.SPECIFIC.value:
        return str(principal.id) in (doc.allowed_users or [])
    return False


def editable(doc: Document, principal: AuthedPrincipal) -> bool:
    return principal.role == UserRole.ADMIN or _is_owner(doc, principal)


def needs_release(doc: Document, principal: AuthedPrincipal) -> bool:
    """Whether downloading requires an approved request.

    False for admins, the owner, and on preauthorized documents.
    """
    return not (
        principal.role == UserRole.ADMIN
        or _is_owner(doc, principal)
        or doc.download_preauthorized
    )


def may_download(
    doc: Document,
    principal: AuthedPrincipal,
    ledger_probe: LedgerProbe,
    now: datetime,
) -> DownloadDecision:
    """Decide whether the principal may fetch the document's bytes.

    Accessibility is checked first, so a user who cannot see a document is
    told FORBIDDEN rather than invited to apply for it.
    """
    if not accessible(doc, principal):
        return DownloadDecision.FORBIDDEN
    if not needs_release(doc, principal):
        return DownloadDecision.ALLOWED
    if ledger_probe(doc.id, principal.id, now):
        return DownloadDecision.ALLOWED
    return DownloadDecision.APPROVAL_REQUIRED


def is_grant_active(expires_at: Optional[datetime], now: datetime) -> bool:
    """An approval counts while it has no expiry or expires strictly after now."""
    expires_at = as_utc(expires_at)
    return expires_at is None or expires_at > as_utc(now)


def filter_accessible(docs: Iterable[Document], principal: AuthedPrincipal):
    return [doc for doc in docs if accessible(doc, principal)]
