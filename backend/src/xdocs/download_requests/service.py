"""Release workflow over the download request ledger.

A requester who can see a document but not download it applies with an
identity disclosure; the document owner or an admin approves or rejects.
Approvals carry an expiry that is only checked when a download is
attempted: no sweeper rewrites expired rows, they simply stop counting,
and since no pending row remains the requester may apply again.

At most one pending row per (document, requester) is enforced by the
partial unique index uq_download_requests_pending, not by a prior read.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth.dependencies import AuthedPrincipal
from ..documents.access import accessible, is_grant_active
from ..errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from ..models.document import Document
from ..models.download_request import DownloadRequest
from ..observability.metrics import record_release_action
from .status import RequestStatus, get_source_states

logger = logging.getLogger(__name__)


def create_request(
    db: Session,
    document_id: UUID,
    requester: AuthedPrincipal,
    applicant_name: str,
    applicant_company: str,
    applicant_contact: str,
    message: Optional[str],
    now: datetime,
) -> DownloadRequest:
    """File a pending download request.

    Raises:
        InvalidInputError: Blank applicant fields, requester needs no
            approval (admin/owner), or the document is preauthorized
        NotFoundError: Unknown document
        ForbiddenError: Document not accessible to the requester
        ConflictError: A pending request already exists
    """
    applicant_name = (applicant_name or "").strip()
    applicant_company = (applicant_company or "").strip()
    applicant_contact = (applicant_contact or "").strip()
    if not applicant_name or not applicant_company or not applicant_contact:
        raise InvalidInputError("applicant name, company and contact are required")

    doc = db.get(Document, document_id)
    if doc is None:
        raise NotFoundError("document not found")
    if not accessible(doc, requester):
        raise ForbiddenError()

    if requester.is_admin or doc.owner_id == requester.id:
        raise InvalidInputError("no need to request")
    if doc.download_preauthorized:
        raise InvalidInputError("download preauthorized")

    request = DownloadRequest(
        document_id=doc.id,
        requester_id=requester.id,
        applicant_name=applicant_name,
        applicant_company=applicant_company,
        applicant_contact=applicant_contact,
        message=(message or "").strip(),
        status=RequestStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(request)
        db.commit()
    except IntegrityError:
        db.rollback()
        record_release_action("conflict")
        raise ConflictError("a pending request already exists")

    db.refresh(request)
    record_release_action("created")
    logger.info(
        "Download request created",
        extra={
            "download_request_id": request.id,
            "document_id": doc.id,
            "user_id": requester.id,
        },
    )
    return request


def list_mine(db: Session, requester: AuthedPrincipal) -> List[DownloadRequest]:
    """All of the requester's applications, newest first."""
    stmt = (
        select(DownloadRequest)
        .where(DownloadRequest.requester_id == requester.id)
        .order_by(DownloadRequest.created_at.desc())
    )
    return list(db.scalars(stmt).unique())


def list_pending(db: Session, viewer: AuthedPrincipal) -> List[DownloadRequest]:
    """The review queue, oldest first.

    Admins see every pending request; anyone else only those on documents
    they own.
    """
    stmt = select(DownloadRequest).where(
        DownloadRequest.status == RequestStatus.PENDING.value
    )
    if not viewer.is_admin:
        owned = select(Document.id).where(Document.owner_id == viewer.id)
        stmt = stmt.where(DownloadRequest.document_id.in_(owned))
    stmt = stmt.order_by(DownloadRequest.created_at.asc())
    return list(db.scalars(stmt).unique())


def _decide(
    db: Session,
    request_id: UUID,
    approver: AuthedPrincipal,
    target: RequestStatus,
    values: dict,
) -> None:
    """Move a request to target with a single conditional UPDATE.

    The row must still be in a state that may reach target and, unless the
    approver is an admin, belong to a document the approver owns. Zero
    affected rows is reported as not-found whether the request is unknown,
    already decided or not the approver's to decide.
    """
    sources = [status.value for status in get_source_states(target)]
    stmt = update(DownloadRequest).where(
        DownloadRequest.id == request_id,
        DownloadRequest.status.in_(sources),
    )
    if not approver.is_admin:
        owned = select(Document.id).where(Document.owner_id == approver.id)
        stmt = stmt.where(DownloadRequest.document_id.in_(owned))

    stmt = stmt.values(status=target.value, approver_id=approver.id, **values)
    result = db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("request not found")
    db.commit()


def approve(
    db: Session,
    request_id: UUID,
    approver: AuthedPrincipal,
    now: datetime,
    ttl_hours: int,
) -> None:
    """Grant the download until now + ttl_hours (at least one hour)."""
    expires_at = now + timedelta(hours=max(1, ttl_hours))
    _decide(
        db,
        request_id,
        approver,
        RequestStatus.APPROVED,
        {"approved_at": now, "updated_at": now, "expires_at": expires_at},
    )
    record_release_action("approved")
    logger.info(
        "Download request approved",
        extra={"download_request_id": request_id, "actor_id": approver.id},
    )


def reject(db: Session, request_id: UUID, approver: AuthedPrincipal, now: datetime) -> None:
    _decide(
        db,
        request_id,
        approver,
        RequestStatus.REJECTED,
        {"rejected_at": now, "updated_at": now},
    )
    record_release_action("rejected")
    logger.info(
        "Download request rejected",
        extra={"download_request_id": request_id, "actor_id": approver.id},
    )


def has_active_grant(db: Session, document_id: UUID, requester_id: UUID, now: datetime) -> bool:
    """Whether an approved, unexpired request exists for the pair."""
    expiries = db.scalars(
        select(DownloadRequest.expires_at).where(
            DownloadRequest.document_id == document_id,
            DownloadRequest.requester_id == requester_id,
            DownloadRequest.status == RequestStatus.APPROVED.value,
        )
    )
    return any(is_grant_active(expires_at, now) for expires_at in expiries)
