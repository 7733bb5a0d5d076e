"""Document store operations.

Upload writes the blob first and the row second; if the row cannot be
inserted the blob is removed again on a best-effort basis. Delete goes the
other way round: row first (the ledger follows through the cascade), blob
after, and a failure to remove the blob is only logged.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.dependencies import AuthedPrincipal
from ..download_requests.service import has_active_grant
from ..errors import ApprovalRequiredError, ForbiddenError, InvalidInputError, NotFoundError
from ..models.document import Document
from ..observability.metrics import record_download_decision, record_upload
from ..storage.blob_store import BlobStoragePort
from .access import DownloadDecision, editable, filter_accessible, may_download
from .validation import (
    DEFAULT_FILENAME,
    DEFAULT_MIME_TYPE,
    normalize_allowed_users,
    parse_allowed_users,
    parse_flag,
    parse_permission,
    sanitize_filename,
)

logger = logging.getLogger(__name__)


def get_document(db: Session, document_id: UUID) -> Document:
    doc = db.get(Document, document_id)
    if doc is None:
        raise NotFoundError("document not found")
    return doc


def list_documents(db: Session, viewer: AuthedPrincipal) -> List[Document]:
    """Every document the viewer may see, newest first.

    Filtering happens in memory after fetching all rows.
    """
    rows = db.scalars(select(Document).order_by(Document.created_at.desc())).unique()
    return filter_accessible(rows, viewer)


def upload_document(
    db: Session,
    blob_store: BlobStoragePort,
    owner: AuthedPrincipal,
    data: Optional[bytes],
    filename: Optional[str],
    mime_type: Optional[str],
    notes: Optional[str] = None,
    permission: Optional[str] = None,
    allowed_users: Optional[str] = None,
    is_generated: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Document:
    """Store an uploaded file and create its document row.

    Text fields arrive as raw multipart values. A missing permission means
    public; allowed_users is a comma separated id list kept only for
    'specific'; is_generated accepts "1" or "true".

    Raises:
        InvalidInputError: No file part, or an unknown permission
        StorageError: The blob could not be written
    """
    if data is None:
        raise InvalidInputError("missing file")

    parsed_permission = parse_permission(permission or "public")
    allowed = normalize_allowed_users(parsed_permission, parse_allowed_users(allowed_users))
    name = filename or DEFAULT_FILENAME

    document_id = uuid.uuid4()
    rel_path = f"{document_id}/{sanitize_filename(name)}"

    try:
        size = blob_store.write(rel_path, data)
    except Exception:
        record_upload("error")
        raise

    doc = Document(
        id=document_id,
        name=name,
        mime_type=mime_type or DEFAULT_MIME_TYPE,
        size=size,
        notes=notes or "",
        owner_id=owner.id,
        permission=parsed_permission.value,
        allowed_users=allowed,
        is_generated=parse_flag(is_generated),
        download_preauthorized=False,
        storage_rel_path=rel_path,
    )
    if now is not None:
        doc.created_at = now
        doc.updated_at = now

    try:
        db.add(doc)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        blob_store.delete(rel_path)
        record_upload("error")
        raise

    db.refresh(doc)
    record_upload("success")
    logger.info(
        "Document uploaded",
        extra={"document_id": doc.id, "user_id": owner.id},
    )
    return doc


def patch_document(
    db: Session,
    document_id: UUID,
    editor: AuthedPrincipal,
    changes: Dict[str, Any],
    now: datetime,
) -> Document:
    """Apply a partial update; fields not in changes keep their value.

    Raises:
        NotFoundError: Unknown document
        ForbiddenError: Editor is neither the owner nor an admin
        InvalidInputError: Unknown permission
    """
    doc = get_document(db, document_id)
    if not editable(doc, editor):
        raise ForbiddenError()

    if changes.get("permission") is not None:
        permission = parse_permission(changes["permission"])
    else:
        permission = parse_permission(doc.permission)
    if "allowed_users" in changes:
        allowed = parse_allowed_users(changes["allowed_users"] or [])
    else:
        allowed = list(doc.allowed_users or [])

    if changes.get("name") is not None:
        doc.name = changes["name"]
    if changes.get("notes") is not None:
        doc.notes = changes["notes"]
    if changes.get("download_preauthorized") is not None:
        doc.download_preauthorized = bool(changes["download_preauthorized"])

    doc.permission = permission.value
    doc.allowed_users = normalize_allowed_users(permission, allowed)
    doc.updated_at = now

    db.commit()
    db.refresh(doc)
    logger.info(
        "Document updated",
        extra={"document_id": doc.id, "user_id": editor.id},
    )
    return doc


def delete_document(
    db: Session,
    blob_store: BlobStoragePort,
    document_id: UUID,
    requester: AuthedPrincipal,
) -> None:
    doc = get_document(db, document_id)
    if not editable(doc, requester):
        raise ForbiddenError()

    rel_path = doc.storage_rel_path
    db.execute(delete(Document).where(Document.id == document_id))
    db.commit()

    blob_store.delete(rel_path)
    logger.info(
        "Document deleted",
        extra={"document_id": document_id, "user_id": requester.id},
    )


def load_for_download(
    db: Session,
    blob_store: BlobStoragePort,
    document_id: UUID,
    principal: AuthedPrincipal,
    now: datetime,
) -> Tuple[Document, bytes]:
    """Run the download gate and return the document with its bytes.

    Raises:
        NotFoundError: Unknown document, or its blob is missing
        ForbiddenError: Document is not accessible to the principal
        ApprovalRequiredError: Accessible, but no unexpired approval exists
    """
    doc = get_document(db, document_id)

    def ledger_probe(doc_id: UUID, requester_id: UUID, at: datetime) -> bool:
        return has_active_grant(db, doc_id, requester_id, at)

    decision = may_download(doc, principal, ledger_probe, now)
    record_download_decision(decision.value)

    if decision == DownloadDecision.FORBIDDEN:
        raise ForbiddenError()
    if decision == DownloadDecision.APPROVAL_REQUIRED:
        logger.info(
            "Download refused: approval required",
            extra={"document_id": doc.id, "user_id": principal.id},
        )
        raise ApprovalRequiredError()

    return doc, blob_store.read(doc.storage_rel_path)

