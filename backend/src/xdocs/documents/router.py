"""Document endpoints: list, upload, patch, delete and download."""

from typing import List, Optional, Union
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

from ..auth.dependencies import CurrentPrincipal
from ..database import get_db
from ..dependencies import BlobStore, ClockDep
from . import service
from .schemas import DocumentPatch, DocumentResponse


router = APIRouter(prefix="/documents", tags=["Documents"])


def content_disposition(filename: str) -> str:
    """Build an attachment header that survives non latin-1 names."""
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    try:
        escaped.encode("latin-1")
        return f'attachment; filename="{escaped}"'
    except UnicodeEncodeError:
        fallback = escaped.encode("ascii", "replace").decode("ascii")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("", response_model=List[DocumentResponse])
def list_documents(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    """Documents visible to the caller, newest first."""
    return [DocumentResponse.from_document(doc) for doc in service.list_documents(db, principal)]


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    principal: CurrentPrincipal,
    blob_store: BlobStore,
    clock: ClockDep,
    db: Session = Depends(get_db),
    file: Union[UploadFile, str, None] = File(None),
    notes: Optional[str] = Form(None),
    permission: Optional[str] = Form(None),
    allowed_users: Optional[str] = Form(None),
    is_generated: Optional[str] = Form(None),
):
    """Upload a file (multipart/form-data).

    Fields: file, notes, permission (public|private|specific),
    allowed_users (comma separated ids), is_generated ("1"/"true").

    A file part sent without a filename arrives as a text field; its
    content is stored as UTF-8 under the default name and mime type.
    """
    data, filename, mime_type = None, None, None
    if isinstance(file, str):
        data = file.encode("utf-8")
    elif file is not None:
        data = file.file.read()
        filename = file.filename
        mime_type = file.content_type

    doc = service.upload_document(
        db,
        blob_store,
        principal,
        data=data,
        filename=filename,
        mime_type=mime_type,
        notes=notes,
        permission=permission,
        allowed_users=allowed_users,
        is_generated=is_generated,
        now=clock(),
    )
    return DocumentResponse.from_document(doc)


@router.patch("/{document_id}", response_model=DocumentResponse)
def patch_document(
    document_id: UUID,
    body: DocumentPatch,
    principal: CurrentPrincipal,
    clock: ClockDep,
    db: Session = Depends(get_db),
):
    changes = body.model_dump(exclude_unset=True)
    doc = service.patch_document(db, document_id, principal, changes, now=clock())
    return DocumentResponse.from_document(doc)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: UUID,
    principal: CurrentPrincipal,
    blob_store: BlobStore,
    db: Session = Depends(get_db),
):
    service.delete_document(db, blob_store, document_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/download")
def download_document(
    document_id: UUID,
    principal: CurrentPrincipal,
    blob_store: BlobStore,
    clock: ClockDep,
    db: Session = Depends(get_db),
):
    """Return the raw bytes if the download gate allows it.

    Raises:
        403: Not accessible, or accessible but lacking an unexpired approval
        404: Unknown document or missing blob
    """
    doc, data = service.load_for_download(db, blob_store, document_id, principal, now=clock())
    return Response(
        content=data,
        media_type=doc.mime_type,
        headers={"Content-Disposition": content_disposition(doc.name)},
    )
