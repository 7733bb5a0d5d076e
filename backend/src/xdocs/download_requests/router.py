"""Download request endpoints.

Applications are filed against a document; the review queue and the
decisions live under /download-requests.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ..auth.dependencies import CurrentPrincipal
from ..database import get_db
from ..dependencies import AppSettings, ClockDep
from . import service
from .schemas import DownloadRequestCreate, DownloadRequestResponse


router = APIRouter(prefix="/download-requests", tags=["Download Requests"])
document_router = APIRouter(prefix="/documents", tags=["Download Requests"])


@document_router.post(
    "/{document_id}/download-requests",
    response_model=DownloadRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_download_request(
    document_id: UUID,
    body: DownloadRequestCreate,
    principal: CurrentPrincipal,
    clock: ClockDep,
    db: Session = Depends(get_db),
):
    """Apply for permission to download a document.

    Raises:
        400: Blank applicant fields, caller is owner/admin, or document is
            preauthorized
        403: Document not accessible
        404: Unknown document
        409: A pending request already exists
    """
    request = service.create_request(
        db,
        document_id,
        principal,
        body.applicant_name,
        body.applicant_company,
        body.applicant_contact,
        body.message,
        now=clock(),
    )
    return DownloadRequestResponse.from_request(request)


@router.get("/mine", response_model=List[DownloadRequestResponse])
def list_my_requests(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    return [DownloadRequestResponse.from_request(r) for r in service.list_mine(db, principal)]


@router.get("/pending", response_model=List[DownloadRequestResponse])
def list_pending_requests(principal: CurrentPrincipal, db: Session = Depends(get_db)):
    """Review queue: all pending requests for admins, own documents otherwise."""
    return [DownloadRequestResponse.from_request(r) for r in service.list_pending(db, principal)]


@router.post("/{request_id}/approve", status_code=status.HTTP_204_NO_CONTENT)
def approve_request(
    request_id: UUID,
    principal: CurrentPrincipal,
    clock: ClockDep,
    settings: AppSettings,
    db: Session = Depends(get_db),
):
    service.approve(db, request_id, principal, now=clock(), ttl_hours=settings.approval_ttl_hours)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{request_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
def reject_request(
    request_id: UUID,
    principal: CurrentPrincipal,
    clock: ClockDep,
    db: Session = Depends(get_db),
):
    service.reject(db, request_id, principal, now=clock())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
