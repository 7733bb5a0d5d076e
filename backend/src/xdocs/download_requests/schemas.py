"""Pydantic schemas for the download request endpoints"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from ..models.download_request import DownloadRequest
from ..users.schemas import CamelModel


class DownloadRequestCreate(BaseModel):
    """Identity disclosure supplied by the requester.

    The three applicant fields are required and must not be blank.
    """
    applicant_name: str = ""
    applicant_company: str = ""
    applicant_contact: str = ""
    message: Optional[str] = None


class DownloadRequestResponse(CamelModel):
    id: UUID
    document_id: UUID
    document_name: str
    owner_id: UUID
    owner_name: str
    requester_id: UUID
    requester_name: str
    applicant_name: str
    applicant_company: str
    applicant_contact: str
    message: str
    status: str
    approver_id: Optional[UUID] = None
    approver_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_request(cls, request: DownloadRequest) -> "DownloadRequestResponse":
        doc = request.document
        owner = doc.owner
        return cls(
            id=request.id,
            document_id=request.document_id,
            document_name=doc.name,
            owner_id=doc.owner_id,
            owner_name=owner.username if owner is not None else "",
            requester_id=request.requester_id,
            requester_name=request.requester.username if request.requester is not None else "",
            applicant_name=request.applicant_name,
            applicant_company=request.applicant_company,
            applicant_contact=request.applicant_contact,
            message=request.message or "",
            status=request.status,
            approver_id=request.approver_id,
            approver_name=request.approver.username if request.approver is not None else None,
            created_at=request.created_at,
            updated_at=request.updated_at,
            approved_at=request.approved_at,
            rejected_at=request.rejected_at,
            expires_at=request.expires_at,
        )
