"""Pydantic schemas for document endpoints"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..models.document import Document
from ..users.schemas import CamelModel


class DocumentResponse(CamelModel):
    """Document metadata as returned to clients.

    ``type`` and ``mimeType`` carry the same value; older clients read the
    former.
    """
    id: UUID
    name: str
    type: str
    mime_type: str
    size: int
    notes: str
    owner_id: UUID
    owner_name: str
    permission: str
    allowed_users: List[str]
    is_generated: bool
    download_preauthorized: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentResponse":
        return cls(
            id=doc.id,
            name=doc.name,
            type=doc.mime_type,
            mime_type=doc.mime_type,
            size=doc.size,
            notes=doc.notes,
            owner_id=doc.owner_id,
            owner_name=doc.owner.username if doc.owner is not None else "",
            permission=doc.permission,
            allowed_users=list(doc.allowed_users or []),
            is_generated=doc.is_generated,
            download_preauthorized=doc.download_preauthorized,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )


class DocumentPatch(BaseModel):
    """PATCH /documents/{id} body. Omitted fields are left unchanged.

    Keys are snake_case; the camelCase spellings are accepted too.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    notes: Optional[str] = None
    permission: Optional[str] = None
    allowed_users: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("allowed_users", "allowedUsers")
    )
    download_preauthorized: Optional[bool] = Field(
        None, validation_alias=AliasChoices("download_preauthorized", "downloadPreauthorized")
    )
