"""DownloadRequest SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, DateTime, Uuid, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, text

from .base import Base, utcnow


class DownloadRequest(Base):
    """An application by a user to download a restricted document.

    The partial unique index keeps at most one pending row per
    (document, requester); decided rows are kept as history.
    """
    __tablename__ = "download_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id = Column(Uuid, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    requester_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    applicant_name = Column(Text, nullable=False)
    applicant_company = Column(Text, nullable=False)
    applicant_contact = Column(Text, nullable=False)
    message = Column(Text, nullable=False, server_default="", default="")
    status = Column(Text, nullable=False, server_default="pending", default="pending")
    approver_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)

    document = relationship("Document", lazy="joined")
    requester = relationship("User", foreign_keys=[requester_id], lazy="joined")
    approver = relationship("User", foreign_keys=[approver_id], lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_download_requests_status",
        ),
        Index(
            "uq_download_requests_pending",
            "document_id",
            "requester_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("idx_download_requests_requester", "requester_id", "created_at"),
        Index("idx_download_requests_document", "document_id"),
        Index("idx_download_requests_status", "status"),
    )

    def __repr__(self):
        return f"<DownloadRequest {self.id} status={self.status}>"
