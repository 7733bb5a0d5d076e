"""Document SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, BigInteger, Boolean, DateTime, Uuid, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false

from .base import Base, PortableJSONB, utcnow


class Document(Base):
    """An uploaded file plus its visibility and release settings.

    The bytes live in the blob store under storage_rel_path
    (``<id>/<sanitized name>``); this row only holds metadata.
    allowed_users is a JSON array of user-id strings and is only populated
    while permission is 'specific'.
    """
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    mime_type = Column(Text, nullable=False, server_default="application/octet-stream")
    size = Column(BigInteger, nullable=False, server_default="0")
    notes = Column(Text, nullable=False, server_default="", default="")
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    permission = Column(Text, nullable=False, server_default="public")
    allowed_users = Column(PortableJSONB, nullable=False, default=list)
    is_generated = Column(Boolean, nullable=False, server_default=false(), default=False)
    download_preauthorized = Column(Boolean, nullable=False, server_default=false(), default=False)
    storage_rel_path = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    owner = relationship("User", lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "permission IN ('public', 'private', 'specific')",
            name="ck_documents_permission",
        ),
        CheckConstraint("size >= 0", name="ck_documents_size"),
        Index("idx_documents_owner", "owner_id"),
        Index("idx_documents_created_at", created_at.desc()),
    )

    def __repr__(self):
        return f"<Document {self.id} name={self.name!r} permission={self.permission}>"
