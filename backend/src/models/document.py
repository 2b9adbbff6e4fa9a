"""Student document SQLAlchemy models

StudentDocument represents a file uploaded for a lesson, with its storage
location, protection level and review state. Each document has exactly one
StudentDocumentTranslation row per configured locale.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from domain.documents.models import DocumentType, ProtectionLevel
from domain.documents.review_status import ReviewStatus

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_column(enum_cls, name: str, **kwargs) -> Column:
    return Column(SQLEnum(enum_cls, name=name, native_enum=False, length=32), **kwargs)


class StudentDocument(Base):
    """Document uploaded by a student for a lesson.

    File metadata and protection level are written once at ingestion. Review
    fields change only through conditional updates from the review service.
    """
    __tablename__ = "student_document"
    __table_args__ = (
        Index("ix_student_document_owner_id", "owner_id"),
        Index("ix_student_document_lesson_id", "lesson_id"),
        Index("ix_student_document_review_status", "review_status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, nullable=False)
    lesson_id = Column(Uuid, nullable=False)
    original_file_name = Column(Text, nullable=False)
    stored_file_name = Column(Text, nullable=False)
    storage_key = Column(Text, nullable=False, unique=True)
    file_url = Column(Text, nullable=False)
    file_size_bytes = Column(BigInteger, nullable=False)
    mime_type = Column(Text, nullable=False)
    document_type = _enum_column(DocumentType, "documenttype", nullable=False)
    protection_level = _enum_column(ProtectionLevel, "protectionlevel", nullable=False)
    review_status = _enum_column(
        ReviewStatus,
        "reviewstatus",
        nullable=False,
        default=ReviewStatus.PENDING_REVIEW,
    )
    rejection_reason = Column(Text, nullable=True)  # Owner-visible
    review_notes = Column(Text, nullable=True)  # Reviewer-only
    reviewed_by = Column(Uuid, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # Relationships
    translations = relationship(
        "StudentDocumentTranslation",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="StudentDocumentTranslation.locale",
        lazy="selectin",
    )

    def to_dict(self):
        """Convert document to dictionary representation"""
        return {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "lesson_id": str(self.lesson_id),
            "original_file_name": self.original_file_name,
            "stored_file_name": self.stored_file_name,
            "file_url": self.file_url,
            "file_size_bytes": self.file_size_bytes,
            "mime_type": self.mime_type,
            "document_type": self.document_type.value if isinstance(self.document_type, enum.Enum) else self.document_type,
            "protection_level": self.protection_level.value if isinstance(self.protection_level, enum.Enum) else self.protection_level,
            "review_status": self.review_status.value if isinstance(self.review_status, enum.Enum) else self.review_status,
            "translations": [t.to_dict() for t in self.translations],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class StudentDocumentTranslation(Base):
    """Title and description of a document in one locale."""
    __tablename__ = "student_document_translation"
    __table_args__ = (
        UniqueConstraint("document_id", "locale", name="uq_student_document_translation_locale"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id = Column(
        Uuid,
        ForeignKey("student_document.id", ondelete="CASCADE"),
        nullable=False,
    )
    locale = Column(String(16), nullable=False)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)

    document = relationship("StudentDocument", back_populates="translations")

    def to_dict(self):
        return {"locale": self.locale, "title": self.title, "description": self.description}
