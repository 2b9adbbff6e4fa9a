"""SQLAlchemy Models for the student document service"""

from .base import Base
from .document import StudentDocument, StudentDocumentTranslation

__all__ = [
    "Base",
    "StudentDocument",
    "StudentDocumentTranslation",
]
