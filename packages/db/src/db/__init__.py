# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import DocumentCategory, RequirementCategory, SourceChannel
from .models import Contact, Document, Loan

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "DocumentCategory",
    "RequirementCategory",
    "SourceChannel",
    # Models
    "Contact",
    "Document",
    "Loan",
]
