# This project was developed with assistance from AI tools.
"""
Domain enums for loan document tracking.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class SourceChannel(str, enum.Enum):
    DRIVE = "drive"
    GMAIL = "gmail"
    UPLOAD = "upload"


class DocumentCategory(str, enum.Enum):
    """Best-guess bucket for an ingested file, inferred from its name."""

    BORROWER = "borrower"
    PROPERTY = "property"
    TITLE = "title"
    INSURANCE = "insurance"
    LOAN = "loan"
    BANKING = "banking"
    OTHER = "other"


class RequirementCategory(str, enum.Enum):
    """Checklist section a lender requirement belongs to."""

    BORROWER_ENTITY = "borrower_entity"
    FINANCIALS = "financials"
    PROPERTY = "property"
    APPRAISAL = "appraisal"
    INSURANCE = "insurance"
    TITLE = "title"
    PAYOFF = "payoff"
    LENDER_SPECIFIC = "lender_specific"
    CUSTOM = "custom"

    @classmethod
    def display_names(cls) -> dict["RequirementCategory", str]:
        """Human-readable section headings used by the checklist UI."""
        return {
            cls.BORROWER_ENTITY: "Borrower & Entity Documents",
            cls.FINANCIALS: "Financial Documents",
            cls.PROPERTY: "Property Ownership",
            cls.APPRAISAL: "Appraisal",
            cls.INSURANCE: "Insurance",
            cls.TITLE: "Title",
            cls.PAYOFF: "Payoff Information",
            cls.LENDER_SPECIFIC: "Lender-Specific Documents",
            cls.CUSTOM: "Additional Requirements",
        }
