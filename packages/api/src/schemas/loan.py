# This project was developed with assistance from AI tools.
"""Loan identity and checklist-state schemas."""

from pydantic import BaseModel, Field

from .requirement import DocumentRequirement


class LoanIdentity(BaseModel):
    """Identifying attributes used to decide whether mail belongs to a loan."""

    property_address: str | None = None
    loan_number: str | None = None
    borrower_name: str = ""
    contact_emails: set[str] = Field(default_factory=set)


class LoanRecord(BaseModel):
    """Loan row as seen by the tracking services."""

    id: int
    funder: str | None = None
    borrower_name: str = ""
    property_address: str | None = None
    loan_number: str | None = None
    drive_folder: str | None = None
    requirement_assignments: dict[str, list[int]] = Field(default_factory=dict)
    completed_requirements: list[str] = Field(default_factory=list)
    custom_requirements: list[DocumentRequirement] = Field(default_factory=list)
