# This project was developed with assistance from AI tools.
"""Requirement catalog, checklist and progress schemas."""

from db.enums import RequirementCategory
from pydantic import BaseModel, ConfigDict, Field


class DocumentRequirement(BaseModel):
    """A named document obligation on a funder's checklist."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: RequirementCategory
    required: bool = True
    funder_specific: bool = False
    description: str | None = None


class FunderSummary(BaseModel):
    id: str
    name: str
    requirement_count: int


class ChecklistItem(BaseModel):
    """A requirement together with its completion mark and assigned documents."""

    requirement: DocumentRequirement
    completed: bool = False
    document_ids: list[int] = []


class ChecklistResponse(BaseModel):
    loan_id: int
    funder: str | None = None
    items: list[ChecklistItem]


class CustomRequirementRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class ProgressResponse(BaseModel):
    """Percent complete over required requirements, overall and per category."""

    overall: int
    by_category: dict[str, int]
