# This project was developed with assistance from AI tools.
"""Funder catalog routes (read-only)."""

from fastapi import APIRouter

from ..schemas.requirement import DocumentRequirement, FunderSummary
from ..services import catalog

router = APIRouter()


@router.get("/funders", response_model=list[FunderSummary])
async def list_funders() -> list[FunderSummary]:
    return catalog.list_funders()


@router.get("/funders/{funder_id}/requirements", response_model=list[DocumentRequirement])
async def get_funder_requirements(funder_id: str) -> list[DocumentRequirement]:
    """Resolved checklist for a funder. Unknown funders get the base list."""
    return catalog.resolve_requirements(funder_id)
