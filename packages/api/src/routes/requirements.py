# This project was developed with assistance from AI tools.
"""Checklist, assignment, completion and progress routes.

Mutations answer with the refreshed checklist so the UI can re-render in one
round trip.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..schemas.requirement import (
    ChecklistResponse,
    CustomRequirementRequest,
    DocumentRequirement,
    ProgressResponse,
)
from ..services import assignment
from ..services.errors import (
    DocumentNotFound,
    InvalidRequirement,
    LoanNotFound,
    RequirementNotFound,
)
from ..services.progress import get_progress
from ..services.repository import LoanRepository
from ._deps import get_repository

router = APIRouter()

_NOT_FOUND = (LoanNotFound, RequirementNotFound, DocumentNotFound)


def _not_found(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/loans/{loan_id}/checklist", response_model=ChecklistResponse)
async def get_checklist(
    loan_id: int,
    repo: LoanRepository = Depends(get_repository),
) -> ChecklistResponse:
    try:
        return await assignment.get_checklist(repo, loan_id)
    except LoanNotFound as exc:
        raise _not_found(exc) from exc


@router.put(
    "/loans/{loan_id}/requirements/{name}/documents/{document_id}",
    response_model=ChecklistResponse,
)
async def assign(
    loan_id: int,
    name: str,
    document_id: int,
    repo: LoanRepository = Depends(get_repository),
) -> ChecklistResponse:
    try:
        await assignment.assign_document(repo, loan_id, name, document_id)
    except _NOT_FOUND as exc:
        raise _not_found(exc) from exc
    return await assignment.get_checklist(repo, loan_id)


@router.delete(
    "/loans/{loan_id}/requirements/{name}/documents/{document_id}",
    response_model=ChecklistResponse,
)
async def unassign(
    loan_id: int,
    name: str,
    document_id: int,
    repo: LoanRepository = Depends(get_repository),
) -> ChecklistResponse:
    try:
        await assignment.unassign_document(repo, loan_id, name, document_id)
    except _NOT_FOUND as exc:
        raise _not_found(exc) from exc
    return await assignment.get_checklist(repo, loan_id)


@router.put("/loans/{loan_id}/requirements/{name}/complete", response_model=ChecklistResponse)
async def mark_complete(
    loan_id: int,
    name: str,
    repo: LoanRepository = Depends(get_repository),
) -> ChecklistResponse:
    try:
        await assignment.mark_requirement_complete(repo, loan_id, name)
    except _NOT_FOUND as exc:
        raise _not_found(exc) from exc
    return await assignment.get_checklist(repo, loan_id)


@router.delete("/loans/{loan_id}/requirements/{name}/complete", response_model=ChecklistResponse)
async def unmark_complete(
    loan_id: int,
    name: str,
    repo: LoanRepository = Depends(get_repository),
) -> ChecklistResponse:
    try:
        await assignment.unmark_requirement_complete(repo, loan_id, name)
    except _NOT_FOUND as exc:
        raise _not_found(exc) from exc
    return await assignment.get_checklist(repo, loan_id)


@router.post(
    "/loans/{loan_id}/requirements",
    response_model=DocumentRequirement,
    status_code=201,
)
async def add_custom(
    loan_id: int,
    body: CustomRequirementRequest,
    repo: LoanRepository = Depends(get_repository),
) -> DocumentRequirement:
    try:
        return await assignment.add_custom_requirement(repo, loan_id, body.name)
    except LoanNotFound as exc:
        raise _not_found(exc) from exc
    except InvalidRequirement as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.delete("/loans/{loan_id}/requirements/{name}", status_code=204)
async def remove_custom(
    loan_id: int,
    name: str,
    repo: LoanRepository = Depends(get_repository),
) -> Response:
    try:
        await assignment.remove_custom_requirement(repo, loan_id, name)
    except _NOT_FOUND as exc:
        raise _not_found(exc) from exc
    return Response(status_code=204)


@router.get("/loans/{loan_id}/progress", response_model=ProgressResponse)
async def progress(
    loan_id: int,
    repo: LoanRepository = Depends(get_repository),
) -> ProgressResponse:
    try:
        return await get_progress(repo, loan_id)
    except LoanNotFound as exc:
        raise _not_found(exc) from exc
