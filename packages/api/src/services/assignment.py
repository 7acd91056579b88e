# This project was developed with assistance from AI tools.
"""Assignment store: which documents satisfy which requirement, and which
requirements a human has marked done.

The two are deliberately independent -- a requirement can be marked complete
with nothing assigned (satisfied over the phone) or have documents assigned
and still be open. Deleting a document never touches its assignments, so a
restore brings the document back exactly where it was filed.

Every mutation re-reads the loan (row-locked) and persists before returning;
there is no in-memory copy to drift from the stored one.
"""

import logging
import re

from db.enums import RequirementCategory

from ..schemas.loan import LoanRecord
from ..schemas.requirement import ChecklistItem, ChecklistResponse, DocumentRequirement
from .catalog import resolve_requirements
from .errors import DocumentNotFound, InvalidRequirement, LoanNotFound, RequirementNotFound
from .repository import LoanRepository

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def resolve_loan_requirements(loan: LoanRecord) -> list[DocumentRequirement]:
    """Funder catalog followed by the loan's custom requirements."""
    return [*resolve_requirements(loan.funder), *loan.custom_requirements]


def _requirement_names(loan: LoanRecord) -> set[str]:
    return {r.name for r in resolve_loan_requirements(loan)}


async def _load(repo: LoanRepository, loan_id: int) -> LoanRecord:
    loan = await repo.get_loan(loan_id, for_update=True)
    if loan is None:
        raise LoanNotFound(f"Loan {loan_id} not found")
    return loan


def _require(loan: LoanRecord, requirement_name: str) -> None:
    if requirement_name not in _requirement_names(loan):
        raise RequirementNotFound(
            f"Requirement '{requirement_name}' is not on the checklist for loan {loan.id}"
        )


async def _save(repo: LoanRepository, loan: LoanRecord) -> None:
    await repo.save_tracking(
        loan.id,
        assignments=loan.requirement_assignments,
        completed=loan.completed_requirements,
        custom=loan.custom_requirements,
    )


async def assign_document(
    repo: LoanRepository, loan_id: int, requirement_name: str, document_id: int
) -> LoanRecord:
    """Link a document to a requirement. Assigning twice is a no-op."""
    loan = await _load(repo, loan_id)
    _require(loan, requirement_name)
    doc = await repo.get_document(document_id)
    if doc is None or doc.loan_id != loan_id:
        raise DocumentNotFound(f"Document {document_id} not found on loan {loan_id}")

    assigned = loan.requirement_assignments.setdefault(requirement_name, [])
    if document_id not in assigned:
        assigned.append(document_id)
        await _save(repo, loan)
        logger.info("Assigned document %s to '%s' on loan %s", document_id, requirement_name, loan_id)
    return loan


async def unassign_document(
    repo: LoanRepository, loan_id: int, requirement_name: str, document_id: int
) -> LoanRecord:
    loan = await _load(repo, loan_id)
    _require(loan, requirement_name)
    assigned = loan.requirement_assignments.get(requirement_name, [])
    if document_id in assigned:
        assigned.remove(document_id)
        if not assigned:
            del loan.requirement_assignments[requirement_name]
        await _save(repo, loan)
        logger.info(
            "Unassigned document %s from '%s' on loan %s", document_id, requirement_name, loan_id
        )
    return loan


async def mark_requirement_complete(
    repo: LoanRepository, loan_id: int, requirement_name: str
) -> LoanRecord:
    loan = await _load(repo, loan_id)
    _require(loan, requirement_name)
    if requirement_name not in loan.completed_requirements:
        loan.completed_requirements.append(requirement_name)
        await _save(repo, loan)
    return loan


async def unmark_requirement_complete(
    repo: LoanRepository, loan_id: int, requirement_name: str
) -> LoanRecord:
    loan = await _load(repo, loan_id)
    _require(loan, requirement_name)
    if requirement_name in loan.completed_requirements:
        loan.completed_requirements.remove(requirement_name)
        await _save(repo, loan)
    return loan


def _custom_id(name: str, taken: set[str]) -> str:
    base = "custom_" + (_SLUG_RE.sub("_", name.lower()).strip("_") or "requirement")
    candidate, n = base, 2
    while candidate in taken:
        candidate = f"{base}_{n}"
        n += 1
    return candidate


async def add_custom_requirement(
    repo: LoanRepository, loan_id: int, name: str
) -> DocumentRequirement:
    """Add an ad-hoc requirement (category ``custom``, required) to a loan."""
    name = (name or "").strip()
    if not name:
        raise InvalidRequirement("Custom requirement name must not be blank")

    loan = await _load(repo, loan_id)
    existing = resolve_loan_requirements(loan)
    if name.lower() in {r.name.lower() for r in existing}:
        raise InvalidRequirement(f"Requirement '{name}' already exists on loan {loan_id}")

    requirement = DocumentRequirement(
        id=_custom_id(name, {r.id for r in existing}),
        name=name,
        category=RequirementCategory.CUSTOM,
        required=True,
    )
    loan.custom_requirements.append(requirement)
    await _save(repo, loan)
    logger.info("Added custom requirement '%s' to loan %s", name, loan_id)
    return requirement


async def remove_custom_requirement(repo: LoanRepository, loan_id: int, name: str) -> None:
    """Remove a custom requirement along with its completion mark and assignments."""
    loan = await _load(repo, loan_id)
    remaining = [r for r in loan.custom_requirements if r.name != name]
    if len(remaining) == len(loan.custom_requirements):
        raise RequirementNotFound(f"Custom requirement '{name}' not found on loan {loan_id}")

    loan.custom_requirements = remaining
    loan.completed_requirements = [n for n in loan.completed_requirements if n != name]
    loan.requirement_assignments.pop(name, None)
    await _save(repo, loan)
    logger.info("Removed custom requirement '%s' from loan %s", name, loan_id)


async def get_checklist(repo: LoanRepository, loan_id: int) -> ChecklistResponse:
    loan = await repo.get_loan(loan_id)
    if loan is None:
        raise LoanNotFound(f"Loan {loan_id} not found")
    completed = set(loan.completed_requirements)
    items = [
        ChecklistItem(
            requirement=r,
            completed=r.name in completed,
            document_ids=list(loan.requirement_assignments.get(r.name, [])),
        )
        for r in resolve_loan_requirements(loan)
    ]
    return ChecklistResponse(loan_id=loan.id, funder=loan.funder, items=items)
