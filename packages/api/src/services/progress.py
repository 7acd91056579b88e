# This project was developed with assistance from AI tools.
"""Checklist progress aggregation.

Progress counts only *required* requirements that a human marked complete.
The overall figure is taken over the union of required requirements, not as
an average of the per-category figures, so small categories don't skew it.
A category (or loan) with nothing required reports 0.
"""

from collections.abc import Iterable

from ..schemas.requirement import DocumentRequirement, ProgressResponse
from .assignment import resolve_loan_requirements
from .errors import LoanNotFound
from .repository import LoanRepository


def _percent(done: int, total: int) -> int:
    """Integer percentage rounded half-up; 0 when there is nothing to do."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


def _completion_ratio(
    requirements: Iterable[DocumentRequirement], completed: set[str]
) -> tuple[int, int]:
    required = [r for r in requirements if r.required]
    done = sum(1 for r in required if r.name in completed)
    return done, len(required)


def category_percentage(
    requirements: Iterable[DocumentRequirement], completed: Iterable[str], category: str
) -> int:
    in_category = [r for r in requirements if r.category.value == category]
    return _percent(*_completion_ratio(in_category, set(completed)))


def compute_progress(
    requirements: list[DocumentRequirement], completed: Iterable[str]
) -> ProgressResponse:
    completed = set(completed)
    by_category: dict[str, int] = {}
    for category in dict.fromkeys(r.category.value for r in requirements):
        by_category[category] = category_percentage(requirements, completed, category)
    return ProgressResponse(
        overall=_percent(*_completion_ratio(requirements, completed)),
        by_category=by_category,
    )


async def get_progress(repo: LoanRepository, loan_id: int) -> ProgressResponse:
    loan = await repo.get_loan(loan_id)
    if loan is None:
        raise LoanNotFound(f"Loan {loan_id} not found")
    return compute_progress(resolve_loan_requirements(loan), loan.completed_requirements)
