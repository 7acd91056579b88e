# This project was developed with assistance from AI tools.
"""Document lifecycle: listing, reclassification, soft delete and restore.

Documents are never hard-deleted. Deleting only flips ``deleted`` so a
restore brings the record back untouched, including its requirement
assignments (which live on the loan and are left alone here).
"""

import logging

from db.enums import DocumentCategory

from ..schemas.document import IngestedDocument
from .errors import DocumentNotFound, LoanNotFound
from .repository import LoanRepository

logger = logging.getLogger(__name__)


async def list_documents(
    repo: LoanRepository, loan_id: int, *, include_deleted: bool = False
) -> list[IngestedDocument]:
    """Return a loan's documents, hiding soft-deleted ones unless asked."""
    if await repo.get_loan(loan_id) is None:
        raise LoanNotFound(f"Loan {loan_id} not found")
    return await repo.list_documents(loan_id, include_deleted=include_deleted)


async def _update(repo: LoanRepository, document_id: int, patch: dict) -> IngestedDocument:
    doc = await repo.update_document(document_id, patch)
    if doc is None:
        raise DocumentNotFound(f"Document {document_id} not found")
    return doc


async def reclassify_document(
    repo: LoanRepository, document_id: int, category: DocumentCategory
) -> IngestedDocument:
    """Human override of the classifier's guess."""
    doc = await _update(repo, document_id, {"category": category})
    logger.info("Reclassified document %s as %s", document_id, category.value)
    return doc


async def delete_document(repo: LoanRepository, document_id: int) -> IngestedDocument:
    doc = await _update(repo, document_id, {"deleted": True})
    logger.info("Soft-deleted document %s", document_id)
    return doc


async def restore_document(repo: LoanRepository, document_id: int) -> IngestedDocument:
    doc = await _update(repo, document_id, {"deleted": False})
    logger.info("Restored document %s", document_id)
    return doc
