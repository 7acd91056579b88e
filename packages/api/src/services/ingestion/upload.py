# This project was developed with assistance from AI tools.
"""Direct upload ingestion.

The degenerate adapter: the user picked the loan, so relevance is implied.
Dedup still applies (people re-upload the same file) and an explicit
category from the user overrides the classifier.
"""

import logging
import os
import uuid

from db.enums import DocumentCategory, SourceChannel

from ...schemas.document import DocumentCandidate, IngestedDocument
from ..classifier import classify
from ..dedup import find_duplicate
from ..errors import DocumentUploadError, LoanNotFound
from .context import IngestionContext, auto_assign

logger = logging.getLogger(__name__)


def validate_upload(ctx: IngestionContext, content_type: str, file_data: bytes) -> None:
    """Raise DocumentUploadError for disallowed types or oversized files."""
    allowed = ctx.settings.ALLOWED_UPLOAD_TYPES
    if content_type not in allowed:
        raise DocumentUploadError(
            f"Unsupported content type: {content_type}. Allowed: {', '.join(sorted(allowed))}"
        )
    max_bytes = ctx.settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    if len(file_data) > max_bytes:
        raise DocumentUploadError(
            f"File size {len(file_data)} exceeds maximum of {ctx.settings.UPLOAD_MAX_SIZE_MB}MB"
        )


async def upload_document(
    ctx: IngestionContext,
    loan_id: int,
    filename: str,
    content_type: str,
    file_data: bytes,
    category: DocumentCategory | None = None,
) -> IngestedDocument:
    """Store an uploaded file for a loan.

    Re-uploading a file that is already on the loan returns the existing
    document instead of creating a second one. If that document was deleted
    it is restored.
    """
    validate_upload(ctx, content_type, file_data)

    loan = await ctx.repo.get_loan(loan_id)
    if loan is None:
        raise LoanNotFound(f"Loan {loan_id} not found")

    name = os.path.basename(filename or "") or "document"
    candidate = DocumentCandidate(
        source_channel=SourceChannel.UPLOAD,
        source_ref=f"upload_{uuid.uuid4().hex}",
        name=name,
        mime_type=content_type,
        size_bytes=len(file_data),
        category=category or classify(name),
    )

    existing = await ctx.repo.list_documents(loan_id)
    duplicate = find_duplicate(existing, candidate, ctx.settings.DEDUP_SIZE_TOLERANCE_BYTES)
    if duplicate is not None:
        logger.info("Upload of %s for loan %s matches document %s", name, loan_id, duplicate.id)
        if duplicate.deleted:
            logger.info("Restoring deleted document %s on re-upload", duplicate.id)
            return await ctx.repo.update_document(duplicate.id, {"deleted": False})
        return duplicate

    if ctx.storage is not None:
        candidate.storage_key = await ctx.storage.store_document(
            loan_id, candidate.source_ref, name, file_data, content_type
        )

    doc = await ctx.repo.persist_document(loan_id, candidate)
    await auto_assign(ctx, loan.funder, doc)
    return doc
