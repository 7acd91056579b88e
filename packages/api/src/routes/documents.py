# This project was developed with assistance from AI tools.
"""Document routes: listing, upload, reclassification, soft delete, restore."""

import logging

from db.enums import DocumentCategory
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from ..clients.base import UpstreamUnavailable
from ..schemas.document import DocumentListResponse, DocumentUpdateRequest, IngestedDocument
from ..services import document as doc_service
from ..services.errors import DocumentNotFound, DocumentUploadError, LoanNotFound
from ..services.ingestion import IngestionContext, upload_document
from ..services.repository import LoanRepository
from ._deps import get_ingestion_context, get_repository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/loans/{loan_id}/documents", response_model=DocumentListResponse)
async def list_documents(
    loan_id: int,
    include_deleted: bool = Query(default=False),
    repo: LoanRepository = Depends(get_repository),
) -> DocumentListResponse:
    try:
        documents = await doc_service.list_documents(
            repo, loan_id, include_deleted=include_deleted
        )
    except LoanNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return DocumentListResponse(data=documents, count=len(documents))


@router.post(
    "/loans/{loan_id}/documents",
    response_model=IngestedDocument,
    status_code=201,
)
async def upload(
    loan_id: int,
    file: UploadFile = File(...),
    category: DocumentCategory | None = Form(default=None),
    ctx: IngestionContext = Depends(get_ingestion_context),
) -> IngestedDocument:
    """Upload a file directly to a loan."""
    content_type = file.content_type or ""
    if content_type not in ctx.settings.ALLOWED_UPLOAD_TYPES:
        raise HTTPException(
            status_code=422,
            detail=f"Unsupported file type: {content_type}. "
            f"Allowed: {', '.join(sorted(ctx.settings.ALLOWED_UPLOAD_TYPES))}",
        )

    file_data = await file.read()

    try:
        return await upload_document(
            ctx,
            loan_id,
            filename=file.filename or "document",
            content_type=content_type,
            file_data=file_data,
            category=category,
        )
    except DocumentUploadError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except LoanNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except UpstreamUnavailable as exc:
        logger.error("Upload for loan %s could not be stored: %s", loan_id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Document storage is unavailable",
        ) from exc


@router.patch("/documents/{document_id}", response_model=IngestedDocument)
async def reclassify(
    document_id: int,
    body: DocumentUpdateRequest,
    repo: LoanRepository = Depends(get_repository),
) -> IngestedDocument:
    try:
        return await doc_service.reclassify_document(repo, document_id, body.category)
    except DocumentNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/documents/{document_id}", response_model=IngestedDocument)
async def delete(
    document_id: int,
    repo: LoanRepository = Depends(get_repository),
) -> IngestedDocument:
    """Soft delete. Assignments are kept so a restore puts the document back."""
    try:
        return await doc_service.delete_document(repo, document_id)
    except DocumentNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/documents/{document_id}/restore", response_model=IngestedDocument)
async def restore(
    document_id: int,
    repo: LoanRepository = Depends(get_repository),
) -> IngestedDocument:
    try:
        return await doc_service.restore_document(repo, document_id)
    except DocumentNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
