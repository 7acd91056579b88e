# This project was developed with assistance from AI tools.
"""Ingested document schemas."""

from datetime import datetime

from db.enums import DocumentCategory, SourceChannel
from pydantic import BaseModel, ConfigDict


class DocumentCandidate(BaseModel):
    """An artifact found by an ingestion adapter, not yet persisted."""

    source_channel: SourceChannel
    source_ref: str
    name: str
    mime_type: str | None = None
    size_bytes: int | None = None
    category: DocumentCategory = DocumentCategory.OTHER
    storage_key: str | None = None
    observed_at: datetime | None = None


class IngestedDocument(BaseModel):
    """Persisted document record for a loan."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    loan_id: int
    source_channel: SourceChannel
    source_ref: str
    name: str
    mime_type: str | None = None
    size_bytes: int | None = None
    observed_at: datetime
    category: DocumentCategory = DocumentCategory.OTHER
    deleted: bool = False
    storage_key: str | None = None


class DocumentUpdateRequest(BaseModel):
    """Human reclassification of a document."""

    category: DocumentCategory


class DocumentListResponse(BaseModel):
    data: list[IngestedDocument]
    count: int
