# This project was developed with assistance from AI tools.
"""Sync request/outcome schemas.

Sync endpoints always answer with one of the outcome objects below, so the UI
can render "X added, Y already present, Z failed" instead of a bare error.
"""

from pydantic import BaseModel, Field


class FolderSyncRequest(BaseModel):
    folder_id: str = Field(min_length=1)


class FolderSyncResult(BaseModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0
    warning: str | None = None


class MailboxSyncResult(BaseModel):
    scanned: int = 0
    pdfs_found: int = 0
    documents_created: int = 0
    skipped: int = 0
    failed: int = 0
    warning: str | None = None
