# This project was developed with assistance from AI tools.
"""Drive and mailbox sync triggers.

Both endpoints answer 200 with an outcome object even when the sync could not
run (loan busy, upstream down); the ``warning`` field says why.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from ..schemas.sync import FolderSyncRequest, FolderSyncResult, MailboxSyncResult
from ..services.errors import LoanNotFound
from ..services.ingestion import IngestionContext, sync_from_folder, sync_from_mailbox
from ._deps import get_ingestion_context

router = APIRouter()


@router.post("/loans/{loan_id}/sync/drive", response_model=FolderSyncResult)
async def sync_drive(
    loan_id: int,
    body: FolderSyncRequest,
    ctx: IngestionContext = Depends(get_ingestion_context),
) -> FolderSyncResult:
    try:
        return await sync_from_folder(ctx, loan_id, body.folder_id)
    except LoanNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/loans/{loan_id}/sync/mailbox", response_model=MailboxSyncResult)
async def sync_mailbox(
    loan_id: int,
    ctx: IngestionContext = Depends(get_ingestion_context),
) -> MailboxSyncResult:
    try:
        return await sync_from_mailbox(ctx, loan_id)
    except LoanNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
