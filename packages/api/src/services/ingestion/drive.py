# This project was developed with assistance from AI tools.
"""Drive folder ingestion.

Walks a loan's folder depth-first, turning every file into a candidate.
Files are scoped to the loan by virtue of living in its folder, so there is
no relevance check. Re-running the sync is idempotent: a file already seen
under the same Drive id is only patched if its name or size changed, and a
file matching an existing document by name/size is skipped.
"""

import logging
from collections.abc import AsyncIterator

from db.enums import SourceChannel

from ...clients.base import FileStoreClient, UpstreamUnavailable
from ...schemas.document import DocumentCandidate, IngestedDocument
from ...schemas.sync import FolderSyncResult
from ...schemas.upstream import DriveItem
from ..classifier import classify
from ..dedup import find_duplicate
from ..errors import LoanNotFound
from ..sync_guard import SyncInProgress
from .context import IngestionContext, auto_assign

logger = logging.getLogger(__name__)


async def walk_folder(
    client: FileStoreClient, folder_id: str, _seen: set[str] | None = None
) -> AsyncIterator[DriveItem]:
    """Yield every file below ``folder_id``, depth-first.

    A folder reachable through two parents is listed once.
    """
    seen = _seen if _seen is not None else set()
    if folder_id in seen:
        return
    seen.add(folder_id)
    for item in await client.list_folder_contents(folder_id):
        if item.is_folder:
            async for child in walk_folder(client, item.id, seen):
                yield child
        else:
            yield item


def _candidate(item: DriveItem) -> DocumentCandidate:
    return DocumentCandidate(
        source_channel=SourceChannel.DRIVE,
        source_ref=item.id,
        name=item.name,
        mime_type=item.mime_type,
        size_bytes=item.size,
        category=classify(item.name),
    )


def _changes(existing: IngestedDocument, item: DriveItem) -> dict:
    patch = {}
    if existing.name != item.name:
        patch["name"] = item.name
    if item.size is not None and existing.size_bytes != item.size:
        patch["size_bytes"] = item.size
    return patch


async def sync_from_folder(
    ctx: IngestionContext, loan_id: int, folder_id: str
) -> FolderSyncResult:
    """Ingest every new file in a Drive folder tree for a loan."""
    loan = await ctx.repo.get_loan(loan_id)
    if loan is None:
        raise LoanNotFound(f"Loan {loan_id} not found")

    result = FolderSyncResult()
    if ctx.drive is None:
        result.warning = "Google Drive is not connected"
        return result

    try:
        async with ctx.registry.acquire(loan_id, "drive"):
            await _ingest_folder(ctx, loan_id, loan.funder, folder_id, result)
            if loan.drive_folder != folder_id:
                await ctx.repo.update_loan(loan_id, {"drive_folder": folder_id})
    except SyncInProgress as exc:
        result.warning = str(exc)
    except UpstreamUnavailable as exc:
        logger.warning("Drive sync for loan %s stopped early: %s", loan_id, exc)
        result.warning = f"Google Drive unavailable: {exc}"

    logger.info(
        "Drive sync for loan %s: created=%d updated=%d skipped=%d",
        loan_id,
        result.created,
        result.updated,
        result.skipped,
    )
    return result


async def _ingest_folder(
    ctx: IngestionContext,
    loan_id: int,
    funder: str | None,
    folder_id: str,
    result: FolderSyncResult,
) -> None:
    existing = await ctx.repo.list_documents(loan_id)
    by_ref = {d.source_ref: d for d in existing if d.source_channel == SourceChannel.DRIVE}
    tolerance = ctx.settings.DEDUP_SIZE_TOLERANCE_BYTES

    async for item in walk_folder(ctx.drive, folder_id):
        known = by_ref.get(item.id)
        if known is not None:
            patch = _changes(known, item)
            if patch:
                updated = await ctx.repo.update_document(known.id, patch)
                if updated is not None:
                    by_ref[item.id] = updated
                    existing = [updated if d.id == updated.id else d for d in existing]
                result.updated += 1
            else:
                result.skipped += 1
            continue

        candidate = _candidate(item)
        duplicate = find_duplicate(existing, candidate, tolerance)
        if duplicate is not None:
            logger.debug("Skipping %s: duplicate of document %s", item.name, duplicate.id)
            result.skipped += 1
            continue

        doc = await ctx.repo.persist_document(loan_id, candidate)
        existing.append(doc)
        by_ref[item.id] = doc
        result.created += 1
        await auto_assign(ctx, funder, doc)
