# This project was developed with assistance from AI tools.
"""Mailbox ingestion.

Pipeline for one loan:

1. list recent messages matching the configured query
2. expand every distinct thread (a reply deep in a thread may carry the
   attachment the listed message does not), concurrently but bounded; a
   thread that fails to load is logged and dropped
3. keep messages the relevance filter ties to this loan
4. keep attachments of allowed MIME types, skip duplicates
5. download each remaining attachment with retry, store it, persist it as
   ``"<filename> (from <sender>)"``

A failed attachment is counted and skipped; it never blocks the others.
"""

import asyncio
import logging
import mimetypes
from email.utils import parseaddr

from db.enums import SourceChannel

from ...clients.base import MailboxClient, UpstreamUnavailable
from ...schemas.document import DocumentCandidate
from ...schemas.loan import LoanIdentity
from ...schemas.sync import MailboxSyncResult
from ...schemas.upstream import MailAttachment, MailCandidate, MailMessage
from ..classifier import classify
from ..dedup import find_duplicate, with_provenance
from ..errors import LoanNotFound
from ..relevance import match_reason
from ..sync_guard import SyncInProgress
from .context import IngestionContext, auto_assign, with_retry

logger = logging.getLogger(__name__)

_GENERIC_MIME_TYPES = {"application/octet-stream", "binary/octet-stream", ""}


def sender_display(sender: str | None) -> str:
    """Short human name for a From header: display name, else address."""
    name, address = parseaddr(sender or "")
    return name or address or "unknown sender"


def attachment_mime_type(attachment: MailAttachment) -> str:
    """Declared MIME type, falling back to the filename extension for generic types."""
    declared = (attachment.mime_type or "").lower()
    if declared in _GENERIC_MIME_TYPES:
        guessed, _ = mimetypes.guess_type(attachment.filename)
        return guessed or declared
    return declared


def is_allowed_attachment(attachment: MailAttachment, allowed_types: list[str]) -> bool:
    return attachment_mime_type(attachment) in {t.lower() for t in allowed_types}


async def expand_threads(
    client: MailboxClient, thread_ids: list[str], concurrency: int
) -> tuple[list[MailMessage], int]:
    """Fetch full threads concurrently. Returns (unique messages, failed thread count)."""
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _fetch(thread_id: str) -> list[MailMessage] | None:
        async with semaphore:
            try:
                return await client.get_thread(thread_id)
            except UpstreamUnavailable as exc:
                logger.warning("Skipping thread %s: %s", thread_id, exc)
                return None

    threads = await asyncio.gather(*(_fetch(t) for t in thread_ids))

    messages: dict[str, MailMessage] = {}
    failed = 0
    for thread in threads:
        if thread is None:
            failed += 1
            continue
        for message in thread:
            messages.setdefault(message.id, message)
    return list(messages.values()), failed


async def sync_from_mailbox(ctx: IngestionContext, loan_id: int) -> MailboxSyncResult:
    """Scan the mailbox for documents belonging to one loan."""
    identity = await ctx.repo.get_identity(loan_id)
    if identity is None:
        raise LoanNotFound(f"Loan {loan_id} not found")

    result = MailboxSyncResult()
    if ctx.mailbox is None:
        result.warning = "Mailbox is not connected"
        return result

    try:
        async with ctx.registry.acquire(loan_id, "mailbox"):
            loan = await ctx.repo.get_loan(loan_id)
            funder = loan.funder if loan is not None else None
            await _scan(ctx, loan_id, funder, identity, result)
    except SyncInProgress as exc:
        result.warning = str(exc)
    except UpstreamUnavailable as exc:
        logger.warning("Mailbox sync for loan %s stopped early: %s", loan_id, exc)
        result.warning = f"Mailbox unavailable: {exc}"

    logger.info(
        "Mailbox sync for loan %s: scanned=%d found=%d created=%d skipped=%d failed=%d",
        loan_id,
        result.scanned,
        result.pdfs_found,
        result.documents_created,
        result.skipped,
        result.failed,
    )
    return result


async def _scan(
    ctx: IngestionContext,
    loan_id: int,
    funder: str | None,
    identity: LoanIdentity,
    result: MailboxSyncResult,
) -> None:
    cfg = ctx.settings
    refs = await ctx.mailbox.list_messages(cfg.MAILBOX_QUERY, cfg.MAILBOX_MAX_RESULTS)
    thread_ids = list(dict.fromkeys(r.thread_id for r in refs))
    messages, failed_threads = await expand_threads(
        ctx.mailbox, thread_ids, cfg.THREAD_FETCH_CONCURRENCY
    )
    result.scanned = len(messages)
    if failed_threads:
        result.warning = f"{failed_threads} of {len(thread_ids)} threads could not be loaded"

    existing = await ctx.repo.list_documents(loan_id)

    for message in messages:
        reason = match_reason(identity, MailCandidate.from_message(message))
        if reason is None:
            continue
        logger.debug("Message %s relevant to loan %s by %s", message.id, loan_id, reason.value)

        for attachment in message.attachments:
            if not is_allowed_attachment(attachment, cfg.ALLOWED_ATTACHMENT_TYPES):
                continue
            result.pdfs_found += 1

            candidate = DocumentCandidate(
                source_channel=SourceChannel.GMAIL,
                source_ref=f"{message.id}:{attachment.attachment_id}",
                name=with_provenance(attachment.filename, sender_display(message.sender)),
                mime_type=attachment_mime_type(attachment),
                size_bytes=attachment.size,
                category=classify(attachment.filename),
            )
            if find_duplicate(existing, candidate, cfg.DEDUP_SIZE_TOLERANCE_BYTES) is not None:
                result.skipped += 1
                continue

            try:
                candidate = await _fetch_and_store(ctx, loan_id, message, attachment, candidate)
            except UpstreamUnavailable:
                result.failed += 1
                continue

            doc = await ctx.repo.persist_document(loan_id, candidate)
            existing.append(doc)
            result.documents_created += 1
            await auto_assign(ctx, funder, doc)


async def _fetch_and_store(
    ctx: IngestionContext,
    loan_id: int,
    message: MailMessage,
    attachment: MailAttachment,
    candidate: DocumentCandidate,
) -> DocumentCandidate:
    data = await with_retry(
        lambda: ctx.mailbox.get_attachment(message.id, attachment.attachment_id),
        ctx.settings.ATTACHMENT_RETRY_DELAYS,
        operation_name=f"Download of {attachment.filename}",
    )
    updates: dict = {}
    if candidate.size_bytes is None:
        updates["size_bytes"] = len(data)
    if ctx.storage is not None:
        updates["storage_key"] = await ctx.storage.store_document(
            loan_id, candidate.source_ref, attachment.filename, data, candidate.mime_type
        )
    return candidate.model_copy(update=updates)
