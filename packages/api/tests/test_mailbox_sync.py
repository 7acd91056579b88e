# This project was developed with assistance from AI tools.
"""Tests for mailbox ingestion."""

import base64

import httpx
import pytest
from db.enums import DocumentCategory, SourceChannel

from src.clients import GmailClient
from src.services.errors import LoanNotFound
from src.services.ingestion import expand_threads, sync_from_mailbox
from src.services.ingestion.mailbox import attachment_mime_type, sender_display
from tests.factories import (
    FakeLoanRepository,
    FakeMailboxClient,
    FakeStorage,
    make_attachment,
    make_context,
    make_loan,
    make_message,
)


def _inbox(**kwargs):
    relevant = make_message(
        id="m1",
        thread_id="t1",
        attachments=[
            make_attachment("a1", "Bank_Statement_Jan.pdf"),
            make_attachment("a2", "photo.jpg", mime_type="image/jpeg"),
        ],
    )
    unrelated = make_message(
        id="m2",
        thread_id="t2",
        subject="Lunch on Friday?",
        sender="Bob <bob@example.com>",
        attachments=[make_attachment("a3", "menu.pdf")],
    )
    return FakeMailboxClient({"t1": [relevant], "t2": [unrelated]}, **kwargs)


@pytest.mark.asyncio
async def test_relevant_pdf_is_ingested_with_provenance():
    repo = FakeLoanRepository([make_loan()])
    storage = FakeStorage()
    ctx = make_context(repo, mailbox=_inbox(), storage=storage)

    result = await sync_from_mailbox(ctx, 1)

    assert (result.scanned, result.pdfs_found, result.documents_created) == (2, 1, 1)
    assert (result.skipped, result.failed) == (0, 0)
    assert result.warning is None

    (doc,) = await repo.list_documents(1)
    assert doc.name == "Bank_Statement_Jan.pdf (from Jane Doe)"
    assert doc.source_channel == SourceChannel.GMAIL
    assert doc.source_ref == "m1:a1"
    assert doc.category == DocumentCategory.BANKING
    assert doc.storage_key in storage.objects


@pytest.mark.asyncio
async def test_second_sync_skips_already_ingested_attachment():
    repo = FakeLoanRepository([make_loan()])
    mailbox = _inbox()
    ctx = make_context(repo, mailbox=mailbox)

    await sync_from_mailbox(ctx, 1)
    second = await sync_from_mailbox(ctx, 1)

    assert (second.documents_created, second.skipped) == (0, 1)
    assert len(repo.documents) == 1
    assert mailbox.downloads == ["a1"]


@pytest.mark.asyncio
async def test_failed_thread_is_skipped_with_warning():
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, mailbox=_inbox(fail_threads={"t3"}))

    result = await sync_from_mailbox(ctx, 1)

    assert result.documents_created == 1
    assert result.warning == "1 of 3 threads could not be loaded"


@pytest.mark.asyncio
async def test_attachment_download_is_retried():
    repo = FakeLoanRepository([make_loan()])
    mailbox = _inbox(attachment_failures={"a1": 2})
    ctx = make_context(repo, mailbox=mailbox)

    result = await sync_from_mailbox(ctx, 1)

    assert (result.documents_created, result.failed) == (1, 0)
    assert mailbox.downloads == ["a1", "a1", "a1"]


@pytest.mark.asyncio
async def test_attachment_failure_is_counted_and_does_not_block_others():
    message = make_message(
        attachments=[
            make_attachment("bad", "Appraisal.pdf"),
            make_attachment("good", "Insurance Binder.pdf"),
        ]
    )
    repo = FakeLoanRepository([make_loan()])
    mailbox = FakeMailboxClient({"t1": [message]}, attachment_failures={"bad": 10})
    ctx = make_context(repo, mailbox=mailbox)

    result = await sync_from_mailbox(ctx, 1)

    assert (result.pdfs_found, result.documents_created, result.failed) == (2, 1, 1)
    (doc,) = await repo.list_documents(1)
    assert doc.name.startswith("Insurance Binder.pdf")


@pytest.mark.asyncio
async def test_reply_deeper_in_thread_is_scanned():
    first = make_message(id="m1", subject="Re: 123 Main St")
    reply = make_message(
        id="m1b", subject="Re: 123 Main St", attachments=[make_attachment("a9", "Lease.pdf")]
    )
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, mailbox=FakeMailboxClient({"t1": [first, reply]}))

    result = await sync_from_mailbox(ctx, 1)

    assert (result.scanned, result.documents_created) == (2, 1)


@pytest.mark.asyncio
async def test_contact_email_makes_message_relevant():
    message = make_message(
        subject="Signed docs",
        sender="Title Desk <closing@titleco.com>",
        attachments=[make_attachment("a1", "Escrow Instructions.pdf")],
    )
    repo = FakeLoanRepository(
        [make_loan(borrower_name="", property_address=None, loan_number=None)],
        contacts={1: {"closing@titleco.com"}},
    )
    ctx = make_context(repo, mailbox=FakeMailboxClient({"t1": [message]}))

    result = await sync_from_mailbox(ctx, 1)

    assert result.documents_created == 1
    (doc,) = await repo.list_documents(1)
    assert doc.name == "Escrow Instructions.pdf (from Title Desk)"


@pytest.mark.asyncio
async def test_unknown_attachment_size_uses_downloaded_length():
    message = make_message(attachments=[make_attachment("a1", "Appraisal.pdf", size=None)])
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, mailbox=FakeMailboxClient({"t1": [message]}))

    await sync_from_mailbox(ctx, 1)

    (doc,) = await repo.list_documents(1)
    assert doc.size_bytes == len(b"%PDF-1.4 a1")


@pytest.mark.asyncio
async def test_new_attachment_is_auto_assigned():
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, mailbox=_inbox())

    await sync_from_mailbox(ctx, 1)

    (doc,) = await repo.list_documents(1)
    assert repo.loans[1].requirement_assignments == {"2 most recent Bank Statements": [doc.id]}


@pytest.mark.asyncio
async def test_no_mailbox_returns_warning():
    ctx = make_context(FakeLoanRepository([make_loan()]))
    result = await sync_from_mailbox(ctx, 1)
    assert result.scanned == 0
    assert "not connected" in result.warning


@pytest.mark.asyncio
async def test_unknown_loan_raises():
    ctx = make_context(FakeLoanRepository(), mailbox=_inbox())
    with pytest.raises(LoanNotFound):
        await sync_from_mailbox(ctx, 1)


@pytest.mark.asyncio
async def test_busy_loan_reports_warning():
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, mailbox=_inbox())

    async with ctx.registry.acquire(1, "drive"):
        result = await sync_from_mailbox(ctx, 1)

    assert result.documents_created == 0
    assert "drive sync" in result.warning


@pytest.mark.asyncio
async def test_expand_threads_dedupes_messages_across_threads():
    shared = make_message(id="m1", thread_id="t1")
    client = FakeMailboxClient({"t1": [shared], "t2": [shared]}, fail_threads={"t3"})

    messages, failed = await expand_threads(client, ["t1", "t2", "t3"], concurrency=2)

    assert [m.id for m in messages] == ["m1"]
    assert failed == 1


def test_attachment_mime_type_falls_back_to_extension():
    assert attachment_mime_type(make_attachment(mime_type="application/octet-stream")) == (
        "application/pdf"
    )
    assert attachment_mime_type(make_attachment(mime_type="Application/PDF")) == "application/pdf"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Jane Doe <jane@example.com>", "Jane Doe"),
        ("jane@example.com", "jane@example.com"),
        (None, "unknown sender"),
    ],
)
def test_sender_display(raw, expected):
    assert sender_display(raw) == expected


@pytest.mark.asyncio
async def test_corrupt_attachment_from_gmail_is_counted_not_raised():
    good = base64.urlsafe_b64encode(b"%PDF-1.4 good").decode().rstrip("=")
    thread = {
        "messages": [
            {
                "id": "m1",
                "threadId": "t1",
                "payload": {
                    "headers": [
                        {"name": "Subject", "value": "Docs for 123 Main St"},
                        {"name": "From", "value": "Jane Doe <jane@example.com>"},
                    ],
                    "parts": [
                        {
                            "filename": "Appraisal.pdf",
                            "mimeType": "application/pdf",
                            "body": {"attachmentId": "ok", "size": 13},
                        },
                        {
                            "filename": "Lease.pdf",
                            "mimeType": "application/pdf",
                            "body": {"attachmentId": "bad", "size": 10},
                        },
                    ],
                },
            }
        ]
    }

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/messages"):
            return httpx.Response(200, json={"messages": [{"id": "m1", "threadId": "t1"}]})
        if path.endswith("/threads/t1"):
            return httpx.Response(200, json=thread)
        if path.endswith("/attachments/ok"):
            return httpx.Response(200, json={"data": good})
        return httpx.Response(200, json={"data": "a"})

    gmail = GmailClient(
        base_url="https://gmail.test/v1/users/me",
        token_provider=lambda: "tok",
        transport=httpx.MockTransport(handler),
    )
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, mailbox=gmail)

    result = await sync_from_mailbox(ctx, 1)
    await gmail.aclose()

    assert (result.documents_created, result.failed) == (1, 1)
    (doc,) = await repo.list_documents(1)
    assert doc.name == "Appraisal.pdf (from Jane Doe)"
