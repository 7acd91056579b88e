# This project was developed with assistance from AI tools.
"""Tests for Drive folder ingestion."""

import pytest
from db.enums import DocumentCategory, SourceChannel

from src.schemas.upstream import DriveItem
from src.services.errors import LoanNotFound
from src.services.ingestion import sync_from_folder, walk_folder
from tests.factories import (
    FakeDriveClient,
    FakeLoanRepository,
    make_context,
    make_document,
    make_loan,
)

BANK = "2 most recent Bank Statements"


def _file(id, name, size=1000):
    return DriveItem(id=id, name=name, mime_type="application/pdf", size=size)


def _folder(id, name="sub"):
    return DriveItem(
        id=id, name=name, mime_type="application/vnd.google-apps.folder", is_folder=True
    )


@pytest.fixture
def tree():
    return {
        "root": [_file("f1", "Bank_Statement_Jan.pdf"), _folder("sub1")],
        "sub1": [_file("f2", "Appraisal.pdf", 500_000), _folder("sub2")],
        "sub2": [_file("f3", "random_file.pdf")],
    }


@pytest.mark.asyncio
async def test_walk_folder_is_depth_first(tree):
    names = [item.name async for item in walk_folder(FakeDriveClient(tree), "root")]
    assert names == ["Bank_Statement_Jan.pdf", "Appraisal.pdf", "random_file.pdf"]


@pytest.mark.asyncio
async def test_walk_folder_visits_shared_folder_once():
    tree = {
        "root": [_folder("a"), _folder("b")],
        "a": [_folder("shared")],
        "b": [_folder("shared")],
        "shared": [_file("f", "x.pdf")],
    }
    client = FakeDriveClient(tree)
    items = [item async for item in walk_folder(client, "root")]
    assert len(items) == 1
    assert client.listed.count("shared") == 1


@pytest.mark.asyncio
async def test_first_sync_creates_classified_documents(tree):
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, drive=FakeDriveClient(tree))

    result = await sync_from_folder(ctx, 1, "root")

    assert (result.created, result.updated, result.skipped) == (3, 0, 0)
    assert result.warning is None
    docs = {d.name: d for d in await repo.list_documents(1)}
    assert docs["Bank_Statement_Jan.pdf"].category == DocumentCategory.BANKING
    assert docs["Bank_Statement_Jan.pdf"].source_channel == SourceChannel.DRIVE
    assert docs["random_file.pdf"].category == DocumentCategory.OTHER
    assert repo.loans[1].drive_folder == "root"


@pytest.mark.asyncio
async def test_resync_is_idempotent(tree):
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, drive=FakeDriveClient(tree))

    await sync_from_folder(ctx, 1, "root")
    second = await sync_from_folder(ctx, 1, "root")

    assert (second.created, second.updated, second.skipped) == (0, 0, 3)
    assert len(repo.documents) == 3


@pytest.mark.asyncio
async def test_renamed_file_is_updated_not_duplicated(tree):
    repo = FakeLoanRepository([make_loan()])
    drive = FakeDriveClient(tree)
    ctx = make_context(repo, drive=drive)
    await sync_from_folder(ctx, 1, "root")

    drive.tree["root"][0] = _file("f1", "Bank_Statement_January.pdf", 1200)
    result = await sync_from_folder(ctx, 1, "root")

    assert (result.created, result.updated, result.skipped) == (0, 1, 2)
    renamed = next(d for d in repo.documents.values() if d.source_ref == "f1")
    assert renamed.name == "Bank_Statement_January.pdf"
    assert renamed.size_bytes == 1200


@pytest.mark.asyncio
async def test_file_already_ingested_from_mail_is_skipped():
    repo = FakeLoanRepository([make_loan()])
    repo.add_document(
        make_document(
            id=7,
            name="Appraisal.pdf (from Jane Doe)",
            size_bytes=500_200,
            source_channel=SourceChannel.GMAIL,
            source_ref="m1:a1",
        )
    )
    drive = FakeDriveClient({"root": [_file("f2", "Appraisal.pdf", 500_000)]})
    ctx = make_context(repo, drive=drive)

    result = await sync_from_folder(ctx, 1, "root")

    assert (result.created, result.skipped) == (0, 1)


@pytest.mark.asyncio
async def test_new_documents_are_auto_assigned(tree):
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, drive=FakeDriveClient(tree))

    await sync_from_folder(ctx, 1, "root")

    assignments = repo.loans[1].requirement_assignments
    bank_doc = next(d for d in repo.documents.values() if d.source_ref == "f1")
    assert assignments[BANK] == [bank_doc.id]
    assert repo.loans[1].completed_requirements == []


@pytest.mark.asyncio
async def test_auto_assign_can_be_disabled(tree):
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, drive=FakeDriveClient(tree), AUTO_ASSIGN_ON_INGEST=False)

    await sync_from_folder(ctx, 1, "root")

    assert repo.loans[1].requirement_assignments == {}


@pytest.mark.asyncio
async def test_unknown_loan_raises():
    ctx = make_context(FakeLoanRepository(), drive=FakeDriveClient({}))
    with pytest.raises(LoanNotFound):
        await sync_from_folder(ctx, 1, "root")


@pytest.mark.asyncio
async def test_no_drive_client_returns_warning():
    ctx = make_context(FakeLoanRepository([make_loan()]))
    result = await sync_from_folder(ctx, 1, "root")
    assert result.created == 0
    assert "not connected" in result.warning


@pytest.mark.asyncio
async def test_listing_failure_keeps_earlier_documents(tree):
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, drive=FakeDriveClient(tree, fail_folders={"sub2"}))

    result = await sync_from_folder(ctx, 1, "root")

    assert result.created == 2
    assert "unavailable" in result.warning
    assert not ctx.registry.is_syncing(1)


@pytest.mark.asyncio
async def test_busy_loan_reports_warning(tree):
    repo = FakeLoanRepository([make_loan()])
    ctx = make_context(repo, drive=FakeDriveClient(tree))

    async with ctx.registry.acquire(1, "mailbox"):
        result = await sync_from_folder(ctx, 1, "root")

    assert result.created == 0
    assert "mailbox sync" in result.warning
    assert repo.documents == {}
