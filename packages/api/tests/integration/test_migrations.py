# This project was developed with assistance from AI tools.
"""Schema integrity tests after alembic upgrade head."""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

pytestmark = pytest.mark.integration


async def test_all_tables_exist(db_session):
    result = await db_session.execute(
        text("SELECT tablename FROM pg_tables WHERE schemaname = 'public' ORDER BY tablename")
    )
    tables = {row[0] for row in result.fetchall()}
    missing = {"loans", "contacts", "documents"} - tables
    assert not missing, f"Missing tables: {missing}"


async def test_document_source_unique_per_loan(db_session, loan):
    from db.enums import SourceChannel
    from db.models import Document

    def _doc():
        return Document(
            loan_id=loan.id,
            source_channel=SourceChannel.DRIVE,
            source_ref="file-1",
            name="Appraisal.pdf",
        )

    db_session.add(_doc())
    await db_session.flush()

    db_session.add(_doc())
    with pytest.raises(IntegrityError):
        await db_session.flush()
    await db_session.rollback()


async def test_loan_tracking_columns_default_empty(db_session, loan):
    await db_session.refresh(loan)
    assert loan.requirement_assignments == {}
    assert loan.completed_requirements == []
    assert loan.custom_requirements == []
