# This project was developed with assistance from AI tools.
"""Request-scoped dependencies shared by the loan document routes."""

from db import get_db
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..services.ingestion import IngestionContext
from ..services.repository import LoanRepository, SqlLoanRepository


async def get_repository(session: AsyncSession = Depends(get_db)) -> LoanRepository:
    return SqlLoanRepository(session)


async def get_ingestion_context(
    request: Request,
    repo: LoanRepository = Depends(get_repository),
) -> IngestionContext:
    """Bundle the repository with the app-wide registry and upstream clients."""
    state = request.app.state
    return IngestionContext(
        repo=repo,
        registry=state.sync_registry,
        drive=getattr(state, "drive_client", None),
        mailbox=getattr(state, "gmail_client", None),
        storage=getattr(state, "storage", None),
        settings=settings,
    )
