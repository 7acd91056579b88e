# This project was developed with assistance from AI tools.
"""FastAPI application entry point."""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from db.database import SessionLocal
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .clients import GmailClient, GoogleDriveClient
from .core.config import settings
from .routes import documents, funders, health, requirements, sync
from .schemas.error import ErrorResponse
from .services.ingestion import IngestionContext
from .services.polling import MailboxPoller
from .services.repository import SqlLoanRepository
from .services.storage import init_storage_service
from .services.sync_guard import SyncRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _poll_context(app: FastAPI) -> AsyncIterator[IngestionContext]:
    async with SessionLocal() as session:
        yield IngestionContext(
            repo=SqlLoanRepository(session),
            registry=app.state.sync_registry,
            drive=app.state.drive_client,
            mailbox=app.state.gmail_client,
            storage=app.state.storage,
            settings=settings,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    app.state.sync_registry = SyncRegistry()
    app.state.drive_client = GoogleDriveClient()
    app.state.gmail_client = GmailClient()
    app.state.storage = init_storage_service(settings)
    if not settings.GOOGLE_ACCESS_TOKEN:
        logger.warning("GOOGLE_ACCESS_TOKEN not set -- Drive and mailbox syncs will be skipped")

    app.state.mail_poller = None
    if settings.MAIL_POLL_ENABLED:
        poller = MailboxPoller(lambda: _poll_context(app), settings.MAIL_POLL_INTERVAL_SECONDS)
        poller.start()
        app.state.mail_poller = poller

    yield

    if app.state.mail_poller is not None:
        await app.state.mail_poller.stop()
    await app.state.drive_client.aclose()
    await app.state.gmail_client.aclose()


app = FastAPI(
    title="Loan Document Tracker API",
    description="Collects, deduplicates and tracks loan documents against funder checklists",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

_HTTP_STATUS_TITLES: dict[int, str] = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def _build_error(
    request: Request, status_code: int, detail: str, request_id: str
) -> ErrorResponse:
    return ErrorResponse(
        title=_HTTP_STATUS_TITLES.get(status_code, "Error"),
        status=status_code,
        detail=detail,
        instance=request.url.path,
        request_id=request_id,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Convert HTTPException to RFC 7807 Problem Details."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    body = _build_error(request, exc.status_code, str(exc.detail), request_id)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Convert Pydantic validation errors to RFC 7807 Problem Details."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    body = _build_error(request, 422, str(exc.errors()), request_id)
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions -- log and return 500."""
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    logger.exception("Unhandled exception (request_id=%s)", request_id)
    body = _build_error(request, 500, "An unexpected error occurred.", request_id)
    return JSONResponse(status_code=500, content=body.model_dump())


# Include routers
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(funders.router, prefix="/api", tags=["funders"])
app.include_router(sync.router, prefix="/api", tags=["sync"])
app.include_router(documents.router, prefix="/api", tags=["documents"])
app.include_router(requirements.router, prefix="/api", tags=["requirements"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint"""
    return {"message": "Welcome to the Loan Document Tracker API"}
