# This project was developed with assistance from AI tools.
"""Health check route: API, database and upstream integrations."""

import logging

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError

from .. import __version__
from ..schemas.health import HealthItem

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[HealthItem])
async def health(
    request: Request,
    db: DatabaseService = Depends(get_db_service),
) -> list[HealthItem]:
    items = [
        HealthItem(
            name="API",
            status="healthy",
            message="Loan Document Tracker API is running",
            version=__version__,
        )
    ]

    try:
        db_ok = await db.health_check()
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Health check: database unreachable: %s", exc)
        db_ok = False
    items.append(
        HealthItem(
            name="Database",
            status="healthy" if db_ok else "unhealthy",
            message="PostgreSQL connection ok" if db_ok else "PostgreSQL connection failed",
        )
    )

    state = request.app.state
    poller = getattr(state, "mail_poller", None)
    items.append(
        HealthItem(
            name="Mail polling",
            status="healthy" if poller is None or poller.running else "unhealthy",
            message="enabled" if poller is not None else "disabled",
        )
    )
    return items
