# This project was developed with assistance from AI tools.
"""Collaborators shared by the ingestion adapters.

An ``IngestionContext`` bundles the repository, the per-loan sync registry and
whichever upstream clients are configured. Routes build one per request; the
mail poller builds one per pass.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from ...clients.base import FileStoreClient, MailboxClient, UpstreamUnavailable
from ...core.config import Settings, settings
from ...schemas.document import IngestedDocument
from ..assignment import assign_document
from ..errors import LoanNotFound, RequirementNotFound
from ..matcher import match_requirement
from ..repository import LoanRepository
from ..storage import StorageService
from ..sync_guard import SyncRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class IngestionContext:
    repo: LoanRepository
    registry: SyncRegistry
    drive: FileStoreClient | None = None
    mailbox: MailboxClient | None = None
    storage: StorageService | None = None
    settings: Settings = field(default_factory=lambda: settings)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    delays: Sequence[float],
    operation_name: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation``, retrying on ``UpstreamUnavailable`` after each delay.

    ``len(delays)`` retries are made; the last error is re-raised.
    """
    attempts = len(delays) + 1
    for attempt in range(attempts):
        try:
            return await operation()
        except UpstreamUnavailable as exc:
            if attempt == attempts - 1:
                logger.warning("%s failed after %d attempts: %s", operation_name, attempts, exc)
                raise
            delay = delays[attempt]
            logger.info(
                "%s failed (attempt %d/%d): %s -- retrying in %ss",
                operation_name,
                attempt + 1,
                attempts,
                exc,
                delay,
            )
            await sleep(delay)
    raise AssertionError("unreachable")


async def auto_assign(ctx: IngestionContext, funder: str | None, doc: IngestedDocument) -> None:
    """File a freshly ingested document under its best-matching requirement."""
    if not ctx.settings.AUTO_ASSIGN_ON_INGEST:
        return
    requirement = match_requirement(funder, doc.name)
    if requirement is None:
        return
    try:
        await assign_document(ctx.repo, doc.loan_id, requirement.name, doc.id)
    except (LoanNotFound, RequirementNotFound) as exc:
        logger.warning("Auto-assign of document %s skipped: %s", doc.id, exc)
