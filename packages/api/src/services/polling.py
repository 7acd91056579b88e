# This project was developed with assistance from AI tools.
"""Background mailbox polling.

A cancellable asyncio task that periodically runs a mailbox sync for every
loan. Polling is best-effort: any failure is logged and the loop carries on
to the next loan and the next tick.

Within one pass the inbox listing and each thread are fetched once and shared
by all loans; attachments are still downloaded per loan as they match.
"""

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from ..clients.base import MailboxClient
from ..schemas.upstream import MailMessage, MessageRef
from .ingestion.context import IngestionContext
from .ingestion.mailbox import sync_from_mailbox

logger = logging.getLogger(__name__)

ContextFactory = Callable[[], AbstractAsyncContextManager[IngestionContext]]


class _PassMailbox:
    """Mailbox view that memoizes listings and threads for a single poll pass.

    Failures are not cached, so a thread that failed for one loan is retried
    for the next.
    """

    def __init__(self, inner: MailboxClient):
        self._inner = inner
        self._listings: dict[tuple[str, int], list[MessageRef]] = {}
        self._threads: dict[str, list[MailMessage]] = {}

    async def list_messages(self, query: str, max_results: int) -> list[MessageRef]:
        key = (query, max_results)
        if key not in self._listings:
            self._listings[key] = await self._inner.list_messages(query, max_results)
        return list(self._listings[key])

    async def get_thread(self, thread_id: str) -> list[MailMessage]:
        if thread_id not in self._threads:
            self._threads[thread_id] = await self._inner.get_thread(thread_id)
        return list(self._threads[thread_id])

    async def get_attachment(self, message_id: str, attachment_id: str) -> bytes:
        return await self._inner.get_attachment(message_id, attachment_id)


class MailboxPoller:
    """Runs ``sync_from_mailbox`` for all loans every ``interval`` seconds."""

    def __init__(self, context_factory: ContextFactory, interval: float):
        self._context_factory = context_factory
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> int:
        """Sync every loan once. Returns the number of documents created."""
        created = 0
        try:
            async with self._context_factory() as ctx:
                if ctx.mailbox is not None:
                    ctx = dataclasses.replace(ctx, mailbox=_PassMailbox(ctx.mailbox))
                for loan_id in await ctx.repo.list_loan_ids():
                    try:
                        outcome = await sync_from_mailbox(ctx, loan_id)
                    except Exception:
                        logger.exception("Mail poll failed for loan %s", loan_id)
                        # The session is shared across loans in this pass
                        await ctx.repo.rollback()
                        continue
                    created += outcome.documents_created
        except Exception:
            logger.exception("Mail poll pass failed")
        return created

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            created = await self.poll_once()
            if created:
                logger.info("Mail poll created %d documents", created)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="mailbox-poller")
        logger.info("Mailbox poller started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Mailbox poller stopped")
