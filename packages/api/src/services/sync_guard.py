# This project was developed with assistance from AI tools.
"""Per-loan sync exclusion.

Drive and mailbox syncs for different loans may run concurrently, but a single
loan never has two syncs in flight. ``SyncRegistry`` keeps one ``SyncState``
per loan and hands out a scoped hold that is released on every exit path,
including errors and cancellation. The registry is owned by the application
(``app.state``) and passed in through the ingestion context.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


class SyncInProgress(Exception):
    """Raised when a loan already has a sync running."""


@dataclass
class SyncState:
    sync_in_progress: bool = False
    since: datetime | None = None
    kind: str | None = None


class SyncRegistry:
    def __init__(self):
        self._states: dict[int, SyncState] = {}

    def state(self, loan_id: int) -> SyncState:
        return self._states.get(loan_id, SyncState())

    def is_syncing(self, loan_id: int) -> bool:
        return self.state(loan_id).sync_in_progress

    @asynccontextmanager
    async def acquire(self, loan_id: int, kind: str) -> AsyncIterator[SyncState]:
        """Hold the loan's sync slot for the duration of the block.

        The check-and-set happens without an ``await`` in between, so it is
        atomic with respect to other tasks on the event loop.
        """
        current = self._states.get(loan_id)
        if current is not None and current.sync_in_progress:
            raise SyncInProgress(
                f"A {current.kind} sync for loan {loan_id} has been running since "
                f"{current.since.isoformat() if current.since else 'unknown'}"
            )
        state = SyncState(sync_in_progress=True, since=datetime.now(UTC), kind=kind)
        self._states[loan_id] = state
        logger.debug("Acquired %s sync for loan %s", kind, loan_id)
        try:
            yield state
        finally:
            self._states.pop(loan_id, None)
            logger.debug("Released %s sync for loan %s", kind, loan_id)
