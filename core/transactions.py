"""State change transactions for lights and bridge groups.

A transaction collects several state changes of one entity and sends them
as a single PUT when it closes. Pending payloads are kept per calling
context (thread, or asyncio task when one is running), so the same Light
may be used by several threads at once, each with its own transaction.

Transactions on the same entity can not be nested within one context, but
a transaction body may open transactions on other entities.
"""

import asyncio
import logging
import threading
from contextlib import contextmanager

from core.errors import CommError, TransactionStateError

logger = logging.getLogger(__name__)


def current_context_id() -> tuple[int, int | None]:
    """Identify the logical execution context of the caller."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    return threading.get_ident(), id(task) if task is not None else None


class PendingStates:
    """Pending transaction payloads keyed by (entity, calling context)."""

    def __init__(self):
        self._pending: dict[tuple, dict] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(entity) -> tuple:
        return (id(entity),) + current_context_id()

    def open(self, entity, transition_time: int | None = None) -> dict:
        """Start an empty payload for entity in the current context.

        Raises:
            TransactionStateError: If one is already open here
        """
        key = self._key(entity)
        with self._lock:
            if key in self._pending:
                raise TransactionStateError(f"Have an open state change transaction on {entity!r} already")
            payload = {}
            if transition_time is not None:
                payload['transitiontime'] = transition_time
            self._pending[key] = payload
            return payload

    def get(self, entity) -> dict | None:
        with self._lock:
            return self._pending.get(self._key(entity))

    def pop(self, entity) -> dict | None:
        with self._lock:
            return self._pending.pop(self._key(entity), None)

    def is_open(self, entity) -> bool:
        return self.get(entity) is not None


PENDING = PendingStates()


def has_state_changes(payload: dict | None) -> bool:
    """True if the payload changes more than just the transition time."""
    return bool(payload) and any(key != 'transitiontime' for key in payload)


@contextmanager
def state_transaction(entity, transition_time: int | None = None):
    """Batch all state changes made on entity inside the block.

    On a clean exit the accumulated changes are sent in one request. A
    payload holding only the transition time changes nothing on the light,
    so no request is sent for it.
    If the block raises, nothing is sent and the entity is re-synced from
    the bridge, as it is if the commit itself fails. The block's own
    exception is re-raised unless the re-sync raises a newer one.

    The entity must provide ``commit_state(payload)`` and ``resync()``.
    """
    PENDING.open(entity, transition_time)
    try:
        yield
    except BaseException:
        PENDING.pop(entity)
        logger.debug("Transaction body on %r failed, re-syncing", entity)
        entity.resync()
        raise

    payload = PENDING.pop(entity)
    if not has_state_changes(payload):
        return
    try:
        entity.commit_state(payload)
    except CommError:
        logger.debug("Commit on %r failed, re-syncing", entity)
        entity.resync()
        raise
