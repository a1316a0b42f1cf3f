import logging
import threading
import uuid
from contextlib import contextmanager

from django.conf import settings

from .exceptions import RegistrationBusy

logger = logging.getLogger(__name__)

_guard = threading.Lock()
_event_locks = {}


def get_event_lock(event_id) -> threading.Lock:
    """Return the process-wide lock for an event, creating it on first use."""
    try:
        key = str(uuid.UUID(str(event_id)))
    except ValueError:
        key = str(event_id)
    with _guard:
        lock = _event_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _event_locks[key] = lock
        return lock


@contextmanager
def event_lock(event_id, timeout=None):
    """
    Serialize registration mutations for one event within this process.

    Callers open their database transaction inside this block so the lock is
    only released after commit. Raises RegistrationBusy when the lock cannot
    be acquired within `timeout` seconds.
    """
    if timeout is None:
        timeout = settings.REGISTRATION_LOCK_TIMEOUT

    lock = get_event_lock(event_id)
    if not lock.acquire(timeout=timeout):
        logger.warning(f"Timed out waiting for registration lock on event {event_id}")
        raise RegistrationBusy()

    try:
        yield
    finally:
        lock.release()
