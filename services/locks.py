"""Per-key asyncio locks: at most one writer per application, document or rate purpose.

Locks are process-local; cross-process writers are caught by the optimistic
version columns on the models. A key's lock lives only while someone holds or
waits on it.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator


@dataclass
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


_locks: dict[str, _Entry] = {}


def _enter(key: str) -> asyncio.Lock:
    entry = _locks.get(key)
    if entry is None:
        entry = _locks[key] = _Entry()
    entry.users += 1
    return entry.lock


def _leave(key: str) -> None:
    entry = _locks.get(key)
    if entry is None:
        return
    entry.users -= 1
    if entry.users == 0:
        del _locks[key]


@asynccontextmanager
async def hold(*keys: str) -> AsyncIterator[None]:
    """Acquire the locks for `keys` in sorted order (avoids lock-order deadlocks)."""
    ordered = sorted(set(keys))
    entered: list[str] = []
    acquired: list[asyncio.Lock] = []
    try:
        for key in ordered:
            lock = _enter(key)
            entered.append(key)
            await lock.acquire()
            acquired.append(lock)
        yield
    finally:
        for lock in reversed(acquired):
            lock.release()
        for key in reversed(entered):
            _leave(key)


def application_key(application_id: str) -> str:
    return f"application:{application_id}"


def applicant_key(applicant_id: str) -> str:
    return f"applicant:{applicant_id}"


def document_key(document_id: str) -> str:
    return f"document:{document_id}"


def rate_key(purpose: str) -> str:
    return f"rate:{purpose}"


def reset() -> None:
    """Drop all locks. Used for testing."""
    _locks.clear()
