"""Per-student asyncio locks shared by the recorders and the reconciler.

Anything that reads a tracking record and writes it back holds the student's
lock for the whole read-merge-write, so an overlapping writer in this process
cannot replace the record with a stale copy. An entry lives only while some
caller holds or waits for it.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

_locks: dict[str, asyncio.Lock] = {}
_users: dict[str, int] = {}


@asynccontextmanager
async def student_lock(student_id: str) -> AsyncIterator[None]:
    lock = _locks.get(student_id)
    if lock is None:
        lock = _locks[student_id] = asyncio.Lock()
    _users[student_id] = _users.get(student_id, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _users[student_id] -= 1
        if _users[student_id] == 0:
            del _users[student_id]
            del _locks[student_id]


def active_student_locks() -> int:
    return len(_locks)
