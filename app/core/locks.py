"""Per-course locking for rank-mutating operations."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

import structlog

logger = structlog.get_logger(__name__)


class CourseLockRegistry:
    """
    Hands out one asyncio.Lock per course code.

    A lock lives only while some task holds it or waits for it, so the
    registry does not grow with the number of courses ever touched.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, course_code: str) -> AsyncIterator[None]:
        lock = self._locks.get(course_code)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[course_code] = lock
        self._users[course_code] = self._users.get(course_code, 0) + 1

        try:
            if lock.locked():
                logger.debug("course_lock_contended", course_code=course_code)
            async with lock:
                yield
        finally:
            self._users[course_code] -= 1
            if self._users[course_code] == 0:
                del self._users[course_code]
                del self._locks[course_code]

    def active_courses(self) -> int:
        """Number of courses that currently have a lock in use."""
        return len(self._locks)
