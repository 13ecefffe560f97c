"""Tests for the per-course lock registry."""

import asyncio

import pytest

from app.core.locks import CourseLockRegistry


@pytest.mark.asyncio
async def test_same_course_is_serialized():
    locks = CourseLockRegistry()
    events = []

    async def worker(name):
        async with locks.hold("COSC0001"):
            events.append(f"{name}:start")
            await asyncio.sleep(0.01)
            events.append(f"{name}:end")

    await asyncio.gather(worker("a"), worker("b"), worker("c"))

    assert events == ["a:start", "a:end", "b:start", "b:end", "c:start", "c:end"]


@pytest.mark.asyncio
async def test_different_courses_run_in_parallel():
    locks = CourseLockRegistry()
    inside = asyncio.Event()

    async def first():
        async with locks.hold("COSC0001"):
            await asyncio.wait_for(inside.wait(), timeout=1)

    async def second():
        async with locks.hold("COSC0002"):
            inside.set()

    await asyncio.gather(first(), second())


@pytest.mark.asyncio
async def test_locks_are_released_when_unused():
    locks = CourseLockRegistry()

    async with locks.hold("COSC0001"):
        async with locks.hold("COSC0002"):
            assert locks.active_courses() == 2

    assert locks.active_courses() == 0


@pytest.mark.asyncio
async def test_lock_released_on_error():
    locks = CourseLockRegistry()

    with pytest.raises(RuntimeError):
        async with locks.hold("COSC0001"):
            raise RuntimeError("boom")

    assert locks.active_courses() == 0
    async with locks.hold("COSC0001"):
        pass


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_leak():
    locks = CourseLockRegistry()

    async def waiter():
        async with locks.hold("COSC0001"):
            pass

    async with locks.hold("COSC0001"):
        task = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert locks.active_courses() == 0
