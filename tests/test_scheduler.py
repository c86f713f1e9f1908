#!/usr/bin/env python3
"""Tests for AsyncioScheduler on a real event loop."""
import asyncio

import pytest

from clipshield.scheduler import AsyncioScheduler, RepeatingHandle


@pytest.mark.asyncio
async def test_schedule_once_fires_once() -> None:
    """Test a one-shot timer runs its callback exactly once."""
    calls = []
    scheduler = AsyncioScheduler()
    scheduler.schedule_once(0.01, lambda: calls.append("fired"))

    await asyncio.sleep(0.05)

    assert calls == ["fired"]


@pytest.mark.asyncio
async def test_cancelled_once_never_fires() -> None:
    """Test a cancelled one-shot timer never runs."""
    calls = []
    scheduler = AsyncioScheduler()
    handle = scheduler.schedule_once(0.01, lambda: calls.append("fired"))
    scheduler.cancel(handle)

    await asyncio.sleep(0.05)

    assert calls == []


@pytest.mark.asyncio
async def test_repeating_fires_until_cancelled() -> None:
    """Test a repeating timer keeps firing and stops on cancel."""
    calls = []
    scheduler = AsyncioScheduler()
    handle = scheduler.schedule_repeating(0.01, lambda: calls.append(1))

    await asyncio.sleep(0.055)
    scheduler.cancel(handle)
    fired = len(calls)
    await asyncio.sleep(0.05)

    assert fired >= 2
    assert len(calls) == fired
    assert handle.fired == fired
    assert handle.cancelled()


@pytest.mark.asyncio
async def test_cancel_from_inside_callback() -> None:
    """Test a repeating timer cancelled by its own callback stops."""
    scheduler = AsyncioScheduler()
    calls = []
    handle: RepeatingHandle

    def callback() -> None:
        calls.append(1)
        scheduler.cancel(handle)

    handle = scheduler.schedule_repeating(0.01, callback)
    await asyncio.sleep(0.05)

    assert calls == [1]
    assert handle.fired == 1


@pytest.mark.asyncio
async def test_one_timer_cancels_another() -> None:
    """Test whichever timer fires first can cancel the other for good."""
    scheduler = AsyncioScheduler()
    calls = []
    deadline = scheduler.schedule_once(0.02, lambda: calls.append("deadline"))

    def tick() -> None:
        calls.append("tick")
        scheduler.cancel(deadline)
        scheduler.cancel(ticker)

    ticker = scheduler.schedule_repeating(0.01, tick)
    await asyncio.sleep(0.05)

    assert calls == ["tick"]


def test_cancel_accepts_none() -> None:
    """Test cancelling None is a no-op."""
    loop = asyncio.new_event_loop()
    try:
        AsyncioScheduler(loop).cancel(None)
    finally:
        loop.close()


def test_repeating_rejects_bad_interval() -> None:
    """Test a non-positive interval is refused."""
    loop = asyncio.new_event_loop()
    try:
        with pytest.raises(ValueError, match="Interval must be positive"):
            AsyncioScheduler(loop).schedule_repeating(0, lambda: None)
    finally:
        loop.close()


def test_requires_running_loop_without_argument() -> None:
    """Test the scheduler needs a loop when called outside one."""
    with pytest.raises(RuntimeError):
        AsyncioScheduler()
