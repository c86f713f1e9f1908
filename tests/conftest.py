#!/usr/bin/env python3
"""Pytest fixtures for clipshield tests.

Provides in-memory collaborators (gateway, scheduler, paste source,
notifier), a settings store, a monitor wired to all of them and an
optional Xvfb display for tests that need a real X server.
"""

import os
import shutil
import subprocess
import time
from collections.abc import Generator

import pytest

from clipshield.monitor import ClipboardMonitor
from clipshield.settings import SettingsStore
from conftest_fakes import FakeGateway, FakeNotifier, FakePasteSource, FakeScheduler

CARD = "4111111111111111"
OTHER_CARD = "5500 0000 0000 0004"
SSN = "123-45-6789"

POLL = 0.5
DEBOUNCE = 0.3


def has_display() -> bool:
    """Return True if DISPLAY points at a usable X server."""
    if not os.environ.get("DISPLAY"):
        return False
    try:
        from Xlib.display import Display

        Display().close()
    except Exception:
        return False
    return True


@pytest.fixture
def xvfb_display() -> Generator[str | None, None, None]:
    """Start Xvfb virtual display if available, yield DISPLAY string.

    Yields None if Xvfb is not installed or fails to start. Tests using
    this fixture should skip if the value is None.
    """
    if shutil.which("Xvfb") is None:
        yield None
        return

    display = ":98"
    proc = subprocess.Popen(
        ["Xvfb", display, "-screen", "0", "640x480x24"],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    try:
        time.sleep(0.5)
        if proc.poll() is not None:
            yield None
            return
        old_display = os.environ.get("DISPLAY")
        os.environ["DISPLAY"] = display
        yield display
        if old_display is not None:
            os.environ["DISPLAY"] = old_display
        else:
            os.environ.pop("DISPLAY", None)
    finally:
        proc.terminate()
        proc.wait()


@pytest.fixture
def settings() -> SettingsStore:
    """Create a settings store with the default delays (30s, 2s)."""
    return SettingsStore()


@pytest.fixture
def gateway() -> FakeGateway:
    """Create an empty in-memory clipboard."""
    return FakeGateway()


@pytest.fixture
def scheduler() -> FakeScheduler:
    """Create a manual-clock scheduler starting at t=0."""
    return FakeScheduler()


@pytest.fixture
def paste_source() -> FakePasteSource:
    """Create an available paste signal source."""
    return FakePasteSource()


@pytest.fixture
def notifier() -> FakeNotifier:
    """Create a notifier that records messages."""
    return FakeNotifier()


@pytest.fixture
def monitor(
    settings: SettingsStore,
    gateway: FakeGateway,
    scheduler: FakeScheduler,
    notifier: FakeNotifier,
    paste_source: FakePasteSource,
) -> ClipboardMonitor:
    """Create a stopped monitor wired to the fake collaborators."""
    return ClipboardMonitor(
        settings,
        gateway,
        scheduler,
        notifier=notifier,
        paste_source=paste_source,
        poll_interval=POLL,
        debounce_interval=DEBOUNCE,
        clock=scheduler.clock,
    )


@pytest.fixture
def counting_monitor(
    monitor: ClipboardMonitor, gateway: FakeGateway, scheduler: FakeScheduler
) -> ClipboardMonitor:
    """Create a started monitor that has just detected CARD (30s left)."""
    monitor.start()
    gateway.simulate_copy(CARD)
    scheduler.advance(POLL)
    return monitor
