#!/usr/bin/env python3
"""Monitor and scan mode entry points.

run_monitor() connects to X11, wires the gateway, paste source, scheduler
and notifier into a ClipboardMonitor and runs until SIGINT or SIGTERM.
While it runs, POSIX signals act as the runtime commands:

- SIGUSR1 toggles monitoring on and off
- SIGUSR2 clears the clipboard immediately

run_scan() reads the clipboard once and clears it if needed.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from clipshield.monitor_state import Counting, describe

if TYPE_CHECKING:
    from clipshield.monitor_state import StatusSnapshot
    from clipshield.scan import ScanResult
    from clipshield.settings import SettingsStore

logger = logging.getLogger(__name__)


class StatusLogger:
    """Observer that logs state changes at INFO and countdown ticks at DEBUG."""

    def __init__(self) -> None:
        self._last: StatusSnapshot | None = None

    def __call__(self, status: StatusSnapshot) -> None:
        previous = self._last
        self._last = status
        if previous is not None and previous == status:
            return
        is_tick = (
            previous is not None
            and isinstance(previous.state, Counting)
            and isinstance(status.state, Counting)
            and previous.state.accelerated == status.state.accelerated
            and status.state.seconds_left < previous.state.seconds_left
        )
        if is_tick:
            logger.debug("%s", describe(status))
        else:
            logger.info("%s", describe(status))


async def run_monitor(settings: SettingsStore) -> None:
    """Monitor the X11 clipboard until SIGINT or SIGTERM.

    Args:
        settings: Settings store; SIGUSR1 toggles its "enabled" key.

    Raises:
        DisplayUnavailableError: If X11 cannot be used.
    """
    from clipshield.monitor import ClipboardMonitor
    from clipshield.notifier import PlyerNotifier
    from clipshield.scheduler import AsyncioScheduler
    from clipshield.x11_display import create_hidden_window, open_display
    from clipshield.x11_events import X11EventPump, register_xfixes_events
    from clipshield.x11_gateway import X11ClipboardGateway
    from clipshield.x11_paste import XInputPasteSignalSource

    loop = asyncio.get_running_loop()
    display = open_display()
    pump = X11EventPump(display)
    try:
        window = create_hidden_window(display)
        register_xfixes_events(display, window)
        gateway = X11ClipboardGateway(display, window, pump, loop)
        paste_source = XInputPasteSignalSource(display, pump, loop)
        pump.attach(loop)

        # Content already on the clipboard becomes the baseline
        await gateway.refresh()

        monitor = ClipboardMonitor(
            settings,
            gateway,
            AsyncioScheduler(loop),
            notifier=PlyerNotifier(),
            paste_source=paste_source,
        )
        monitor.add_observer(StatusLogger())

        shutdown_requested = asyncio.Event()
        loop.add_signal_handler(signal.SIGINT, shutdown_requested.set)
        loop.add_signal_handler(signal.SIGTERM, shutdown_requested.set)
        loop.add_signal_handler(signal.SIGUSR1, settings.toggle, "enabled")
        loop.add_signal_handler(signal.SIGUSR2, monitor.clear_now)

        if settings.snapshot().enabled:
            monitor.start()
        else:
            logger.info("Monitoring disabled, send SIGUSR1 to enable")

        await shutdown_requested.wait()
        monitor.stop()
        for signum in (signal.SIGINT, signal.SIGTERM, signal.SIGUSR1, signal.SIGUSR2):
            loop.remove_signal_handler(signum)
    finally:
        pump.detach()
        display.close()


async def run_scan(settings: SettingsStore) -> ScanResult:
    """Scan the X11 clipboard once, clearing it if sensitive data is found.

    Args:
        settings: Settings selecting the enabled patterns.

    Returns:
        The scan outcome.

    Raises:
        DisplayUnavailableError: If X11 cannot be used.
    """
    from clipshield.notifier import PlyerNotifier
    from clipshield.scan import scan_clipboard
    from clipshield.x11_display import create_hidden_window, open_display
    from clipshield.x11_events import X11EventPump
    from clipshield.x11_gateway import X11ClipboardGateway

    loop = asyncio.get_running_loop()
    display = open_display()
    pump = X11EventPump(display)
    try:
        window = create_hidden_window(display)
        gateway = X11ClipboardGateway(display, window, pump, loop)
        pump.attach(loop)
        await gateway.refresh()
        snapshot = settings.snapshot()
        result = scan_clipboard(gateway, snapshot)
    finally:
        pump.detach()
        display.close()

    if result.cleared and snapshot.show_notification:
        PlyerNotifier().notify(result.message)
    return result
