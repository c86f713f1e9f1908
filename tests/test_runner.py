#!/usr/bin/env python3
"""Tests for the monitor and scan entry points."""
import asyncio
import logging
import os
import signal
from contextlib import ExitStack
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from clipshield.monitor_state import CLEARED, IDLE, Counting, StatusSnapshot
from clipshield.runner import StatusLogger, run_monitor, run_scan
from clipshield.settings import SettingsStore
from conftest import CARD


class TestStatusLogger:
    """Tests for StatusLogger."""

    def test_state_changes_logged_at_info(self, caplog) -> None:
        """Detections and clears are logged at INFO."""
        status_logger = StatusLogger()
        with caplog.at_level(logging.DEBUG, logger="clipshield.runner"):
            status_logger(StatusSnapshot(IDLE, 0, None))
            status_logger(StatusSnapshot(Counting(30), 0, "Credit Card"))
            status_logger(StatusSnapshot(CLEARED, 1, "Credit Card"))

        assert [r.levelno for r in caplog.records] == [logging.INFO] * 3
        assert caplog.records[1].getMessage() == "Credit Card detected, clearing in 30s"

    def test_ticks_logged_at_debug(self, caplog) -> None:
        """Plain countdown ticks are logged at DEBUG."""
        status_logger = StatusLogger()
        with caplog.at_level(logging.DEBUG, logger="clipshield.runner"):
            status_logger(StatusSnapshot(Counting(30), 0, "SSN (US)"))
            status_logger(StatusSnapshot(Counting(29), 0, "SSN (US)"))
            status_logger(StatusSnapshot(Counting(2, accelerated=True), 0, "SSN (US)"))

        assert [r.levelno for r in caplog.records] == [
            logging.INFO,
            logging.DEBUG,
            logging.INFO,
        ]

    def test_repeated_status_not_logged(self, caplog) -> None:
        """Identical consecutive snapshots are logged once."""
        status_logger = StatusLogger()
        with caplog.at_level(logging.DEBUG, logger="clipshield.runner"):
            status_logger(StatusSnapshot(IDLE, 0, None))
            status_logger(StatusSnapshot(IDLE, 0, None))

        assert len(caplog.records) == 1


def patch_x11(stack: ExitStack, gateway: MagicMock) -> dict[str, MagicMock]:
    """Replace the X11 layer with mocks; return them by name."""
    mocks = {
        "display": MagicMock(),
        "pump": MagicMock(),
    }
    stack.enter_context(
        patch("clipshield.x11_display.open_display", return_value=mocks["display"])
    )
    stack.enter_context(patch("clipshield.x11_display.create_hidden_window"))
    stack.enter_context(patch("clipshield.x11_events.register_xfixes_events"))
    stack.enter_context(
        patch("clipshield.x11_events.X11EventPump", return_value=mocks["pump"])
    )
    stack.enter_context(
        patch("clipshield.x11_gateway.X11ClipboardGateway", return_value=gateway)
    )
    mocks["notifier"] = stack.enter_context(patch("clipshield.notifier.PlyerNotifier"))
    return mocks


def make_gateway(text: str | None) -> MagicMock:
    """Create a mock X11 gateway holding text."""
    gateway = MagicMock()
    gateway.refresh = AsyncMock(return_value=text)
    gateway.read_text.return_value = text
    return gateway


class TestRunScan:
    """Tests for run_scan."""

    @pytest.mark.asyncio
    async def test_sensitive_clipboard_cleared(self) -> None:
        """Sensitive text is cleared and a notification sent."""
        gateway = make_gateway(CARD)
        with ExitStack() as stack:
            mocks = patch_x11(stack, gateway)
            result = await run_scan(SettingsStore())

        assert result.cleared
        gateway.refresh.assert_awaited_once()
        gateway.clear.assert_called_once()
        mocks["notifier"].return_value.notify.assert_called_once_with(result.message)
        mocks["pump"].attach.assert_called_once()
        mocks["pump"].detach.assert_called_once()
        mocks["display"].close.assert_called_once()

    @pytest.mark.asyncio
    async def test_notification_disabled(self) -> None:
        """No notification is sent when notifications are off."""
        gateway = make_gateway(CARD)
        with ExitStack() as stack:
            mocks = patch_x11(stack, gateway)
            result = await run_scan(SettingsStore(show_notification=False))

        assert result.cleared
        mocks["notifier"].return_value.notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_clean_clipboard(self) -> None:
        """Clean text is left alone and nobody is notified."""
        gateway = make_gateway("hello")
        with ExitStack() as stack:
            mocks = patch_x11(stack, gateway)
            result = await run_scan(SettingsStore())

        assert not result.cleared
        gateway.clear.assert_not_called()
        mocks["notifier"].return_value.notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_display_closed_on_error(self) -> None:
        """The display is closed even when the read fails."""
        gateway = make_gateway(None)
        gateway.refresh.side_effect = RuntimeError("boom")
        with ExitStack() as stack:
            mocks = patch_x11(stack, gateway)
            with pytest.raises(RuntimeError):
                await run_scan(SettingsStore())

        mocks["pump"].detach.assert_called_once()
        mocks["display"].close.assert_called_once()


class TestRunMonitor:
    """Tests for run_monitor signal handling."""

    @pytest.mark.asyncio
    async def test_signals_drive_monitor(self) -> None:
        """SIGUSR1 toggles, SIGUSR2 clears and SIGTERM shuts down."""
        settings = SettingsStore()
        gateway = make_gateway(None)
        with ExitStack() as stack:
            mocks = patch_x11(stack, gateway)
            stack.enter_context(patch("clipshield.x11_paste.XInputPasteSignalSource"))
            monitor_cls = stack.enter_context(patch("clipshield.monitor.ClipboardMonitor"))
            monitor = monitor_cls.return_value

            task = asyncio.create_task(run_monitor(settings))
            await asyncio.sleep(0.05)
            monitor.start.assert_called_once()

            os.kill(os.getpid(), signal.SIGUSR1)
            await asyncio.sleep(0.05)
            assert settings.get("enabled") is False

            os.kill(os.getpid(), signal.SIGUSR2)
            await asyncio.sleep(0.05)
            monitor.clear_now.assert_called_once()

            os.kill(os.getpid(), signal.SIGTERM)
            await asyncio.wait_for(task, timeout=1.0)

        monitor.stop.assert_called_once()
        mocks["pump"].detach.assert_called_once()
        mocks["display"].close.assert_called_once()

    @pytest.mark.asyncio
    async def test_starts_paused_when_disabled(self) -> None:
        """The monitor is not started while the enabled setting is off."""
        settings = SettingsStore(enabled=False)
        gateway = make_gateway(None)
        with ExitStack() as stack:
            patch_x11(stack, gateway)
            stack.enter_context(patch("clipshield.x11_paste.XInputPasteSignalSource"))
            monitor_cls = stack.enter_context(patch("clipshield.monitor.ClipboardMonitor"))

            task = asyncio.create_task(run_monitor(settings))
            await asyncio.sleep(0.05)
            os.kill(os.getpid(), signal.SIGINT)
            await asyncio.wait_for(task, timeout=1.0)

        monitor_cls.return_value.start.assert_not_called()
