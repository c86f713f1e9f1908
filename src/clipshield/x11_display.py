#!/usr/bin/env python3
"""X11 display connection.

This module opens the X11 display, retrying with exponential backoff via
tenacity while the server is unreachable, and creates the hidden window
that owns the clipboard when ClipShield writes to it.

The module handles:
- Resolving the DISPLAY environment variable
- Connecting with retry
- Creating hidden windows for clipboard ownership
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from tenacity import retry, retry_if_exception_type, stop_after_delay, wait_exponential
from Xlib import X

from clipshield.x11_constants import CONNECT_TIMEOUT, INITIAL_WAIT, MAX_WAIT, WAIT_MULTIPLIER

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.xobject.drawable import Window

logger = logging.getLogger(__name__)


class DisplayUnavailableError(Exception):
    """
    Exception raised when the X11 display cannot be used.

    Raised when DISPLAY is unset, the connection fails after all retries,
    or a required extension is missing.
    """

    pass


def get_display_name() -> str:
    """Return the DISPLAY environment variable.

    Raises:
        DisplayUnavailableError: If DISPLAY is unset or empty.
    """
    display_name = os.environ.get("DISPLAY")
    if not display_name:
        raise DisplayUnavailableError(
            "DISPLAY environment variable is not set; X11 is required for clipboard access"
        )
    return display_name


@retry(
    wait=wait_exponential(
        multiplier=WAIT_MULTIPLIER,
        min=INITIAL_WAIT,
        max=MAX_WAIT,
    ),
    retry=retry_if_exception_type(ConnectionError),
    stop=stop_after_delay(CONNECT_TIMEOUT),
    reraise=True,
)
def connect_display(display_name: str) -> Display:
    """Connect to the X server, retrying while it refuses connections.

    Args:
        display_name: X11 display name, e.g. ":0".

    Returns:
        Display object for X11 operations.

    Raises:
        ConnectionError: If the server stays unreachable.
        DisplayUnavailableError: If the display name is malformed.
    """
    from Xlib.display import Display as XDisplay
    from Xlib.error import DisplayConnectionError, DisplayNameError

    try:
        return XDisplay(display_name)
    except DisplayNameError as e:
        raise DisplayUnavailableError(f"Invalid display name {display_name!r}: {e}") from e
    except DisplayConnectionError as e:
        logger.warning("Connection to X11 display %s failed, will retry", display_name)
        raise ConnectionError(str(e)) from e


def open_display(connect_timeout: float = CONNECT_TIMEOUT) -> Display:
    """Open the display named by DISPLAY.

    Args:
        connect_timeout: Seconds to keep retrying an unreachable server.

    Returns:
        Display object for X11 operations.

    Raises:
        DisplayUnavailableError: If DISPLAY is unset or the connection fails.
    """
    display_name = get_display_name()
    try:
        display = connect_display.retry_with(stop=stop_after_delay(connect_timeout))(
            display_name
        )
    except ConnectionError as e:
        raise DisplayUnavailableError(
            f"Failed to connect to X11 display {display_name}: {e}"
        ) from e
    logger.debug("Connected to X11 display %s", display_name)
    return display


def get_display_fd(display: Display) -> int:
    """Get the file descriptor for the X11 display connection.

    The file descriptor can be integrated into asyncio's event loop using
    loop.add_reader() for event-driven X11 event processing.

    Args:
        display: The X11 display connection.

    Returns:
        File descriptor number for the display connection.
    """
    return display.fileno()


def create_hidden_window(display: Display) -> Window:
    """Create a 1x1 unmapped window for clipboard ownership.

    X11 clipboard ownership requires a window. This creates a minimal hidden
    window that owns the CLIPBOARD selection after a conceal-write or clear
    and receives converted selection data when reading.

    Args:
        display: The X11 display connection.

    Returns:
        A Window object for owning clipboard selections.
    """
    screen = display.screen()
    window = screen.root.create_window(
        0, 0, 1, 1, 0, screen.root_depth, event_mask=X.PropertyChangeMask,
    )
    return window
