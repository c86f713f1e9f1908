#!/usr/bin/env python3
"""Constants for the X11 clipboard backend.

Connection retry parameters control the exponential backoff used when
the X server is not yet reachable, e.g. when started from a login script.
"""

# Initial delay between connection attempts in seconds.
INITIAL_WAIT: float = 1.0

# Maximum delay between connection attempts in seconds.
MAX_WAIT: float = 10.0

# Exponential backoff multiplier; tenacity waits multiplier * 2^(attempt - 1),
# clamped to [INITIAL_WAIT, MAX_WAIT].
WAIT_MULTIPLIER: float = 2.0

# Give up connecting after this many seconds.
CONNECT_TIMEOUT: float = 30.0

# Timeout in seconds for clipboard reads, so an unresponsive owner
# cannot leave a read pending forever.
CLIPBOARD_TIMEOUT: float = 2.0

# Property on our window that receives converted selection data.
SELECTION_PROPERTY: str = "CLIPSHIELD_SEL"

# Target advertised with concealed content. Clipboard managers that honor
# it (Klipper, CopyQ) keep the entry out of their history.
CONCEAL_TARGET: str = "x-kde-passwordManagerHint"
CONCEAL_VALUE: bytes = b"secret"

# Raw key events need XInput 2.0 or later.
XINPUT_MIN_VERSION: tuple[int, int] = (2, 0)

# Core protocol event code carrying extension events (XGE), e.g. XInput 2.
GENERIC_EVENT_CODE: int = 35
