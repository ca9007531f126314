"""Progress indicator — a spinner on its own terminal line."""

from __future__ import annotations

import sys
from collections.abc import Callable

from rich.console import Console


def start_spinner(console: Console, message: str) -> Callable[[], None]:
    """
    Start a spinner showing *message* and return its stop handle.

    The handle may be called more than once; only the first call stops the
    spinner and leaves *message* printed in its place.
    """
    spinner = "line" if sys.platform == "win32" else "dots"
    status = console.status(message, spinner=spinner)
    status.start()
    stopped = False

    def stop() -> None:
        nonlocal stopped
        if stopped:
            return
        stopped = True
        status.stop()
        console.print(message)

    return stop
