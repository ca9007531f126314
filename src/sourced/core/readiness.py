"""
UI readiness — find the public address of the UI container, wait until it
answers HTTP, then open it in the browser.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser

import httpx

from sourced.core.compose import CommandRunner
from sourced.core.constants import POLL_INTERVAL_SECONDS, PROBE_TIMEOUT_SECONDS
from sourced.core.exceptions import AddressNotFoundError, BrowserLaunchError, ComposeError

logger = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"
_BIND_ALL_HOSTS = {"0.0.0.0", "::", "[::]"}  # nosec B104: matched, never bound


async def query_address(runner: CommandRunner, container: str, port: int) -> str:
    """Run ``port <container> <port>`` once and return the trimmed output."""
    output = await runner.run("port", container, str(port))
    return output.strip()


async def find_address(
    runner: CommandRunner,
    container: str,
    port: int,
    interval: float = POLL_INTERVAL_SECONDS,
) -> str:
    """
    Wait until compose can report the public address of *container*.

    A failing query means the container is not created yet and is retried
    every *interval* seconds without limit.

    Raises:
        AddressNotFoundError: compose succeeded but reported nothing.
        WorkdirError:         the environment became unusable.
    """
    while True:
        try:
            address = await query_address(runner, container, port)
            break
        except ComposeError as exc:
            logger.debug("port of %s not available yet: %s", container, exc)
        await asyncio.sleep(interval)

    if not address:
        raise AddressNotFoundError(f"could not find the public port of {container}")
    return address


def normalize_address(address: str) -> str:
    """
    Turn a bind address into a connect address.

    Compose reports ``0.0.0.0:8088`` for ports published on all interfaces,
    which is right for binding but not for connecting.
    """
    host, sep, port = address.strip().rpartition(":")
    if sep and host in _BIND_ALL_HOSTS:
        return f"{LOOPBACK}:{port}"
    return address.strip()


def ui_url(address: str) -> str:
    return f"http://{normalize_address(address)}"


async def wait_ready(
    url: str,
    interval: float = POLL_INTERVAL_SECONDS,
    probe_timeout: float = PROBE_TIMEOUT_SECONDS,
    client: httpx.AsyncClient | None = None,
) -> None:
    """
    Block until *url* answers with any HTTP response.

    The status code is irrelevant: a response proves the server is
    listening. Transport errors and timeouts mean "not yet".
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(probe_timeout))
    try:
        while True:
            try:
                response = await client.get(url)
                logger.debug("UI answered %s with %d", url, response.status_code)
                return
            except httpx.HTTPError as exc:
                logger.debug("UI not ready at %s: %s", url, exc)
            await asyncio.sleep(interval)
    finally:
        if owns_client:
            await client.aclose()


def open_browser(url: str) -> None:
    """Open *url* in the default browser."""
    try:
        opened = webbrowser.open(url, new=2)
    except webbrowser.Error as exc:
        raise BrowserLaunchError(f"could not open the browser: {exc}") from exc
    if not opened:
        raise BrowserLaunchError(f"could not open the browser for {url}")
