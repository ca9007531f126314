"""
UI orchestrator — opens the web UI while making sure the stack is healthy.

Lifecycle::

    PreCheck ──(environment error)──────────────────────────► fail fast
        │
        ▼
    Racing: monitor_stack()  ─┐
            serve_ui()       ─┼─ first to finish wins ──► success / error
            timeout          ─┘                      └──► UITimeoutError

The pre-check queries the UI port once. Environment errors abort right away
since waiting cannot fix them; any other failure only means the container is
not up yet. If it succeeds the address is already known and only the HTTP
probe is left.

Whatever wins, the remaining tasks are cancelled before returning.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Collection

import httpx
from rich.console import Console

from sourced.core.compose import CommandRunner
from sourced.core.constants import (
    CONTAINER_PREFIX,
    DEFAULT_BATCH_SERVICES,
    POLL_INTERVAL_SECONDS,
    PROBE_TIMEOUT_SECONDS,
    SPINNER_THRESHOLD_SECONDS,
    UI_BANNER,
    UI_CONTAINER_NAME,
    UI_INTERNAL_PORT,
)
from sourced.core.exceptions import AddressNotFoundError, ComposeError, UITimeoutError
from sourced.core.monitor import monitor_stack
from sourced.core.progress import start_spinner
from sourced.core.readiness import find_address, open_browser, query_address, ui_url, wait_ready

logger = logging.getLogger(__name__)


class UIOrchestrator:
    """
    Coordinate the stack monitors and the UI readiness pipeline.

    Usage::

        orchestrator = UIOrchestrator(runner, console=console)
        await orchestrator.open(timeout=120.0)
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        console: Console | None = None,
        container: str = UI_CONTAINER_NAME,
        internal_port: int = UI_INTERNAL_PORT,
        batch_services: Collection[str] = DEFAULT_BATCH_SERVICES,
        container_prefix: str = CONTAINER_PREFIX,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        probe_timeout: float = PROBE_TIMEOUT_SECONDS,
        spinner_threshold: float = SPINNER_THRESHOLD_SECONDS,
        browser: Callable[[str], None] = open_browser,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._runner = runner
        self._console = console or Console()
        self._container = container
        self._internal_port = internal_port
        self._batch_services = frozenset(batch_services)
        self._prefix = container_prefix
        self._interval = poll_interval
        self._probe_timeout = probe_timeout
        self._spinner_threshold = spinner_threshold
        self._browser = browser
        self._http_client = http_client

    async def open(self, timeout: float) -> None:
        """
        Open the UI, failing on the first unhealthy service or on timeout.

        Raises:
            WorkdirError:  the pre-check found an unusable environment.
            SourcedError:  the first failure reported by any concurrent task.
            UITimeoutError: nothing conclusive happened within *timeout*.
        """
        address = await self._pre_check()

        self._console.print(UI_BANNER)

        stop_spinner: Callable[[], None] | None = None
        if timeout > self._spinner_threshold:
            stop_spinner = start_spinner(self._console, "Initializing source{d}...")

        tasks = [
            asyncio.create_task(
                monitor_stack(self._runner, self._batch_services, self._interval, self._prefix),
                name="monitor_stack",
            ),
            asyncio.create_task(self._serve_ui(address), name="serve_ui"),
        ]
        try:
            done, _ = await asyncio.wait(
                tasks, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
            if not done:
                raise UITimeoutError(self._container, timeout)

            # Tasks finishing in the same iteration: a failure beats success
            for task in done:
                exc = task.exception()
                if exc is not None:
                    raise exc
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if stop_spinner is not None:
                stop_spinner()

    async def _pre_check(self) -> str | None:
        """Return the UI address if compose already knows it, else None."""
        try:
            address = await query_address(self._runner, self._container, self._internal_port)
        except ComposeError as exc:
            logger.debug("%s not up yet: %s", self._container, exc)
            return None
        return address

    async def _serve_ui(self, address: str | None) -> None:
        if address is None:
            address = await find_address(
                self._runner, self._container, self._internal_port, self._interval
            )
        elif not address:
            raise AddressNotFoundError(f"could not find the public port of {self._container}")
        url = ui_url(address)
        logger.info("waiting for the UI at %s", url)
        await wait_ready(
            url,
            interval=self._interval,
            probe_timeout=self._probe_timeout,
            client=self._http_client,
        )
        await asyncio.to_thread(self._browser, url)
        logger.info("opened %s", url)


def open_ui(runner: CommandRunner, timeout: float, **kwargs) -> None:
    """Blocking entry point: run UIOrchestrator.open() on a fresh event loop."""
    asyncio.run(UIOrchestrator(runner, **kwargs).open(timeout))
