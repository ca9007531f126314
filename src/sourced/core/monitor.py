"""
Stack monitor — watches every compose service while the UI starts.

The services are discovered once with ``config --services``; one polling
task per service then runs ``ps <service>`` at a fixed interval. The first
service found in an unexpected state ends the whole monitor with an
exception, which the UI orchestrator treats as a failure signal.

Monitors never finish on their own; they run until they fail or are
cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection

from sourced.core.compose import CommandRunner
from sourced.core.constants import CONTAINER_PREFIX, POLL_INTERVAL_SECONDS
from sourced.core.exceptions import (
    ComposeError,
    DiscoveryError,
    ServiceStatusError,
    ServiceUnhealthyError,
    WorkdirError,
)
from sourced.core.status import StateKind, parse_service_states

logger = logging.getLogger(__name__)


async def list_services(runner: CommandRunner) -> list[str]:
    """Return the names of all services of the stack."""
    try:
        output = await runner.run("config", "--services")
    except (ComposeError, WorkdirError) as exc:
        raise DiscoveryError(f"cannot get list of services: {exc}") from exc
    return [line.strip() for line in output.strip().splitlines() if line.strip()]


async def monitor_service(
    runner: CommandRunner,
    service: str,
    batch_services: Collection[str],
    interval: float = POLL_INTERVAL_SECONDS,
    prefix: str = CONTAINER_PREFIX,
) -> None:
    """
    Poll *service* until it reaches a terminal state.

    Never returns normally.

    Raises:
        ServiceStatusError:    the status query itself failed.
        ServiceUnhealthyError: the service is in an unexpected state.
    """
    while True:
        try:
            output = await runner.run("ps", service)
        except (ComposeError, WorkdirError) as exc:
            raise ServiceStatusError(service, exc) from exc

        for state in parse_service_states(service, output, batch_services, prefix):
            if state.kind is StateKind.EXITED_WITH_CODE:
                raise ServiceUnhealthyError(service, state.raw, exit_code=str(state.exit_code))
            if state.kind is StateKind.UNEXPECTED:
                raise ServiceUnhealthyError(service, state.raw)
            logger.debug("service %s: %s", service, state.raw)

        await asyncio.sleep(interval)


async def monitor_stack(
    runner: CommandRunner,
    batch_services: Collection[str],
    interval: float = POLL_INTERVAL_SECONDS,
    prefix: str = CONTAINER_PREFIX,
) -> None:
    """
    Discover the services and monitor all of them concurrently.

    Never returns normally: it raises the first failure of any service
    monitor, or DiscoveryError. Per-service tasks are cancelled when this
    coroutine exits, including on cancellation.
    """
    services = await list_services(runner)
    logger.debug("monitoring services: %s", ", ".join(services))

    if not services:
        logger.warning("compose reported no services; nothing to monitor")
        await asyncio.Event().wait()

    tasks = [
        asyncio.create_task(
            monitor_service(runner, service, batch_services, interval, prefix),
            name=f"monitor:{service}",
        )
        for service in services
    ]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in done:
            exc = task.exception()
            if exc is not None:
                logger.debug("monitor failed: %s", exc)
                raise exc
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
