"""
Compose runner — executes the orchestration tool against a working directory.

Every call re-validates the working directory, so environment problems
surface as WorkdirError subclasses before any process is spawned::

    runner = ComposeRunner(["docker-compose"], workdir)
    services = await runner.run("config", "--services")
"""

from __future__ import annotations

import asyncio
import base64
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from sourced.core.constants import CONTAINER_PREFIX
from sourced.core.exceptions import ComposeError
from sourced.core.workdir import validate_workdir

logger = logging.getLogger(__name__)


def project_name(workdir: Path) -> str:
    """
    Return the COMPOSE_PROJECT_NAME used for *workdir*.

    The encoded path keeps projects of different workdirs apart; it also
    makes container names long enough for compose to wrap them in ``ps``.
    """
    encoded = base64.b32encode(str(workdir).encode("utf-8")).decode("ascii")
    return CONTAINER_PREFIX + encoded.rstrip("=").lower()


class CommandRunner(Protocol):
    """Anything that can run a compose subcommand and return its stdout."""

    async def run(self, *args: str, stdin: bytes | None = None) -> str: ...


class ComposeRunner:
    """Run compose subcommands and return their stdout."""

    def __init__(self, command: Sequence[str], workdir: Path) -> None:
        if not command:
            raise ValueError("ComposeRunner requires a command")
        self._command = list(command)
        self._workdir = workdir

    async def run(self, *args: str, stdin: bytes | None = None) -> str:
        """
        Run ``<command> <args...>`` in the working directory.

        Returns:
            The decoded stdout of the process.

        Raises:
            WorkdirError: the working directory is unusable.
            ComposeError: the process could not be started or exited non-zero.
        """
        workdir = validate_workdir(self._workdir)
        argv = [*self._command, *args]
        env = dict(os.environ, COMPOSE_PROJECT_NAME=project_name(workdir))
        logger.debug("compose: %s (cwd=%s)", " ".join(argv), workdir)

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(workdir),
                env=env,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ComposeError(f"cannot run {argv[0]}: {exc}", args=args) from exc

        try:
            out, err = await proc.communicate(stdin)
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
            # Reap the child and drain its pipes so the transport closes on this loop
            await asyncio.shield(proc.communicate())
            raise
        stdout = out.decode("utf-8", errors="replace")
        stderr = err.decode("utf-8", errors="replace").strip()

        if proc.returncode != 0:
            detail = stderr or f"exit status {proc.returncode}"
            raise ComposeError(
                f"{' '.join(args)}: {detail}",
                args=args,
                returncode=proc.returncode,
                stderr=stderr,
            )
        return stdout
