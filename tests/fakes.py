"""
In-memory stand-in for ComposeRunner.

Responses are scripted per argument tuple. A script is a list consumed in
order; its last item repeats forever. Items may be a string (stdout), an
exception instance (raised) or an async callable (awaited for the result).
"""

from __future__ import annotations

import asyncio
from typing import Any

from sourced.core.exceptions import ComposeError

UI_PORT_ARGS = ("port", "sourced-ui", "8088")


def ps_line(service: str, state: str, prefix: str = "srcd-abc123") -> str:
    """Render a ``docker-compose ps <service>`` table with one container."""
    return (
        "Name                      Command               State    Ports\n"
        "----------------------------------------------------------------\n"
        f"{prefix}_{service}_1   /bin/{service} --serve   {state}   0.0.0.0:9999->8080/tcp\n"
    )


class FakeComposeRunner:
    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self._scripts: dict[tuple[str, ...], list[Any]] = {}

    def on(self, *args: str, result: Any) -> FakeComposeRunner:
        items = list(result) if isinstance(result, list) else [result]
        self._scripts[args] = items
        return self

    def services(self, *names: str) -> FakeComposeRunner:
        return self.on("config", "--services", result="\n".join(names) + "\n")

    def count(self, *args: str) -> int:
        return sum(1 for call in self.calls if call[: len(args)] == args)

    async def run(self, *args: str, stdin: bytes | None = None) -> str:
        self.calls.append(args)
        await asyncio.sleep(0)
        script = self._scripts.get(args)
        if script is None:
            raise ComposeError(f"no scripted response for {args}", args=args, returncode=1)
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item()
        return item
