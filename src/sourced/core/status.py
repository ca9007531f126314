"""
Service state extraction from ``docker-compose ps <service>`` output.

The table is owned by compose and its layout is not stable, so parsing is
done line by line with a small grammar instead of one multi-line pattern::

    <prefix><name-token> ... <state> [<exit-code>] ...

Only lines whose first token starts with the container prefix are
considered. Container names longer than the column are wrapped by compose;
the continuation line does not start with the prefix and is ignored. The
query is scoped to a single service so the wrapped remainder is not needed.

Example::

    Name                                     Command              State          Ports
    ------------------------------------------------------------------------------------------
    srcd-l1vzzxjzl3nln2vudhlzztdlbi9qcm9qzwn   /bin/bblfsh-web ...   Up      0.0.0.0:9999->8080/tcp
    2vudhlzztdlbg_bblfsh-web_1
"""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum

from sourced.core.constants import CONTAINER_PREFIX


class StateKind(str, Enum):
    UP = "up"
    EXITED_CLEAN = "exited_clean"
    EXITED_WITH_CODE = "exited_with_code"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ServiceState:
    """Latest observed state of one service."""

    kind: StateKind
    raw: str
    exit_code: int | None = None

    @property
    def is_terminal(self) -> bool:
        """True if the state should abort the wait."""
        return self.kind in (StateKind.EXITED_WITH_CODE, StateKind.UNEXPECTED)


# Last "Up" or "Exit <code>" on the line; the command column may contain anything
_STATE_RE = re.compile(r".*\b(Up|Exit (\w+))\b")


def _name_re(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(prefix)}\w+")


def extract_states(output: str, prefix: str = CONTAINER_PREFIX) -> list[str]:
    """
    Return the raw state strings (``"Up"``, ``"Exit 0"``...) found in *output*.

    Unmatched lines are skipped; empty or garbled output yields ``[]``.
    """
    name_re = _name_re(prefix)
    states: list[str] = []
    for line in output.strip().splitlines():
        name = name_re.match(line)
        if name is None:
            continue
        state = _STATE_RE.match(line, name.end())
        if state is None:
            continue
        states.append(state.group(1))
    return states


def classify_state(service: str, raw: str, batch_services: Collection[str]) -> ServiceState:
    """
    Map a raw state string of *service* to a ServiceState.

    ``Exit 0`` is a clean exit only for services in *batch_services*; the
    rest are expected to keep running and any exit is unexpected.
    """
    if raw == "Up":
        return ServiceState(StateKind.UP, raw)

    if raw.startswith("Exit "):
        code = raw[len("Exit ") :]
        if service not in batch_services:
            return ServiceState(StateKind.UNEXPECTED, raw)
        if code == "0":
            return ServiceState(StateKind.EXITED_CLEAN, raw, exit_code=0)
        if code.isdigit():
            return ServiceState(StateKind.EXITED_WITH_CODE, raw, exit_code=int(code))

    return ServiceState(StateKind.UNEXPECTED, raw)


def parse_service_states(
    service: str,
    output: str,
    batch_services: Collection[str],
    prefix: str = CONTAINER_PREFIX,
) -> list[ServiceState]:
    """Extract and classify every state line of a ``ps <service>`` output."""
    return [classify_state(service, raw, batch_services) for raw in extract_states(output, prefix)]
