"""sourced constants: filesystem layout, UI container, polling and exit codes."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    ENV_ERROR = 3
    TIMEOUT = 6


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

SOURCED_DIR_NAME = ".sourced"
CONFIG_FILENAME = "config.toml"
WORKDIRS_DIR_NAME = "workdirs"
ACTIVE_WORKDIR_NAME = "__active__"
COMPOSE_FILENAME = "docker-compose.yml"
ENV_FILENAME = ".env"

# ---------------------------------------------------------------------------
# Orchestration tool
# ---------------------------------------------------------------------------

DEFAULT_COMPOSE_COMMAND = ("docker-compose",)
CONTAINER_PREFIX = "srcd-"  # COMPOSE_PROJECT_NAME prefix, see compose.project_name()

# ---------------------------------------------------------------------------
# Web UI
# ---------------------------------------------------------------------------

UI_CONTAINER_NAME = "sourced-ui"  # service name of the srcd/sourced-ui image
UI_INTERNAL_PORT = 8088
DEFAULT_WEB_TIMEOUT_SECONDS = 2.0
POLL_INTERVAL_SECONDS = 1.0
PROBE_TIMEOUT_SECONDS = 1.0
SPINNER_THRESHOLD_SECONDS = 5.0

# Services that run to completion; "Exit 0" is their normal end state
DEFAULT_BATCH_SERVICES = ("ghsync", "gitcollector")

UI_BANNER = """
Once source{d} is fully initialized, the UI will be available, by default at:
  http://127.0.0.1:8088
  user:admin
  pass:admin
"""
