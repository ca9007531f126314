"""
Working directory checks.

A working directory holds the ``docker-compose.yml`` and ``.env`` files that
describe one deployment. The active one is usually reached through the
``~/.sourced/workdirs/__active__`` link.
"""

from __future__ import annotations

from pathlib import Path

from sourced.core.constants import COMPOSE_FILENAME, ENV_FILENAME
from sourced.core.exceptions import (
    WorkdirInvalidError,
    WorkdirMalformedError,
    WorkdirNotFoundError,
)

REQUIRED_FILES = (COMPOSE_FILENAME, ENV_FILENAME)


def validate_workdir(path: Path) -> Path:
    """
    Check that *path* can be used to run compose and return it resolved.

    Raises:
        WorkdirNotFoundError:  nothing exists at *path* (or a dangling link).
        WorkdirInvalidError:   *path* exists but is not a directory.
        WorkdirMalformedError: a required file is missing.
    """
    if not path.exists():
        raise WorkdirNotFoundError(
            f"working directory {path} does not exist; run 'sourced init' first"
        )
    if not path.is_dir():
        raise WorkdirInvalidError(f"working directory {path} is not a directory")

    resolved = path.resolve()
    missing = [name for name in REQUIRED_FILES if not (resolved / name).is_file()]
    if missing:
        raise WorkdirMalformedError(
            f"working directory {resolved} is malformed, missing: {', '.join(missing)}"
        )
    return resolved
