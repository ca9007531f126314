"""sourced web — open the UI once the stack is up."""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from sourced.core.constants import ExitCode


def configure_logging(level: str, console: Console) -> None:
    """Route the ``sourced`` logger to *console* through rich."""
    logger = logging.getLogger("sourced")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def cmd_web(timeout: float | None, verbose: bool, console: Console, err_console: Console) -> None:
    from sourced.core.compose import ComposeRunner
    from sourced.core.config import load_config
    from sourced.core.exceptions import ConfigError, SourcedError, UITimeoutError, WorkdirError
    from sourced.core.ui import open_ui

    try:
        config = load_config()
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.CONFIG_ERROR)

    configure_logging("DEBUG" if verbose else config.logging.level, err_console)

    web_cfg = config.web
    runner = ComposeRunner(config.compose.command, config.compose.workdir_path)

    try:
        open_ui(
            runner,
            timeout if timeout is not None else web_cfg.timeout_seconds,
            console=console,
            container=web_cfg.container_name,
            internal_port=web_cfg.internal_port,
            batch_services=web_cfg.batch_services,
            container_prefix=web_cfg.container_prefix,
            poll_interval=web_cfg.poll_interval_seconds,
            probe_timeout=web_cfg.probe_timeout_seconds,
            spinner_threshold=web_cfg.spinner_threshold_seconds,
        )
    except WorkdirError as exc:
        err_console.print(f"[red]Environment error:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.ENV_ERROR)
    except UITimeoutError as exc:
        err_console.print(f"[red]Timeout:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.TIMEOUT)
    except SourcedError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(ExitCode.ERROR)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(ExitCode.ERROR)
