"""
sourced CLI entry point.

Commands:
  sourced web              — open the web interface in your browser
  sourced version          — show version and compose setup
"""

from __future__ import annotations

import click
from rich.console import Console

from sourced import __version__

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="sourced %(version)s")
def cli() -> None:
    """sourced — run and inspect a source{d} deployment."""


# ---------------------------------------------------------------------------
# web
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to wait for the UI (default: web.timeout_seconds, 2)",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every poll")
def web(timeout: float | None, verbose: bool) -> None:
    """Open the web interface in your browser.

    By default at http://127.0.0.1:8088 (user: admin, pass: admin).
    """
    from sourced.cli._web import cmd_web

    cmd_web(timeout=timeout, verbose=verbose, console=console, err_console=err_console)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def version(as_json: bool) -> None:
    """Show the version and the compose setup the web command would use."""
    from rich.markup import escape

    from sourced.core.config import load_config
    from sourced.core.constants import ExitCode
    from sourced.core.exceptions import ConfigError

    try:
        config = load_config()
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {escape(str(exc))}")
        raise SystemExit(ExitCode.CONFIG_ERROR) from exc

    info = {
        "sourced": __version__,
        "compose_command": " ".join(config.compose.command),
        "workdir": str(config.compose.workdir_path),
        "ui": f"{config.web.container_name}:{config.web.internal_port}",
        "batch_services": config.web.batch_services,
    }
    if as_json:
        import json

        click.echo(json.dumps(info, indent=2))
        return

    console.print(f"sourced {__version__}")
    console.print(f"  compose:  [cyan]{info['compose_command']}[/cyan]")
    console.print(f"  workdir:  {info['workdir']}")
    console.print(f"  ui:       {info['ui']}")
    console.print(f"  batch:    {', '.join(config.web.batch_services) or '(none)'}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
