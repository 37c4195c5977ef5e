"""Main CLI entry point for hostkeeper."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from hostkeeper.cli import cleanup, harden, site, status

app = typer.Typer(
    name="hostkeeper",
    help="Idempotent web host provisioning, hardening and cleanup.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Register subcommands
app.command(name="site")(site.site_cmd)
app.command(name="harden")(harden.harden_cmd)
app.command(name="cleanup")(cleanup.cleanup_cmd)
app.command(name="status")(status.status_cmd)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a hostkeeper YAML config file",
    ),
) -> None:
    """
    hostkeeper: idempotent web host provisioning, hardening and cleanup.

    - [bold]site[/bold]: Provision nginx sites with Let's Encrypt certificates
    - [bold]harden[/bold]: Apply firewall, fail2ban, SSH, update and kernel hardening
    - [bold]cleanup[/bold]: Prune Docker resources and report to Slack
    - [bold]status[/bold]: Show the state of the hardening controls
    """
    from hostkeeper.utils.config import load_config
    from hostkeeper.utils.logging import configure_logging

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = "INFO"
    configure_logging(level=level)

    try:
        ctx.obj = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    ctx.meta["verbose"] = verbose
    ctx.meta["log_level"] = level
    ctx.meta["config_path"] = config.resolve() if config else None


@app.command()
def version() -> None:
    """Show the hostkeeper version."""
    from hostkeeper import __version__

    console.print(f"hostkeeper version {__version__}")


if __name__ == "__main__":
    app()
