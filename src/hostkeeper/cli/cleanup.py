"""CLI command for container cleanup with reporting."""

from __future__ import annotations

import socket
import sys
from pathlib import Path
from typing import Optional

import typer

from hostkeeper.cli.utils import build_collaborators, build_reconciler, console, get_config, handle_error
from hostkeeper.utils.config import CleanupSettings, load_cleanup_settings, save_cleanup_settings
from hostkeeper.utils.errors import ConfigurationError, HostkeeperError

WEBHOOK_HELP = """To get a Slack Webhook URL:
  1. Go to https://api.slack.com/apps
  2. Create/select an app, then Incoming Webhooks, then Add New Webhook
  3. Copy the webhook URL"""


def run_setup_wizard(path: Path) -> CleanupSettings:
    """Ask for the cleanup settings and save them to ``path``.

    Raises:
        ConfigurationError: If an answer is invalid
    """
    console.print("[yellow]Cleanup setup: please configure the following[/yellow]\n")

    server_name = typer.prompt("Server name (e.g., PROD-01)", default="", show_default=False)
    if not server_name:
        server_name = socket.gethostname()
        console.print(f"[blue]Using hostname: {server_name}[/blue]")

    console.print()
    console.print(WEBHOOK_HELP)
    webhook = typer.prompt("Slack Webhook URL (Enter to skip)", default="", show_default=False)

    threshold = typer.prompt("Disk usage warning threshold %", default=80, type=int)
    enable_prune = typer.confirm("Enable automatic docker prune?", default=True)

    try:
        settings = CleanupSettings(
            server_name=server_name,
            slack_webhook=webhook,
            disk_threshold=threshold,
            enable_prune=enable_prune,
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid setting: {e}") from e

    try:
        save_cleanup_settings(settings, path)
    except OSError as e:
        raise ConfigurationError(f"Cannot save settings to {path}: {e}", config_key=str(path)) from e
    console.print(f"[green]Configuration saved to {path}[/green]")
    return settings


def cleanup_cmd(
    ctx: typer.Context,
    setup: bool = typer.Option(
        False,
        "--setup",
        "--reconfigure",
        help="Run the setup wizard, then clean up",
    ),
    settings_path: Optional[Path] = typer.Option(
        None,
        "--settings",
        "-s",
        help="Settings file (default from config: /etc/hostkeeper/cleanup.conf)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Append the run record to this file (default from config)",
    ),
    no_notify: bool = typer.Option(
        False,
        "--no-notify",
        help="Do not send the report to Slack",
    ),
) -> None:
    """
    Prune unused Docker resources and report before/after metrics.

    The report covers disk, Docker and system usage plus the state of the
    hardening controls, and is sent to Slack when a webhook is configured.
    The command schedules itself daily with cron on first run.

    Example:
        hostkeeper cleanup --setup
    """
    from hostkeeper.collaborators.slack import SlackWebhookSink
    from hostkeeper.core.cleanup import ContainerPrune
    from hostkeeper.core.pipeline import MetricsPipeline
    from hostkeeper.core.schedule import cleanup_task
    from hostkeeper.core.status import StatusChecker
    from hostkeeper.renderers.base import RenderContext
    from hostkeeper.renderers.terminal import TerminalRenderer
    from hostkeeper.utils.logging import configure_logging, get_logger

    config = get_config(ctx)
    path = settings_path or Path(config.paths.cleanup_settings)
    record = log_file or Path(config.paths.cleanup_log)
    config_path = ctx.meta.get("config_path")

    try:
        if setup:
            settings = run_setup_wizard(path)
            if not typer.confirm("Run cleanup now?", default=True):
                console.print("[green]Setup complete. Run the command again to clean up.[/green]")
                raise typer.Exit(0)
        else:
            loaded = load_cleanup_settings(path)
            if loaded is None:
                if not sys.stdin.isatty():
                    raise ConfigurationError(
                        f"Settings file not found: {path}. Run 'hostkeeper cleanup --setup' interactively first.",
                        config_key=str(path),
                    )
                settings = run_setup_wizard(path)
            else:
                settings = loaded

        try:
            configure_logging(level=ctx.meta.get("log_level", "INFO"), log_file=record)
        except OSError as e:
            console.print(f"[yellow]Cannot write run record to {record}: {e}[/yellow]")
        logger = get_logger("cli.cleanup")
        logger.info(f"Server: {settings.server_name}")

        collaborators = build_collaborators()
        sink = None
        if settings.slack_webhook and not no_notify:
            sink = SlackWebhookSink(
                settings.slack_webhook,
                timeout=config.notify.timeout,
                max_attempts=config.notify.max_attempts,
            )

        pipeline = MetricsPipeline(
            host=collaborators.host,
            runtime=collaborators.runtime,
            status_checker=StatusChecker(collaborators, config.paths.sysctl_file),
            reconciler=build_reconciler(collaborators, config),
            schedule_task=cleanup_task(
                str(Path(sys.argv[0]).resolve()),
                str(record.resolve()),
                schedule=config.schedule.cleanup_cron,
                settings_file=str(path.resolve()),
                config_file=str(config_path) if config_path else None,
            ),
            sink=sink,
            server_name=settings.server_name,
            threshold=settings.disk_threshold,
        )
        with console.status("Cleaning up..."):
            report = pipeline.run_with_report(ContainerPrune(collaborators.runtime, settings.enable_prune))
    except HostkeeperError as e:
        handle_error(e)

    TerminalRenderer(console).render(report, RenderContext())
