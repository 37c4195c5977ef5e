"""CLI command for security status."""

from pathlib import Path
from typing import Optional

import typer

from hostkeeper.cli.utils import build_collaborators, console, get_config


def status_cmd(
    ctx: typer.Context,
    format: str = typer.Option(
        "terminal",
        "--format",
        "-f",
        help="Output format (terminal, json)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path",
    ),
) -> None:
    """
    Show the state of the hardening controls.

    Example:
        hostkeeper status --format json
    """
    from hostkeeper.core.status import StatusChecker
    from hostkeeper.renderers import get_renderer
    from hostkeeper.renderers.base import OutputFormat, RenderContext

    config = get_config(ctx)

    try:
        output_format = OutputFormat(format)
    except ValueError:
        console.print(f"[red]Error:[/red] Unsupported format: {format}")
        raise typer.Exit(1)
    if output_format not in (OutputFormat.TERMINAL, OutputFormat.JSON):
        console.print(f"[red]Error:[/red] Unsupported format: {format}")
        raise typer.Exit(1)

    checker = StatusChecker(build_collaborators(), config.paths.sysctl_file)
    with console.status("Checking controls..."):
        checks = checker.collect()

    context = RenderContext(format=output_format, output_path=output)
    if output_format == OutputFormat.JSON:
        renderer = get_renderer(output_format)
        if output:
            renderer.render_to_file(checks, context)
            console.print(f"Report written to {output}")
        else:
            typer.echo(renderer.render(checks, context))
        return

    from hostkeeper.renderers.terminal import TerminalRenderer

    renderer = TerminalRenderer(console)
    if output:
        renderer.render_to_file(checks, context)
        console.print(f"Report written to {output}")
    else:
        renderer.render(checks, context)
