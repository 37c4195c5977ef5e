"""Terminal renderer for hostkeeper output."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hostkeeper.models.reconcile import ActionTaken, ReconcileResult
from hostkeeper.models.report import Report, SeverityBand
from hostkeeper.models.status import ControlState, StatusCheckResult
from hostkeeper.renderers.base import BaseRenderer, OutputFormat, RenderContext
from hostkeeper.renderers.text import TIMESTAMP_FORMAT

ACTION_STYLES = {
    ActionTaken.NOOP_ALREADY_COMPLIANT: "dim",
    ActionTaken.APPLIED: "green",
    ActionTaken.APPLIED_AFTER_OVERRIDE: "yellow",
    ActionTaken.FAILED: "bold red",
    ActionTaken.ROLLED_BACK: "red",
}

STATE_STYLES = {
    ControlState.INSTALLED: "green",
    ControlState.DISABLED: "yellow",
    ControlState.MISSING: "red",
}

SEVERITY_STYLES = {
    SeverityBand.OK: "bold green",
    SeverityBand.WARNING: "bold yellow",
    SeverityBand.CRITICAL: "bold red",
}


class TerminalRenderer(BaseRenderer):
    """Renderer for rich terminal output.

    Example:
        renderer = TerminalRenderer()
        renderer.render(results, RenderContext())
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the terminal renderer.

        Args:
            console: Rich console to use. Creates a new one if None.
        """
        self._console = console or Console()

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        return OutputFormat.TERMINAL

    def render(self, data: Any, context: RenderContext) -> str:
        """Print data to the console.

        Returns:
            Empty string (output is printed to console)
        """
        items = data if isinstance(data, list) else None

        if isinstance(data, Report):
            self._render_report(data, context)
        elif items and all(isinstance(i, ReconcileResult) for i in items):
            self._render_results(items, context)
        elif items and all(isinstance(i, StatusCheckResult) for i in items):
            self._render_status(items, context)
        else:
            self._render_generic(data, context)

        return ""

    def render_to_file(self, data: Any, context: RenderContext) -> None:
        """Capture terminal output and write it to a file."""
        if context.output_path is None:
            raise ValueError("output_path must be set in context for file rendering")

        file_console = Console(record=True, force_terminal=True)
        original_console = self._console
        self._console = file_console

        try:
            self.render(data, context)
            output = file_console.export_text(styles=context.color)
            context.output_path.write_text(output, encoding="utf-8")
        finally:
            self._console = original_console

    def _render_report(self, report: Report, context: RenderContext) -> None:
        style = SEVERITY_STYLES[report.severity]
        self._console.print()
        self._console.print(
            Panel(
                f"[bold]Server:[/bold] {report.server_name}\n"
                f"[bold]Generated:[/bold] {report.generated_at.strftime(TIMESTAMP_FORMAT)}\n"
                f"[bold]Disk:[/bold] [{style}]{report.severity.value.upper()}[/{style}] "
                f"(threshold {report.threshold}%)",
                title=report.title,
            )
        )

        for section in report.sections:
            table = Table(title=section.title, show_header=bool(section.headers))
            table.add_column("", style="bold")
            columns = section.headers or [""] * max((len(r) - 1 for r in section.rows), default=1)
            for header in columns:
                table.add_column(header)
            for row in section.rows:
                table.add_row(*row)
            self._console.print(table)

        if report.warnings:
            self._console.print()
            self._console.print("[bold yellow]Warnings[/bold yellow]")
            for warning in report.warnings:
                self._console.print(f"  [yellow]![/yellow] {warning}")

    def _render_results(self, results: list[ReconcileResult], context: RenderContext) -> None:
        self._console.print()
        table = Table(title="Reconciliation")
        table.add_column("Resource", style="bold")
        table.add_column("Kind", style="dim")
        table.add_column("Action")
        table.add_column("Verified")
        if context.verbose:
            table.add_column("Detail")

        for result in results:
            style = ACTION_STYLES[result.action_taken]
            row = [
                result.resource_id,
                result.kind.value,
                f"[{style}]{result.action_taken.value}[/{style}]",
                "[green]yes[/green]" if result.verified else "[dim]no[/dim]",
            ]
            if context.verbose:
                row.append(result.detail or "-")
            table.add_row(*row)

        self._console.print(table)

        for result in results:
            if not result.succeeded and result.detail and not context.verbose:
                self._console.print(f"  [red]![/red] {result.resource_id}: {result.detail}")

    def _render_status(self, checks: list[StatusCheckResult], context: RenderContext) -> None:
        self._console.print()
        table = Table(title="Security Status")
        table.add_column("Control", style="bold")
        table.add_column("State")
        table.add_column("Detail")

        for check in checks:
            style = STATE_STYLES[check.state]
            table.add_row(check.name, f"[{style}]{check.state.value}[/{style}]", check.detail)

        self._console.print(table)

        warnings = [c.warning for c in checks if c.warning]
        if warnings:
            self._console.print()
            for warning in warnings:
                self._console.print(f"  [yellow]![/yellow] {warning}")

    def _render_generic(self, data: Any, context: RenderContext) -> None:
        if isinstance(data, BaseModel):
            self._console.print_json(data.model_dump_json())
        else:
            self._console.print(data)
