"""Plain-text renderer for cleanup reports."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from hostkeeper.models.report import Report, ReportSection, SeverityBand
from hostkeeper.models.status import ControlState
from hostkeeper.renderers.base import BaseRenderer, OutputFormat, RenderContext

RULE = "─" * 32
LABEL_WIDTH = 14
VALUE_WIDTH = 10
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SEVERITY_ICONS = {
    SeverityBand.OK: "✅",
    SeverityBand.WARNING: "⚠️",
    SeverityBand.CRITICAL: "🚨",
}

STATE_ICONS = {
    ControlState.INSTALLED: "✅",
    ControlState.DISABLED: "⚠️ ",
    ControlState.MISSING: "❌",
}

SECTION_ICONS = {
    "CLEANED": "🧹",
    "DOCKER": "📊",
    "SYSTEM": "💻",
    "SECURITY": "🛡️",
    "CRON": "⏰",
}


class PlainTextRenderer(BaseRenderer):
    """Fixed-width text layout of a cleanup report.

    The same body is written to the cleanup log and sent inside the Slack
    code block.

    Example:
        renderer = PlainTextRenderer()
        print(renderer.render(report, RenderContext(format=OutputFormat.TEXT)))
    """

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        return OutputFormat.TEXT

    def render(self, data: Any, context: RenderContext) -> str:
        if isinstance(data, Report):
            return self.render_report(data)
        if isinstance(data, BaseModel):
            return "\n".join(f"{k}: {v}" for k, v in data.model_dump(mode="json").items())
        return str(data)

    def render_report(self, report: Report) -> str:
        """Header, body and warnings."""
        lines = [
            report.title,
            f"{report.server_name} • {report.generated_at.strftime(TIMESTAMP_FORMAT)}",
            "",
            self.render_body(report),
        ]
        if report.warnings:
            lines += ["", "WARNINGS", *self.warning_lines(report)]
        return "\n".join(lines)

    def render_body(self, report: Report) -> str:
        """The report sections as an aligned table."""
        blocks = [self._render_section(report, section) for section in report.sections]
        return "\n\n".join(block for block in blocks if block)

    @staticmethod
    def warning_lines(report: Report) -> list[str]:
        return [f"• {warning}" for warning in report.warnings]

    def _render_section(self, report: Report, section: ReportSection) -> str:
        if section.title == "CRON":
            value = section.rows[0][1] if section.rows else ""
            return f"{SECTION_ICONS['CRON']} {'CRON':<{LABEL_WIDTH - 2}}{value}"

        icon = SEVERITY_ICONS[report.severity] if section.title == "DISK" else SECTION_ICONS.get(section.title, "")
        heading = f"{icon} {section.title}".strip()
        if section.headers:
            heading = f"{heading:<{LABEL_WIDTH + 1}}" + "".join(
                f"{h:<{VALUE_WIDTH}}" for h in section.headers
            )
        lines = [heading.rstrip(), RULE]

        states = {check.name: check.state for check in report.status_checks}
        for row in section.rows:
            label, *values = row
            if section.title == "SECURITY" and label in states:
                values = [f"{STATE_ICONS[states[label]]} {' '.join(values)}"]
            cells = "".join(f"{v:<{VALUE_WIDTH}}" for v in values[:-1]) + (values[-1] if values else "")
            lines.append(f"{label:<{LABEL_WIDTH}}{cells}".rstrip())
        return "\n".join(lines)
