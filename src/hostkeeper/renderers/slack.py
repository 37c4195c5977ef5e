"""Slack Block Kit renderer for cleanup reports."""

from __future__ import annotations

import json
from typing import Any

from hostkeeper.models.report import Report
from hostkeeper.renderers.base import BaseRenderer, OutputFormat, RenderContext
from hostkeeper.renderers.text import TIMESTAMP_FORMAT, PlainTextRenderer


class SlackRenderer(BaseRenderer):
    """Builds incoming-webhook payloads.

    The payload holds a title section, the plain-text report in a code
    block and, when there are warnings, a warnings section.
    """

    def __init__(self, text_renderer: PlainTextRenderer | None = None) -> None:
        self._text = text_renderer or PlainTextRenderer()

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        return OutputFormat.SLACK

    def render(self, data: Any, context: RenderContext) -> str:
        if not isinstance(data, Report):
            raise TypeError(f"SlackRenderer renders reports, not {type(data).__name__}")
        return json.dumps(self.build_payload(data), indent=context.indent or None, ensure_ascii=False)

    def build_payload(self, report: Report) -> dict[str, Any]:
        """Block Kit payload for a report."""
        timestamp = report.generated_at.strftime(TIMESTAMP_FORMAT)
        blocks: list[dict[str, Any]] = [
            _mrkdwn(f"*🐳 {report.title}*\n`{report.server_name}` • {timestamp}"),
            _mrkdwn(f"```{self._text.render_body(report)}```"),
        ]
        if report.warnings:
            warnings = "\n".join(self._text.warning_lines(report))
            blocks.append(_mrkdwn(f"*🚨 WARNINGS*\n{warnings}"))
        return {
            "text": f"{report.title}: {report.server_name}",
            "blocks": blocks,
        }


def _mrkdwn(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}
