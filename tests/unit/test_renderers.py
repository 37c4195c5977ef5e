"""Unit tests for report renderers."""

import json
from datetime import datetime

import pytest

from hostkeeper.core.diff import compute_diff
from hostkeeper.core.report import build_report
from hostkeeper.models.metrics import MetricSnapshot
from hostkeeper.models.report import MutationOutcome, ScheduleOutcome
from hostkeeper.models.status import ControlState, StatusCheckResult
from hostkeeper.renderers import get_renderer
from hostkeeper.renderers.base import OutputFormat, RenderContext
from hostkeeper.renderers.json import JSONRenderer
from hostkeeper.renderers.slack import SlackRenderer
from hostkeeper.renderers.text import PlainTextRenderer


@pytest.fixture
def report():
    now = datetime(2026, 3, 1, 3, 0, 0)
    before = MetricSnapshot(
        captured_at=now,
        values={"disk_percent": 72, "disk_used": "36G", "disk_free": "14G", "images": 12},
    )
    after = MetricSnapshot(
        captured_at=now,
        values={"disk_percent": 65, "disk_used": "33G", "disk_free": "17G", "images": 3},
    )
    checks = [
        StatusCheckResult(name="UFW", state=ControlState.INSTALLED, detail="Active"),
        StatusCheckResult(
            name="Docker", state=ControlState.DISABLED, detail="Stopped",
            warning="Docker service is not running",
        ),
    ]
    return build_report(
        server_name="PROD-01",
        threshold=80,
        diff=compute_diff(before, after),
        cleanup=MutationOutcome(reclaimed={"images": "2.31GB"}),
        status_checks=checks,
        schedule=ScheduleOutcome.ALREADY_REGISTERED,
        generated_at=now,
    )


class TestPlainTextRenderer:
    """Tests for PlainTextRenderer."""

    def test_header(self, report):
        """Test the title and server line."""
        lines = PlainTextRenderer().render_report(report).splitlines()

        assert lines[0] == "Docker Cleanup Report"
        assert lines[1] == "PROD-01 • 2026-03-01 03:00:00"

    def test_body_tables(self, report):
        """Test section rows are laid out."""
        body = PlainTextRenderer().render_body(report)

        assert "DISK" in body
        assert "72%" in body and "65%" in body
        assert "2.31GB" in body
        assert "⏰ CRON" in body and "Registered" in body

    def test_warnings(self, report):
        """Test warnings follow the body."""
        text = PlainTextRenderer().render_report(report)

        assert text.rstrip().endswith("• Docker service is not running")
        assert "WARNINGS" in text

    def test_render_dispatch(self, report):
        """Test render returns the full report."""
        renderer = PlainTextRenderer()
        context = RenderContext(format=OutputFormat.TEXT)
        assert renderer.render(report, context) == renderer.render_report(report)


class TestSlackRenderer:
    """Tests for SlackRenderer."""

    def test_payload_blocks(self, report):
        """Test title, code block and warnings blocks."""
        payload = SlackRenderer().build_payload(report)
        blocks = [b["text"]["text"] for b in payload["blocks"]]

        assert payload["text"] == "Docker Cleanup Report: PROD-01"
        assert blocks[0].startswith("*🐳 Docker Cleanup Report*")
        assert "`PROD-01`" in blocks[0]
        assert blocks[1].startswith("```") and blocks[1].endswith("```")
        assert blocks[2].startswith("*🚨 WARNINGS*")

    def test_no_warnings_block(self, report):
        """Test a clean report has two blocks."""
        clean = report.model_copy(update={"warnings": []})
        assert len(SlackRenderer().build_payload(clean)["blocks"]) == 2

    def test_render_is_json(self, report):
        """Test render produces the payload as JSON."""
        rendered = SlackRenderer().render(report, RenderContext(format=OutputFormat.SLACK))
        assert json.loads(rendered)["text"] == "Docker Cleanup Report: PROD-01"

    def test_rejects_other_data(self):
        """Test only reports are rendered."""
        with pytest.raises(TypeError):
            SlackRenderer().render({"x": 1}, RenderContext())


class TestJSONRenderer:
    """Tests for JSONRenderer."""

    def test_list_of_models(self):
        """Test a list of status checks is rendered."""
        checks = [StatusCheckResult(name="UFW", state=ControlState.MISSING, detail="Not installed")]

        data = json.loads(JSONRenderer().render(checks, RenderContext(format=OutputFormat.JSON)))

        assert data == [
            {"name": "UFW", "state": "missing", "detail": "Not installed", "warning": None}
        ]

    def test_to_file(self, report, tmp_path):
        """Test rendering to a file."""
        path = tmp_path / "report.json"
        JSONRenderer().render_to_file(report, RenderContext(format=OutputFormat.JSON, output_path=path))

        assert json.loads(path.read_text())["server_name"] == "PROD-01"


class TestGetRenderer:
    """Tests for get_renderer."""

    def test_by_name(self):
        """Test renderers are looked up by format name."""
        assert isinstance(get_renderer("json"), JSONRenderer)
        assert isinstance(get_renderer(OutputFormat.TEXT), PlainTextRenderer)

    def test_unknown(self):
        """Test unknown formats are rejected."""
        with pytest.raises(ValueError):
            get_renderer("xml")
