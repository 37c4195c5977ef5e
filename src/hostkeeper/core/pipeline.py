"""Snapshot, mutate, snapshot, report, deliver."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from pydantic import BaseModel, Field

from hostkeeper.collaborators.base import ContainerRuntime, HostProbe, NotificationSink
from hostkeeper.core.diff import compute_diff
from hostkeeper.core.reconciler import Reconciler
from hostkeeper.core.report import build_report
from hostkeeper.core.schedule import ensure_registration
from hostkeeper.core.snapshot import capture_snapshot
from hostkeeper.core.status import StatusChecker
from hostkeeper.models.metrics import MetricDiff, MetricSnapshot
from hostkeeper.models.report import MutationOutcome, Report, ScheduleOutcome
from hostkeeper.models.resource import ManagedResource
from hostkeeper.models.status import StatusCheckResult
from hostkeeper.renderers.slack import SlackRenderer
from hostkeeper.renderers.text import PlainTextRenderer
from hostkeeper.utils.errors import DeliveryError
from hostkeeper.utils.logging import get_logger

logger = get_logger(__name__)

MutatingStep = Callable[[], MutationOutcome]


class PipelineRun(BaseModel):
    """State of one pipeline run; each step returns an updated copy."""

    model_config = {"frozen": True}

    before: MetricSnapshot | None = Field(default=None, description="Snapshot before mutation")
    outcome: MutationOutcome | None = Field(default=None, description="Mutating step outcome")
    after: MetricSnapshot | None = Field(default=None, description="Snapshot after mutation")
    status_checks: list[StatusCheckResult] = Field(default_factory=list, description="Auxiliary checks")
    schedule: ScheduleOutcome | None = Field(default=None, description="Recurring registration")
    diff: MetricDiff | None = Field(default=None, description="Before/after pairs")
    report: Report | None = Field(default=None, description="Assembled report")
    delivered: bool = Field(default=False, description="Report reached the sink")


class MetricsPipeline:
    """Runs a mutating step between two metric snapshots and reports on it.

    Steps run strictly in order: snapshot before, mutate, snapshot after,
    status checks, schedule registration, diff, report, log, dispatch. A
    delivery failure is logged and never fails the run.

    Example:
        pipeline = MetricsPipeline(host, runtime, checker, reconciler, task, sink,
                                   server_name="PROD-01", threshold=80)
        report = pipeline.run_with_report(ContainerPrune(runtime))
    """

    def __init__(
        self,
        host: HostProbe,
        runtime: ContainerRuntime,
        status_checker: StatusChecker,
        reconciler: Reconciler,
        schedule_task: ManagedResource,
        sink: NotificationSink | None,
        server_name: str,
        threshold: int = 80,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._host = host
        self._runtime = runtime
        self._status_checker = status_checker
        self._reconciler = reconciler
        self._schedule_task = schedule_task
        self._sink = sink
        self._server_name = server_name
        self._threshold = threshold
        self._clock = clock
        self._text = PlainTextRenderer()
        self._slack = SlackRenderer(self._text)
        self.last_run: PipelineRun | None = None

    def run_with_report(self, mutating_step: MutatingStep) -> Report:
        """Run the pipeline around ``mutating_step`` and return the report.

        Raises:
            SnapshotMismatchError: If the two snapshots are not comparable
        """
        logger.info(f"Cleanup started on {self._server_name}")

        logger.info("Collecting before metrics")
        before = self._snapshot()
        run = PipelineRun(before=before)

        outcome = mutating_step()
        run = run.model_copy(update={"outcome": outcome})

        logger.info("Collecting after metrics")
        after = self._snapshot()
        run = run.model_copy(update={"after": after})

        status_checks = self._status_checker.collect()
        run = run.model_copy(update={"status_checks": status_checks})

        schedule = ensure_registration(self._reconciler, self._schedule_task)
        run = run.model_copy(update={"schedule": schedule})

        diff = compute_diff(before, after)
        run = run.model_copy(update={"diff": diff})

        report = build_report(
            server_name=self._server_name,
            threshold=self._threshold,
            diff=diff,
            cleanup=outcome,
            status_checks=status_checks,
            schedule=schedule,
            generated_at=self._clock(),
        )
        run = run.model_copy(update={"report": report})

        logger.info("Report\n" + self._text.render_report(report))

        run = run.model_copy(update={"delivered": self._dispatch(report)})
        self.last_run = run
        logger.info("Cleanup finished")
        return report

    def _snapshot(self) -> MetricSnapshot:
        return capture_snapshot(self._host, self._runtime, clock=self._clock)

    def _dispatch(self, report: Report) -> bool:
        if self._sink is None:
            logger.info("Slack webhook not configured, skipping notification")
            return False
        try:
            self._sink.deliver(self._slack.build_payload(report))
        except DeliveryError as e:
            logger.error(f"Failed to send Slack message: {e.message}")
            return False
        logger.info("Slack message sent")
        return True
