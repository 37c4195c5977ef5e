"""Recurring task registration."""

from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from hostkeeper.collaborators.base import Scheduler
from hostkeeper.models.reconcile import ActionTaken, ChangeSet, Observation
from hostkeeper.models.report import ScheduleOutcome
from hostkeeper.models.resource import ManagedResource, ScheduledTaskSpec
from hostkeeper.utils.errors import ApplyError, ProbeError, VerificationError
from hostkeeper.utils.logging import get_logger

if TYPE_CHECKING:
    from hostkeeper.core.reconciler import Reconciler

logger = get_logger(__name__)


class ScheduleHandler:
    """Handler for ``scheduled_task`` resources.

    An entry is identified by its marker substring; any existing line
    containing the marker counts as registered, whatever its schedule.
    Entries are only ever appended, never rewritten or removed.

    Two processes reconciling the same task at once can both append: the
    listing and the append are not atomic.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler

    def _registered(self, spec: ScheduledTaskSpec) -> bool:
        return any(spec.marker in line for line in self._scheduler.list_entries())

    def probe(self, resource: ManagedResource) -> Observation:
        spec = self._spec(resource)
        registered = self._registered(spec)
        return Observation(exists=registered, compliant=registered)

    def apply(self, resource: ManagedResource, observation: Observation, changes: ChangeSet) -> None:
        spec = self._spec(resource)
        if not self._scheduler.append_entry(spec.entry):
            raise ApplyError(f"Failed to register {spec.marker}", resource_id=resource.id)
        changes.actions.append(f"scheduled: {spec.entry}")

    def verify(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        try:
            return self._registered(self._spec(resource))
        except ProbeError as e:
            logger.error(e.message)
            return False

    def activate(self, resource: ManagedResource, changes: ChangeSet) -> None:
        # cron picks up new entries by itself
        return None

    def rollback(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        # Nothing is removed; the prior state holds when the marker is absent
        try:
            return not self._registered(self._spec(resource))
        except ProbeError as e:
            logger.error(e.message)
            return False

    @staticmethod
    def _spec(resource: ManagedResource) -> ScheduledTaskSpec:
        spec = resource.desired_spec
        if not isinstance(spec, ScheduledTaskSpec):
            raise TypeError(f"ScheduleHandler cannot handle {resource.kind.value}")
        return spec


def ensure_registration(reconciler: Reconciler, resource: ManagedResource) -> ScheduleOutcome:
    """Make sure a recurring task is registered exactly once.

    Returns:
        Whether it was already there, was just added, or could not be added
    """
    try:
        result = reconciler.reconcile(resource)
    except VerificationError as e:
        logger.error(e.message)
        return ScheduleOutcome.FAILED
    if result.action_taken == ActionTaken.NOOP_ALREADY_COMPLIANT:
        return ScheduleOutcome.ALREADY_REGISTERED
    if result.changed:
        logger.info(f"Registered recurring task {resource.id}")
        return ScheduleOutcome.JUST_ADDED
    logger.warning(f"Could not register recurring task {resource.id}: {result.detail}")
    return ScheduleOutcome.FAILED


def certificate_renewal_task(schedule: str = "0 0,12 * * *") -> ManagedResource:
    """Twice-daily certificate renewal that reloads nginx after renewal."""
    return ManagedResource.scheduled_task(
        ScheduledTaskSpec(
            marker="certbot renew",
            schedule=schedule,
            command='certbot renew --quiet --post-hook "systemctl reload nginx"',
        )
    )


def cleanup_task(
    command: str,
    log_file: str,
    schedule: str = "0 3 * * *",
    settings_file: str | None = None,
    config_file: str | None = None,
) -> ManagedResource:
    """Daily cleanup run; the run itself appends its record to ``log_file``.

    ``settings_file`` and ``config_file`` are passed through so scheduled runs
    read the same files as the run that registered them.
    """
    args = [command]
    if config_file:
        args += ["--config", config_file]
    args += ["cleanup", "--log-file", log_file]
    if settings_file:
        args += ["--settings", settings_file]
    return ManagedResource.scheduled_task(
        ScheduledTaskSpec(
            marker="hostkeeper-cleanup",
            schedule=schedule,
            command=f"{shlex.join(args)} > /dev/null 2>&1 # hostkeeper-cleanup",
        )
    )
