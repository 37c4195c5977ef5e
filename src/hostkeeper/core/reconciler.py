"""Idempotent reconciliation of managed resources.

Every resource goes through the same cycle: probe the current state, decide
what to do, optionally confirm overwriting user-authored state, apply, verify
before activation, and roll back whatever verification rejects.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from hostkeeper.models.reconcile import (
    ActionTaken,
    ChangeSet,
    Decision,
    Observation,
    ReconcileResult,
)
from hostkeeper.models.resource import ManagedResource, ResourceKind
from hostkeeper.utils.errors import ApplyError, ProbeError, VerificationError
from hostkeeper.utils.logging import get_logger, get_logger_with_context

logger = get_logger(__name__)

OverridePolicy = Callable[[ManagedResource, Observation], bool]


def always_override(resource: ManagedResource, observation: Observation) -> bool:
    return True


def never_override(resource: ManagedResource, observation: Observation) -> bool:
    return False


@runtime_checkable
class ResourceHandler(Protocol):
    """Kind-specific probe and mutation steps."""

    def probe(self, resource: ManagedResource) -> Observation:
        """Observe current state without changing anything.

        Raises:
            ProbeError: If the state cannot be determined
        """
        ...

    def apply(self, resource: ManagedResource, observation: Observation, changes: ChangeSet) -> None:
        """Converge the resource, recording every change in ``changes``.

        Raises:
            ApplyError: If an external tool fails
        """
        ...

    def verify(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        """Check applied state before it is activated."""
        ...

    def activate(self, resource: ManagedResource, changes: ChangeSet) -> None:
        """Make verified state live (reload, enable, start).

        Raises:
            ApplyError: If activation fails
        """
        ...

    def rollback(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        """Undo ``changes``; False when the prior state cannot be restored."""
        ...


def decide(observation: Observation) -> Decision:
    """Compare observed state against the desired state.

    A failed probe counts as not yet compliant.
    """
    if observation.probe_error is not None:
        return Decision.NEEDS_UPDATE
    if observation.compliant:
        return Decision.COMPLIANT
    if not observation.exists:
        return Decision.NEEDS_CREATE
    if observation.user_authored:
        return Decision.NEEDS_OVERRIDE_CONFIRMATION
    return Decision.NEEDS_UPDATE


class Reconciler:
    """Drives resources to their desired state through their handlers.

    Example:
        reconciler = Reconciler({ResourceKind.SITE_CONFIG: SiteHandler(...)})
        result = reconciler.reconcile(ManagedResource.site(SiteSpec(domain="example.com")))
        if not result.succeeded:
            print(result.detail)
    """

    def __init__(
        self,
        handlers: dict[ResourceKind, ResourceHandler],
        override_policy: OverridePolicy = never_override,
    ) -> None:
        """Initialize the reconciler.

        Args:
            handlers: Handler for each resource kind
            override_policy: Asked before user-authored state is replaced
        """
        self._handlers = dict(handlers)
        self._override_policy = override_policy

    def reconcile(self, resource: ManagedResource) -> ReconcileResult:
        """Reconcile one resource.

        Resource-local failures are reported in the result.

        Raises:
            VerificationError: If applied state failed verification and the
                previous state could not be restored
        """
        handler = self._handlers.get(resource.kind)
        if handler is None:
            return self._result(
                resource,
                ActionTaken.FAILED,
                detail=f"No handler registered for {resource.kind.value}",
            )

        log = get_logger_with_context(__name__, resource=resource.id, kind=resource.kind.value)

        try:
            observation = handler.probe(resource)
        except ProbeError as e:
            observation = Observation.unknown(e.message)

        decision = decide(observation)
        log.debug(f"Decision: {decision.value}")

        if decision == Decision.COMPLIANT:
            return self._result(resource, ActionTaken.NOOP_ALREADY_COMPLIANT, verified=True)

        overridden = False
        if decision == Decision.NEEDS_OVERRIDE_CONFIRMATION:
            if not self._override_policy(resource, observation):
                log.info("Override declined, keeping existing state")
                return self._result(
                    resource, ActionTaken.NOOP_ALREADY_COMPLIANT, detail="kept existing"
                )
            overridden = True
        elif observation.probe_error:
            log.warning(f"Probe failed, treating as not compliant: {observation.probe_error}")

        changes = ChangeSet()
        try:
            handler.apply(resource, observation, changes)
        except ApplyError as e:
            log.error(f"Apply failed: {e.message}")
            if not handler.rollback(resource, changes):
                log.warning("Partial changes could not be undone")
            return self._result(resource, ActionTaken.FAILED, detail=e.message)

        if not handler.verify(resource, changes):
            log.error("Verification failed, rolling back")
            if not handler.rollback(resource, changes):
                raise VerificationError(
                    f"{resource.id}: verification failed and previous state could not be restored",
                    resource_id=resource.id,
                )
            return self._result(
                resource,
                ActionTaken.ROLLED_BACK,
                detail="verification failed; previous state restored",
            )

        try:
            handler.activate(resource, changes)
        except ApplyError as e:
            log.error(f"Activation failed: {e.message}")
            if not handler.rollback(resource, changes):
                log.warning("Changes could not be undone after failed activation")
            return self._result(resource, ActionTaken.FAILED, detail=e.message)

        action = ActionTaken.APPLIED_AFTER_OVERRIDE if overridden else ActionTaken.APPLIED
        detail = "; ".join(changes.actions)
        log.info(f"{action.value}: {detail}" if detail else action.value)
        return self._result(resource, action, verified=True, detail=detail)

    def reconcile_all(self, resources: list[ManagedResource]) -> list[ReconcileResult]:
        """Reconcile resources in order; one failing resource does not stop the rest."""
        results = [self.reconcile(resource) for resource in resources]
        failed = [r.resource_id for r in results if not r.succeeded]
        if failed:
            logger.warning(f"Resources not converged: {', '.join(failed)}")
        return results

    @staticmethod
    def _result(
        resource: ManagedResource,
        action: ActionTaken,
        verified: bool = False,
        detail: str = "",
    ) -> ReconcileResult:
        return ReconcileResult(
            resource_id=resource.id,
            kind=resource.kind,
            action_taken=action,
            verified=verified,
            detail=detail,
        )
