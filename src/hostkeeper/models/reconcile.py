"""Reconciliation data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from hostkeeper.models.resource import ResourceKind


class ActionTaken(str, Enum):
    """Outcome of one reconciliation attempt."""

    NOOP_ALREADY_COMPLIANT = "noop_already_compliant"
    APPLIED = "applied"
    APPLIED_AFTER_OVERRIDE = "applied_after_override"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


class Decision(str, Enum):
    """Comparison of desired and observed state."""

    COMPLIANT = "compliant"
    NEEDS_CREATE = "needs_create"
    NEEDS_UPDATE = "needs_update"
    NEEDS_OVERRIDE_CONFIRMATION = "needs_override_confirmation"


class Observation(BaseModel):
    """Observed state of a resource as reported by its probe."""

    model_config = {"frozen": True}

    exists: bool = Field(default=False, description="Any trace of the resource is present")
    compliant: bool = Field(default=False, description="Observed state satisfies the desired spec")
    user_authored: bool = Field(
        default=False,
        description="Present state was written by someone other than hostkeeper",
    )
    details: dict[str, Any] = Field(default_factory=dict, description="Kind-specific findings")
    probe_error: str | None = Field(default=None, description="Why the state is unknown")

    @classmethod
    def unknown(cls, reason: str) -> "Observation":
        """Observation for a probe that could not determine state."""
        return cls(probe_error=reason)


class ChangeSet(BaseModel):
    """What an apply step changed, kept so the step can be undone."""

    backups: dict[str, str | None] = Field(
        default_factory=dict,
        description="Path to previous content; None when the file did not exist",
    )
    created_links: list[str] = Field(default_factory=list, description="Symlinks created")
    created_dirs: list[str] = Field(default_factory=list, description="Directories created")
    installed_packages: list[str] = Field(default_factory=list, description="Packages installed")
    firewall_defaults: dict[str, str] = Field(
        default_factory=dict,
        description="Direction to default policy before it was changed",
    )
    firewall_rules: list[str] = Field(default_factory=list, description="Allow rules added, as port/proto")
    actions: list[str] = Field(default_factory=list, description="Human-readable log of actions")

    @property
    def changed_files(self) -> list[str]:
        """Paths whose content was written."""
        return list(self.backups)


class ReconcileResult(BaseModel):
    """Result of reconciling one resource."""

    model_config = {"frozen": True}

    resource_id: str = Field(description="Identifier of the reconciled resource")
    kind: ResourceKind = Field(description="Kind of the reconciled resource")
    action_taken: ActionTaken = Field(description="What the reconciler did")
    verified: bool = Field(default=False, description="Verification probe passed")
    detail: str = Field(default="", description="Human-readable cause")

    @property
    def succeeded(self) -> bool:
        """Resource ended in its desired (or explicitly kept) state."""
        return self.action_taken in (
            ActionTaken.NOOP_ALREADY_COMPLIANT,
            ActionTaken.APPLIED,
            ActionTaken.APPLIED_AFTER_OVERRIDE,
        )

    @property
    def changed(self) -> bool:
        """An effectful application happened and stuck."""
        return self.action_taken in (ActionTaken.APPLIED, ActionTaken.APPLIED_AFTER_OVERRIDE)
