"""Shared utilities for CLI commands."""

from __future__ import annotations

import os

import typer
from rich.console import Console

from hostkeeper.collaborators.base import PackageManager
from hostkeeper.collaborators.system import HostCollaborators
from hostkeeper.core.controls import SecurityControlHandler
from hostkeeper.core.reconciler import OverridePolicy, Reconciler, always_override
from hostkeeper.core.schedule import ScheduleHandler
from hostkeeper.core.site import SiteHandler
from hostkeeper.models.reconcile import Observation, ReconcileResult
from hostkeeper.models.resource import ManagedResource, ResourceKind
from hostkeeper.utils.config import HostkeeperConfig
from hostkeeper.utils.errors import HostkeeperError, PreconditionError

# Shared console instance
console = Console()


def get_config(ctx: typer.Context) -> HostkeeperConfig:
    """Configuration loaded by the main callback, or defaults."""
    config = ctx.obj if ctx is not None else None
    return config if isinstance(config, HostkeeperConfig) else HostkeeperConfig()


def build_collaborators() -> HostCollaborators:
    """Production collaborators for the local host."""
    return HostCollaborators.from_system()


def build_reconciler(
    collaborators: HostCollaborators,
    config: HostkeeperConfig,
    override_policy: OverridePolicy = always_override,
) -> Reconciler:
    """Reconciler with a handler for every resource kind."""
    return Reconciler(
        {
            ResourceKind.SITE_CONFIG: SiteHandler(
                collaborators.web_server,
                sites_available=config.paths.sites_available,
                sites_enabled=config.paths.sites_enabled,
            ),
            ResourceKind.SECURITY_CONTROL: SecurityControlHandler(collaborators),
            ResourceKind.SCHEDULED_TASK: ScheduleHandler(collaborators.scheduler),
        },
        override_policy=override_policy,
    )


def require_root() -> None:
    """Raise PreconditionError unless running as root."""
    if os.geteuid() != 0:
        raise PreconditionError("This command must be run as root (use sudo)", requirement="root")


def require_apt(packages: PackageManager) -> None:
    """Raise PreconditionError on hosts without apt."""
    if not packages.is_available():
        raise PreconditionError(
            "This command requires a Debian or Ubuntu host (apt-get not found)",
            requirement="apt",
        )


def confirm_override(resource: ManagedResource, observation: Observation) -> bool:
    """Ask before replacing configuration hostkeeper did not write."""
    return typer.confirm(
        f"{resource.id}: existing configuration was not written by hostkeeper. Replace it?",
        default=False,
    )


def handle_error(error: HostkeeperError) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {error.message}")
    for key, value in error.details.items():
        console.print(f"  [dim]{key}:[/dim] {value}")
    raise typer.Exit(1)


def exit_on_failures(results: list[ReconcileResult]) -> None:
    """Exit 1 when any resource failed or was rolled back."""
    failed = [r for r in results if not r.succeeded]
    if failed:
        console.print(
            f"[red]{len(failed)} resource(s) not converged:[/red] "
            + ", ".join(r.resource_id for r in failed)
        )
        raise typer.Exit(1)
