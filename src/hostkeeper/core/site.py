"""Reconciliation of nginx site configurations."""

from __future__ import annotations

from pathlib import Path

from hostkeeper.collaborators.base import WebServer
from hostkeeper.core.files import chown_tree, make_dir, make_link, read_text, restore, write_file
from hostkeeper.knowledge.templates import (
    MANAGED_MARKER,
    render_default_page,
    render_site_config,
    site_header,
)
from hostkeeper.models.reconcile import ChangeSet, Observation
from hostkeeper.models.resource import ManagedResource, SiteSpec
from hostkeeper.utils.errors import ApplyError, ProbeError
from hostkeeper.utils.logging import get_logger

logger = get_logger(__name__)


class SiteHandler:
    """Handler for ``site_config`` resources.

    A site is compliant when its configuration file starts with the managed
    header for the current desired content, the file is enabled and the web
    directory exists. Lines below the header (certbot's TLS additions) are
    not compared.
    """

    def __init__(
        self,
        web_server: WebServer,
        sites_available: Path | str = "/etc/nginx/sites-available",
        sites_enabled: Path | str = "/etc/nginx/sites-enabled",
    ) -> None:
        self._web_server = web_server
        self._available = Path(sites_available)
        self._enabled = Path(sites_enabled)

    def conf_path(self, spec: SiteSpec) -> Path:
        return self._available / f"{spec.domain}.conf"

    def link_path(self, spec: SiteSpec) -> Path:
        return self._enabled / f"{spec.domain}.conf"

    def probe(self, resource: ManagedResource) -> Observation:
        spec = self._spec(resource)
        conf = self.conf_path(spec)
        link = self.link_path(spec)

        try:
            content = read_text(conf)
        except OSError as e:
            raise ProbeError(f"Cannot read {conf}: {e}", resource_id=resource.id) from e

        first_line = content.splitlines()[0] if content else ""
        managed = MANAGED_MARKER in first_line
        header_current = first_line == site_header(spec)
        link_present = link.is_symlink() or link.exists()
        web_dir_present = spec.web_dir.is_dir()

        return Observation(
            exists=content is not None,
            compliant=header_current and link_present and web_dir_present,
            user_authored=content is not None and not managed,
            details={
                "conf": str(conf),
                "header_current": header_current,
                "link_present": link_present,
                "web_dir_present": web_dir_present,
            },
        )

    def apply(self, resource: ManagedResource, observation: Observation, changes: ChangeSet) -> None:
        spec = self._spec(resource)

        if not spec.web_dir.is_dir():
            make_dir(spec.web_dir, changes)
        index = spec.web_dir / "index.html"
        if not index.exists():
            write_file(index, render_default_page(spec.domain), changes)
        if spec.owner and str(spec.web_dir) in changes.created_dirs:
            chown_tree(spec.web_dir, spec.owner)

        # A current header means only the link or directory was missing
        if not observation.details.get("header_current", False):
            write_file(self.conf_path(spec), render_site_config(spec), changes)

        make_link(self.link_path(spec), self.conf_path(spec), changes)

    def verify(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        return self._web_server.validate_config()

    def activate(self, resource: ManagedResource, changes: ChangeSet) -> None:
        if not self._web_server.reload():
            raise ApplyError("nginx reload failed", resource_id=resource.id)

    def rollback(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        restored = restore(changes)
        if restored and changes.changed_files:
            logger.info(f"Restored previous configuration of {resource.id}")
        return restored

    @staticmethod
    def _spec(resource: ManagedResource) -> SiteSpec:
        spec = resource.desired_spec
        if not isinstance(spec, SiteSpec):
            raise TypeError(f"SiteHandler cannot handle {resource.kind.value}")
        return spec
