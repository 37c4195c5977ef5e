"""Reconciliation of host security controls and components."""

from __future__ import annotations

import re
from typing import Callable

from hostkeeper.collaborators.system import HostCollaborators
from hostkeeper.core.files import read_text, restore, write_file
from hostkeeper.knowledge.templates import MANAGED_MARKER
from hostkeeper.models.reconcile import ChangeSet, Observation
from hostkeeper.models.resource import ControlName, ManagedResource, SecurityControlSpec
from hostkeeper.utils.errors import ApplyError, ProbeError
from hostkeeper.utils.logging import get_logger

logger = get_logger(__name__)

_DIRECTIVE = re.compile(r"^(\S+)\s+(.*?)\s*$")


def read_directives(text: str) -> dict[str, str]:
    """Active ``Key Value`` directives; commented lines are ignored.

    The first occurrence of a key wins, as sshd reads it.
    """
    directives: dict[str, str] = {}
    for line in text.splitlines():
        if not line or line[0].isspace() or line.startswith("#"):
            continue
        match = _DIRECTIVE.match(line)
        if match and match.group(1) not in directives:
            directives[match.group(1)] = match.group(2)
    return directives


def set_directives(text: str, directives: dict[str, str]) -> str:
    """Replace existing directive lines in place and append missing ones."""
    lines = text.splitlines()
    remaining = dict(directives)
    for i, line in enumerate(lines):
        for key in list(remaining):
            if line.startswith(key) and (len(line) == len(key) or line[len(key)].isspace()):
                lines[i] = f"{key} {remaining.pop(key)}"
                break
    lines.extend(f"{key} {value}" for key, value in remaining.items())
    return "\n".join(lines) + "\n"


class SecurityControlHandler:
    """Handler for ``security_control`` resources.

    Apply is install-if-absent followed by configuration; activation enables
    the control. Package installs are not undone by rollback; file and
    directive contents, added firewall rules and changed firewall defaults are.
    """

    def __init__(self, collaborators: HostCollaborators) -> None:
        self._c = collaborators
        self._verifiers: dict[ControlName, Callable[[SecurityControlSpec], bool]] = {
            ControlName.WEB_SERVER: lambda spec: self._c.web_server.validate_config(),
            ControlName.CERTIFICATE_CLIENT: lambda spec: self._c.runner.which(spec.binary or "certbot"),
            ControlName.FIREWALL: self._verify_firewall,
            ControlName.INTRUSION_PREVENTION: lambda spec: self._c.intrusion_prevention.test_config(),
            ControlName.SSH_HARDENING: lambda spec: self._c.runner.run(["sshd", "-t"]).ok,
            ControlName.AUTO_UPDATES: lambda spec: self._c.runner.run(["apt-config", "dump"]).ok,
            ControlName.KERNEL_HARDENING: self._verify_sysctl,
            ControlName.CONTAINER_RUNTIME: lambda spec: self._c.runner.run(
                [spec.binary or "docker", "--version"]
            ).ok,
        }

    def probe(self, resource: ManagedResource) -> Observation:
        spec = self._spec(resource)
        packages = self._c.packages

        missing_packages = [p for p in spec.packages if not packages.is_installed(p)]
        binary_present = self._c.runner.which(spec.binary) if spec.binary else False
        if spec.installer_url:
            installed = binary_present
        elif spec.packages:
            installed = not missing_packages
        else:
            installed = binary_present if spec.binary else True

        stale_files: list[str] = []
        present_files: list[str] = []
        user_authored = False
        for path, content in spec.files.items():
            current = self._read(path, resource.id)
            if current is None:
                stale_files.append(path)
                continue
            present_files.append(path)
            if current != content:
                stale_files.append(path)
                if MANAGED_MARKER not in current:
                    user_authored = True

        mismatched: list[str] = []
        if spec.directives_file:
            current = self._read(spec.directives_file, resource.id)
            active = read_directives(current or "")
            mismatched = [k for k, v in spec.directives.items() if active.get(k) != v]

        service_ok = True
        if spec.service:
            service_ok = (
                installed
                and self._c.services.is_enabled(spec.service)
                and self._c.services.is_active(spec.service)
            )

        firewall_ok = True
        missing_rules: list[str] = []
        if spec.firewall:
            firewall = self._c.firewall
            if installed and firewall.is_installed():
                listed = set(firewall.list_rules())
                missing_rules = [r.key for r in spec.firewall.rules if r.key not in listed]
                defaults = firewall.default_policies()
                firewall_ok = (
                    firewall.is_active()
                    and not missing_rules
                    and defaults.get("incoming") == spec.firewall.default_incoming
                    and defaults.get("outgoing") == spec.firewall.default_outgoing
                )
            else:
                firewall_ok = False
                missing_rules = [r.key for r in spec.firewall.rules]

        exists = (
            binary_present
            or len(missing_packages) < len(spec.packages)
            or bool(present_files)
            or (not spec.packages and not spec.files and not spec.binary)
        )
        compliant = (
            installed
            and not stale_files
            and not mismatched
            and service_ok
            and firewall_ok
        )

        return Observation(
            exists=exists,
            compliant=compliant,
            user_authored=user_authored,
            details={
                "installed": installed,
                "missing_packages": missing_packages,
                "stale_files": stale_files,
                "mismatched_directives": mismatched,
                "service_ok": service_ok,
                "missing_rules": missing_rules,
            },
        )

    def apply(self, resource: ManagedResource, observation: Observation, changes: ChangeSet) -> None:
        spec = self._spec(resource)
        details = observation.details
        unknown = observation.probe_error is not None

        self._install(resource, spec, changes)

        stale = set(details.get("stale_files", [])) if not unknown else set(spec.files)
        for path, content in spec.files.items():
            if path in stale:
                write_file(path, content, changes)

        if spec.directives_file and (unknown or details.get("mismatched_directives")):
            try:
                current = read_text(spec.directives_file) or ""
            except OSError as e:
                raise ApplyError(f"Cannot read {spec.directives_file}: {e}", resource_id=resource.id) from e
            write_file(spec.directives_file, set_directives(current, spec.directives), changes)

        if spec.firewall:
            self._configure_firewall(resource, spec, changes)

    def verify(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        spec = self._spec(resource)
        verifier = self._verifiers.get(spec.control)
        ok = verifier(spec) if verifier else True
        if not ok:
            logger.error(f"{spec.control.value}: verification failed")
        return ok

    def activate(self, resource: ManagedResource, changes: ChangeSet) -> None:
        spec = self._spec(resource)
        services = self._c.services

        if spec.control == ControlName.FIREWALL:
            if not self._c.firewall.is_active() and not self._c.firewall.enable():
                raise ApplyError("Failed to enable firewall", resource_id=resource.id)
            changes.actions.append("firewall enabled")

        if spec.control == ControlName.SSH_HARDENING and changes.changed_files:
            # Ubuntu names the unit ssh, others sshd
            if services.reload("ssh") or services.reload("sshd"):
                changes.actions.append("ssh reloaded")
            else:
                logger.warning("Could not reload SSH service, changes will apply after reboot")

        if spec.service:
            if not services.is_enabled(spec.service) and not services.enable(spec.service):
                raise ApplyError(f"Failed to enable {spec.service}", resource_id=resource.id)
            if changes.changed_files:
                started = services.restart(spec.service)
            else:
                started = services.is_active(spec.service) or services.start(spec.service)
            if not started:
                raise ApplyError(f"Failed to start {spec.service}", resource_id=resource.id)
            changes.actions.append(f"{spec.service} running")

    def rollback(self, resource: ManagedResource, changes: ChangeSet) -> bool:
        if changes.installed_packages:
            logger.info(f"Installed packages kept: {', '.join(changes.installed_packages)}")
        firewall_undone = self._undo_firewall(changes)
        return restore(changes) and firewall_undone

    def _install(self, resource: ManagedResource, spec: SecurityControlSpec, changes: ChangeSet) -> None:
        packages = self._c.packages
        if spec.installer_url:
            if spec.binary and self._c.runner.which(spec.binary):
                return
            logger.info(f"Installing {spec.control.value} from {spec.installer_url}")
            if not packages.install_from_script(spec.installer_url):
                raise ApplyError(
                    f"Installer script failed: {spec.installer_url}", resource_id=resource.id
                )
            changes.actions.append(f"installed {spec.binary or spec.control.value}")
            return

        missing = [p for p in spec.packages if not packages.is_installed(p)]
        if not missing:
            return
        logger.info(f"Installing {', '.join(missing)}")
        if not packages.install(missing):
            raise ApplyError(f"Failed to install {', '.join(missing)}", resource_id=resource.id)
        changes.installed_packages.extend(missing)
        changes.actions.append(f"installed {', '.join(missing)}")

    def _configure_firewall(
        self, resource: ManagedResource, spec: SecurityControlSpec, changes: ChangeSet
    ) -> None:
        """Allow rules first, then tighten the defaults."""
        policy = spec.firewall
        if policy is None:
            return
        firewall = self._c.firewall

        listed = set(firewall.list_rules())
        for rule in policy.rules:
            if rule.key in listed:
                continue
            if not firewall.allow(rule.port, rule.proto, rule.comment):
                raise ApplyError(f"Failed to allow {rule.key}", resource_id=resource.id)
            changes.firewall_rules.append(rule.key)
            changes.actions.append(f"allowed {rule.key}")

        defaults = firewall.default_policies()
        for direction, wanted in (
            ("incoming", policy.default_incoming),
            ("outgoing", policy.default_outgoing),
        ):
            previous = defaults.get(direction)
            if previous == wanted:
                continue
            if not firewall.set_default(direction, wanted):
                raise ApplyError(
                    f"Failed to set default {direction} policy", resource_id=resource.id
                )
            if previous:
                changes.firewall_defaults[direction] = previous
            changes.actions.append(f"default {direction} {wanted}")

    def _undo_firewall(self, changes: ChangeSet) -> bool:
        firewall = self._c.firewall
        undone = True
        for direction, previous in changes.firewall_defaults.items():
            if not firewall.set_default(direction, previous):
                logger.error(f"Cannot restore default {direction} policy {previous}")
                undone = False
        for key in reversed(changes.firewall_rules):
            if not firewall.delete_rule(key):
                undone = False
        return undone

    def _verify_firewall(self, spec: SecurityControlSpec) -> bool:
        policy = spec.firewall
        if policy is None or policy.required_port is None:
            return True
        return f"{policy.required_port}/tcp" in self._c.firewall.list_rules()

    def _verify_sysctl(self, spec: SecurityControlSpec) -> bool:
        """Load each managed sysctl file; loading is also what makes it live."""
        # sysctl -p applies values as it reads them. A partial failure leaves the
        # values loaded so far live; rollback restores only the file.
        return all(self._c.runner.run(["sysctl", "-p", path]).ok for path in spec.files)

    @staticmethod
    def _read(path: str, resource_id: str) -> str | None:
        try:
            return read_text(path)
        except OSError as e:
            raise ProbeError(f"Cannot read {path}: {e}", resource_id=resource_id) from e

    @staticmethod
    def _spec(resource: ManagedResource) -> SecurityControlSpec:
        spec = resource.desired_spec
        if not isinstance(spec, SecurityControlSpec):
            raise TypeError(f"SecurityControlHandler cannot handle {resource.kind.value}")
        return spec
