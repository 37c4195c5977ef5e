"""Shared test fixtures for hostkeeper tests."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from hostkeeper.collaborators.base import CertificateOutcome, CommandResult, DiskUsage, MemoryUsage
from hostkeeper.collaborators.system import HostCollaborators
from hostkeeper.core.controls import SecurityControlHandler
from hostkeeper.core.reconciler import Reconciler, always_override
from hostkeeper.core.schedule import ScheduleHandler
from hostkeeper.core.site import SiteHandler
from hostkeeper.models.resource import ResourceKind
from hostkeeper.utils.errors import ApplyError, DeliveryError, ProbeError
from hostkeeper.utils.units import ZERO_SIZE


class FakeRunner:
    """Command runner answering from a table of argument prefixes."""

    def __init__(self, mutations: list[str]) -> None:
        self.mutations = mutations
        self.commands: list[list[str]] = []
        self.binaries: set[str] = {"sshd", "sysctl", "apt-config"}
        self.failing: set[tuple[str, ...]] = set()

    def run(self, args: list[str], input: str | None = None, env: dict[str, str] | None = None) -> CommandResult:
        self.commands.append(list(args))
        for prefix in self.failing:
            if tuple(args[: len(prefix)]) == prefix:
                return CommandResult(args=args, returncode=1, stderr="failed")
        if args[:1] == ["sysctl"]:
            self.mutations.append("runner.sysctl")
        return CommandResult(args=args, returncode=0, stdout="ok")

    def which(self, name: str) -> bool:
        return name in self.binaries


class FakeServices:
    def __init__(self, mutations: list[str]) -> None:
        self.mutations = mutations
        self.enabled: set[str] = set()
        self.active: set[str] = set()
        self.failing: set[str] = set()

    def is_enabled(self, service: str) -> bool:
        return service in self.enabled

    def is_active(self, service: str) -> bool:
        return service in self.active

    def enable(self, service: str) -> bool:
        self.mutations.append(f"services.enable:{service}")
        if service in self.failing:
            return False
        self.enabled.add(service)
        return True

    def start(self, service: str) -> bool:
        self.mutations.append(f"services.start:{service}")
        if service in self.failing:
            return False
        self.active.add(service)
        return True

    def restart(self, service: str) -> bool:
        self.mutations.append(f"services.restart:{service}")
        if service in self.failing:
            return False
        self.active.add(service)
        return True

    def reload(self, service: str) -> bool:
        self.mutations.append(f"services.reload:{service}")
        return service not in self.failing and service in self.active


class FakePackages:
    def __init__(self, mutations: list[str], runner: FakeRunner) -> None:
        self.mutations = mutations
        self.runner = runner
        self.available = True
        self.installed: set[str] = set()
        self.fail_install = False
        # Binary each package provides, so installs show up on PATH
        self.provides = {
            "nginx": "nginx",
            "certbot": "certbot",
            "ufw": "ufw",
            "fail2ban": "fail2ban-client",
        }

    def is_available(self) -> bool:
        return self.available

    def is_installed(self, package: str) -> bool:
        return package in self.installed

    def install(self, packages: list[str]) -> bool:
        self.mutations.append(f"packages.install:{','.join(packages)}")
        if self.fail_install:
            return False
        for package in packages:
            self.installed.add(package)
            if package in self.provides:
                self.runner.binaries.add(self.provides[package])
        return True

    def update_index(self) -> bool:
        self.mutations.append("packages.update_index")
        return True

    def upgrade(self) -> bool:
        self.mutations.append("packages.upgrade")
        return True

    def install_from_script(self, url: str) -> bool:
        self.mutations.append(f"packages.install_from_script:{url}")
        if self.fail_install:
            return False
        self.runner.binaries.add("docker")
        return True


class FakeWebServer:
    def __init__(self, mutations: list[str]) -> None:
        self.mutations = mutations
        self.valid = True
        self.reload_ok = True
        self.validations = 0

    def validate_config(self) -> bool:
        self.validations += 1
        return self.valid

    def reload(self) -> bool:
        self.mutations.append("web_server.reload")
        return self.reload_ok


class FakeCertificates:
    def __init__(self, mutations: list[str]) -> None:
        self.mutations = mutations
        self.success = True
        self.issued: list[tuple[str, str]] = []
        self.live_dir: Path | None = None

    def issue(self, domain: str, email: str) -> CertificateOutcome:
        self.mutations.append(f"certificates.issue:{domain}")
        self.issued.append((domain, email))
        if not self.success:
            return CertificateOutcome(success=False, detail="Challenge failed")
        if self.live_dir is not None:
            cert_dir = self.live_dir / domain
            cert_dir.mkdir(parents=True, exist_ok=True)
            (cert_dir / "fullchain.pem").write_text("CERT")
            (cert_dir / "privkey.pem").write_text("KEY")
        return CertificateOutcome(success=True, detail=f"Certificate obtained for {domain}")

    def expiry(self, cert_path: str) -> str | None:
        return "Mar  1 12:00:00 2027 GMT"


class FakeRuntime:
    def __init__(self, mutations: list[str]) -> None:
        self.mutations = mutations
        self.available = True
        self.current = {"images": 12, "containers": 5, "volumes": 4}
        self.after_prune = {"images": 3, "containers": 2, "volumes": 1}
        self.reclaimed = {
            "containers": "120MB",
            "images": "2.31GB",
            "volumes": "45.1MB",
            "build_cache": "800MB",
            "networks": ZERO_SIZE,
        }
        self.failing: set[str] = set()
        self.counts_error = False

    def is_available(self) -> bool:
        return self.available

    def prune(self, resource_class: str) -> str:
        self.mutations.append(f"runtime.prune:{resource_class}")
        if resource_class in self.failing:
            raise ApplyError(f"Failed to prune {resource_class}", resource_id=resource_class)
        self.current = dict(self.after_prune)
        return self.reclaimed[resource_class]

    def counts(self) -> dict[str, int]:
        if self.counts_error:
            raise ProbeError("Failed to query Docker")
        return dict(self.current)


class FakeFirewall:
    def __init__(self, mutations: list[str], runner: FakeRunner) -> None:
        self.mutations = mutations
        self.runner = runner
        self.active = False
        self.defaults: dict[str, str] = {"incoming": "allow", "outgoing": "allow"}
        self.rules: list[str] = []
        self.fail_allow = False
        self.unlisted: set[str] = set()

    def is_installed(self) -> bool:
        return self.runner.which("ufw")

    def is_active(self) -> bool:
        return self.active

    def default_policies(self) -> dict[str, str]:
        return dict(self.defaults)

    def set_default(self, direction: str, policy: str) -> bool:
        self.mutations.append(f"firewall.default:{direction}:{policy}")
        self.defaults[direction] = policy
        return True

    def allow(self, port: int, proto: str = "tcp", comment: str | None = None) -> bool:
        if self.fail_allow:
            return False
        self.mutations.append(f"firewall.allow:{port}/{proto}")
        self.rules.append(f"{port}/{proto}")
        return True

    def delete_rule(self, key: str) -> bool:
        self.mutations.append(f"firewall.delete:{key}")
        self.rules.remove(key)
        return True

    def list_rules(self) -> list[str]:
        return [r for r in self.rules if r not in self.unlisted]

    def enable(self) -> bool:
        self.mutations.append("firewall.enable")
        self.active = True
        return True


class FakeIntrusionPrevention:
    def __init__(self, mutations: list[str], runner: FakeRunner, services: FakeServices) -> None:
        self.mutations = mutations
        self.runner = runner
        self.services = services
        self.config_ok = True
        self.jails = 1

    def is_installed(self) -> bool:
        return self.runner.which("fail2ban-client")

    def status(self) -> tuple[bool, int]:
        active = self.services.is_active("fail2ban")
        return active, self.jails if active else 0

    def test_config(self) -> bool:
        return self.config_ok

    def restart(self) -> bool:
        return self.services.restart("fail2ban")


class FakeScheduler:
    def __init__(self, mutations: list[str]) -> None:
        self.mutations = mutations
        self.entries: list[str] = []
        self.list_error = False
        self.append_ok = True

    def list_entries(self) -> list[str]:
        if self.list_error:
            raise ProbeError("Cannot read crontab")
        return list(self.entries)

    def append_entry(self, entry: str) -> bool:
        self.mutations.append("scheduler.append")
        if not self.append_ok:
            return False
        self.entries.append(entry)
        return True


class FakeHost:
    """Host probe returning queued disk readings, oldest first."""

    def __init__(self) -> None:
        self.disk_readings = [
            DiskUsage(total="50G", used="36G", free="14G", percent=72),
            DiskUsage(total="50G", used="33G", free="17G", percent=65),
        ]
        self.disk_calls = 0

    def disk_usage(self, path: str = "/") -> DiskUsage:
        reading = self.disk_readings[min(self.disk_calls, len(self.disk_readings) - 1)]
        self.disk_calls += 1
        return reading

    def cpu_percent(self) -> int:
        return 7

    def memory(self) -> MemoryUsage:
        return MemoryUsage(total="3.8G", used="1.2G", percent=31)


class FakeSink:
    def __init__(self) -> None:
        self.payloads: list[dict[str, Any]] = []
        self.fail = False

    def deliver(self, payload: dict[str, Any]) -> None:
        if self.fail:
            raise DeliveryError("Webhook returned 500", status_code=500)
        self.payloads.append(payload)


class FakeHostCollaborators(HostCollaborators):
    """HostCollaborators wired to fakes that share one mutation log."""

    def __init__(self) -> None:
        self.mutations: list[str] = []
        runner = FakeRunner(self.mutations)
        services = FakeServices(self.mutations)
        super().__init__(
            runner=runner,
            services=services,
            packages=FakePackages(self.mutations, runner),
            web_server=FakeWebServer(self.mutations),
            certificates=FakeCertificates(self.mutations),
            runtime=FakeRuntime(self.mutations),
            firewall=FakeFirewall(self.mutations, runner),
            intrusion_prevention=FakeIntrusionPrevention(self.mutations, runner, services),
            scheduler=FakeScheduler(self.mutations),
            host=FakeHost(),
        )


@pytest.fixture
def fakes() -> FakeHostCollaborators:
    """Collaborators backed by in-memory fakes."""
    return FakeHostCollaborators()


@pytest.fixture
def host_paths(tmp_path: Path) -> dict[str, Path]:
    """Filesystem layout of a host under tmp_path."""
    paths = {
        "web_root": tmp_path / "var" / "www",
        "sites_available": tmp_path / "etc" / "nginx" / "sites-available",
        "sites_enabled": tmp_path / "etc" / "nginx" / "sites-enabled",
        "letsencrypt_live": tmp_path / "etc" / "letsencrypt" / "live",
        "etc": tmp_path / "etc",
    }
    for key in ("web_root", "sites_available", "sites_enabled"):
        paths[key].mkdir(parents=True)
    return paths


@pytest.fixture
def site_handler(fakes: FakeHostCollaborators, host_paths: dict[str, Path]) -> SiteHandler:
    return SiteHandler(
        fakes.web_server,
        sites_available=host_paths["sites_available"],
        sites_enabled=host_paths["sites_enabled"],
    )


@pytest.fixture
def reconciler(fakes: FakeHostCollaborators, site_handler: SiteHandler) -> Reconciler:
    """Reconciler over the fakes that accepts every override."""
    return Reconciler(
        {
            ResourceKind.SITE_CONFIG: site_handler,
            ResourceKind.SECURITY_CONTROL: SecurityControlHandler(fakes),
            ResourceKind.SCHEDULED_TASK: ScheduleHandler(fakes.scheduler),
        },
        override_policy=always_override,
    )


@pytest.fixture
def fixed_clock() -> Any:
    """Clock that always returns the same instant."""
    instant = datetime(2026, 3, 1, 3, 0, 0)
    return lambda: instant


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handlers that CLI runs install on the hostkeeper logger."""
    logger = logging.getLogger("hostkeeper")
    handlers, propagate, level = list(logger.handlers), logger.propagate, logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers, logger.propagate = handlers, propagate
    logger.setLevel(level)
