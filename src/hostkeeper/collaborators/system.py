"""Wiring of the production collaborators."""

from __future__ import annotations

from hostkeeper.collaborators.apt import AptPackages
from hostkeeper.collaborators.base import (
    CertificateClient,
    CommandRunner,
    ContainerRuntime,
    Firewall,
    HostProbe,
    IntrusionPrevention,
    PackageManager,
    Scheduler,
    ServiceManager,
    WebServer,
)
from hostkeeper.collaborators.certbot import CertbotClient
from hostkeeper.collaborators.crontab import CrontabScheduler
from hostkeeper.collaborators.docker import DockerRuntime
from hostkeeper.collaborators.fail2ban import Fail2banControl
from hostkeeper.collaborators.host import LinuxHostProbe
from hostkeeper.collaborators.nginx import NginxServer
from hostkeeper.collaborators.shell import SubprocessRunner
from hostkeeper.collaborators.systemd import SystemdServices
from hostkeeper.collaborators.ufw import UfwFirewall


class HostCollaborators:
    """The set of collaborators one run works with.

    Tests construct this directly with fakes; production uses
    :meth:`from_system`.
    """

    def __init__(
        self,
        runner: CommandRunner,
        services: ServiceManager,
        packages: PackageManager,
        web_server: WebServer,
        certificates: CertificateClient,
        runtime: ContainerRuntime,
        firewall: Firewall,
        intrusion_prevention: IntrusionPrevention,
        scheduler: Scheduler,
        host: HostProbe,
    ) -> None:
        self.runner = runner
        self.services = services
        self.packages = packages
        self.web_server = web_server
        self.certificates = certificates
        self.runtime = runtime
        self.firewall = firewall
        self.intrusion_prevention = intrusion_prevention
        self.scheduler = scheduler
        self.host = host

    @classmethod
    def from_system(cls) -> "HostCollaborators":
        """Bind the process-invoking adapters for the local host."""
        runner = SubprocessRunner()
        services = SystemdServices(runner)
        return cls(
            runner=runner,
            services=services,
            packages=AptPackages(runner),
            web_server=NginxServer(runner, services),
            certificates=CertbotClient(runner),
            runtime=DockerRuntime(),
            firewall=UfwFirewall(runner),
            intrusion_prevention=Fail2banControl(runner, services),
            scheduler=CrontabScheduler(runner),
            host=LinuxHostProbe(),
        )
