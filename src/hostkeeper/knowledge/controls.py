"""Baseline control definitions for web hosting and host hardening."""

from __future__ import annotations

from hostkeeper.knowledge.templates import (
    AUTO_UPGRADES,
    FAIL2BAN_JAIL,
    SSHD_DIRECTIVES,
    SYSCTL_SECURITY,
    UNATTENDED_UPGRADES,
)
from hostkeeper.models.resource import (
    ControlName,
    FirewallPolicy,
    ManagedResource,
    PortRule,
    SecurityControlSpec,
)

DOCKER_INSTALL_URL = "https://get.docker.com"


def web_server_control() -> ManagedResource:
    """nginx installed, enabled and running."""
    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.WEB_SERVER,
            packages=["nginx"],
            binary="nginx",
            service="nginx",
        )
    )


def certificate_client_control() -> ManagedResource:
    """certbot with the nginx plugin installed."""
    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.CERTIFICATE_CLIENT,
            packages=["certbot", "python3-certbot-nginx"],
            binary="certbot",
        )
    )


def firewall_control(
    ssh_port: int = 22,
    open_http: bool = True,
    open_https: bool = True,
    extra_ports: list[int] | None = None,
) -> ManagedResource:
    """Deny-by-default firewall that keeps SSH reachable."""
    rules = [PortRule(port=ssh_port, comment="SSH")]
    if open_http:
        rules.append(PortRule(port=80, comment="HTTP"))
    if open_https:
        rules.append(PortRule(port=443, comment="HTTPS"))
    for port in extra_ports or []:
        if port not in {r.port for r in rules}:
            rules.append(PortRule(port=port, comment="Custom"))

    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.FIREWALL,
            packages=["ufw"],
            binary="ufw",
            firewall=FirewallPolicy(rules=rules, required_port=ssh_port),
        )
    )


def intrusion_prevention_control(jail_path: str = "/etc/fail2ban/jail.local") -> ManagedResource:
    """fail2ban guarding sshd, banning through ufw."""
    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.INTRUSION_PREVENTION,
            packages=["fail2ban"],
            binary="fail2ban-client",
            service="fail2ban",
            files={jail_path: FAIL2BAN_JAIL},
        )
    )


def ssh_hardening_control(sshd_config: str = "/etc/ssh/sshd_config") -> ManagedResource:
    """Brute-force slowdown directives in sshd_config."""
    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.SSH_HARDENING,
            directives_file=sshd_config,
            directives=dict(SSHD_DIRECTIVES),
        )
    )


def auto_updates_control(apt_conf_dir: str = "/etc/apt/apt.conf.d") -> ManagedResource:
    """Unattended security upgrades."""
    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.AUTO_UPDATES,
            packages=["unattended-upgrades", "apt-listchanges"],
            service="unattended-upgrades",
            files={
                f"{apt_conf_dir}/20auto-upgrades": AUTO_UPGRADES,
                f"{apt_conf_dir}/50unattended-upgrades": UNATTENDED_UPGRADES,
            },
        )
    )


def kernel_hardening_control(sysctl_file: str = "/etc/sysctl.d/99-security.conf") -> ManagedResource:
    """Network stack sysctl hardening."""
    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.KERNEL_HARDENING,
            files={sysctl_file: SYSCTL_SECURITY},
        )
    )


def container_runtime_control() -> ManagedResource:
    """Docker engine from the vendor install script."""
    return ManagedResource.control(
        SecurityControlSpec(
            control=ControlName.CONTAINER_RUNTIME,
            binary="docker",
            installer_url=DOCKER_INSTALL_URL,
            service="docker",
        )
    )


def hardening_baseline(
    ssh_port: int = 22,
    open_http: bool = True,
    open_https: bool = True,
    extra_ports: list[int] | None = None,
    include_container_runtime: bool = False,
    sshd_config: str = "/etc/ssh/sshd_config",
    sysctl_file: str = "/etc/sysctl.d/99-security.conf",
) -> list[ManagedResource]:
    """Controls applied by ``hostkeeper harden``, in application order."""
    controls = [
        firewall_control(ssh_port, open_http, open_https, extra_ports),
        intrusion_prevention_control(),
        ssh_hardening_control(sshd_config),
        auto_updates_control(),
        kernel_hardening_control(sysctl_file),
    ]
    if include_container_runtime:
        controls.append(container_runtime_control())
    return controls
