"""Unit tests for security control reconciliation."""

import pytest

from hostkeeper.core.controls import read_directives, set_directives
from hostkeeper.knowledge.controls import (
    DOCKER_INSTALL_URL,
    container_runtime_control,
    firewall_control,
    hardening_baseline,
    intrusion_prevention_control,
    kernel_hardening_control,
    ssh_hardening_control,
    web_server_control,
)
from hostkeeper.knowledge.templates import FAIL2BAN_JAIL, SYSCTL_SECURITY
from hostkeeper.models.reconcile import ActionTaken
from hostkeeper.models.resource import ControlName


class TestDirectives:
    """Tests for Key Value directive helpers."""

    def test_read_ignores_comments(self):
        """Test commented and indented lines are not active."""
        text = "#MaxAuthTries 6\nMaxAuthTries 4\n  LoginGraceTime 10\nPort 22\n"
        assert read_directives(text) == {"MaxAuthTries": "4", "Port": "22"}

    def test_first_occurrence_wins(self):
        """Test the first value of a repeated key is the active one."""
        assert read_directives("Port 22\nPort 2222\n") == {"Port": "22"}

    def test_set_replaces_in_place(self):
        """Test an existing directive is rewritten where it is."""
        text = "Port 22\nMaxAuthTries 6\nUsePAM yes\n"
        updated = set_directives(text, {"MaxAuthTries": "3"})
        assert updated == "Port 22\nMaxAuthTries 3\nUsePAM yes\n"

    def test_set_appends_missing(self):
        """Test absent directives are appended."""
        updated = set_directives("Port 22\n", {"LoginGraceTime": "20"})
        assert updated == "Port 22\nLoginGraceTime 20\n"

    def test_set_does_not_match_prefix(self):
        """Test a key is not matched inside a longer key."""
        updated = set_directives("MaxAuthTriesX 1\n", {"MaxAuthTries": "3"})
        assert updated == "MaxAuthTriesX 1\nMaxAuthTries 3\n"


class TestBaseline:
    """Tests for the baseline control definitions."""

    def test_firewall_rules(self):
        """Test SSH comes first and extra ports are deduplicated."""
        resource = firewall_control(ssh_port=2222, open_http=False, extra_ports=[443, 8080])
        policy = resource.desired_spec.firewall

        assert [r.key for r in policy.rules] == ["2222/tcp", "443/tcp", "8080/tcp"]
        assert policy.required_port == 2222
        assert policy.default_incoming == "deny"

    def test_docker_is_optional(self):
        """Test the container runtime is only included on request."""
        names = [r.id for r in hardening_baseline()]
        with_docker = [r.id for r in hardening_baseline(include_container_runtime=True)]

        assert ControlName.CONTAINER_RUNTIME.value not in names
        assert with_docker[-1] == ControlName.CONTAINER_RUNTIME.value
        assert names[0] == ControlName.FIREWALL.value


class TestSecurityControlHandler:
    """Tests for SecurityControlHandler through the reconciler."""

    def test_web_server_install_and_start(self, reconciler, fakes):
        """Test nginx is installed, enabled and started."""
        result = reconciler.reconcile(web_server_control())

        assert result.action_taken == ActionTaken.APPLIED
        assert "packages.install:nginx" in fakes.mutations
        assert fakes.services.is_active("nginx")
        assert fakes.services.is_enabled("nginx")

    def test_web_server_already_running(self, reconciler, fakes):
        """Test a healthy web server is a no-op."""
        fakes.packages.installed.add("nginx")
        fakes.services.enabled.add("nginx")
        fakes.services.active.add("nginx")

        result = reconciler.reconcile(web_server_control())

        assert result.action_taken == ActionTaken.NOOP_ALREADY_COMPLIANT
        assert fakes.mutations == []

    def test_install_failure(self, reconciler, fakes):
        """Test a failed install is reported as failed."""
        fakes.packages.fail_install = True

        result = reconciler.reconcile(web_server_control())

        assert result.action_taken == ActionTaken.FAILED
        assert "nginx" in result.detail

    def test_firewall_allows_ssh_before_enable(self, reconciler, fakes):
        """Test the SSH rule exists before the firewall is enabled."""
        result = reconciler.reconcile(firewall_control(ssh_port=2222))

        assert result.action_taken == ActionTaken.APPLIED
        ssh = fakes.mutations.index("firewall.allow:2222/tcp")
        enable = fakes.mutations.index("firewall.enable")
        assert ssh < enable
        assert fakes.firewall.defaults == {"incoming": "deny", "outgoing": "allow"}

    def test_firewall_allow_failure_keeps_defaults(self, reconciler, fakes):
        """Test a rule that cannot be added leaves an active firewall's defaults alone."""
        fakes.firewall.active = True
        fakes.firewall.fail_allow = True

        result = reconciler.reconcile(firewall_control())

        assert result.action_taken == ActionTaken.FAILED
        assert fakes.firewall.defaults == {"incoming": "allow", "outgoing": "allow"}
        assert not any(m.startswith("firewall.default") for m in fakes.mutations)

    def test_firewall_verify_failure_restores_rules_and_defaults(self, reconciler, fakes):
        """Test a failed verification undoes added rules and changed defaults."""
        fakes.firewall.active = True
        fakes.firewall.unlisted.add("22/tcp")

        result = reconciler.reconcile(firewall_control())

        assert result.action_taken == ActionTaken.ROLLED_BACK
        assert fakes.firewall.defaults == {"incoming": "allow", "outgoing": "allow"}
        assert fakes.firewall.rules == []
        restore_default = fakes.mutations.index("firewall.default:incoming:allow")
        delete_ssh = fakes.mutations.index("firewall.delete:22/tcp")
        assert restore_default < delete_ssh

    def test_firewall_idempotent(self, reconciler, fakes):
        """Test a second run adds no rules."""
        reconciler.reconcile(firewall_control())
        fakes.mutations.clear()

        result = reconciler.reconcile(firewall_control())

        assert result.action_taken == ActionTaken.NOOP_ALREADY_COMPLIANT
        assert fakes.mutations == []
        assert fakes.firewall.rules.count("22/tcp") == 1

    def test_intrusion_prevention(self, reconciler, fakes, tmp_path):
        """Test the jail file is written and the service restarted."""
        jail = tmp_path / "jail.local"

        result = reconciler.reconcile(intrusion_prevention_control(str(jail)))

        assert result.action_taken == ActionTaken.APPLIED
        assert jail.read_text() == FAIL2BAN_JAIL
        assert "services.restart:fail2ban" in fakes.mutations

    def test_intrusion_prevention_bad_config_rolled_back(self, reconciler, fakes, tmp_path):
        """Test a rejected jail restores the previous file."""
        jail = tmp_path / "jail.local"
        fakes.intrusion_prevention.config_ok = False

        result = reconciler.reconcile(intrusion_prevention_control(str(jail)))

        assert result.action_taken == ActionTaken.ROLLED_BACK
        assert not jail.exists()
        assert "services.restart:fail2ban" not in fakes.mutations

    def test_user_authored_jail_kept_without_override(self, fakes, tmp_path):
        """Test an administrator's jail file is left alone when declined."""
        from hostkeeper.core.controls import SecurityControlHandler
        from hostkeeper.core.reconciler import Reconciler
        from hostkeeper.models.resource import ResourceKind

        fakes.packages.install(["fail2ban"])
        fakes.services.enabled.add("fail2ban")
        fakes.services.active.add("fail2ban")
        jail = tmp_path / "jail.local"
        jail.write_text("[sshd]\nenabled = true\n")
        reconciler = Reconciler({ResourceKind.SECURITY_CONTROL: SecurityControlHandler(fakes)})

        result = reconciler.reconcile(intrusion_prevention_control(str(jail)))

        assert result.detail == "kept existing"
        assert jail.read_text() == "[sshd]\nenabled = true\n"

    def test_ssh_directives(self, reconciler, fakes, tmp_path):
        """Test directives are set and ssh is reloaded."""
        sshd = tmp_path / "sshd_config"
        sshd.write_text("Port 22\n#MaxAuthTries 6\nMaxAuthTries 6\n")
        fakes.services.active.add("ssh")

        result = reconciler.reconcile(ssh_hardening_control(str(sshd)))

        assert result.action_taken == ActionTaken.APPLIED
        assert read_directives(sshd.read_text()) == {
            "Port": "22",
            "MaxAuthTries": "3",
            "LoginGraceTime": "20",
        }
        assert "services.reload:ssh" in fakes.mutations

    def test_ssh_rejected_config_restored(self, reconciler, fakes, tmp_path):
        """Test sshd -t failure restores sshd_config."""
        sshd = tmp_path / "sshd_config"
        sshd.write_text("Port 22\n")
        fakes.runner.failing.add(("sshd", "-t"))

        result = reconciler.reconcile(ssh_hardening_control(str(sshd)))

        assert result.action_taken == ActionTaken.ROLLED_BACK
        assert sshd.read_text() == "Port 22\n"

    def test_kernel_hardening(self, reconciler, fakes, tmp_path):
        """Test the sysctl file is written and loaded."""
        sysctl = tmp_path / "99-security.conf"

        result = reconciler.reconcile(kernel_hardening_control(str(sysctl)))

        assert result.action_taken == ActionTaken.APPLIED
        assert sysctl.read_text() == SYSCTL_SECURITY
        assert ["sysctl", "-p", str(sysctl)] in fakes.runner.commands

    def test_container_runtime_from_script(self, reconciler, fakes):
        """Test Docker is installed from the vendor script."""
        result = reconciler.reconcile(container_runtime_control())

        assert result.action_taken == ActionTaken.APPLIED
        assert f"packages.install_from_script:{DOCKER_INSTALL_URL}" in fakes.mutations
        assert fakes.services.is_active("docker")

    @pytest.mark.parametrize("installed", [True, False])
    def test_container_runtime_present(self, reconciler, fakes, installed):
        """Test the installer only runs when docker is absent."""
        if installed:
            fakes.runner.binaries.add("docker")

        reconciler.reconcile(container_runtime_control())

        ran = any(m.startswith("packages.install_from_script") for m in fakes.mutations)
        assert ran is not installed
