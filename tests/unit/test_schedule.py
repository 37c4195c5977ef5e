"""Unit tests for recurring task registration."""

import pytest

from hostkeeper.core.schedule import certificate_renewal_task, cleanup_task, ensure_registration
from hostkeeper.models.report import ScheduleOutcome
from hostkeeper.models.resource import ScheduledTaskSpec


class TestTaskDefinitions:
    """Tests for the task factories."""

    def test_cleanup_entry(self):
        """Test the cleanup line carries its marker and log file."""
        task = cleanup_task("/usr/local/bin/hostkeeper", "/var/log/hk.log")
        entry = task.desired_spec.entry

        assert entry.startswith("0 3 * * * /usr/local/bin/hostkeeper cleanup")
        assert "--log-file /var/log/hk.log" in entry
        assert entry.endswith("# hostkeeper-cleanup")

    def test_cleanup_entry_carries_settings_and_config(self):
        """Test scheduled runs read the same settings and config files."""
        task = cleanup_task(
            "/usr/local/bin/hostkeeper",
            "/var/log/hk.log",
            settings_file="/srv/hk/cleanup.conf",
            config_file="/srv/hk/hostkeeper.yaml",
        )
        entry = task.desired_spec.entry

        assert "/usr/local/bin/hostkeeper --config /srv/hk/hostkeeper.yaml cleanup" in entry
        assert "--settings /srv/hk/cleanup.conf" in entry

    def test_cleanup_entry_quotes_paths(self):
        """Test paths with spaces stay single arguments."""
        task = cleanup_task("hostkeeper", "/var/log/hk.log", settings_file="/srv/my hk/cleanup.conf")
        entry = task.desired_spec.entry
        assert "--settings '/srv/my hk/cleanup.conf'" in entry

    def test_renewal_entry(self):
        """Test renewal reloads nginx after renewing."""
        entry = certificate_renewal_task().desired_spec.entry
        assert entry == '0 0,12 * * * certbot renew --quiet --post-hook "systemctl reload nginx"'

    def test_marker_must_be_in_entry(self):
        """Test a marker that the entry does not contain is rejected."""
        with pytest.raises(ValueError):
            ScheduledTaskSpec(marker="absent", schedule="* * * * *", command="true")


class TestEnsureRegistration:
    """Tests for ensure_registration."""

    def test_registers_once(self, reconciler, fakes):
        """Test repeated runs leave exactly one entry."""
        task = cleanup_task("hostkeeper", "/tmp/hk.log")

        first = ensure_registration(reconciler, task)
        second = ensure_registration(reconciler, task)

        assert first == ScheduleOutcome.JUST_ADDED
        assert second == ScheduleOutcome.ALREADY_REGISTERED
        assert sum("hostkeeper-cleanup" in e for e in fakes.scheduler.entries) == 1

    def test_existing_entry_with_other_schedule(self, reconciler, fakes):
        """Test an entry with a different schedule still counts."""
        fakes.scheduler.entries.append("30 4 * * * certbot renew --quiet")

        outcome = ensure_registration(reconciler, certificate_renewal_task())

        assert outcome == ScheduleOutcome.ALREADY_REGISTERED
        assert fakes.mutations == []

    def test_other_entries_preserved(self, reconciler, fakes):
        """Test unrelated entries are kept."""
        fakes.scheduler.entries.append("@reboot /opt/start.sh")

        ensure_registration(reconciler, certificate_renewal_task())

        assert fakes.scheduler.entries[0] == "@reboot /opt/start.sh"
        assert len(fakes.scheduler.entries) == 2

    def test_append_failure(self, reconciler, fakes):
        """Test a failed append is reported, not raised."""
        fakes.scheduler.append_ok = False

        outcome = ensure_registration(reconciler, certificate_renewal_task())

        assert outcome == ScheduleOutcome.FAILED

    def test_unreadable_listing(self, reconciler, fakes):
        """Test an unreadable scheduler yields a failed outcome."""
        fakes.scheduler.list_error = True

        outcome = ensure_registration(reconciler, certificate_renewal_task())

        assert outcome == ScheduleOutcome.FAILED
