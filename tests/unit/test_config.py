"""Unit tests for configuration loading and cleanup settings."""

import stat

import pytest

from hostkeeper.utils.config import (
    CleanupSettings,
    HostkeeperConfig,
    load_cleanup_settings,
    load_config,
    parse_key_value,
    save_cleanup_settings,
    save_config,
)
from hostkeeper.utils.errors import ConfigurationError


class TestLoadConfig:
    """Tests for the YAML tool configuration."""

    def test_explicit_file(self, tmp_path):
        """Test values from an explicit file override defaults."""
        path = tmp_path / "hostkeeper.yaml"
        path.write_text("paths:\n  web_root: /srv/www\nschedule:\n  cleanup_cron: '15 2 * * *'\n")

        config = load_config(path)

        assert config.paths.web_root == "/srv/www"
        assert config.paths.sites_available == "/etc/nginx/sites-available"
        assert config.schedule.cleanup_cron == "15 2 * * *"

    def test_missing_explicit_file(self, tmp_path):
        """Test an explicit path must exist."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_empty_file(self, tmp_path):
        """Test an empty file gives defaults."""
        path = tmp_path / "hostkeeper.yaml"
        path.write_text("")
        assert load_config(path) == HostkeeperConfig()

    def test_invalid_yaml(self, tmp_path):
        """Test malformed YAML is reported."""
        path = tmp_path / "hostkeeper.yaml"
        path.write_text("paths: [unclosed\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_save_round_trip(self, tmp_path):
        """Test a saved config loads back."""
        config = HostkeeperConfig.model_validate({"site": {"owner": "nginx"}})
        path = save_config(config, tmp_path / "out.yaml")

        assert load_config(path).site.owner == "nginx"


class TestCleanupSettings:
    """Tests for the persisted cleanup settings."""

    def test_parse_key_value(self):
        """Test quoting, comments and blank lines."""
        text = '# comment\n\nSLACK_WEBHOOK="https://hooks.example/x"\nDISK_THRESHOLD=85\nNAME=\'a b\'\n'
        assert parse_key_value(text) == {
            "SLACK_WEBHOOK": "https://hooks.example/x",
            "DISK_THRESHOLD": "85",
            "NAME": "a b",
        }

    def test_first_run(self, tmp_path):
        """Test a missing file means first run."""
        assert load_cleanup_settings(tmp_path / "cleanup.conf") is None

    def test_save_and_load(self, tmp_path):
        """Test settings survive a save with restrictive mode."""
        path = tmp_path / "etc" / "cleanup.conf"
        settings = CleanupSettings(
            server_name="PROD-01",
            slack_webhook="https://hooks.example/x",
            disk_threshold=85,
            enable_prune=False,
        )

        save_cleanup_settings(settings, path)
        loaded = load_cleanup_settings(path)

        assert loaded == settings
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_empty_webhook_is_none(self, tmp_path):
        """Test a blank webhook disables notification."""
        path = tmp_path / "cleanup.conf"
        path.write_text('SLACK_WEBHOOK=""\nSERVER_NAME="web"\n')

        settings = load_cleanup_settings(path)

        assert settings.slack_webhook is None
        assert settings.disk_threshold == 80
        assert settings.enable_prune

    def test_invalid_threshold(self, tmp_path):
        """Test an out-of-range threshold is a configuration error."""
        path = tmp_path / "cleanup.conf"
        path.write_text("DISK_THRESHOLD=150\n")

        with pytest.raises(ConfigurationError):
            load_cleanup_settings(path)

    @pytest.mark.parametrize(
        "webhook",
        ["https://hooks.slack.com:abc/services/T/B/X", "hooks.slack.com/services/T/B/X", "ftp://hooks.example/x"],
    )
    def test_invalid_webhook(self, tmp_path, webhook):
        """Test a webhook that is not an http(s) URL is a configuration error."""
        path = tmp_path / "cleanup.conf"
        path.write_text(f'SLACK_WEBHOOK="{webhook}"\n')

        with pytest.raises(ConfigurationError):
            load_cleanup_settings(path)

    def test_server_name_defaults_to_hostname(self):
        """Test a blank server name falls back to the hostname."""
        import socket

        assert CleanupSettings(server_name="").server_name == socket.gethostname()
