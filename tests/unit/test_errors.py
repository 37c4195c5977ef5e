"""Unit tests for the errors module."""

from unittest.mock import MagicMock

import pytest

from hostkeeper.utils.errors import (
    DeliveryError,
    HostkeeperError,
    PreconditionError,
    SnapshotMismatchError,
    ValidationError,
    parse_port_list,
    retry,
    validate_domain,
    validate_email,
    validate_port,
)


class TestHostkeeperError:
    """Tests for base HostkeeperError."""

    def test_basic_error(self):
        """Test basic error creation."""
        error = HostkeeperError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.code == "UNKNOWN_ERROR"
        assert error.details == {}


class TestErrorKinds:
    """Tests for the specific error kinds."""

    def test_precondition(self):
        """Test precondition requirement detail."""
        error = PreconditionError("must be root", requirement="root")
        assert error.code == "PRECONDITION_FAILED"
        assert error.details["requirement"] == "root"

    def test_delivery_status(self):
        """Test delivery errors carry the HTTP status."""
        assert DeliveryError("rejected", status_code=404).details == {"status_code": 404}

    def test_snapshot_mismatch(self):
        """Test mismatched keys are listed sorted."""
        error = SnapshotMismatchError({"b", "a"}, set())
        assert error.details["missing_after"] == ["a", "b"]
        assert error.details["missing_before"] == []


class TestRetry:
    """Tests for retry decorator."""

    def test_success_after_failures(self):
        """Test success after transient failures."""
        mock_func = MagicMock(side_effect=[ConnectionError(), ConnectionError(), "success"])

        @retry(max_attempts=3, delay=0.01, exceptions=(ConnectionError,))
        def func():
            return mock_func()

        assert func() == "success"
        assert mock_func.call_count == 3

    def test_all_attempts_fail(self):
        """Test the last error is raised."""
        mock_func = MagicMock(side_effect=ConnectionError("down"))

        @retry(max_attempts=2, delay=0.01, exceptions=(ConnectionError,))
        def func():
            return mock_func()

        with pytest.raises(ConnectionError):
            func()
        assert mock_func.call_count == 2

    def test_other_exceptions_not_retried(self):
        """Test exceptions outside the list propagate at once."""
        mock_func = MagicMock(side_effect=ValueError())

        @retry(max_attempts=3, delay=0.01, exceptions=(ConnectionError,))
        def func():
            return mock_func()

        with pytest.raises(ValueError):
            func()
        assert mock_func.call_count == 1


class TestValidators:
    """Tests for input validators."""

    @pytest.mark.parametrize("domain", ["example.com", "www.example.com", "a-b.example.co.uk"])
    def test_valid_domains(self, domain):
        """Test valid domains pass."""
        validate_domain(domain)

    @pytest.mark.parametrize("domain", ["", "-example.com", "example", "exa mple.com", "example-.com"])
    def test_invalid_domains(self, domain):
        """Test malformed domains are rejected."""
        with pytest.raises(ValidationError):
            validate_domain(domain)

    def test_email(self):
        """Test email validation."""
        validate_email("admin@example.com")
        with pytest.raises(ValidationError):
            validate_email("")
        with pytest.raises(ValidationError):
            validate_email("admin@")

    def test_port_range(self):
        """Test ports outside 1-65535 are rejected."""
        validate_port(22)
        with pytest.raises(ValidationError):
            validate_port(0)
        with pytest.raises(ValidationError):
            validate_port(70000)

    def test_port_list(self):
        """Test comma-separated ports are parsed in order without duplicates."""
        assert parse_port_list("8080, 9000,,abc,8080") == [8080, 9000]
        assert parse_port_list("") == []
