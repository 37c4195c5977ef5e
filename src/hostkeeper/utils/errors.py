"""Error handling utilities for hostkeeper."""

from __future__ import annotations

import functools
import re
import time
from typing import Any, Callable, TypeVar

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
DOMAIN_PATTERN = re.compile(
    r"^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.(?!-)[A-Za-z0-9-]{1,63}(?<!-))*\.[A-Za-z]{2,63}$"
)


class HostkeeperError(Exception):
    """Base exception for hostkeeper."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class PreconditionError(HostkeeperError):
    """A run precondition is not met (privileges, platform, required input)."""

    def __init__(self, message: str, requirement: str | None = None):
        details = {"requirement": requirement} if requirement else {}
        super().__init__(message, code="PRECONDITION_FAILED", details=details)


class ProbeError(HostkeeperError):
    """The current state of a resource could not be determined."""

    def __init__(self, message: str, resource_id: str | None = None):
        details = {"resource_id": resource_id} if resource_id else {}
        super().__init__(message, code="PROBE_ERROR", details=details)


class ApplyError(HostkeeperError):
    """An external tool failed while creating or configuring a resource."""

    def __init__(self, message: str, resource_id: str | None = None, command: list[str] | None = None):
        details: dict[str, Any] = {}
        if resource_id:
            details["resource_id"] = resource_id
        if command:
            details["command"] = command
        super().__init__(message, code="APPLY_ERROR", details=details)


class VerificationError(HostkeeperError):
    """Verification rejected applied state and no rollback was possible."""

    def __init__(self, message: str, resource_id: str | None = None):
        details = {"resource_id": resource_id} if resource_id else {}
        super().__init__(message, code="VERIFICATION_ERROR", details=details)


class DeliveryError(HostkeeperError):
    """A notification could not be delivered."""

    def __init__(self, message: str, status_code: int | None = None):
        details = {"status_code": status_code} if status_code else {}
        super().__init__(message, code="DELIVERY_ERROR", details=details)


class ValidationError(HostkeeperError):
    """Validation failed."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConfigurationError(HostkeeperError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)


class SnapshotMismatchError(HostkeeperError):
    """Two metric snapshots do not share the same key set."""

    def __init__(self, missing_after: set[str], missing_before: set[str]):
        super().__init__(
            "Snapshots are not comparable: key sets differ",
            code="SNAPSHOT_MISMATCH",
            details={
                "missing_after": sorted(missing_after),
                "missing_before": sorted(missing_before),
            },
        )


def retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to retry a function on failure.

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay after each retry
        exceptions: Tuple of exceptions to catch and retry

    Returns:
        Decorated function with retry logic
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Exception | None = None
            current_delay = delay

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        time.sleep(current_delay)
                        current_delay *= backoff

            if last_exception:
                raise last_exception
            raise RuntimeError("Retry failed without exception")

        return wrapper

    return decorator


def validate_email(email: str) -> None:
    """Validate a contact email address.

    Raises:
        ValidationError: If the address is empty or malformed
    """
    if not email:
        raise ValidationError("Email is required for certificate issuance", field="email")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f"Invalid email format: {email}", field="email")


def validate_domain(domain: str) -> None:
    """Validate a domain name.

    Raises:
        ValidationError: If the domain is empty or malformed
    """
    if not domain:
        raise ValidationError("Domain cannot be empty", field="domain")
    if domain.startswith("-"):
        raise ValidationError("Domain cannot start with '-'", field="domain")
    if not DOMAIN_PATTERN.match(domain):
        raise ValidationError(f"Invalid domain name: {domain}", field="domain")


def validate_port(port: int) -> None:
    """Validate a TCP/UDP port number."""
    if not 1 <= port <= 65535:
        raise ValidationError(f"Port out of range: {port}", field="port")


def parse_port_list(value: str) -> list[int]:
    """Parse a comma-separated port list.

    Blank entries are skipped; non-numeric entries are ignored.

    Args:
        value: Input such as "8080, 9000"

    Returns:
        Ports in input order without duplicates
    """
    ports: list[int] = []
    for raw in value.split(","):
        raw = raw.strip()
        if not raw.isdigit():
            continue
        port = int(raw)
        validate_port(port)
        if port not in ports:
            ports.append(port)
    return ports
