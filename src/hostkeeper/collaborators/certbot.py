"""Let's Encrypt issuance through certbot."""

from hostkeeper.collaborators.base import CertificateOutcome, CommandRunner
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.certbot")


class CertbotClient:
    """Certificate client backed by ``certbot --nginx``.

    Issuance can block for tens of seconds while the ACME challenge runs;
    certbot's own timeouts apply.
    """

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def issue(self, domain: str, email: str) -> CertificateOutcome:
        result = self._runner.run(
            [
                "certbot",
                "--nginx",
                "-d",
                domain,
                "--non-interactive",
                "--agree-tos",
                "--email",
                email,
                "--redirect",
            ]
        )
        if result.ok:
            return CertificateOutcome(success=True, detail=f"Certificate obtained for {domain}")
        return CertificateOutcome(success=False, detail=result.output or f"certbot exited {result.returncode}")

    def expiry(self, cert_path: str) -> str | None:
        result = self._runner.run(["openssl", "x509", "-enddate", "-noout", "-in", cert_path])
        if not result.ok or "=" not in result.stdout:
            return None
        return result.stdout.strip().split("=", 1)[1]
