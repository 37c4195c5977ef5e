"""TLS certificate issuance for provisioned sites."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from hostkeeper.collaborators.base import CertificateClient
from hostkeeper.models.reconcile import ActionTaken, ReconcileResult
from hostkeeper.utils.logging import get_logger

logger = get_logger(__name__)

ISSUE_HINTS = (
    "Domain DNS points to this server",
    "Port 80 and 443 are open",
    "Domain is accessible from internet",
)


class CertificateResult(BaseModel):
    """Outcome of certificate handling for one domain."""

    model_config = {"frozen": True}

    domain: str = Field(description="Certificate subject")
    issued: bool = Field(default=False, description="A certificate was issued in this run")
    skipped: bool = Field(default=False, description="Issuance was not attempted")
    detail: str = Field(default="", description="Reason or tool summary")
    hints: list[str] = Field(default_factory=list, description="Troubleshooting hints on failure")
    cert_path: str | None = Field(default=None, description="Certificate chain path, if present")
    key_path: str | None = Field(default=None, description="Private key path, if present")
    expires: str | None = Field(default=None, description="Expiry date as printed by openssl")

    @property
    def failed(self) -> bool:
        return not self.issued and not self.skipped


class CertificateIssuer:
    """Issues certificates for sites whose configuration is in place.

    Example:
        issuer = CertificateIssuer(CertbotClient(runner))
        result = issuer.issue_if_needed("example.com", "admin@example.com", site_result)
    """

    def __init__(self, client: CertificateClient, live_dir: Path | str = "/etc/letsencrypt/live") -> None:
        self._client = client
        self._live = Path(live_dir)

    def cert_paths(self, domain: str) -> tuple[Path, Path]:
        """Certificate chain and key locations for a domain."""
        base = self._live / domain
        return base / "fullchain.pem", base / "privkey.pem"

    def issue_if_needed(self, domain: str, email: str, site_result: ReconcileResult) -> CertificateResult:
        """Issue a certificate unless one exists and the site was untouched.

        Nothing is attempted for a site that did not converge.
        """
        cert, key = self.cert_paths(domain)

        if not site_result.succeeded:
            return self._result(
                domain, cert, key, skipped=True, detail="site configuration not in place"
            )

        if cert.exists() and site_result.action_taken == ActionTaken.NOOP_ALREADY_COMPLIANT:
            logger.info(f"Certificate for {domain} already present")
            return self._result(domain, cert, key, skipped=True, detail="certificate already present")

        logger.info(f"Obtaining SSL certificate for {domain}")
        outcome = self._client.issue(domain, email)
        if outcome.success:
            logger.info(f"SSL certificate obtained for {domain}")
            return self._result(domain, cert, key, issued=True, detail=outcome.detail)

        logger.error(f"Failed to obtain SSL certificate for {domain}: {outcome.detail}")
        return self._result(domain, cert, key, detail=outcome.detail, hints=list(ISSUE_HINTS))

    def _result(self, domain: str, cert: Path, key: Path, **fields: object) -> CertificateResult:
        present = cert.exists()
        return CertificateResult(
            domain=domain,
            cert_path=str(cert) if present else None,
            key_path=str(key) if present else None,
            expires=self._client.expiry(str(cert)) if present else None,
            **fields,
        )
