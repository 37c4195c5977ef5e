"""Debian/Ubuntu package management."""

from __future__ import annotations

import tempfile
from pathlib import Path

import httpx

from hostkeeper.collaborators.base import CommandRunner
from hostkeeper.utils.logging import get_logger

logger = get_logger("collaborators.apt")

# Keep dpkg from prompting (e.g. grub-pc) and keep existing config files
NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}
DPKG_OPTIONS = ["-o", "Dpkg::Options::=--force-confdef", "-o", "Dpkg::Options::=--force-confold"]


class AptPackages:
    """Package manager backed by ``apt-get`` and ``dpkg``.

    Example:
        packages = AptPackages(SubprocessRunner())
        if not packages.is_installed("ufw"):
            packages.install(["ufw"])
    """

    def __init__(self, runner: CommandRunner, download_timeout: float = 60.0) -> None:
        self._runner = runner
        self._download_timeout = download_timeout
        self._index_updated = False

    def is_available(self) -> bool:
        return self._runner.which("apt-get")

    def is_installed(self, package: str) -> bool:
        result = self._runner.run(["dpkg-query", "-W", "-f=${Status}", package])
        return result.ok and "install ok installed" in result.stdout

    def update_index(self) -> bool:
        logger.info("Updating package index...")
        result = self._runner.run(["apt-get", "update", "-y"], env=NONINTERACTIVE_ENV)
        self._index_updated = result.ok
        return result.ok

    def upgrade(self) -> bool:
        logger.info("Upgrading installed packages...")
        result = self._runner.run(
            ["apt-get", "upgrade", "-y", *DPKG_OPTIONS], env=NONINTERACTIVE_ENV
        )
        if not result.ok:
            logger.error(f"Upgrade failed: {result.output}")
        return result.ok

    def install(self, packages: list[str]) -> bool:
        if not packages:
            return True
        if not self._index_updated:
            self.update_index()
        logger.info(f"Installing {', '.join(packages)}...")
        result = self._runner.run(
            ["apt-get", "install", "-y", *DPKG_OPTIONS, *packages], env=NONINTERACTIVE_ENV
        )
        if not result.ok:
            logger.error(f"Install of {', '.join(packages)} failed: {result.output}")
        return result.ok

    def install_from_script(self, url: str) -> bool:
        """Download a vendor install script and run it with ``sh``."""
        logger.info(f"Downloading installer from {url}")
        try:
            with httpx.Client(timeout=self._download_timeout, follow_redirects=True) as client:
                response = client.get(url)
                response.raise_for_status()
                script = response.text
        except httpx.HTTPError as e:
            logger.error(f"Failed to download installer: {e}")
            return False

        with tempfile.NamedTemporaryFile("w", suffix=".sh", delete=False) as tmp:
            tmp.write(script)
            tmp_path = Path(tmp.name)

        try:
            result = self._runner.run(["sh", str(tmp_path)], env=NONINTERACTIVE_ENV)
        finally:
            tmp_path.unlink(missing_ok=True)

        if not result.ok:
            logger.error(f"Installer failed: {result.output}")
        return result.ok
