"""
Installer manager — idempotent, best-effort package installation.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from relinker.adapters.base import PackageInstaller

logger = logging.getLogger(__name__)


class InstallStatus(str, Enum):
    ALREADY_INSTALLED = "already_installed"
    INSTALLED = "installed"
    FAILED = "failed"
    SKIPPED = "skipped"     # dry run


class InstallerManager:
    """Wraps a PackageInstaller with check-before-install semantics.

    The package index is refreshed once, right before the first real
    install of this manager's lifetime. Failures are logged and
    reported, never raised.
    """

    def __init__(self, installer: PackageInstaller, *, dry_run: bool = False):
        self.installer = installer
        self.dry_run = dry_run
        self._index_refreshed = False

    def is_installed(self, package: str) -> bool:
        try:
            return self.installer.is_installed(package)
        except Exception as e:
            logger.warning("Install-state check for %s raised: %s", package, e)
            return False

    def ensure_installed(self, package: str) -> InstallStatus:
        """Install ``package`` unless it is already installed."""
        if self.is_installed(package):
            logger.info("Package %s already installed", package)
            return InstallStatus.ALREADY_INSTALLED

        if self.dry_run:
            logger.info("[dry-run] Would install %s", package)
            return InstallStatus.SKIPPED

        self._refresh_once()
        try:
            receipt = self.installer.install(package)
        except Exception as e:
            logger.warning("Installing %s raised: %s", package, e)
            return InstallStatus.FAILED

        if receipt.failed:
            logger.warning("Installing %s failed: %s", package, receipt.error)
            return InstallStatus.FAILED
        return InstallStatus.INSTALLED

    def ensure_all(self, packages: Iterable[str]) -> dict[str, InstallStatus]:
        """Best-effort install of several packages, one at a time."""
        return {pkg: self.ensure_installed(pkg) for pkg in packages}

    def _refresh_once(self) -> None:
        if self._index_refreshed:
            return
        self._index_refreshed = True
        receipt = self.installer.refresh_index()
        if receipt.failed:
            logger.warning("Package index refresh failed: %s", receipt.error)
