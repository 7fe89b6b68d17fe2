"""
APT adapters — repository search and package install/remove.

Search parses ``apt search`` output, which looks like::

    Sorting...
    Full Text Search...
    libgnutls28-dev/jammy-updates,jammy-security 3.7.3-4ubuntu1.5 amd64
      GNU TLS library - development files

    libgnutls30/jammy-updates,now 3.7.3-4ubuntu1.5 amd64 [installed]
      GNU TLS library - main runtime library

Install state is read with ``dpkg-query`` rather than apt, which has
no stable CLI interface for it.
"""

from __future__ import annotations

import logging
import re
import shutil

from relinker.adapters.base import PackageInstaller, PackageSearch, SearchResult
from relinker.adapters.shell.runner import run_command
from relinker.core.models.library import PackageCandidate
from relinker.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

# "name/suite[,suite] version arch [tag,tag]"
_PACKAGE_LINE = re.compile(
    r"^(?P<name>[a-zA-Z0-9+_.-]+)/\S*(?:\s+\S+)*?(?:\s+\[(?P<tags>[^\]]*)\])?\s*$"
)

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

SEARCH_TIMEOUT = 60
INSTALL_TIMEOUT = 600


def parse_apt_search(output: str) -> list[PackageCandidate]:
    """Parse ``apt search`` output into candidates, preserving order."""
    packages: list[PackageCandidate] = []
    current: dict | None = None

    for line in output.splitlines():
        if not line.strip():
            continue
        if line[:1].isspace():
            # Description line belongs to the previous package
            if current is not None and not current["description"]:
                current["description"] = line.strip()
            continue
        match = _PACKAGE_LINE.match(line.strip())
        if not match:
            # "Sorting...", "Full Text Search...", warnings
            continue
        if current is not None:
            packages.append(PackageCandidate(**current))
        tags = match.group("tags") or ""
        current = {
            "name": match.group("name"),
            "description": "",
            "tags": tuple(t.strip() for t in tags.split(",") if t.strip()),
        }

    if current is not None:
        packages.append(PackageCandidate(**current))
    return packages


class AptSearchAdapter(PackageSearch):
    """``apt search`` over the configured repositories."""

    @property
    def name(self) -> str:
        return "apt"

    def is_available(self) -> bool:
        return shutil.which("apt") is not None

    def search(self, term: str) -> SearchResult:
        result = run_command(
            ["apt", "search", term],
            timeout=SEARCH_TIMEOUT,
            env_overrides={"LC_ALL": "C"},
        )
        if not result["ok"]:
            error = result.get("error", "apt search failed")
            logger.warning("Package search for %r failed: %s", term, error)
            return SearchResult(ok=False, error=error)

        packages = parse_apt_search(result.get("stdout", ""))
        logger.debug("apt search %r → %d package(s)", term, len(packages))
        return SearchResult(packages=packages)


class AptInstaller(PackageInstaller):
    """Install state via dpkg-query, changes via apt-get."""

    def __init__(self, use_sudo: bool = True):
        self._use_sudo = use_sudo

    @property
    def name(self) -> str:
        return "apt"

    def is_available(self) -> bool:
        return shutil.which("apt-get") is not None and shutil.which("dpkg-query") is not None

    def is_installed(self, package: str) -> bool:
        result = run_command(
            ["dpkg-query", "-W", "-f=${Status}", package],
            timeout=10,
        )
        # Non-zero exit simply means "not known to dpkg"
        return bool(result["ok"]) and "install ok installed" in result.get("stdout", "")

    def refresh_index(self) -> Receipt:
        result = run_command(
            ["apt-get", "update", "-y"],
            needs_sudo=self._use_sudo,
            timeout=INSTALL_TIMEOUT,
            env_overrides=_APT_ENV,
        )
        return Receipt.from_command(self.name, "update", "", result)

    def install(self, package: str) -> Receipt:
        logger.info("Installing package: %s", package)
        result = run_command(
            ["apt-get", "install", "-y", package],
            needs_sudo=self._use_sudo,
            timeout=INSTALL_TIMEOUT,
            env_overrides=_APT_ENV,
        )
        return Receipt.from_command(self.name, "install", package, result)

    def remove(self, packages: list[str]) -> Receipt:
        if not packages:
            return Receipt.skip(self.name, "remove", reason="No packages to remove")
        logger.info("Removing packages: %s", " ".join(packages))
        result = run_command(
            ["apt-get", "remove", "--purge", "-y"] + list(packages),
            needs_sudo=self._use_sudo,
            timeout=INSTALL_TIMEOUT,
            env_overrides=_APT_ENV,
        )
        return Receipt.from_command(self.name, "remove", " ".join(packages), result)
