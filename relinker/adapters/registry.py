"""
Adapter registry — wires the real adapters and services for one run.

The CLI builds everything through ``build_components`` so that tests
can swap the whole set for fakes with a single monkeypatch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from relinker.adapters.base import (
    Adapter,
    DependencyRewriter,
    FileRemover,
    LibraryBuilder,
    PackageInstaller,
    PackageSearch,
)
from relinker.core.models.settings import Settings
from relinker.core.persistence.record_file import default_record_path
from relinker.core.services.installer import InstallerManager
from relinker.core.services.locator import LibraryLocator
from relinker.core.services.package_resolver import PackageCandidateResolver
from relinker.core.services.patcher import BinaryPatcher

logger = logging.getLogger(__name__)


@dataclass
class Components:
    """Everything the use cases need, already wired together."""

    search: PackageSearch
    package_installer: PackageInstaller
    builder: LibraryBuilder | None
    rewriter: DependencyRewriter
    remover: FileRemover
    locator: LibraryLocator
    resolver: PackageCandidateResolver
    installer: InstallerManager
    patcher: BinaryPatcher

    def adapters(self) -> dict[str, Adapter]:
        """The external-tool adapters, keyed by the role they fill."""
        roles: dict[str, Adapter] = {
            "search": self.search,
            "installer": self.package_installer,
            "rewriter": self.rewriter,
            "remover": self.remover,
        }
        if self.builder is not None:
            roles["builder"] = self.builder
        return roles

    def adapter_status(self) -> dict[str, bool]:
        """Availability of each role's external tool."""
        return {role: a.is_available() for role, a in self.adapters().items()}


def build_components(settings: Settings, *, dry_run: bool = False) -> Components:
    """Create the real apt/cmake/patchelf/rm adapters and the services on top."""
    from relinker.adapters.build.cmake import CMakeSourceBuilder
    from relinker.adapters.elf.patchelf import PatchelfRewriter
    from relinker.adapters.packages.apt import AptInstaller, AptSearchAdapter
    from relinker.adapters.shell.filesystem import ListdirLister, SudoFileRemover

    search = AptSearchAdapter()
    package_installer = AptInstaller(use_sudo=settings.use_sudo)
    work_dir = settings.build_dir or str(Path.cwd())
    builder = CMakeSourceBuilder.libdispatch(work_dir, use_sudo=settings.use_sudo)
    rewriter = PatchelfRewriter()

    logger.debug("Search directories: %s", ", ".join(settings.search_dirs))
    return Components(
        search=search,
        package_installer=package_installer,
        builder=builder,
        rewriter=rewriter,
        remover=SudoFileRemover(use_sudo=settings.use_sudo),
        locator=LibraryLocator(settings.search_dirs, ListdirLister()),
        resolver=PackageCandidateResolver(search),
        installer=InstallerManager(package_installer, dry_run=dry_run),
        patcher=BinaryPatcher(rewriter, dry_run=dry_run),
    )


def record_path_for(settings: Settings, binary: Path) -> Path:
    """Resolution record location for ``binary``."""
    if settings.record_path:
        return Path(settings.record_path)
    return default_record_path(binary)
