"""
Shared test fixtures and configuration.
"""

import logging
from dataclasses import dataclass, field

import pytest

from relinker.adapters.mock import (
    MockDependencyRewriter,
    MockDirectoryLister,
    MockFileRemover,
    MockLibraryBuilder,
    MockPackageInstaller,
    MockPackageSearch,
)
from relinker.core.models.library import LibraryRequirement, RequirementTable
from relinker.core.models.settings import DEFAULT_SEARCH_DIRS
from relinker.core.services.installer import InstallerManager
from relinker.core.services.locator import LibraryLocator
from relinker.core.services.package_resolver import PackageCandidateResolver
from relinker.core.services.patcher import BinaryPatcher

BINARY = "/srv/blockheads/blockheads_server171"


@dataclass
class FakeHost:
    """A host made of in-memory adapters, wired like the real one."""

    lister: MockDirectoryLister
    search: MockPackageSearch
    packages: MockPackageInstaller
    builder: MockLibraryBuilder
    rewriter: MockDependencyRewriter
    remover: MockFileRemover
    dry_run: bool = False
    locator: LibraryLocator = field(init=False)
    resolver: PackageCandidateResolver = field(init=False)
    installer: InstallerManager = field(init=False)
    patcher: BinaryPatcher = field(init=False)

    def __post_init__(self):
        self.locator = LibraryLocator(DEFAULT_SEARCH_DIRS, self.lister)
        self.resolver = PackageCandidateResolver(self.search)
        self.installer = InstallerManager(self.packages, dry_run=self.dry_run)
        self.patcher = BinaryPatcher(self.rewriter, dry_run=self.dry_run)

    def resolve(self, table: RequirementTable, binary: str = BINARY, **kwargs):
        from relinker.core.use_cases.resolve import resolve_and_patch

        return resolve_and_patch(
            binary,
            table,
            locator=self.locator,
            resolver=self.resolver,
            installer=self.installer,
            builder=self.builder,
            patcher=self.patcher,
            dry_run=self.dry_run,
            **kwargs,
        )


def make_host(
    tree: dict[str, list[str]] | None = None,
    *,
    needed: list[str] | None = None,
    search: dict[str, list[str]] | None = None,
    installed: set[str] | None = None,
    provides: dict[str, list[tuple[str, str]]] | None = None,
    build_ok: bool = True,
    build_produces: list[tuple[str, str]] | None = None,
    dry_run: bool = False,
) -> FakeHost:
    lister = MockDirectoryLister(tree or {})
    return FakeHost(
        lister=lister,
        search=MockPackageSearch(search or {}),
        packages=MockPackageInstaller(installed, lister=lister, provides=provides),
        builder=MockLibraryBuilder(succeed=build_ok, lister=lister, produces=build_produces),
        rewriter=MockDependencyRewriter({BINARY: needed or []}),
        remover=MockFileRemover(),
        dry_run=dry_run,
    )


def table_of(*requirements: LibraryRequirement) -> RequirementTable:
    return RequirementTable(requirements=requirements)


@pytest.fixture(autouse=True)
def reset_relinker_logger():
    """Undo the CLI's logging setup so caplog sees relinker records again."""
    yield
    logger = logging.getLogger("relinker")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def host() -> FakeHost:
    """An empty fake host: no libraries, no packages, nothing needed."""
    return make_host()
