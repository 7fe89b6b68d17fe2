"""
Adapter base — capability contracts between the core and host tools.

The core never shells out directly. It talks to these interfaces,
which have one real implementation each (apt, cmake/ninja, patchelf,
rm) and in-memory fakes in ``relinker.adapters.mock``.

Operational failures are returned as Receipts, not raised. The only
exceptions an adapter may raise are documented per method and are
about unreadable inputs (a directory or an ELF file), which the
caller handles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from relinker.core.models.library import PackageCandidate
from relinker.core.models.receipt import Receipt


class ElfReadError(Exception):
    """Raised when a binary's dynamic section cannot be read."""


class SearchResult(BaseModel):
    """Ordered package search results, in repository order."""

    ok: bool = True
    packages: list[PackageCandidate] = Field(default_factory=list)
    error: str | None = None


class Adapter(ABC):
    """Common shape of every adapter."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'apt', 'patchelf')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the underlying tool is available. Fast, never raises."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class DirectoryLister(ABC):
    """Depth-1 directory listing."""

    @abstractmethod
    def list_files(self, directory: str) -> list[str]:
        """Return the names of regular files directly inside ``directory``.

        A missing directory yields ``[]``. An unreadable directory
        raises ``PermissionError`` (or another ``OSError``).
        """


class PackageSearch(Adapter):
    """Package repository search."""

    @abstractmethod
    def search(self, term: str) -> SearchResult:
        """Search the repository. Failure is reported with ``ok=False``."""


class PackageInstaller(Adapter):
    """Package install state and install/remove operations."""

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        """Whether ``package`` is installed. False when the check fails."""

    @abstractmethod
    def refresh_index(self) -> Receipt:
        """Refresh the package index (``apt-get update``)."""

    @abstractmethod
    def install(self, package: str) -> Receipt:
        """Install a single package."""

    @abstractmethod
    def remove(self, packages: list[str]) -> Receipt:
        """Remove (purge) packages in one operation."""


class LibraryBuilder(Adapter):
    """From-source build of the one library that is rarely packaged."""

    #: Base name of the library this builder produces.
    library: str = ""

    #: Packages needed to run the build, installed best-effort first.
    toolchain_packages: tuple[str, ...] = ()

    @abstractmethod
    def build(self) -> Receipt:
        """Fetch, build and install the library."""

    @abstractmethod
    def installed_files(self) -> list[str]:
        """Absolute paths of library files this builder installs."""

    @abstractmethod
    def refresh_linker_cache(self) -> Receipt:
        """Refresh the dynamic linker cache after files changed."""


class DependencyRewriter(Adapter):
    """Read and rewrite a binary's declared dynamic dependencies."""

    #: Package that provides the rewrite tool.
    tool_package: str = ""

    @abstractmethod
    def list_dependencies(self, path: str) -> list[str]:
        """Return DT_NEEDED entries in declaration order.

        Raises:
            ElfReadError: If the file is missing or not a readable ELF.
        """

    @abstractmethod
    def replace_dependency(self, path: str, old: str, new: str) -> Receipt:
        """Rewrite one DT_NEEDED entry from ``old`` to ``new``."""


class FileRemover(Adapter):
    """Deletion of installed artifacts."""

    @abstractmethod
    def remove(self, paths: list[str]) -> Receipt:
        """Delete files. Missing files are not an error."""
