"""Adapters — bindings for host tools (apt, cmake/ninja, patchelf, rm).

Public re-exports for convenient access.
"""

from relinker.adapters.base import (
    Adapter,
    DependencyRewriter,
    DirectoryLister,
    ElfReadError,
    FileRemover,
    LibraryBuilder,
    PackageInstaller,
    PackageSearch,
    SearchResult,
)

__all__ = [
    "Adapter",
    "DependencyRewriter",
    "DirectoryLister",
    "ElfReadError",
    "FileRemover",
    "LibraryBuilder",
    "PackageInstaller",
    "PackageSearch",
    "SearchResult",
]
