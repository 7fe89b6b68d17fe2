"""
Mock adapters — in-memory test doubles for every capability.

They keep a call log, can be told to fail per target, and model just
enough host state (a directory tree, an installed-package set, a
binary's DT_NEEDED list) for the orchestrators to run end to end
without touching apt, a compiler or a real ELF file.
"""

from __future__ import annotations

from typing import Callable

from relinker.adapters.base import (
    DependencyRewriter,
    DirectoryLister,
    ElfReadError,
    FileRemover,
    LibraryBuilder,
    PackageInstaller,
    PackageSearch,
    SearchResult,
)
from relinker.core.models.library import PackageCandidate
from relinker.core.models.receipt import Receipt


class MockDirectoryLister(DirectoryLister):
    """Directory tree held in a dict: ``{directory: [file names]}``."""

    def __init__(
        self,
        tree: dict[str, list[str]] | None = None,
        unreadable: set[str] | None = None,
    ):
        self.tree: dict[str, list[str]] = {d: list(f) for d, f in (tree or {}).items()}
        self.unreadable = set(unreadable or ())
        self.call_log: list[str] = []

    def add_file(self, directory: str, file_name: str) -> None:
        self.tree.setdefault(directory, []).append(file_name)

    def remove_matching(self, prefix: str) -> None:
        for directory, files in self.tree.items():
            self.tree[directory] = [f for f in files if not f.startswith(prefix)]

    def list_files(self, directory: str) -> list[str]:
        self.call_log.append(directory)
        if directory in self.unreadable:
            raise PermissionError(f"Permission denied: '{directory}'")
        return list(self.tree.get(directory, []))


class MockPackageSearch(PackageSearch):
    """Search results keyed by term, in the order given."""

    def __init__(
        self,
        results: dict[str, list[str]] | None = None,
        failing: set[str] | None = None,
    ):
        self.results = results or {}
        self.failing = set(failing or ())
        self.call_log: list[str] = []

    @property
    def name(self) -> str:
        return "mock-search"

    def is_available(self) -> bool:
        return True

    def search(self, term: str) -> SearchResult:
        self.call_log.append(term)
        if term in self.failing:
            return SearchResult(ok=False, error=f"[mock] search for {term} failed")
        names = self.results.get(term, [])
        return SearchResult(packages=[PackageCandidate(name=n) for n in names])


class MockPackageInstaller(PackageInstaller):
    """Installed-package set with optional install side effects.

    ``provides`` maps a package to ``(directory, file_name)`` pairs that
    appear in ``lister`` when the package gets installed, mimicking a
    real package dropping its shared library on disk.
    """

    def __init__(
        self,
        installed: set[str] | None = None,
        *,
        lister: MockDirectoryLister | None = None,
        provides: dict[str, list[tuple[str, str]]] | None = None,
        failing_install: set[str] | None = None,
        failing_remove: set[str] | None = None,
    ):
        self.installed = set(installed or ())
        self.lister = lister
        self.provides = provides or {}
        self.failing_install = set(failing_install or ())
        self.failing_remove = set(failing_remove or ())
        self.call_log: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "mock-installer"

    @property
    def installs(self) -> list[str]:
        return [target for op, target in self.call_log if op == "install"]

    @property
    def removals(self) -> list[str]:
        return [target for op, target in self.call_log if op == "remove"]

    def is_available(self) -> bool:
        return True

    def is_installed(self, package: str) -> bool:
        self.call_log.append(("is_installed", package))
        return package in self.installed

    def refresh_index(self) -> Receipt:
        self.call_log.append(("update", ""))
        return Receipt.success(self.name, "update")

    def install(self, package: str) -> Receipt:
        self.call_log.append(("install", package))
        if package in self.failing_install:
            return Receipt.failure(self.name, "install", error="[mock] install failed", target=package)
        self.installed.add(package)
        if self.lister is not None:
            for directory, file_name in self.provides.get(package, []):
                self.lister.add_file(directory, file_name)
        return Receipt.success(self.name, "install", target=package)

    def remove(self, packages: list[str]) -> Receipt:
        target = " ".join(packages)
        self.call_log.append(("remove", target))
        if any(p in self.failing_remove for p in packages):
            return Receipt.failure(self.name, "remove", error="[mock] remove failed", target=target)
        self.installed.difference_update(packages)
        return Receipt.success(self.name, "remove", target=target)


class MockLibraryBuilder(LibraryBuilder):
    """Builder that succeeds or fails on demand."""

    def __init__(
        self,
        library: str = "libdispatch.so",
        *,
        succeed: bool = True,
        lister: MockDirectoryLister | None = None,
        produces: list[tuple[str, str]] | None = None,
        toolchain_packages: tuple[str, ...] = (),
    ):
        self.library = library
        self.succeed = succeed
        self.lister = lister
        self.produces = produces or []
        self.toolchain_packages = toolchain_packages
        self.build_count = 0
        self.cache_refreshes = 0

    @property
    def name(self) -> str:
        return "mock-builder"

    def is_available(self) -> bool:
        return True

    def build(self) -> Receipt:
        self.build_count += 1
        if not self.succeed:
            return Receipt.failure(self.name, "build", error="[mock] build failed", target=self.library)
        if self.lister is not None:
            for directory, file_name in self.produces:
                self.lister.add_file(directory, file_name)
        return Receipt.success(self.name, "build", target=self.library)

    def installed_files(self) -> list[str]:
        if self.lister is None:
            return []
        stem = self.library.split(".so")[0]
        return [
            f"{directory}/{f}"
            for directory, files in self.lister.tree.items()
            for f in files
            if f.startswith(stem)
        ]

    def refresh_linker_cache(self) -> Receipt:
        self.cache_refreshes += 1
        return Receipt.success(self.name, "refresh")


class MockDependencyRewriter(DependencyRewriter):
    """DT_NEEDED lists held per binary path, rewritten in place."""

    tool_package = "patchelf"

    def __init__(
        self,
        needed: dict[str, list[str]] | None = None,
        *,
        failing: set[str] | None = None,
        available: bool = True,
    ):
        self.needed: dict[str, list[str]] = {p: list(d) for p, d in (needed or {}).items()}
        self.failing = set(failing or ())
        self._available = available
        self.replace_calls: list[tuple[str, str, str]] = []

    @property
    def name(self) -> str:
        return "mock-rewriter"

    def is_available(self) -> bool:
        return self._available

    def list_dependencies(self, path: str) -> list[str]:
        if path not in self.needed:
            raise ElfReadError(f"[mock] not an ELF file: {path}")
        return list(self.needed[path])

    def replace_dependency(self, path: str, old: str, new: str) -> Receipt:
        self.replace_calls.append((path, old, new))
        if old in self.failing:
            return Receipt.failure(
                self.name, "replace-needed",
                error=f"[mock] cannot replace {old}", target=path,
            )
        entries = self.needed.get(path, [])
        self.needed[path] = [new if e == old else e for e in entries]
        return Receipt.success(self.name, "replace-needed", target=path)


class MockFileRemover(FileRemover):
    """Records deletions; optionally runs a callback per path."""

    def __init__(self, on_remove: Callable[[str], None] | None = None, fail: bool = False):
        self.on_remove = on_remove
        self.fail = fail
        self.removed: list[str] = []

    @property
    def name(self) -> str:
        return "mock-rm"

    def is_available(self) -> bool:
        return True

    def remove(self, paths: list[str]) -> Receipt:
        if self.fail:
            return Receipt.failure(self.name, "remove", error="[mock] rm failed", target=", ".join(paths))
        for path in paths:
            self.removed.append(path)
            if self.on_remove is not None:
                self.on_remove(path)
        return Receipt.success(self.name, "remove", target=", ".join(paths))
