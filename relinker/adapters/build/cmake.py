"""
Source library builder — git clone + CMake/Ninja build + install.

Used for the one library the repositories rarely carry
(swift-corelibs-libdispatch). The build runs unprivileged in a work
directory; only ``ninja install`` and ``ldconfig`` are elevated.
"""

from __future__ import annotations

import glob
import logging
import os
import shutil
from pathlib import Path

from relinker.adapters.base import LibraryBuilder
from relinker.adapters.shell.runner import run_command
from relinker.core.models.receipt import Receipt

logger = logging.getLogger(__name__)

LIBDISPATCH_REPO = "https://github.com/swiftlang/swift-corelibs-libdispatch.git"
LIBDISPATCH_TOOLCHAIN = (
    "git",
    "cmake",
    "ninja-build",
    "clang",
    "build-essential",
    "pkg-config",
    "libbsd-dev",
)

CLONE_TIMEOUT = 300
BUILD_TIMEOUT = 1800


class CMakeSourceBuilder(LibraryBuilder):
    """Build a library from a git repository with CMake + Ninja."""

    def __init__(
        self,
        library: str,
        repo_url: str,
        work_dir: str,
        *,
        install_prefix: str = "/usr/local",
        toolchain_packages: tuple[str, ...] = (),
        cmake_args: tuple[str, ...] = (),
        use_sudo: bool = True,
    ):
        self.library = library
        self.repo_url = repo_url
        self.work_dir = Path(work_dir)
        self.install_prefix = install_prefix
        self.toolchain_packages = toolchain_packages
        self.cmake_args = cmake_args
        self._use_sudo = use_sudo

    @classmethod
    def libdispatch(cls, work_dir: str, *, use_sudo: bool = True) -> CMakeSourceBuilder:
        """Builder for swift-corelibs-libdispatch."""
        return cls(
            library="libdispatch.so",
            repo_url=LIBDISPATCH_REPO,
            work_dir=work_dir,
            toolchain_packages=LIBDISPATCH_TOOLCHAIN,
            cmake_args=(
                "-DCMAKE_C_COMPILER=clang",
                "-DCMAKE_CXX_COMPILER=clang++",
            ),
            use_sudo=use_sudo,
        )

    @property
    def name(self) -> str:
        return "cmake"

    @property
    def source_dir(self) -> Path:
        repo = self.repo_url.rstrip("/").rsplit("/", 1)[-1]
        return self.work_dir / repo.removesuffix(".git")

    @property
    def lib_dir(self) -> str:
        return os.path.join(self.install_prefix, "lib")

    def is_available(self) -> bool:
        return all(shutil.which(tool) for tool in ("git", "cmake", "ninja"))

    def build(self) -> Receipt:
        src = self.source_dir
        build_dir = src / "build"

        if src.exists():
            logger.info("Removing previous checkout at %s", src)
            shutil.rmtree(src, ignore_errors=True)

        nproc = str(os.cpu_count() or 1)
        steps: list[tuple[str, list[str], str | None, bool, int]] = [
            ("clone", ["git", "clone", "--depth", "1", self.repo_url, str(src)], None, False, CLONE_TIMEOUT),
            ("configure", ["cmake", "-G", "Ninja", *self.cmake_args, ".."], str(build_dir), False, BUILD_TIMEOUT),
            ("compile", ["ninja", f"-j{nproc}"], str(build_dir), False, BUILD_TIMEOUT),
            ("install", ["ninja", "install"], str(build_dir), self._use_sudo, BUILD_TIMEOUT),
        ]

        for step, cmd, cwd, needs_sudo, timeout in steps:
            if step == "configure":
                try:
                    build_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    return Receipt.failure(
                        self.name, "build", error=f"Cannot create {build_dir}: {e}",
                        target=self.library,
                    )
            logger.info("Building %s: %s", self.library, step)
            result = run_command(cmd, cwd=cwd, needs_sudo=needs_sudo, timeout=timeout)
            if not result["ok"]:
                receipt = Receipt.from_command(self.name, "build", self.library, result)
                receipt.error = f"{step} step failed: {receipt.error}"
                receipt.metadata["step"] = step
                return receipt

        return Receipt.success(
            self.name, "build", target=self.library,
            output=f"{self.library} installed under {self.lib_dir}",
        )

    def installed_files(self) -> list[str]:
        pattern = os.path.join(self.lib_dir, self.library.split(".so")[0] + "*")
        return sorted(glob.glob(pattern))

    def refresh_linker_cache(self) -> Receipt:
        result = run_command(["ldconfig"], needs_sudo=self._use_sudo, timeout=60)
        return Receipt.from_command("ldconfig", "refresh", "", result)
