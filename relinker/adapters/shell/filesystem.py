"""
Filesystem adapters — directory listing and artifact deletion.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from relinker.adapters.base import DirectoryLister, FileRemover
from relinker.adapters.shell.runner import run_command
from relinker.core.models.receipt import Receipt

logger = logging.getLogger(__name__)


class ListdirLister(DirectoryLister):
    """List regular files one level deep.

    Symlinks are not reported: the versioned real file
    (``libffi.so.8.1.0``) is what gets linked, not its aliases.
    """

    def list_files(self, directory: str) -> list[str]:
        if not os.path.isdir(directory):
            return []
        names: list[str] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if entry.is_file(follow_symlinks=False):
                        names.append(entry.name)
                except OSError:
                    continue
        # scandir order is filesystem-dependent
        names.sort()
        return names


class SudoFileRemover(FileRemover):
    """Delete files with ``rm -f``, through sudo when configured."""

    def __init__(self, use_sudo: bool = True):
        self._use_sudo = use_sudo

    @property
    def name(self) -> str:
        return "rm"

    def is_available(self) -> bool:
        return True

    def remove(self, paths: list[str]) -> Receipt:
        targets = [p for p in paths if p and p != "/"]
        if not targets:
            return Receipt.skip(self.name, "remove", reason="Nothing to remove")

        existing = [p for p in targets if os.path.lexists(p)]
        if not existing:
            return Receipt.skip(
                self.name, "remove",
                reason=f"{', '.join(targets)} not present",
                target=", ".join(targets),
            )

        needs_sudo = self._use_sudo and not all(_owned_by_us(p) for p in existing)
        result = run_command(["rm", "-f", "--"] + existing, needs_sudo=needs_sudo, timeout=60)
        receipt = Receipt.from_command(self.name, "remove", ", ".join(existing), result)
        if receipt.ok:
            logger.info("Removed %s", ", ".join(existing))
        return receipt


def _owned_by_us(path: str) -> bool:
    """Whether the current user can delete ``path`` without elevation."""
    parent = Path(path).parent
    return os.access(parent, os.W_OK)
