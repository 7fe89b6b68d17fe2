"""
Library locator — find the highest-versioned file for a base name.

Scans a fixed, ordered list of directories one level deep. Rank
depends only on the version suffix; the directory only breaks ties
(first directory in the list wins). Does not consult ldconfig.
"""

from __future__ import annotations

import logging
from typing import Iterable

from relinker.adapters.base import DirectoryLister
from relinker.core.models.library import LibraryCandidate
from relinker.core.models.settings import DEFAULT_SEARCH_DIRS
from relinker.core.services.versions import version_key

logger = logging.getLogger(__name__)


class LibraryLocator:
    """Find library files by base-name prefix across search directories."""

    def __init__(
        self,
        search_dirs: Iterable[str] = DEFAULT_SEARCH_DIRS,
        lister: DirectoryLister | None = None,
    ):
        if lister is None:
            from relinker.adapters.shell.filesystem import ListdirLister

            lister = ListdirLister()
        self.search_dirs = tuple(search_dirs)
        self._lister = lister

    def find_all(self, base_name: str) -> list[LibraryCandidate]:
        """All files starting with ``base_name``, in directory-list order.

        Missing directories count as empty. Unreadable directories are
        skipped with a warning.
        """
        candidates: list[LibraryCandidate] = []
        for directory in self.search_dirs:
            try:
                names = self._lister.list_files(directory)
            except OSError as e:
                logger.warning("Skipping unreadable directory %s: %s", directory, e)
                continue
            for name in names:
                if name.startswith(base_name):
                    candidates.append(LibraryCandidate.from_file(base_name, name, directory))
        return candidates

    def find_highest(self, base_name: str) -> LibraryCandidate | None:
        """The highest-version file for ``base_name``, or None."""
        best: LibraryCandidate | None = None
        best_key = None
        for candidate in self.find_all(base_name):
            key = version_key(candidate.version_suffix)
            # Strict comparison keeps the earliest directory on ties
            if best is None or key > best_key:
                best, best_key = candidate, key

        if best is None:
            logger.debug("No file matching %s* in %d directories", base_name, len(self.search_dirs))
        else:
            logger.debug("Highest %s: %s", base_name, best.path)
        return best
