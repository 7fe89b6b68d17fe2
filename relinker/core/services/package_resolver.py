"""
Package candidate resolver — pick one package name for a search term.

A best-effort name heuristic. It may pick a package that does not
actually ship the library; the locator's post-install scan is what
decides whether the requirement is satisfied.
"""

from __future__ import annotations

import logging

from relinker.adapters.base import PackageSearch
from relinker.core.models.library import PackageCandidate

logger = logging.getLogger(__name__)

# Debug-symbol and documentation packages never ship the runtime library
EXCLUDED_MARKERS: tuple[str, ...] = ("dbg", "doc")


def filter_candidates(
    term: str,
    packages: list[PackageCandidate],
    excluded_markers: tuple[str, ...] = EXCLUDED_MARKERS,
) -> list[PackageCandidate]:
    """Apply the filter chain, preserving repository order."""
    return [
        p for p in packages
        if p.name.startswith(term)
        and not any(marker in p.name for marker in excluded_markers)
    ]


class PackageCandidateResolver:
    """Resolve a search term to at most one package name."""

    def __init__(self, search: PackageSearch):
        self._search = search

    def resolve(self, term: str) -> PackageCandidate | None:
        """First surviving candidate for ``term``, or None.

        A failing search is treated the same as an empty one.
        """
        try:
            result = self._search.search(term)
        except Exception as e:
            logger.warning("Package search for %r raised: %s", term, e)
            return None

        if not result.ok:
            logger.info("Package search for %r failed: %s", term, result.error)
            return None

        survivors = filter_candidates(term, result.packages)
        if not survivors:
            logger.info("No package candidate for %r (%d raw results)", term, len(result.packages))
            return None

        chosen = survivors[0]
        if len(survivors) > 1:
            logger.debug(
                "Picked %s for %r out of %d candidates: %s",
                chosen.name, term, len(survivors), ", ".join(p.name for p in survivors[:5]),
            )
        return chosen
