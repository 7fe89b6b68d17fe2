"""
Binary patcher — point a binary's DT_NEEDED entries at resolved files.

For one requirement, every declared dependency whose name starts with
the requirement's base name is rewritten to the resolved file name.
A binary can declare several versioned entries for the same library;
all of them are rewritten. Entries for other libraries are never
touched.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

from relinker.adapters.base import DependencyRewriter, ElfReadError
from relinker.core.models.library import LibraryCandidate, LibraryRequirement, Replacement

logger = logging.getLogger(__name__)


class PatchOutcome(BaseModel):
    """Result of patching one requirement into one binary."""

    status: Literal["patched", "unchanged", "planned", "no_match", "failed"]
    matched: list[str] = Field(default_factory=list)
    replaced: list[Replacement] = Field(default_factory=list)
    message: str = ""
    error: str | None = None


class BinaryPatcher:
    """Rewrite matching dependency entries through a DependencyRewriter."""

    def __init__(self, rewriter: DependencyRewriter, *, dry_run: bool = False):
        self.rewriter = rewriter
        self.dry_run = dry_run

    def matching_dependencies(self, binary: str, base_name: str) -> list[str]:
        """Declared dependencies of ``binary`` that start with ``base_name``."""
        return [d for d in self.rewriter.list_dependencies(binary) if d.startswith(base_name)]

    def patch(
        self,
        binary: str,
        requirement: LibraryRequirement,
        candidate: LibraryCandidate,
    ) -> PatchOutcome:
        try:
            matched = self.matching_dependencies(binary, requirement.base_name)
        except ElfReadError as e:
            logger.error("Cannot read dependencies of %s: %s", binary, e)
            return PatchOutcome(status="failed", message=str(e), error=str(e))

        if not matched:
            msg = f"No existing dependency on {requirement.base_name} found in binary, skipping"
            logger.info(msg)
            return PatchOutcome(status="no_match", message=msg)

        target = candidate.file_name
        pending = [old for old in matched if old != target]
        if not pending:
            msg = f"{', '.join(matched)} already points at {target}"
            logger.info(msg)
            return PatchOutcome(status="unchanged", matched=matched, message=msg)

        if self.dry_run:
            planned = [Replacement(old=old, new=target) for old in pending]
            return PatchOutcome(
                status="planned",
                matched=matched,
                replaced=planned,
                message=f"[dry-run] Would replace {', '.join(pending)} with {target}",
            )

        replaced: list[Replacement] = []
        for old in pending:
            receipt = self.rewriter.replace_dependency(binary, old, target)
            if receipt.failed:
                msg = f"Failed to replace {old} with {target}: {receipt.error}"
                logger.error(msg)
                return PatchOutcome(
                    status="failed",
                    matched=matched,
                    replaced=replaced,
                    message=msg,
                    error=receipt.error,
                )
            replaced.append(Replacement(old=old, new=target))

        return PatchOutcome(
            status="patched",
            matched=matched,
            replaced=replaced,
            message=f"Replaced {', '.join(r.old for r in replaced)} with {target}",
        )
