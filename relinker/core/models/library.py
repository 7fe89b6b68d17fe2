"""
Library models — requirements, candidates and per-run decisions.

A ``RequirementTable`` is the immutable input of a run: which base
library names the target binary may depend on and what term to
search the package repository with. Everything else here is produced
during a run and discarded afterwards.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any, Iterable, Iterator, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Suffix assigned to a file whose name is exactly the base name
# (``libfoo.so``). Ranks below every versioned file.
LOWEST_VERSION = ""


class LibraryRequirement(BaseModel):
    """One library the target binary may need."""

    model_config = ConfigDict(frozen=True)

    base_name: str                  # unversioned prefix, e.g. "libgnutls.so"
    search_term: str                # package repository search term
    source_buildable: bool = False  # falls back to the library builder


class RequirementTableError(ValueError):
    """Raised when a requirement table is inconsistent."""


def check_requirements(requirements: Iterable[LibraryRequirement]) -> None:
    """Reject duplicate base names and more than one source-buildable entry.

    Raises:
        RequirementTableError: On the first inconsistency found.
    """
    seen: set[str] = set()
    buildable: list[str] = []
    for req in requirements:
        if req.base_name in seen:
            raise RequirementTableError(f"Duplicate base name: {req.base_name}")
        seen.add(req.base_name)
        if req.source_buildable:
            buildable.append(req.base_name)
    if len(buildable) > 1:
        raise RequirementTableError(
            f"At most one source-buildable requirement allowed, got: {', '.join(buildable)}"
        )


class RequirementTable(BaseModel):
    """Ordered, immutable set of library requirements."""

    model_config = ConfigDict(frozen=True)

    requirements: tuple[LibraryRequirement, ...] = ()

    @model_validator(mode="after")
    def _check_consistency(self) -> RequirementTable:
        check_requirements(self.requirements)
        return self

    def __iter__(self) -> Iterator[LibraryRequirement]:  # type: ignore[override]
        return iter(self.requirements)

    def __len__(self) -> int:
        return len(self.requirements)

    def get(self, base_name: str) -> LibraryRequirement | None:
        """Look up a requirement by base name."""
        for req in self.requirements:
            if req.base_name == base_name:
                return req
        return None

    @property
    def source_buildable(self) -> LibraryRequirement | None:
        """The requirement that may be built from source, if any."""
        for req in self.requirements:
            if req.source_buildable:
                return req
        return None

    def extended(self, extra: list[LibraryRequirement]) -> RequirementTable:
        """Return a new table with ``extra`` entries appended (or replacing by base name)."""
        merged = {r.base_name: r for r in self.requirements}
        for req in extra:
            merged[req.base_name] = req
        check_requirements(merged.values())
        return RequirementTable(requirements=tuple(merged.values()))


class LibraryCandidate(BaseModel):
    """A concrete library file found on disk."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    version_suffix: str = LOWEST_VERSION
    directory: str

    @property
    def path(self) -> str:
        return os.path.join(self.directory, self.file_name)

    @classmethod
    def from_file(cls, base_name: str, file_name: str, directory: str) -> LibraryCandidate:
        """Derive the version suffix from ``file_name`` relative to ``base_name``."""
        suffix = file_name[len(base_name):] if file_name.startswith(base_name) else file_name
        if suffix.startswith("."):
            suffix = suffix[1:]
        return cls(
            file_name=file_name,
            version_suffix=suffix or LOWEST_VERSION,
            directory=directory,
        )


class PackageCandidate(BaseModel):
    """A package name returned by the repository search."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    tags: tuple[str, ...] = ()


class SkipReason(str, Enum):
    """Why a requirement did not end up patched."""

    BUILD_FAILED = "build_failed"
    NOT_FOUND_AFTER_BUILD = "not_found_after_build"
    NO_PACKAGE_CANDIDATE = "no_package_candidate"
    NOT_FOUND_AFTER_INSTALL = "not_found_after_install"
    NO_MATCHING_DEPENDENCY = "no_matching_dependency"
    REWRITE_FAILED = "rewrite_failed"
    UNEXPECTED_ERROR = "unexpected_error"
    DRY_RUN = "dry_run"


# Skip reasons that indicate something went wrong, as opposed to
# "nothing to do" or "not applied in this mode".
FAILURE_REASONS = frozenset({
    SkipReason.BUILD_FAILED,
    SkipReason.NOT_FOUND_AFTER_BUILD,
    SkipReason.NOT_FOUND_AFTER_INSTALL,
    SkipReason.REWRITE_FAILED,
    SkipReason.UNEXPECTED_ERROR,
})


class ResolutionOrigin(str, Enum):
    """How the resolved library came to exist."""

    PRESENT = "present"         # found on the first scan
    INSTALLED = "installed"     # found after this run installed a package
    BUILT = "built"             # found after the library builder ran
    INCIDENTAL = "incidental"   # found after an install step that installed nothing


class Replacement(BaseModel):
    """One rewritten dependency entry."""

    old: str
    new: str


class PatchDecision(BaseModel):
    """Result of resolving one requirement."""

    requirement: LibraryRequirement
    resolved_file: LibraryCandidate | None = None
    skipped: bool = False
    skip_reason: SkipReason | None = None
    origin: ResolutionOrigin | None = None
    package: str | None = None
    replaced: list[Replacement] = Field(default_factory=list)
    message: str = ""

    @property
    def failed(self) -> bool:
        return self.skip_reason in FAILURE_REASONS

    @classmethod
    def skip(
        cls,
        requirement: LibraryRequirement,
        reason: SkipReason,
        message: str = "",
        **kwargs: Any,
    ) -> PatchDecision:
        return cls(
            requirement=requirement,
            skipped=True,
            skip_reason=reason,
            message=message,
            **kwargs,
        )


class ResolutionReport(BaseModel):
    """All decisions of one resolve-and-patch run."""

    binary: str
    dry_run: bool = False
    decisions: list[PatchDecision] = Field(default_factory=list)

    @property
    def patched(self) -> int:
        return sum(1 for d in self.decisions if not d.skipped)

    @property
    def skipped(self) -> int:
        return sum(1 for d in self.decisions if d.skipped and not d.failed)

    @property
    def failed(self) -> int:
        return sum(1 for d in self.decisions if d.failed)

    @property
    def status(self) -> Literal["ok", "partial", "failed"]:
        if self.failed == 0:
            return "ok"
        if self.failed == len(self.decisions):
            return "failed"
        return "partial"

    def decision_for(self, base_name: str) -> PatchDecision | None:
        for decision in self.decisions:
            if decision.requirement.base_name == base_name:
                return decision
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data = self.model_dump(mode="json")
        data["summary"] = {
            "status": self.status,
            "patched": self.patched,
            "skipped": self.skipped,
            "failed": self.failed,
        }
        return data
