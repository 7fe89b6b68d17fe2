"""
ResolutionRecord — what an install run actually chose.

Persisted next to the patched binary so that an uninstall removes the
packages that were really selected, instead of re-running the name
heuristic against a repository that may have changed since.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class ResolutionRecord(BaseModel):
    """Durable record of resolved packages for one binary."""

    schema_version: int = 1
    binary: str = ""
    packages: dict[str, str] = Field(default_factory=dict)   # base name -> package
    built: list[str] = Field(default_factory=list)           # base names built from source
    created_at: str = Field(default_factory=_now_iso)
    updated_at: str = Field(default_factory=_now_iso)

    def touch(self) -> None:
        """Update the ``updated_at`` timestamp."""
        self.updated_at = _now_iso()

    def record_package(self, base_name: str, package: str) -> None:
        self.packages[base_name] = package

    def record_built(self, base_name: str) -> None:
        if base_name not in self.built:
            self.built.append(base_name)

    @property
    def empty(self) -> bool:
        return not self.packages and not self.built
