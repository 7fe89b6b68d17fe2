"""
Removal models — uninstall plan, scopes and outcome.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from relinker.core.models.receipt import Receipt


class RemovalScope(str, Enum):
    """What an uninstall is allowed to touch."""

    EVERYTHING = "everything"       # binary + built library + installed packages
    BINARY_ONLY = "binary-only"     # binary + built library, packages untouched


class RemovalPlan(BaseModel):
    """What an uninstall would remove, computed before asking for confirmation."""

    binary: str
    binary_present: bool = False
    installed_packages: list[str] = Field(default_factory=list)
    builder_library: str | None = None      # base name of the source-built library
    builder_package: str | None = None      # package providing it, when installed
    builder_files: list[str] = Field(default_factory=list)
    recorded: bool = False                  # packages came from the resolution record
    scope_options: list[RemovalScope] = Field(
        default_factory=lambda: [RemovalScope.EVERYTHING, RemovalScope.BINARY_ONLY]
    )

    def packages_for(self, scope: RemovalScope) -> list[str]:
        """Packages the given scope would remove."""
        if scope is not RemovalScope.EVERYTHING:
            return []
        return list(self.installed_packages)

    def describe(self, scope: RemovalScope) -> str:
        """One-line summary of a scope, used for the confirmation prompt."""
        parts = [self.binary]
        if self.builder_library:
            parts.append(self.builder_library.split(".so")[0])
        if scope is RemovalScope.EVERYTHING:
            pkgs = self.packages_for(scope)
            parts.append(", ".join(pkgs) if pkgs else "(no matching packages detected)")
        return ", ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class RemovalOutcome(BaseModel):
    """Result of executing (or declining) a removal."""

    scope: RemovalScope
    confirmed: bool = False
    performed: bool = False
    steps: list[Receipt] = Field(default_factory=list)

    @property
    def failed_steps(self) -> list[Receipt]:
        return [s for s in self.steps if s.failed]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
