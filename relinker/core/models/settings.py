"""
Settings — optional host configuration read from relinker.yml.

Every field has a default, so a host without a config file behaves
exactly like the compiled-in defaults.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from relinker.core.models.library import LibraryRequirement, RequirementTable

# Scanned in this order; a library's directory never affects its rank.
DEFAULT_SEARCH_DIRS: tuple[str, ...] = (
    "/usr/lib",
    "/usr/lib/x86_64-linux-gnu",
    "/lib",
    "/lib/x86_64-linux-gnu",
    "/usr/local/lib",
)


class Settings(BaseModel):
    """Host-level settings for a relinker run."""

    search_dirs: list[str] = Field(default_factory=lambda: list(DEFAULT_SEARCH_DIRS))
    package_manager: Literal["apt"] = "apt"
    use_sudo: bool = True
    record_path: str | None = None      # default: next to the binary
    build_dir: str | None = None        # default: current directory
    extra_requirements: list[LibraryRequirement] = Field(default_factory=list)

    @field_validator("search_dirs")
    @classmethod
    def _non_empty_dirs(cls, value: list[str]) -> list[str]:
        dirs = [d for d in (v.strip() for v in value) if d]
        if not dirs:
            raise ValueError("search_dirs must contain at least one directory")
        return dirs

    @model_validator(mode="after")
    def _extra_requirements_fit_table(self) -> Settings:
        if self.extra_requirements:
            from relinker.core.data.requirements import DEFAULT_REQUIREMENTS

            # raises RequirementTableError on a conflict
            DEFAULT_REQUIREMENTS.extended(self.extra_requirements)
        return self

    def requirement_table(self, base: RequirementTable) -> RequirementTable:
        """Apply ``extra_requirements`` on top of ``base``."""
        if not self.extra_requirements:
            return base
        return base.extended(self.extra_requirements)
