"""
Domain models — Pydantic types for relinker.

All models are re-exported here for convenient access:

    from relinker.core.models import LibraryRequirement, PatchDecision, Receipt
"""

from relinker.core.models.library import (
    FAILURE_REASONS,
    LOWEST_VERSION,
    LibraryCandidate,
    LibraryRequirement,
    PackageCandidate,
    PatchDecision,
    Replacement,
    RequirementTable,
    RequirementTableError,
    ResolutionOrigin,
    ResolutionReport,
    SkipReason,
)
from relinker.core.models.receipt import Receipt
from relinker.core.models.record import ResolutionRecord
from relinker.core.models.removal import RemovalOutcome, RemovalPlan, RemovalScope
from relinker.core.models.settings import DEFAULT_SEARCH_DIRS, Settings

__all__ = [
    "DEFAULT_SEARCH_DIRS",
    "FAILURE_REASONS",
    "LOWEST_VERSION",
    # library.py
    "LibraryCandidate",
    "LibraryRequirement",
    "PackageCandidate",
    "PatchDecision",
    # receipt.py
    "Receipt",
    # removal.py
    "RemovalOutcome",
    "RemovalPlan",
    "RemovalScope",
    "Replacement",
    "RequirementTable",
    "RequirementTableError",
    "ResolutionOrigin",
    # record.py
    "ResolutionRecord",
    "ResolutionReport",
    # settings.py
    "Settings",
    "SkipReason",
]
