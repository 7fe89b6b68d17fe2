"""
Compiled-in requirement table.

The libraries the target server binary links against, keyed by their
unversioned base name, with the package repository search term used
to find a providing package. ``libdispatch`` is rarely packaged and
is built from source when missing.
"""

from __future__ import annotations

from relinker.core.models.library import LibraryRequirement, RequirementTable

DEFAULT_REQUIREMENTS = RequirementTable(
    requirements=(
        LibraryRequirement(base_name="libgnustep-base.so", search_term="libgnustep-base"),
        LibraryRequirement(base_name="libobjc.so", search_term="libobjc"),
        LibraryRequirement(base_name="libgnutls.so", search_term="libgnutls"),
        LibraryRequirement(base_name="libgcrypt.so", search_term="libgcrypt"),
        LibraryRequirement(base_name="libffi.so", search_term="libffi"),
        LibraryRequirement(base_name="libicui18n.so", search_term="libicu"),
        LibraryRequirement(base_name="libicuuc.so", search_term="libicu"),
        LibraryRequirement(base_name="libicudata.so", search_term="libicu"),
        LibraryRequirement(
            base_name="libdispatch.so",
            search_term="libdispatch",
            source_buildable=True,
        ),
    )
)
