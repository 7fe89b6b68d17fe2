"""
Resolve use case — find, install or build each required library and
patch the binary to load it.

Every requirement is handled on its own: a missing package, a failed
build or a rewrite error becomes a skipped ``PatchDecision`` and the
run moves on to the next entry. The report at the end lists one
decision per requirement, in table order.
"""

from __future__ import annotations

import logging
from pathlib import Path

from relinker.adapters.base import LibraryBuilder
from relinker.core.models.library import (
    LibraryCandidate,
    LibraryRequirement,
    PatchDecision,
    RequirementTable,
    ResolutionOrigin,
    ResolutionReport,
    SkipReason,
)
from relinker.core.models.record import ResolutionRecord
from relinker.core.persistence.record_file import load_record, save_record
from relinker.core.services.installer import InstallerManager, InstallStatus
from relinker.core.services.locator import LibraryLocator
from relinker.core.services.package_resolver import PackageCandidateResolver
from relinker.core.services.patcher import BinaryPatcher

logger = logging.getLogger(__name__)


def resolve_and_patch(
    binary: str | Path,
    table: RequirementTable,
    *,
    locator: LibraryLocator,
    resolver: PackageCandidateResolver,
    installer: InstallerManager,
    builder: LibraryBuilder | None,
    patcher: BinaryPatcher,
    record_path: Path | None = None,
    dry_run: bool = False,
) -> ResolutionReport:
    """Resolve every requirement in ``table`` and patch ``binary``.

    Args:
        binary: Path of the ELF binary to patch.
        table: Requirements to resolve, in order.
        locator: Finds library files on disk.
        resolver: Picks a package for a search term.
        installer: Installs packages idempotently.
        builder: From-source fallback for the source-buildable entry.
        patcher: Rewrites the binary's dependency entries.
        record_path: Where to persist the resolution record. None = don't.
        dry_run: Report what would happen without installing, building
            or rewriting anything.

    Returns:
        ResolutionReport with one decision per requirement.
    """
    binary = str(binary)
    report = ResolutionReport(binary=binary, dry_run=dry_run)

    logger.info("Resolving %d libraries for %s", len(table), binary)

    # ── Rewrite tool ─────────────────────────────────────────────
    _ensure_rewriter_tool(patcher, installer)

    # ── Per-requirement resolution ───────────────────────────────
    for requirement in table:
        try:
            decision = _resolve_requirement(
                binary, requirement,
                locator=locator,
                resolver=resolver,
                installer=installer,
                builder=builder,
                patcher=patcher,
                dry_run=dry_run,
            )
        except Exception as e:
            logger.exception("Unexpected error while resolving %s", requirement.base_name)
            decision = PatchDecision.skip(
                requirement, SkipReason.UNEXPECTED_ERROR,
                message=f"{type(e).__name__}: {e}",
            )
        _log_decision(decision)
        report.decisions.append(decision)

    # ── Persist record ───────────────────────────────────────────
    if record_path is not None and not dry_run:
        _update_record(record_path, report)

    logger.info(
        "Resolution finished: %d patched, %d skipped, %d failed",
        report.patched, report.skipped, report.failed,
    )
    return report


def _ensure_rewriter_tool(patcher: BinaryPatcher, installer: InstallerManager) -> None:
    rewriter = patcher.rewriter
    if rewriter.is_available() or not rewriter.tool_package:
        return
    logger.info("%s not found, installing %s", rewriter.name, rewriter.tool_package)
    status = installer.ensure_installed(rewriter.tool_package)
    if status is InstallStatus.FAILED:
        logger.warning("Could not install %s; patching will likely fail", rewriter.tool_package)


def _resolve_requirement(
    binary: str,
    requirement: LibraryRequirement,
    *,
    locator: LibraryLocator,
    resolver: PackageCandidateResolver,
    installer: InstallerManager,
    builder: LibraryBuilder | None,
    patcher: BinaryPatcher,
    dry_run: bool,
) -> PatchDecision:
    base = requirement.base_name
    package: str | None = None

    candidate = locator.find_highest(base)
    origin = ResolutionOrigin.PRESENT

    if candidate is None and requirement.source_buildable and builder is not None:
        if dry_run:
            return PatchDecision.skip(
                requirement, SkipReason.DRY_RUN,
                message=f"[dry-run] No local {base}; would build it from source",
            )
        result = _build(requirement, locator, installer, builder)
        if isinstance(result, PatchDecision):
            return result
        candidate, origin = result, ResolutionOrigin.BUILT

    elif candidate is None:
        chosen = resolver.resolve(requirement.search_term)
        if chosen is None:
            return PatchDecision.skip(
                requirement, SkipReason.NO_PACKAGE_CANDIDATE,
                message=f"No package candidate found for {requirement.search_term}",
            )
        package = chosen.name
        if dry_run:
            return PatchDecision.skip(
                requirement, SkipReason.DRY_RUN, package=package,
                message=f"[dry-run] No local {base}; would install {package}",
            )

        status = installer.ensure_installed(package)
        candidate = locator.find_highest(base)
        if candidate is None:
            return PatchDecision.skip(
                requirement, SkipReason.NOT_FOUND_AFTER_INSTALL, package=package,
                message=f"Still no library file for {base} after installing {package}",
            )
        origin = (
            ResolutionOrigin.INSTALLED if status is InstallStatus.INSTALLED
            else ResolutionOrigin.INCIDENTAL
        )

    return _patch(binary, requirement, candidate, origin, package, patcher)


def _build(
    requirement: LibraryRequirement,
    locator: LibraryLocator,
    installer: InstallerManager,
    builder: LibraryBuilder,
) -> LibraryCandidate | PatchDecision:
    base = requirement.base_name
    logger.info("No local %s found, attempting to build it from source", base)

    if builder.toolchain_packages:
        statuses = installer.ensure_all(builder.toolchain_packages)
        missing = [p for p, s in statuses.items() if s is InstallStatus.FAILED]
        if missing:
            logger.warning("Toolchain packages not installed: %s", ", ".join(missing))

    receipt = builder.build()
    if receipt.failed:
        return PatchDecision.skip(
            requirement, SkipReason.BUILD_FAILED,
            message=f"Building {base} failed: {receipt.error}",
        )

    refresh = builder.refresh_linker_cache()
    if refresh.failed:
        logger.warning("Linker cache refresh failed: %s", refresh.error)

    candidate = locator.find_highest(base)
    if candidate is None:
        return PatchDecision.skip(
            requirement, SkipReason.NOT_FOUND_AFTER_BUILD,
            message=f"Still no library file for {base} after build",
        )
    return candidate


def _patch(
    binary: str,
    requirement: LibraryRequirement,
    candidate: LibraryCandidate,
    origin: ResolutionOrigin,
    package: str | None,
    patcher: BinaryPatcher,
) -> PatchDecision:
    outcome = patcher.patch(binary, requirement, candidate)
    common = dict(resolved_file=candidate, origin=origin, package=package, replaced=outcome.replaced)

    if outcome.status == "no_match":
        return PatchDecision.skip(
            requirement, SkipReason.NO_MATCHING_DEPENDENCY, message=outcome.message, **common,
        )
    if outcome.status == "failed":
        return PatchDecision.skip(
            requirement, SkipReason.REWRITE_FAILED, message=outcome.message, **common,
        )
    if outcome.status == "planned":
        return PatchDecision.skip(requirement, SkipReason.DRY_RUN, message=outcome.message, **common)
    return PatchDecision(requirement=requirement, message=outcome.message, **common)


def _log_decision(decision: PatchDecision) -> None:
    base = decision.requirement.base_name
    if not decision.skipped:
        logger.info("%s -> %s (%s)", base, decision.resolved_file.file_name, decision.origin.value)
    elif decision.failed:
        logger.warning("%s skipped (%s): %s", base, decision.skip_reason.value, decision.message)
    else:
        logger.info("%s skipped (%s): %s", base, decision.skip_reason.value, decision.message)


def _update_record(record_path: Path, report: ResolutionReport) -> None:
    record = load_record(record_path) or ResolutionRecord(binary=report.binary)
    record.binary = report.binary

    for decision in report.decisions:
        if decision.resolved_file is None:
            continue
        base = decision.requirement.base_name
        if decision.origin is ResolutionOrigin.BUILT:
            record.record_built(base)
        elif decision.package:
            record.record_package(base, decision.package)

    try:
        save_record(record, record_path)
    except OSError as e:
        logger.error("Resolution record not saved: %s", e)
