"""
Remove use case — undo an install: delete the binary and the
source-built library, and optionally purge the packages pulled in.

Split in two so the CLI can show the plan and ask before anything
destructive happens:

    plan_removal()    → RemovalPlan     (read-only)
    execute_removal() → RemovalOutcome  (only acts when confirmed)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from relinker.adapters.base import FileRemover, LibraryBuilder, PackageInstaller
from relinker.core.models.library import RequirementTable
from relinker.core.models.receipt import Receipt
from relinker.core.models.removal import RemovalOutcome, RemovalPlan, RemovalScope
from relinker.core.persistence.record_file import delete_record, load_record
from relinker.core.services.package_resolver import PackageCandidateResolver

logger = logging.getLogger(__name__)

_SCOPE_ALIASES: dict[str, RemovalScope] = {
    "everything": RemovalScope.EVERYTHING,
    "all": RemovalScope.EVERYTHING,
    "1": RemovalScope.EVERYTHING,
    "binary": RemovalScope.BINARY_ONLY,
    "binary-only": RemovalScope.BINARY_ONLY,
    "binary_only": RemovalScope.BINARY_ONLY,
    "binary only": RemovalScope.BINARY_ONLY,
    "blockheads": RemovalScope.BINARY_ONLY,
    "blockheads server": RemovalScope.BINARY_ONLY,
    "blockheads_server": RemovalScope.BINARY_ONLY,
    "2": RemovalScope.BINARY_ONLY,
}


def parse_scope(raw: str | None) -> RemovalScope | None:
    """Map user input to a scope. Empty input means binary-only.

    Returns None for anything unrecognized.
    """
    if raw is None:
        return RemovalScope.BINARY_ONLY
    choice = " ".join(raw.strip().lower().split())
    if not choice:
        return RemovalScope.BINARY_ONLY
    return _SCOPE_ALIASES.get(choice)


def plan_removal(
    binary: str | Path,
    table: RequirementTable,
    *,
    resolver: PackageCandidateResolver,
    installer: PackageInstaller,
    builder: LibraryBuilder | None = None,
    record_path: Path | None = None,
) -> RemovalPlan:
    """Work out what an uninstall would remove. Changes nothing.

    Packages come from the resolution record when one exists. Without
    a record, the package heuristic is re-run for every requirement and
    the picks that are currently installed are kept.
    With a record, the source-built library's files are only listed
    when the record says relinker built it.
    """
    binary_path = Path(binary)
    plan = RemovalPlan(binary=str(binary_path), binary_present=binary_path.is_file())

    # ── Packages per base name ───────────────────────────────────
    record = load_record(record_path) if record_path is not None else None
    if record is not None:
        plan.recorded = True
        package_map = dict(record.packages)
        if record.empty:
            logger.info("Resolution record lists no packages")
    else:
        logger.info("No resolution record, recomputing package candidates")
        package_map = {}
        for requirement in table:
            candidate = resolver.resolve(requirement.search_term)
            if candidate is not None:
                package_map[requirement.base_name] = candidate.name

    # ── Source-built library ─────────────────────────────────────
    buildable = table.source_buildable
    if buildable is not None:
        plan.builder_library = buildable.base_name
        builder_pkg = package_map.pop(buildable.base_name, None)
        if builder_pkg and _installed(installer, builder_pkg):
            plan.builder_package = builder_pkg
    if builder is not None:
        if record is not None and buildable is not None and buildable.base_name not in record.built:
            logger.info("%s was not built by relinker, leaving its files", buildable.base_name)
        else:
            plan.builder_files = builder.installed_files()

    # ── Remaining installed packages, deduplicated ───────────────
    packages: list[str] = []
    for pkg in package_map.values():
        if pkg in packages or pkg == plan.builder_package:
            continue
        if _installed(installer, pkg):
            packages.append(pkg)
    plan.installed_packages = packages

    logger.debug("Removal plan: %s", plan.to_dict())
    return plan


def execute_removal(
    plan: RemovalPlan,
    scope: RemovalScope,
    confirmed: bool,
    *,
    installer: PackageInstaller,
    remover: FileRemover,
    builder: LibraryBuilder | None = None,
    record_path: Path | None = None,
) -> RemovalOutcome:
    """Carry out ``plan`` for ``scope``. Does nothing unless ``confirmed``.

    Each step is attempted regardless of earlier failures and recorded
    as a Receipt on the outcome.
    """
    outcome = RemovalOutcome(scope=scope, confirmed=confirmed)
    if not confirmed:
        logger.info("Removal not confirmed, nothing removed")
        return outcome

    outcome.performed = True
    steps = outcome.steps

    # ── Binary ───────────────────────────────────────────────────
    if plan.binary_present:
        logger.info("Removing %s", plan.binary)
        steps.append(_attempt(remover.name, "remove-binary", plan.binary, remover.remove, [plan.binary]))
    else:
        steps.append(Receipt.skip(remover.name, "remove-binary", f"{plan.binary} not present", target=plan.binary))

    # ── Source-built library files ───────────────────────────────
    if plan.builder_files:
        logger.info("Removing %s", ", ".join(plan.builder_files))
        steps.append(_attempt(
            remover.name, "remove-library", plan.builder_library or "",
            remover.remove, plan.builder_files,
        ))
        if builder is not None:
            steps.append(_attempt(builder.name, "refresh-linker-cache", "", builder.refresh_linker_cache))
    elif plan.builder_library:
        steps.append(Receipt.skip(
            remover.name, "remove-library",
            f"No local {plan.builder_library} files detected", target=plan.builder_library,
        ))

    # ── Packages ─────────────────────────────────────────────────
    if scope is RemovalScope.EVERYTHING:
        if plan.builder_package:
            logger.info("Removing package %s", plan.builder_package)
            steps.append(_attempt(
                installer.name, "remove-package", plan.builder_package,
                installer.remove, [plan.builder_package],
            ))
        packages = plan.packages_for(scope)
        if packages:
            logger.info("Removing packages: %s", " ".join(packages))
            steps.append(_attempt(
                installer.name, "remove-packages", " ".join(packages),
                installer.remove, packages,
            ))
        else:
            steps.append(Receipt.skip(installer.name, "remove-packages", "No additional packages to remove"))

    # ── Record ───────────────────────────────────────────────────
    # Kept until an everything-scope removal succeeds
    if record_path is not None and scope is RemovalScope.EVERYTHING and not outcome.failed_steps:
        delete_record(record_path)

    if outcome.failed_steps:
        logger.warning("Removal finished with %d failed step(s)", len(outcome.failed_steps))
    else:
        logger.info("Removal (%s) complete", scope.value)
    return outcome


def _installed(installer: PackageInstaller, package: str) -> bool:
    try:
        return installer.is_installed(package)
    except Exception as e:
        logger.warning("Install-state check for %s raised: %s", package, e)
        return False


def _attempt(
    adapter: str,
    operation: str,
    target: str,
    fn: Callable[..., Receipt],
    *args: object,
) -> Receipt:
    try:
        receipt = fn(*args)
    except Exception as e:
        logger.exception("%s %s raised", adapter, operation)
        return Receipt.failure(adapter, operation, error=f"{type(e).__name__}: {e}", target=target)
    if receipt.failed:
        logger.warning("%s %s failed: %s", adapter, operation, receipt.error)
    return receipt
