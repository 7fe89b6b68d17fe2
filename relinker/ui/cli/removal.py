"""
CLI commands for undoing an install.

Thin wrappers over ``relinker.core.use_cases.remove``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


def _plan(ctx: click.Context, binary: Path):
    """Build components and a removal plan for ``binary``."""
    from relinker.adapters.registry import build_components, record_path_for
    from relinker.core.data.requirements import DEFAULT_REQUIREMENTS
    from relinker.core.use_cases.remove import plan_removal

    settings = ctx.obj["settings"]
    components = build_components(settings)
    record_path = record_path_for(settings, binary)
    plan = plan_removal(
        binary,
        settings.requirement_table(DEFAULT_REQUIREMENTS),
        resolver=components.resolver,
        installer=components.package_installer,
        builder=components.builder,
        record_path=record_path,
    )
    return components, plan, record_path


def _echo_plan(plan) -> None:
    from relinker.core.models.removal import RemovalScope

    source = "resolution record" if plan.recorded else "package search"
    click.secho(f"\n🗑️  Removal plan for {plan.binary}", fg="cyan", bold=True)
    click.echo(f"   Binary: {'present' if plan.binary_present else 'not present'}")
    if plan.builder_library:
        files = ", ".join(plan.builder_files) if plan.builder_files else "no local files"
        click.echo(f"   {plan.builder_library}: {files}")
        if plan.builder_package:
            click.echo(f"   {plan.builder_library} package: {plan.builder_package}")
    pkgs = ", ".join(plan.installed_packages) if plan.installed_packages else "(none)"
    click.echo(f"   Installed packages ({source}): {pkgs}")
    click.echo()
    click.secho("   Uninstall options:", fg="white", bold=True)
    click.echo(f"     1) everything   ({plan.describe(RemovalScope.EVERYTHING)})")
    click.echo(f"     2) binary-only  ({plan.describe(RemovalScope.BINARY_ONLY)}; packages untouched)")
    click.echo()


# ── Plan ────────────────────────────────────────────────────────


@click.command("plan-removal")
@click.argument("binary", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def plan_removal_cmd(ctx: click.Context, binary: Path, as_json: bool) -> None:
    """Show what an uninstall of BINARY would remove."""
    _, plan, _ = _plan(ctx, binary)

    if as_json:
        click.echo(json.dumps(plan.to_dict(), indent=2))
        return

    _echo_plan(plan)


# ── Act ─────────────────────────────────────────────────────────


@click.command()
@click.argument("binary", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--scope",
    default=None,
    help="everything or binary-only (default: ask, binary-only on empty answer).",
)
@click.option("--yes", "assume_yes", is_flag=True, help="Skip the confirmation prompt.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the outcome as JSON.")
@click.pass_context
def uninstall(
    ctx: click.Context,
    binary: Path,
    scope: str | None,
    assume_yes: bool,
    as_json: bool,
) -> None:
    """Remove BINARY, its source-built library and optionally its packages."""
    from relinker.core.services.privileges import PrivilegeError, check_privileges
    from relinker.core.use_cases.remove import execute_removal, parse_scope

    components, plan, record_path = _plan(ctx, binary)

    if not as_json:
        _echo_plan(plan)

    raw = scope
    if raw is None:
        raw = click.prompt(
            "Choose uninstall scope (everything/binary-only)",
            default="binary-only",
            show_default=True,
            err=as_json,
        )
    chosen = parse_scope(raw)
    if chosen is None:
        click.secho(f"❌ Invalid choice: {raw!r}. Use 'everything' or 'binary-only'.", fg="red", err=True)
        sys.exit(1)

    if assume_yes:
        confirmed = True
    else:
        click.echo(f"This will forcefully delete: {plan.describe(chosen)}", err=as_json)
        answer = click.prompt(
            "Are you sure? Type 'yes' to proceed", default="", show_default=False, err=as_json,
        )
        confirmed = answer == "yes"

    if not confirmed:
        outcome = execute_removal(
            plan, chosen, False,
            installer=components.package_installer,
            remover=components.remover,
        )
        if as_json:
            click.echo(json.dumps(outcome.to_dict(), indent=2))
        else:
            click.secho("Aborting uninstall.", fg="yellow")
        return

    try:
        check_privileges()
    except PrivilegeError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    outcome = execute_removal(
        plan, chosen, True,
        installer=components.package_installer,
        remover=components.remover,
        builder=components.builder,
        record_path=record_path,
    )

    if as_json:
        click.echo(json.dumps(outcome.to_dict(), indent=2))
        sys.exit(1 if outcome.failed_steps else 0)

    for step in outcome.steps:
        target = f" {step.target}" if step.target else ""
        if step.ok:
            click.echo(f"   ✅ {step.operation}{target}")
        elif step.failed:
            click.secho(f"   ❌ {step.operation}{target}: {step.error}", fg="red")
        else:
            click.secho(f"   ⏭️  {step.operation}: {step.output}", fg="yellow")

    click.echo()
    if outcome.failed_steps:
        click.secho(f"⚠️  Uninstall ({chosen.value}) finished with errors", fg="yellow", bold=True)
        sys.exit(1)
    click.secho(f"✅ Uninstall ({chosen.value}) complete", fg="green", bold=True)
