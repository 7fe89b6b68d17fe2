"""
relinker — CLI entrypoint.

Usage:
    relinker --help
    relinker install ./blockheads_server171
    relinker uninstall ./blockheads_server171
    relinker locate libgnutls.so
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from relinker import __version__
from relinker.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="relinker")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to relinker.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """relinker — point a prebuilt binary at the libraries this host has."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(debug=debug, verbose=verbose, quiet=quiet)

    # ── Settings ────────────────────────────────────────────────
    from relinker.core.config.loader import ConfigError, load_settings

    try:
        ctx.obj["settings"] = load_settings(ctx.obj["config_path"])
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.argument("binary", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Report decisions without installing, building or patching.")
@click.option("--record/--no-record", default=True, help="Save the resolution record used by uninstall.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, binary: Path, dry_run: bool, record: bool, as_json: bool) -> None:
    """Resolve BINARY's shared libraries and patch it to load them."""
    from relinker.adapters.registry import build_components, record_path_for
    from relinker.core.data.requirements import DEFAULT_REQUIREMENTS
    from relinker.core.services.privileges import PrivilegeError, check_privileges
    from relinker.core.use_cases.resolve import resolve_and_patch

    if not binary.is_file():
        click.secho(f"❌ Binary not found: {binary}", fg="red", err=True)
        sys.exit(1)

    if not dry_run:
        try:
            check_privileges()
        except PrivilegeError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)

    settings = ctx.obj["settings"]
    components = build_components(settings, dry_run=dry_run)
    table = settings.requirement_table(DEFAULT_REQUIREMENTS)

    report = resolve_and_patch(
        binary,
        table,
        locator=components.locator,
        resolver=components.resolver,
        installer=components.installer,
        builder=components.builder,
        patcher=components.patcher,
        record_path=record_path_for(settings, binary) if record else None,
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(1 if report.status == "failed" else 0)

    quiet = ctx.obj.get("quiet", False)
    title = "🔍 Dry run for" if dry_run else "🔗 Patching"
    if not quiet:
        click.secho(f"\n{title} {binary}", fg="cyan", bold=True)

    for d in report.decisions:
        base = d.requirement.base_name
        if not d.skipped:
            via = f" ({d.origin.value}" + (f": {d.package})" if d.package else ")")
            click.echo(f"   ✅ {base} → {d.resolved_file.file_name}{via}")
            for r in d.replaced:
                click.echo(f"      {r.old} → {r.new}")
        elif d.failed:
            click.secho(f"   ❌ {base}: {d.message}", fg="red")
        elif not quiet:
            click.secho(f"   ⏭️  {base}: {d.message}", fg="yellow")

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}[report.status]
    click.secho(
        f"   {report.patched} patched, {report.skipped} skipped, {report.failed} failed",
        fg=status_color,
        bold=True,
    )
    if not dry_run and report.patched and not quiet:
        click.echo(f"   You can now run {binary}")
    click.echo()

    if report.status == "failed":
        sys.exit(1)


# ── Register sub-commands from relinker/ui/cli/ ──────────────────

from relinker.ui.cli.inspect import deps, doctor, locate, requirements
from relinker.ui.cli.removal import plan_removal_cmd, uninstall

cli.add_command(uninstall)
cli.add_command(plan_removal_cmd)
cli.add_command(locate)
cli.add_command(deps)
cli.add_command(requirements)
cli.add_command(doctor)


if __name__ == "__main__":
    cli()
