"""
CLI commands for read-only inspection: libraries on disk, a binary's
declared dependencies, the requirement table and host tools.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click


@click.command()
@click.argument("base_name")
@click.option("--all", "show_all", is_flag=True, help="List every match, not just the highest version.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def locate(ctx: click.Context, base_name: str, show_all: bool, as_json: bool) -> None:
    """Find the highest-versioned file for BASE_NAME (e.g. libffi.so)."""
    from relinker.adapters.registry import build_components
    from relinker.core.services.versions import version_key

    locator = build_components(ctx.obj["settings"]).locator
    best = locator.find_highest(base_name)
    matches = locator.find_all(base_name) if show_all else []

    if as_json:
        click.echo(json.dumps({
            "base_name": base_name,
            "highest": best.model_dump() if best else None,
            "matches": [m.model_dump() for m in matches],
        }, indent=2))
        sys.exit(0 if best else 1)

    if best is None:
        click.secho(f"❌ No file matching {base_name}* in:", fg="red")
        for directory in locator.search_dirs:
            click.echo(f"   {directory}")
        sys.exit(1)

    click.secho(f"✅ {best.path}", fg="green", bold=True)
    if show_all:
        for m in sorted(matches, key=lambda c: version_key(c.version_suffix), reverse=True):
            marker = " ← highest" if m == best else ""
            click.echo(f"   • {m.path}  [{m.version_suffix or '-'}]{marker}")


@click.command()
@click.argument("binary", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def deps(ctx: click.Context, binary: Path, as_json: bool) -> None:
    """List BINARY's declared shared-library dependencies."""
    from relinker.adapters.base import ElfReadError
    from relinker.adapters.registry import build_components

    rewriter = build_components(ctx.obj["settings"]).rewriter
    try:
        needed = rewriter.list_dependencies(str(binary))
    except ElfReadError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"binary": str(binary), "needed": needed}, indent=2))
        return

    click.secho(f"📦 {binary}: {len(needed)} needed", fg="cyan", bold=True)
    for name in needed:
        click.echo(f"   • {name}")


@click.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def requirements(ctx: click.Context, as_json: bool) -> None:
    """Show the libraries resolved on install and their search terms."""
    from relinker.core.data.requirements import DEFAULT_REQUIREMENTS

    table = ctx.obj["settings"].requirement_table(DEFAULT_REQUIREMENTS)

    if as_json:
        click.echo(json.dumps(table.model_dump(mode="json")["requirements"], indent=2))
        return

    click.secho(f"📋 {len(table)} requirements", fg="cyan", bold=True)
    for req in table:
        built = "  (built from source when missing)" if req.source_buildable else ""
        click.echo(f"   • {req.base_name:<22} ← {req.search_term}{built}")


@click.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def doctor(ctx: click.Context, as_json: bool) -> None:
    """Check that the host tools relinker drives are available."""
    from relinker.adapters.registry import build_components
    from relinker.adapters.shell.runner import is_root

    components = build_components(ctx.obj["settings"])
    adapters = components.adapters()
    status = components.adapter_status()

    if as_json:
        click.echo(json.dumps({
            "root": is_root(),
            "tools": status,
            "adapters": {role: a.name for role, a in adapters.items()},
        }, indent=2))
        return

    click.secho("🩺 Host tools:", fg="cyan", bold=True)
    for role, available in status.items():
        icon = "✅" if available else "❌"
        click.echo(f"   {icon} {role:<10} ({adapters[role].name})")
    click.echo(f"   {'✅' if is_root() else '⚠️ '} running as root")
    if not all(status.values()):
        click.echo()
        click.secho("⚠️  Missing tools are installed on demand during install", fg="yellow")
