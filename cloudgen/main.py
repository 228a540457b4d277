"""
cloudgen — CLI entrypoint.

Usage:
    python -m cloudgen.main --help
    python -m cloudgen.main generate --output build/demo
    python -m cloudgen.main features
    python -m cloudgen.main properties aws --env test
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from cloudgen import __version__
from cloudgen.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="cloudgen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to cloudgen.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """cloudgen — generate one application for several clouds at once."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("CLOUDGEN_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("CLOUDGEN_LOG_FILE"),
        log_file_level=os.environ.get("CLOUDGEN_LOG_FILE_LEVEL"),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--files", "show_files", is_flag=True, help="List every generated file.")
@click.option(
    "--output",
    "-o",
    "output_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write the generated project into this directory.",
)
@click.pass_context
def generate(ctx: click.Context, as_json: bool, show_files: bool, output_dir: str | None) -> None:
    """Generate the project described by cloudgen.yml."""
    from cloudgen.core.use_cases.generate import run_generate

    result = run_generate(
        config_path=ctx.obj.get("config_path"),
        output_dir=Path(output_dir) if output_dir else None,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    context = result.context
    assert context is not None  # guaranteed after error check above
    quiet = ctx.obj.get("quiet", False)

    if not quiet:
        click.secho(f"\n🏗️  {context.lib_project.name}", fg="cyan", bold=True)
        modules = context.module_names()
        if modules:
            click.echo(f"   Modules: {', '.join(modules)}")
        else:
            click.echo("   Single module (platform independent)")
        click.echo()

    for target in sorted(context.targets, key=lambda t: t.value):
        names = context.features(target)
        click.secho(f"   [{target.module_name}] ", fg="white", bold=True, nl=False)
        click.echo(", ".join(f.name for f in names) or "(no features)")

    click.echo()
    click.echo(f"   Files: {len(result.files)}")
    if show_files or ctx.obj.get("verbose"):
        for f in result.files:
            marker = " *" if f.executable else ""
            click.echo(f"     • {f.path}{marker}")

    if result.written:
        click.echo()
        click.secho(f"   💾 Written to {output_dir}", fg="green")

    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def features(as_json: bool) -> None:
    """List the available features."""
    from cloudgen.features import default_catalog

    catalog = default_catalog()

    if as_json:
        click.echo(json.dumps([
            {
                "name": f.name,
                "title": f.title,
                "target": f.target.value if f.target else None,
                "default": f.default,
                "roles": sorted(r.value for r in f.roles),
            }
            for f in catalog
        ], indent=2))
        return

    click.secho(f"\n🧩 Features: {len(catalog)}", fg="cyan", bold=True)
    for f in catalog:
        scope = f" @{f.target.module_name}" if f.target else ""
        default = " (default)" if f.default else ""
        click.echo(f"   • {f.name}{scope}{default}  {f.title}")
    click.echo()


@cli.command()
@click.argument("module")
@click.option("--env", "environment", default=None, help="Environment overlay to print.")
@click.pass_context
def properties(ctx: click.Context, module: str, environment: str | None) -> None:
    """Print the configuration of one generated module.

    MODULE is "lib" or a target module name (aws, azure, gcp, oci).
    """
    from cloudgen.core.models.target import Target
    from cloudgen.core.use_cases.generate import run_generate

    try:
        target = Target.parse(module)
    except ValueError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    result = run_generate(config_path=ctx.obj.get("config_path"))
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    context = result.context
    assert context is not None
    if target not in context.targets:
        click.secho(f"❌ Module '{module}' is not part of this build", fg="red")
        sys.exit(1)

    if environment:
        config = context.environment_configurations(target).get(environment)
        if config is None:
            click.secho(f"❌ No '{environment}' configuration in module '{module}'", fg="red")
            sys.exit(1)
    else:
        config = context.configuration(target)

    assert config is not None
    if context.options.config_format == "yaml":
        click.echo(config.to_yaml(), nl=False)
    else:
        click.echo(config.to_properties(), nl=False)


if __name__ == "__main__":
    cli()
