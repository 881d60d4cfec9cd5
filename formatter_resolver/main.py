"""formatter-resolver CLI - inspect which formatter and config a file would use."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from rich.table import Table

from .console import console
from .console import err_console
from .errors import FormatterResolverError
from .logging_setup import init_json_logging
from .module_resolution import ModuleResolver
from .module_resolution import PackageManager
from .module_resolution.validator import get_version
from .paths import TextDocument
from .paths import Workspace
from .prompt import ConsoleChoicePrompt
from .settings import SettingsManager

logger = logging.getLogger(__name__)


def _create_resolver(ctx: click.Context) -> ModuleResolver:
    workspace = Workspace(ctx.obj["workspace"])
    return ModuleResolver(
        settings=SettingsManager(workspace),
        prompt=ConsoleChoicePrompt(err_console),
        workspace=workspace,
        package_name=ctx.obj["package_name"],
    )


@click.group()
@click.version_option(package_name="formatter-resolver")
@click.option(
    "--workspace",
    "-w",
    "workspace",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Workspace folder (repeatable, defaults to the current directory)",
)
@click.option("--package", "package_name", default="prettier", show_default=True, help="Formatter package name")
@click.option("--log-path", default=None, help="JSONL log file path")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, ...)")
@click.pass_context
def cli(ctx, workspace, package_name, log_path, log_level):
    """Find the formatter module and configuration a file should use."""
    init_json_logging(log_path, log_level)
    ctx.ensure_object(dict)
    ctx.obj["workspace"] = list(workspace) or [Path.cwd()]
    ctx.obj["package_name"] = package_name


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def resolve(ctx, file: Path):
    """Show which formatter module FILE resolves to."""
    resolver = _create_resolver(ctx)
    file = file.absolute()
    try:
        instance = asyncio.run(resolver.get_formatter_instance(file))
    except FormatterResolverError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if instance is None:
        err_console.print("[red]No usable formatter module.[/red] See the log for details.")
        ctx.exit(1)

    table = Table(title=f"Formatter for {file.name}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Module", getattr(instance, "__file__", None) or instance.__name__)
    table.add_row("Version", get_version(instance) or "unknown")
    table.add_row("Bundled", "yes" if instance is resolver.get_bundled_instance() else "no")
    console.print(table)


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def config(ctx, file: Path):
    """Print the formatting options that apply to FILE as JSON."""
    resolver = _create_resolver(ctx)
    file = file.absolute()
    settings = resolver.settings.get_settings(file)
    resolved = asyncio.run(resolver.resolve_config(TextDocument.from_path(file), settings))

    if resolved in ("error", "disabled"):
        err_console.print(f"[yellow]Config status: {resolved}[/yellow]")
        ctx.exit(1)
    click.echo(json.dumps(resolved, indent=2, sort_keys=True))


@cli.command("format")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--check", is_flag=True, help="Exit non-zero if FILE is not formatted, without printing it")
@click.pass_context
def format_cmd(ctx, file: Path, check: bool):
    """Format FILE with its resolved formatter and print the result."""
    resolver = _create_resolver(ctx)
    file = file.absolute()

    async def _run():
        instance = await resolver.get_formatter_instance(file)
        options = await resolver.resolve_config(TextDocument.from_path(file), resolver.settings.get_settings(file))
        return instance, options

    try:
        instance, options = asyncio.run(_run())
    except FormatterResolverError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if instance is None or options == "error":
        err_console.print("[red]Cannot format:[/red] formatter or configuration unavailable. See the log.")
        ctx.exit(1)
    if options == "disabled":
        err_console.print("[dim]Skipped: no formatter configuration found.[/dim]")
        ctx.exit(0)

    source = file.read_text(encoding="utf-8")
    formatted = instance.format(source, filepath=str(file), **(options or {}))
    resolver.dispose()

    if check:
        if formatted != source:
            err_console.print(f"[yellow]{file} is not formatted[/yellow]")
            ctx.exit(1)
        return
    sys.stdout.write(formatted)


@cli.command("global-root")
@click.argument("package_manager", type=click.Choice([pm.value for pm in PackageManager]))
@click.pass_context
def global_root(ctx, package_manager: str):
    """Print the global install root of PACKAGE_MANAGER."""
    resolver = _create_resolver(ctx)
    try:
        root = resolver.locator.global_root(package_manager)
    except FormatterResolverError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    if root is None:
        err_console.print(f"[yellow]No global root found for {package_manager}[/yellow]")
        ctx.exit(1)
    click.echo(str(root))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
