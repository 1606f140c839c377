"""Typer-based CLI for tsinject."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__, config
from .config_manager import STYLE_KEYS, load_style, save_style_value
from .diff_engine import DiffEngine
from .errors import ParserUnavailableError
from .models import EditDirective, InjectionContext
from .planner import InjectionPlanner, build_injection_context
from .storage import FileHost

console = Console()

app = typer.Typer(
    help="Add constructor dependency injections to TypeScript classes without reformatting them.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Show or change the style of generated code")
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"tsinject v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every planning decision."),
):
    """tsinject: structural source patcher for constructor injection."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _context_from_options(
    file: Path,
    dependency: Optional[str],
    dependency_file: Optional[Path],
    module: Optional[str],
    class_name: Optional[str],
) -> InjectionContext:
    if file.suffix not in config.SUPPORTED_EXTENSIONS:
        raise typer.BadParameter(f"{file} is not a TypeScript file")
    try:
        return build_injection_context(
            file,
            dependency_name=dependency,
            dependency_file=dependency_file,
            module=module,
            class_name=class_name,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)
    raise typer.Exit(1)


def _directive_table(directives: List[EditDirective]) -> Table:
    table = Table(title="Planned edits")
    table.add_column("#", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("Edit")
    table.add_column("Text")
    for index, directive in enumerate(directives, 1):
        if directive.is_noop:
            table.add_row(str(index), "-", escape(directive.description or "no-op"), "[dim]no change[/dim]")
        else:
            table.add_row(str(index), str(directive.offset), escape(directive.description), escape(repr(directive.text)))
    return table


@app.command("plan")
def plan_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="TypeScript file to modify."),
    dependency: Optional[str] = typer.Option(None, "--dependency", "-d", help="Dependency class name."),
    dependency_file: Optional[Path] = typer.Option(None, "--from", "-f", help="File that defines the dependency."),
    module: Optional[str] = typer.Option(None, "--module", "-m", help="Package to import the dependency from."),
    class_name: Optional[str] = typer.Option(None, "--class", "-c", help="Class to modify (default: from file name)."),
):
    """Show the edits an injection would make, without changing anything."""
    context = _context_from_options(file, dependency, dependency_file, module, class_name)
    try:
        planner = InjectionPlanner(FileHost(file.resolve().parent), load_style(file.resolve()))
        directives = planner.plan(context)
    except (ValueError, ParserUnavailableError) as e:
        _fail(str(e))

    console.print(f"Injecting [bold]{context.dependency_name}[/bold] into [bold]{context.class_name}[/bold]")
    console.print(_directive_table(directives))


@app.command("inject")
def inject_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="TypeScript file to modify."),
    dependency: Optional[str] = typer.Option(None, "--dependency", "-d", help="Dependency class name."),
    dependency_file: Optional[Path] = typer.Option(None, "--from", "-f", help="File that defines the dependency."),
    module: Optional[str] = typer.Option(None, "--module", "-m", help="Package to import the dependency from."),
    class_name: Optional[str] = typer.Option(None, "--class", "-c", help="Class to modify (default: from file name)."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the diff without writing."),
    auto_apply: bool = typer.Option(False, "--yes", "-y", help="Write without confirmation."),
    no_backup: bool = typer.Option(False, "--no-backup", help="Do not keep a backup of the original file."),
):
    """Inject a dependency into a class constructor.

    Example:
      tsinject inject src/app/hero-list.component.ts --from src/app/logger.service.ts
      tsinject inject src/app/api.service.ts -d HttpClient -m @angular/common/http
    """
    context = _context_from_options(file, dependency, dependency_file, module, class_name)
    host = FileHost(file.resolve().parent)
    try:
        planner = InjectionPlanner(host, load_style(file.resolve()))
        result = planner.inject(context)
    except (ValueError, ParserUnavailableError) as e:
        _fail(str(e))

    if not result.changed:
        console.print(f"[green]{context.class_name} already injects {context.dependency_name}.[/green]")
        return

    diff_engine = DiffEngine()
    changes = host.changes()
    typer.echo(diff_engine.preview_changes(changes))

    if dry_run:
        console.print("Dry run: no files written.")
        return

    if not auto_apply and not typer.confirm("Apply changes?", default=False):
        console.print("Cancelled.")
        raise typer.Exit()

    outcome = diff_engine.apply_changes(changes, backup=not no_backup)
    if not outcome.success:
        _fail(outcome.error or "could not write changes")
    console.print(f"[green]{outcome}[/green]")
    if outcome.backup_id:
        console.print(f"Backup: {outcome.backup_id} (undo with 'tsinject rollback {outcome.backup_id}')")


@app.command("backups")
def list_backups():
    """List backups taken before files were written."""
    backups = DiffEngine().list_backups()
    if not backups:
        console.print("No backups found.")
        return
    table = Table(title="Backups")
    table.add_column("ID")
    table.add_column("Created")
    table.add_column("Files")
    for entry in backups:
        table.add_row(entry["backup_id"], entry["timestamp"], str(len(entry["files"])))
    console.print(table)


@app.command("rollback")
def rollback(backup_id: str = typer.Argument(..., help="Backup ID from 'tsinject backups'.")):
    """Restore files from a backup."""
    if not DiffEngine().rollback(backup_id):
        _fail(f"could not restore backup {backup_id}")
    console.print(f"[green]Restored backup {backup_id}.[/green]")


@config_app.command("show")
def show_config(
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="Include the project config that applies here."),
):
    """Show the effective style settings."""
    try:
        style = load_style(path.resolve() if path else None)
    except ValueError as e:
        _fail(str(e))
    for key, value in style.to_dict().items():
        console.print(f"{key} = {value!r}", highlight=False)


@config_app.command("set")
def set_config(
    key: str = typer.Argument(..., help=f"One of: {', '.join(STYLE_KEYS)}"),
    value: str = typer.Argument(..., help="New value. Use \\t or \\n escapes for whitespace."),
):
    """Set a style value in the global config file."""
    decoded = value.encode("utf-8").decode("unicode_escape") if key == "indent" else value
    try:
        save_style_value(key, decoded)
    except ValueError as e:
        _fail(str(e))
    console.print(f"Set {key} = {decoded!r}", highlight=False)
