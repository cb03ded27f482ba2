"""Command-line interface for rakelet."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from rakelet import __version__
from rakelet.buildfile import BUILDFILE_NAMES, find_buildfile, load_buildfile
from rakelet.cli_commands.list_tasks import list_tasks
from rakelet.cli_commands.run_targets import run_targets
from rakelet.config import ConfigError, load_settings
from rakelet.console_logger import ConsoleLogger
from rakelet.graph import BuildGraph
from rakelet.logging import Logger, LogLevel
from rakelet.process_runner import CommandOutput, Shell, make_process_runner

app = typer.Typer(
    help="rakelet - a minimal incremental build tool",
    add_completion=False,
    no_args_is_help=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"rakelet version {__version__}")
        raise typer.Exit()


def split_assignments(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate NAME=value environment assignments from task names.

    Returns:
        Tuple of (task names, environment assignments)
    """
    targets: list[str] = []
    assignments: dict[str, str] = {}
    for arg in args:
        name, sep, value = arg.partition("=")
        if sep and name:
            assignments[name] = value
        else:
            targets.append(arg)
    return targets, assignments


def _locate_buildfile(logger: Logger, rakefile: Optional[str], nosearch: bool) -> Path:
    """Find the build file to load, exiting with an error if there is none."""
    if rakefile:
        path = Path(rakefile)
        if not path.is_file():
            logger.error(f"[red]No such build file: {escape(rakefile)}[/red]")
            raise typer.Exit(1)
        return path.resolve()

    path = find_buildfile(Path.cwd(), search_parents=not nosearch)
    if path is None:
        logger.error(
            f"[red]No build file found ({', '.join(BUILDFILE_NAMES)})[/red]"
        )
        raise typer.Exit(1)
    return path


@app.command()
def main(
    targets: Optional[List[str]] = typer.Argument(
        None, help="Tasks to run (default: 'default'); NAME=value sets an environment variable"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Do a dry run without executing actions"
    ),
    trace: bool = typer.Option(
        False, "--trace", "-t", help="Turn on invoke/execute tracing"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Don't echo commands or show their output"
    ),
    rakefile: Optional[str] = typer.Option(
        None, "--rakefile", "-f", help="Use this file as the build file"
    ),
    nosearch: bool = typer.Option(
        False, "--nosearch", "-N", help="Don't search parent directories for the build file"
    ),
    show_tasks: bool = typer.Option(
        False, "--tasks", "-T", help="Display the tasks with descriptions, then exit"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-L", help="Log verbosity (fatal, error, warn, info, debug, trace)"
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """Run build tasks, executing only those that are out of date."""
    targets, assignments = split_assignments(targets or [])
    os.environ.update(assignments)

    try:
        settings = load_settings(Path.cwd())
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        level = LogLevel.from_name(log_level or settings.log_level)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    logger = ConsoleLogger(console, level)
    if trace or settings.trace:
        logger.push_level(LogLevel.TRACE)

    quiet = quiet or settings.quiet
    path = _locate_buildfile(logger, rakefile or settings.buildfile, nosearch)
    base_dir = path.parent
    os.chdir(base_dir)
    logger.debug(f"(in {base_dir})")

    graph = BuildGraph(logger, base_dir)
    output = CommandOutput.NONE if quiet else CommandOutput.ALL
    shell = Shell(make_process_runner(output), logger, cwd=base_dir, echo=not quiet)

    loaded = load_buildfile(path, graph, shell)
    if not loaded.ok:
        logger.error(f"[red]{escape(str(loaded.error))}[/red]")
        raise typer.Exit(1)

    if show_tasks:
        list_tasks(logger, graph)
        return

    run_targets(logger, graph, targets, dry_run=dry_run or settings.dry_run)


if __name__ == "__main__":
    app()
