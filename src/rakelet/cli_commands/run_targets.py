"""Run requested targets against a loaded build graph."""

from __future__ import annotations

import typer
from rich.markup import escape

from rakelet.cli_commands import status_mark
from rakelet.graph import BuildGraph
from rakelet.invoker import Invoker
from rakelet.logging import Logger


def run_targets(
    logger: Logger,
    graph: BuildGraph,
    targets: list[str],
    dry_run: bool = False,
) -> None:
    """
    Invoke each target in order, stopping at the first failure.

    Args:
    logger: Logger interface for output
    graph: Loaded build graph
    targets: Task names in the order given by the user ("default" if empty)
    dry_run: Evaluate staleness but run no actions

    Raises:
    typer.Exit: With code 1 if any task fails
    """
    invoker = Invoker(graph, dry_run=dry_run)
    result = invoker.run(targets)

    if not result.ok:
        logger.error(
            f"[red]{status_mark(False)} {escape(str(result.error))}[/red]"
        )
        raise typer.Exit(1)

    logger.debug(
        f"[green]{status_mark(True)} Executed {len(result.executed)} task(s)[/green]"
    )
