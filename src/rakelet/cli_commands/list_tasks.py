from __future__ import annotations

from rich.markup import escape
from rich.table import Table

from rakelet.graph import BuildGraph
from rakelet.logging import Logger


def list_tasks(logger: Logger, graph: BuildGraph) -> None:
    """
    List tasks that have a description, like `rake -T`.
    """
    described = [
        graph.tasks[name] for name in sorted(graph.task_names()) if graph.tasks[name].description
    ]
    if not described:
        logger.warn("[yellow]No described tasks (use desc(...) before a task)[/yellow]")
        return

    table = Table(show_edge=False, show_header=False, box=None, padding=(0, 2))
    table.add_column(
        "Task",
        style="bold cyan",
        no_wrap=True,
        width=max(len(task.name) for task in described),
    )
    table.add_column("Description", style="white", max_width=80)

    for task in described:
        table.add_row(escape(task.name), escape(task.description))

    logger.info(table)
