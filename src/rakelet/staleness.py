"""Staleness detection from filesystem timestamps."""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from rakelet.errors import FileProbeError, MissingTimestampError
from rakelet.task import Task, TaskKind

if TYPE_CHECKING:
    from rakelet.graph import BuildGraph

# Timestamp reported for existing directories, so a directory never makes
# its dependents stale.
EARLIEST = 0.0


@dataclass
class TaskStatus:
    """Status of a task for execution planning."""

    task_name: str
    will_run: bool
    reason: str  # "no_file", "missing", "stale", "fresh"


class FileProbe:
    """The only environment inputs to staleness: existence and mtime of a path.

    Relative task names are resolved against base_dir.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir

    def path(self, name: str) -> Path:
        path = Path(name)
        if self.base_dir is not None and not path.is_absolute():
            return self.base_dir / path
        return path

    def exists(self, name: str) -> bool:
        """Whether a file or directory exists.

        Raises:
            FileProbeError: If the path can't be checked (e.g. permission denied)
        """
        try:
            return self.path(name).exists()
        except OSError as e:
            raise FileProbeError(name, e) from e

    def mtime(self, name: str) -> float:
        """Get the modification time of a file.

        Raises:
            MissingTimestampError: If the file doesn't exist
            FileProbeError: If the file can't be stat'ed for another reason
        """
        try:
            return self.path(name).stat().st_mtime
        except FileNotFoundError:
            raise MissingTimestampError(name)
        except OSError as e:
            raise FileProbeError(name, e) from e


def timestamp(task: Task, graph: "BuildGraph") -> float:
    """Get the timestamp of a task.

    File tasks report their file's mtime (failing if it is missing). Plain tasks
    report the newest prerequisite timestamp, or now when they have none.
    Existing directories report EARLIEST.

    Raises:
        MissingTimestampError: If a file task's file doesn't exist
    """
    match task.kind:
        case TaskKind.FILE:
            return graph.probe.mtime(task.name)
        case TaskKind.DIRECTORY:
            graph.probe.mtime(task.name)
            return EARLIEST
        case _:
            newest = _newest_prerequisite(task, graph)
            return time.time() if newest is None else newest


def needed(task: Task, graph: "BuildGraph") -> bool:
    """Whether a task's actions must run this invocation."""
    return check_status(task, graph).will_run


def check_status(task: Task, graph: "BuildGraph") -> TaskStatus:
    """Decide whether a task needs to run and why.

    Plain tasks always run. A file task runs when its file is missing or is
    strictly older than its newest prerequisite; an existing file with no
    prerequisites is fresh. A directory runs only when missing.
    """
    if task.kind is TaskKind.PLAIN:
        return TaskStatus(task.name, will_run=True, reason="no_file")

    if not graph.probe.exists(task.name):
        return TaskStatus(task.name, will_run=True, reason="missing")

    if task.kind is TaskKind.DIRECTORY or not task.prerequisites:
        return TaskStatus(task.name, will_run=False, reason="fresh")

    newest = _newest_prerequisite(task, graph)
    if graph.probe.mtime(task.name) < newest:
        return TaskStatus(task.name, will_run=True, reason="stale")
    return TaskStatus(task.name, will_run=False, reason="fresh")


def _newest_prerequisite(task: Task, graph: "BuildGraph") -> Optional[float]:
    """Get the newest timestamp among a task's prerequisites.

    A prerequisite file that doesn't exist yet (e.g. during a dry run) will be
    produced by this invocation, so it counts as now rather than failing.

    Returns:
        Newest timestamp, or None if the task has no prerequisites
    """
    stamps = []
    for name in task.prerequisites:
        prerequisite = graph.resolve(name)
        if prerequisite.kind is not TaskKind.PLAIN and not graph.probe.exists(name):
            stamps.append(time.time())
        else:
            stamps.append(timestamp(prerequisite, graph))
    return max(stamps) if stamps else None
