"""Memoized, dependency-ordered task invocation."""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from rakelet.errors import ActionError, BuildError, CycleError
from rakelet.graph import BuildGraph
from rakelet.rules import synthesize
from rakelet.staleness import TaskStatus, check_status
from rakelet.task import Action, Task

DEFAULT_TASK = "default"


@dataclass
class RunResult:
    """Outcome of running one or more requested tasks.

    The first fatal error stops the run; tasks executed before it are not
    undone.
    """

    executed: list[str] = field(default_factory=list)
    statuses: dict[str, TaskStatus] = field(default_factory=dict)
    error: Optional[BuildError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Invoker:
    """Walks a build graph depth-first, executing stale tasks once each.

    Invocation state belongs to the invoker: a task is "in progress" from the
    moment it is entered until all its prerequisites are done, and "done"
    afterwards. Entering an in-progress task means the graph has a cycle.
    """

    def __init__(self, graph: BuildGraph, dry_run: bool = False):
        """Initialize invoker.

        Args:
            graph: Build graph to resolve tasks from
            dry_run: If True, evaluate staleness but suppress all actions
        """
        self.graph = graph
        self.dry_run = dry_run
        self.result = RunResult()
        self._done: set[str] = set()
        self._in_progress: list[str] = []

    @property
    def logger(self):
        return self.graph.logger

    def is_invoked(self, name: str) -> bool:
        return name in self._done

    def run(self, names: Iterable[str] = ()) -> RunResult:
        """Invoke each requested task in order.

        Args:
            names: Task names as given by the user; "default" if empty

        Returns:
            RunResult holding the executed tasks and the first error, if any
        """
        names = list(names) or [DEFAULT_TASK]
        try:
            for name in names:
                self.invoke(name)
        except BuildError as e:
            self.result.error = e
        return self.result

    def invoke(self, task: Union[str, Task]) -> None:
        """Invoke a task: its prerequisites first, then itself if needed.

        Raises:
            CycleError: If the task is reached again while its own
                prerequisites are being invoked
            BuildError: Any resolution, staleness or action failure
        """
        if isinstance(task, str):
            task = self.graph.resolve(task)

        if task.name in self._done:
            self.logger.trace(f"[dim]** Invoke {task.name} (already invoked)[/dim]")
            return

        if task.name in self._in_progress:
            start = self._in_progress.index(task.name)
            raise CycleError(self._in_progress[start:] + [task.name])

        self._in_progress.append(task.name)
        try:
            for prerequisite in list(task.prerequisites):
                self.invoke(prerequisite)
        finally:
            self._in_progress.pop()
        self._done.add(task.name)

        status = check_status(task, self.graph)
        self.result.statuses[task.name] = status
        self.logger.trace(
            f"[dim]** Invoke {task.name} (needed: {status.will_run}, {status.reason})[/dim]"
        )
        if status.will_run:
            self.execute(task)

    def execute(self, task: Task) -> None:
        """Run a task's actions in declaration order.

        A task declared without actions gets one more chance to pick them up
        from a rule. In dry-run mode nothing is run.

        Raises:
            ActionError: If any action raises
        """
        if not task.actions:
            known = set(task.prerequisites)
            if synthesize(self.graph, task.name) is not None:
                for prerequisite in task.prerequisites:
                    if prerequisite not in known:
                        self.invoke(prerequisite)

        if self.dry_run:
            self.logger.info(f"[yellow]** Execute (dry run) {task.name}[/yellow]")
            self.result.executed.append(task.name)
            return

        self.logger.trace(f"[dim]** Execute {task.name}[/dim]")
        for action in task.actions:
            _call_action(action, task)
        self.result.executed.append(task.name)


def _call_action(action: Action, task: Task) -> None:
    """Call an action, passing the task if the action accepts an argument.

    Raises:
        ActionError: Wrapping whatever the action raised
    """
    try:
        if _accepts_argument(action):
            action(task)
        else:
            action()
    except ActionError:
        raise
    except Exception as e:
        raise ActionError(task.name, str(e) or type(e).__name__) from e


def _accepts_argument(action: Action) -> bool:
    try:
        parameters = inspect.signature(action).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(
        p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.VAR_POSITIONAL)
        for p in parameters
    )
