"""The build graph: an explicit registry of tasks and rules."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from rakelet.errors import MalformedDeclarationError, TaskNotFoundError
from rakelet.logging import Logger
from rakelet.rules import synthesize
from rakelet.staleness import FileProbe
from rakelet.task import Action, Pattern, Rule, SourceSpec, Task, TaskKind, normalize_names

Prerequisites = Union[str, Iterable[str], None]


class BuildGraph:
    """Owns every task and rule declared by one build file.

    Declarations happen while the build file loads; afterwards the graph is
    only read (and extended by rule synthesis) while tasks are invoked.
    """

    def __init__(self, logger: Logger, base_dir: Optional[Path] = None):
        """Initialize an empty graph.

        Args:
            logger: Logger for diagnostic output
            base_dir: Directory that relative file task names are resolved
                against (defaults to the current directory)
        """
        self.logger = logger
        self.probe = FileProbe(base_dir)
        self.tasks: dict[str, Task] = {}
        self.rules: list[Rule] = []
        self._pending_description = ""

    def clear(self) -> None:
        """Drop all tasks and rules."""
        self.tasks.clear()
        self.rules.clear()
        self._pending_description = ""

    def get_task(self, name: str) -> Task | None:
        return self.tasks.get(name)

    def task_names(self) -> list[str]:
        return list(self.tasks.keys())

    def lookup_or_create(self, name: str, kind: TaskKind = TaskKind.PLAIN) -> Task:
        """Get the task called name, registering a bare one if absent.

        Never attempts rule synthesis. An existing task keeps its kind.
        """
        task = self.tasks.get(name)
        if task is None:
            task = Task(name=name, kind=kind)
            self.tasks[name] = task
        return task

    def resolve(self, name: str) -> Task:
        """Resolve a task name to a task.

        Resolution order:
        1. A task already in the graph
        2. A task synthesized from the first applicable rule
        3. A bare file task, if a file of that name exists
        4. Failure

        Raises:
            TaskNotFoundError: If nothing resolves the name
            MalformedRuleError: If a matching rule has an unusable source
        """
        task = self.tasks.get(name)
        if task is not None:
            return task

        task = synthesize(self, name)
        if task is not None:
            return task

        if self.probe.exists(name):
            return self.lookup_or_create(name, TaskKind.FILE)

        raise TaskNotFoundError(name)

    def describe(self, description: str) -> None:
        """Set the description of the next declared task."""
        self._pending_description = description

    def define_task(
        self,
        descriptor: Union[str, Mapping[str, Prerequisites]],
        prerequisites: Prerequisites = None,
        action: Optional[Action] = None,
        kind: TaskKind = TaskKind.PLAIN,
    ) -> Task:
        """Declare a task, or enhance an existing one with the same name.

        Args:
            descriptor: Task name, or a one-entry mapping of task name to
                prerequisites (e.g. {"app": ["main.o", "util.o"]})
            prerequisites: One prerequisite name or a sequence of them
            action: Callable run when the task is executed; takes no
                arguments or the task itself
            kind: Staleness policy for a newly created task

        Returns:
            The declared task

        Raises:
            MalformedDeclarationError: If the descriptor names zero tasks or
                more than one task
        """
        name, declared = _split_descriptor(descriptor, "task")
        if not isinstance(name, str) or not name:
            raise MalformedDeclarationError(f"Invalid task name: {name!r}")

        task = self.lookup_or_create(name, kind)
        task.enhance(normalize_names(declared) + normalize_names(prerequisites), action)

        if self._pending_description:
            task.description = self._pending_description
            self._pending_description = ""
        return task

    def define_file(
        self,
        descriptor: Union[str, Mapping[str, Prerequisites]],
        prerequisites: Prerequisites = None,
        action: Optional[Action] = None,
    ) -> Task:
        """Declare a file task. See define_task."""
        return self.define_task(descriptor, prerequisites, action, TaskKind.FILE)

    def define_directory(self, path: str) -> Task:
        """Declare directory tasks for path and each of its parents.

        Each directory task creates its directory when missing and depends on
        its parent's task.

        Returns:
            The task for the leaf directory
        """
        parts = Path(path).parts
        if not parts:
            raise MalformedDeclarationError(f"Invalid directory name: {path!r}")

        description, self._pending_description = self._pending_description, ""
        task = None
        parent = None
        for depth in range(1, len(parts) + 1):
            name = str(Path(*parts[:depth]))
            task = self.define_task(name, parent, kind=TaskKind.DIRECTORY)
            if not task.actions:
                task.enhance(action=self._make_directory_action(name))
            parent = name

        if description:
            task.description = description
        return task

    def _make_directory_action(self, name: str) -> Action:
        target = self.probe.path(name)

        def make_directory() -> None:
            self.logger.command(f"mkdir -p {name}")
            os.makedirs(target, exist_ok=True)

        return make_directory

    def create_rule(
        self,
        descriptor: Union[Pattern, Mapping[Pattern, Any]],
        source: Optional[SourceSpec] = None,
        action: Optional[Action] = None,
    ) -> Rule:
        """Register a rule for synthesizing file tasks.

        Args:
            descriptor: Pattern, or a one-entry mapping of pattern to source
                (e.g. {".o": ".c"}). A string pattern matches task names
                ending with it.
            source: Replacement extension or function deriving the source path
            action: Action attached to synthesized tasks

        Returns:
            The registered rule

        Raises:
            MalformedDeclarationError: If the rule names more than one pattern,
                zero or several sources, or a pattern of an unknown kind
        """
        if isinstance(descriptor, Mapping):
            pattern, declared = _split_descriptor(descriptor, "rule")
            declared = _single_source(pattern, declared)
        else:
            pattern, declared = descriptor, None
        source = _single_source(pattern, source)

        if declared is not None and source is not None:
            raise MalformedDeclarationError(
                f"Rule for {pattern!r} may only have one source"
            )
        source = declared if declared is not None else source

        if source is None:
            raise MalformedDeclarationError(f"Rule for {pattern!r} has no source")
        if not isinstance(pattern, (str, re.Pattern)) and not callable(pattern):
            raise MalformedDeclarationError(f"Invalid rule pattern: {pattern!r}")

        rule = Rule(pattern, source, (action,) if action is not None else ())
        self.rules.append(rule)
        return rule


def _single_source(pattern: Any, source: Any) -> Any:
    """Unwrap a one-element source list; None for an empty one.

    Raises:
        MalformedDeclarationError: If more than one source is given
    """
    if not isinstance(source, (list, tuple)):
        return source
    if len(source) > 1:
        raise MalformedDeclarationError(
            f"Rule for {pattern!r} may only have one source, got {list(source)!r}"
        )
    return source[0] if source else None


def _split_descriptor(descriptor: Any, what: str) -> tuple[Any, Any]:
    """Split a declaration descriptor into (name, dependencies).

    Raises:
        MalformedDeclarationError: If a mapping descriptor has zero or several entries
    """
    if not isinstance(descriptor, Mapping):
        return descriptor, None
    if len(descriptor) != 1:
        raise MalformedDeclarationError(
            f"A {what} declaration must name exactly one {what}, got {len(descriptor)}"
        )
    return next(iter(descriptor.items()))
