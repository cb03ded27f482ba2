"""Task and rule data model."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Union

Action = Callable[..., Any]
Pattern = Union[str, re.Pattern, Callable[[str], bool]]
SourceSpec = Union[str, Callable[[str], str]]


class TaskKind(enum.Enum):
    """Staleness policy of a task.

    PLAIN tasks always run; FILE tasks are named after a path and run only
    when the file is missing or older than one of its prerequisites.
    DIRECTORY tasks run only when the directory is missing.
    """

    PLAIN = "plain"
    FILE = "file"
    DIRECTORY = "directory"


def normalize_names(names: Union[str, Iterable[str], None]) -> list[str]:
    """Normalize one name or a sequence of names to an ordered, de-duplicated list.

    Examples:
        "a" -> ["a"]
        ["a", "b", "a"] -> ["a", "b"]
        None -> []
    """
    if names is None:
        return []
    if isinstance(names, str):
        names = [names]

    result: list[str] = []
    for name in names:
        name = str(name)
        if name not in result:
            result.append(name)
    return result


@dataclass
class Task:
    """A named unit of work with prerequisites and actions."""

    name: str
    kind: TaskKind = TaskKind.PLAIN
    prerequisites: list[str] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    source: Optional[str] = None  # Rule source that synthesized this task
    description: str = ""

    @property
    def is_file(self) -> bool:
        """Whether the task name is a filesystem path."""
        return self.kind is not TaskKind.PLAIN

    def enhance(
        self,
        prerequisites: Union[str, Iterable[str], None] = None,
        action: Optional[Action] = None,
    ) -> "Task":
        """Merge in more prerequisites and/or append an action.

        Prerequisites are union-merged keeping declaration order; the action is
        appended after any existing ones.

        Returns:
            The task itself, for chaining
        """
        for name in normalize_names(prerequisites):
            if name not in self.prerequisites:
                self.prerequisites.append(name)
        if action is not None:
            self.actions.append(action)
        return self


@dataclass(frozen=True)
class Rule:
    """A pattern-based template for synthesizing file tasks.

    Attributes:
        pattern: Suffix string, compiled regex or predicate over task names
        source: Replacement extension, or a function mapping task name to
            the candidate source path
        actions: Actions attached to every task synthesized from this rule
    """

    pattern: Pattern
    source: SourceSpec
    actions: tuple[Action, ...] = ()

    def matches(self, task_name: str) -> bool:
        if isinstance(self.pattern, str):
            return task_name.endswith(self.pattern)
        if isinstance(self.pattern, re.Pattern):
            return self.pattern.search(task_name) is not None
        return bool(self.pattern(task_name))
