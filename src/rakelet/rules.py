"""Rule-based synthesis of file tasks from filename patterns."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Optional

from rakelet.errors import BuildError, MalformedRuleError
from rakelet.task import Rule, Task, TaskKind

if TYPE_CHECKING:
    from rakelet.graph import BuildGraph


def derive_source(rule: Rule, task_name: str) -> str:
    """Derive the candidate source path for a task name from a rule.

    A string source replaces the final extension of the task name
    ("report.txt" with ".txt.in" gives "report.txt.in"). The extension is
    taken with os.path.splitext rather than from the last dot anywhere in the
    name, so "build.d/bin" has no extension; a name without an extension gets
    the string appended ("build.d/bin" with ".c" gives "build.d/bin.c").
    A callable source is called with the task name.

    Raises:
        MalformedRuleError: If the rule's source is neither a string nor
            callable, or the source function raised
    """
    if isinstance(rule.source, str):
        root, _ = os.path.splitext(task_name)
        return root + rule.source
    if callable(rule.source):
        try:
            return str(rule.source(task_name))
        except BuildError:
            raise
        except Exception as e:
            raise MalformedRuleError(
                rule.source, f"Rule source for '{task_name}' failed: {type(e).__name__}: {e}"
            ) from e
    raise MalformedRuleError(rule.source)


def _matches(rule: Rule, task_name: str) -> bool:
    """Apply a rule's pattern, reporting a failing predicate as a rule error."""
    try:
        return rule.matches(task_name)
    except Exception as e:
        raise MalformedRuleError(
            rule.source, f"Rule pattern failed on '{task_name}': {type(e).__name__}: {e}"
        ) from e


def synthesize(graph: "BuildGraph", task_name: str) -> Optional[Task]:
    """Synthesize a file task for task_name from the first applicable rule.

    Rules are scanned in registration order. The first rule whose pattern
    matches and whose derived source exists on disk wins; later rules are
    never consulted. The synthesized task (or an existing task of the same
    name) gets the source as a prerequisite and the rule's actions.

    Returns:
        The synthesized task, or None if no rule applies
    """
    for rule in graph.rules:
        if not _matches(rule, task_name):
            continue

        source = derive_source(rule, task_name)
        if not graph.probe.exists(source):
            graph.logger.debug(
                f"Rule for '{task_name}' skipped: source '{source}' not found"
            )
            continue

        task = graph.lookup_or_create(task_name, TaskKind.FILE)
        task.enhance(source)
        for action in rule.actions:
            task.enhance(action=action)
        task.source = source
        graph.logger.debug(f"Synthesized '{task_name}' from '{source}'")
        return task

    return None
