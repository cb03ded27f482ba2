"""Error taxonomy for the build engine.

Every error raised by the core derives from BuildError and carries an
ErrorKind tag, so the driver can report and translate failures without
matching on exception classes.
"""

from __future__ import annotations

import enum
from typing import Sequence


class ErrorKind(enum.Enum):
    """Category of a fatal build condition."""

    UNKNOWN_TASK = "unknown_task"
    MALFORMED_DECLARATION = "malformed_declaration"
    ACTION_FAILED = "action_failed"
    MISSING_TIMESTAMP = "missing_timestamp"
    FILESYSTEM = "filesystem"
    DEPENDENCY_CYCLE = "dependency_cycle"
    BUILD_FILE = "build_file"


class BuildError(Exception):
    """Base class for all fatal build conditions."""

    kind: ErrorKind = ErrorKind.ACTION_FAILED


class TaskNotFoundError(BuildError):
    """Raised when a task name resolves to no task, rule or file."""

    kind = ErrorKind.UNKNOWN_TASK

    def __init__(self, task_name: str):
        super().__init__(f"Don't know how to build task '{task_name}'")
        self.task_name = task_name


class MalformedDeclarationError(BuildError):
    """Raised when a task or rule declaration is structurally invalid."""

    kind = ErrorKind.MALFORMED_DECLARATION


class MalformedRuleError(MalformedDeclarationError):
    """Raised when a rule can't be applied: its source specifier is neither a
    string nor a callable, or its pattern predicate or source function raised.
    """

    def __init__(self, source: object, message: str | None = None):
        super().__init__(message or f"Don't know how to handle rule dependent: {source!r}")
        self.source = source


class ActionError(BuildError):
    """Raised when a task action fails."""

    kind = ErrorKind.ACTION_FAILED

    def __init__(self, task_name: str, message: str):
        super().__init__(f"Task '{task_name}' failed: {message}")
        self.task_name = task_name


class MissingTimestampError(BuildError):
    """Raised when the modification time of a missing file is requested."""

    kind = ErrorKind.MISSING_TIMESTAMP

    def __init__(self, path: str):
        super().__init__(f"File not found: {path}")
        self.path = path


class FileProbeError(BuildError):
    """Raised when a file's existence or mtime can't be read."""

    kind = ErrorKind.FILESYSTEM

    def __init__(self, path: str, reason: OSError):
        super().__init__(f"Can't read '{path}': {reason}")
        self.path = path


class CycleError(BuildError):
    """Raised when a dependency cycle is detected during invocation."""

    kind = ErrorKind.DEPENDENCY_CYCLE

    def __init__(self, cycle: Sequence[str]):
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = list(cycle)


class BuildFileError(BuildError):
    """Raised when a build file cannot be found or fails while loading."""

    kind = ErrorKind.BUILD_FILE
