"""rakelet - a minimal incremental build tool."""

__version__ = "0.1.0"

from rakelet.buildfile import LoadResult, find_buildfile, load_buildfile
from rakelet.errors import (
    ActionError,
    BuildError,
    BuildFileError,
    CycleError,
    ErrorKind,
    MalformedDeclarationError,
    MalformedRuleError,
    FileProbeError,
    MissingTimestampError,
    TaskNotFoundError,
)
from rakelet.graph import BuildGraph
from rakelet.invoker import Invoker, RunResult
from rakelet.staleness import TaskStatus, check_status, needed, timestamp
from rakelet.task import Rule, Task, TaskKind

__all__ = [
    "__version__",
    "ActionError",
    "BuildError",
    "BuildFileError",
    "BuildGraph",
    "CycleError",
    "ErrorKind",
    "FileProbeError",
    "Invoker",
    "LoadResult",
    "MalformedDeclarationError",
    "MalformedRuleError",
    "MissingTimestampError",
    "Rule",
    "RunResult",
    "Task",
    "TaskKind",
    "TaskNotFoundError",
    "TaskStatus",
    "check_status",
    "find_buildfile",
    "load_buildfile",
    "needed",
    "timestamp",
]
