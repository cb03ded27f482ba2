"""Find and load build files.

A build file is a plain Python script. It is executed with the declaration
helpers below already in its globals, bound to the graph being built:

    desc("Build the report")
    file("report.txt", ["report.txt.in"], lambda t: sh(f"cp {t.prerequisites[0]} {t.name}"))
    rule({".o": ".c"}, action=lambda t: sh(f"cc -c {t.source} -o {t.name}"))
    directory("build/out")
    task({"default": ["report.txt"]})
"""

from __future__ import annotations

import runpy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from rakelet.errors import BuildError, BuildFileError
from rakelet.graph import BuildGraph
from rakelet.process_runner import Shell

BUILDFILE_NAMES = ("rakefile.py", "Rakefile.py")


@dataclass
class LoadResult:
    """Outcome of loading a build file into a graph."""

    graph: BuildGraph
    path: Optional[Path] = None
    error: Optional[BuildError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def find_buildfile(start_dir: Path | None = None, search_parents: bool = True) -> Path | None:
    """Find a build file in the start directory or, optionally, its parents.

    Args:
        start_dir: Directory to start searching from (defaults to cwd)
        search_parents: If False, only start_dir is checked

    Returns:
        Path to the build file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        for filename in BUILDFILE_NAMES:
            path = current / filename
            if path.is_file():
                return path

        parent = current.parent
        if not search_parents or parent == current:
            break
        current = parent

    return None


def make_namespace(graph: BuildGraph, shell: Shell) -> dict[str, Any]:
    """Build the globals a build file is executed with."""

    def task(descriptor, prerequisites=None, action=None):
        return graph.define_task(descriptor, prerequisites, action)

    def file(descriptor, prerequisites=None, action=None):
        return graph.define_file(descriptor, prerequisites, action)

    def rule(descriptor, source=None, action=None):
        return graph.create_rule(descriptor, source, action)

    return {
        "graph": graph,
        "task": task,
        "file": file,
        "rule": rule,
        "directory": graph.define_directory,
        "desc": graph.describe,
        "sh": shell,
    }


def load_buildfile(path: Path, graph: BuildGraph, shell: Shell) -> LoadResult:
    """Execute a build file, populating graph with its declarations.

    Returns:
        LoadResult carrying the first error raised while loading, if any
    """
    graph.logger.debug(f"Loading build file {path}")
    if not path.is_file():
        return LoadResult(graph, path, BuildFileError(f"Build file not found: {path}"))

    try:
        runpy.run_path(
            str(path),
            init_globals=make_namespace(graph, shell),
            run_name="__rakefile__",
        )
    except BuildError as e:
        return LoadResult(graph, path, e)
    except Exception as e:
        error = BuildFileError(f"Error loading {path}: {type(e).__name__}: {e}")
        error.__cause__ = e
        return LoadResult(graph, path, error)

    graph.logger.debug(f"Loaded {len(graph.tasks)} task(s) and {len(graph.rules)} rule(s)")
    return LoadResult(graph, path)
