"""Process execution abstraction layer.

This module provides an interface for running subprocesses, allowing for
better testability and dependency injection, plus the shell helper that build
file actions use to run commands.
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from rakelet.logging import Logger

__all__ = [
    "CommandOutput",
    "ProcessRunner",
    "PassthroughProcessRunner",
    "SilentProcessRunner",
    "Shell",
    "make_process_runner",
]


class CommandOutput(Enum):
    """Command output control modes."""

    ALL = "all"
    NONE = "none"


class ProcessRunner(ABC):
    """Abstract interface for running subprocess commands."""

    @abstractmethod
    def run(self, *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[Any]:
        """
        Run a subprocess command.

        This method signature matches subprocess.run() to allow for direct
        substitution in existing code.

        Raises:
        subprocess.CalledProcessError: If check=True and process exits non-zero
        """
        ...


class PassthroughProcessRunner(ProcessRunner):
    """Process runner that directly delegates to subprocess.run."""

    def run(self, *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[Any]:
        return subprocess.run(*args, **kwargs)


class SilentProcessRunner(ProcessRunner):
    """Process runner that suppresses all subprocess output by redirecting to DEVNULL."""

    def run(self, *args: Any, **kwargs: Any) -> subprocess.CompletedProcess[Any]:
        kwargs["stdout"] = subprocess.DEVNULL
        kwargs["stderr"] = subprocess.DEVNULL
        return subprocess.run(*args, **kwargs)


def make_process_runner(output: CommandOutput) -> ProcessRunner:
    """
    Factory function for creating ProcessRunner instances.

    Raises:
    ValueError: If an invalid CommandOutput value is provided
    """
    match output:
        case CommandOutput.ALL:
            return PassthroughProcessRunner()
        case CommandOutput.NONE:
            return SilentProcessRunner()
        case _:
            raise ValueError(f"Invalid CommandOutput: {output}")


class Shell:
    """The `sh` helper exposed to build files.

    Runs a command through a ProcessRunner and fails on a nonzero exit code.
    A string command goes through the system shell; a sequence is run directly.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        logger: Logger,
        cwd: Optional[Path] = None,
        echo: bool = True,
    ):
        self.runner = runner
        self.logger = logger
        self.cwd = cwd
        self.echo = echo

    def __call__(self, command: Union[str, Sequence[str]]) -> None:
        """Run a command.

        Raises:
            subprocess.CalledProcessError: If the command exits non-zero
        """
        is_string = isinstance(command, str)
        display = command if is_string else " ".join(command)
        if self.echo:
            self.logger.command(display)

        self.runner.run(
            command if is_string else list(command),
            shell=is_string,
            cwd=self.cwd,
            check=True,
        )
