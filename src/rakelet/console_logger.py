from rich.console import Console

from rakelet.logging import Logger, LogLevel


class ConsoleLogger(Logger):
    """Writes build diagnostics to a Rich console.

    Messages more verbose than the active level are dropped. The active level
    is the top of a stack, so --trace can raise it over the configured level
    without losing it. Echoed commands are printed as literal, unwrapped text.
    """

    def __init__(self, console: Console, level: LogLevel = LogLevel.INFO) -> None:
        self._console = console
        self._levels = [level]

    @property
    def level(self) -> LogLevel:
        return self._levels[-1]

    def enabled(self, level: LogLevel) -> bool:
        return level.value <= self.level.value

    def log(self, level: LogLevel = LogLevel.INFO, *args, **kwargs) -> None:
        if self.enabled(level):
            self._console.print(*args, **kwargs)

    def command(self, text: str) -> None:
        """Echo a command before it runs.

        Brackets in shell commands are not markup, and wrapping a long compiler
        line would break copy-pasting it back into a terminal.
        """
        if self.enabled(LogLevel.INFO):
            self._console.print(text, markup=False, highlight=False, soft_wrap=True)

    def push_level(self, level: LogLevel) -> None:
        self._levels.append(level)

    def pop_level(self) -> LogLevel:
        """Drop the most recently pushed level.

        Raises:
            RuntimeError: If only the configured level is left
        """
        if len(self._levels) == 1:
            raise RuntimeError("Cannot pop the base log level")
        return self._levels.pop()
