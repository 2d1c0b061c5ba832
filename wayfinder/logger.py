"""
Logging sinks consumed by the engine.

- Logger: the protocol the engine talks to (info/warning/error/debug, one line
  each, return values ignored). Any logging.Logger satisfies it.
- ConsoleLogger: default sink printing through rich consoles; info goes to
  stdout (help and version text land there), everything else to stderr.
  warn is an alias of warning.
"""
from collections import defaultdict
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text


@runtime_checkable
class Logger(Protocol):
    def info(self, message, /): ...
    def warning(self, message, /): ...
    def error(self, message, /): ...
    def debug(self, message, /): ...


class ConsoleLogger:
    """
    Logger printing through rich.

    Parameters
    - debug: bool
      Print debug lines (dimmed, to stderr). Off by default.
    - colorful: bool
      Style warnings/errors/debug lines. Palette entries can be overridden with
      a __styles__ mapping in __main__ ("log-debug", "log-warning", "log-error").
    - stdout / stderr: Console
      Injected consoles (tests pass recording consoles).
    """

    def __init__(self, debug=False, colorful=True, *, stdout=None, stderr=None):
        self.debug_enabled = bool(debug)
        self.colorful = bool(colorful)
        self.stdout = Console(highlight=False) if stdout is None else stdout
        self.stderr = Console(stderr=True, highlight=False) if stderr is None else stderr

    def _style(self, style):
        styles = defaultdict(str, {
            "log-debug": "dim",
            "log-warning": "bold #FFB400",
            "log-error": "bold #FF4D4D",
        } | getattr(__import__("__main__"), "__styles__", {}))
        return styles[style] if self.colorful else ""

    def info(self, message, /):
        # Text keeps rich from interpreting markup inside help text.
        self.stdout.print(Text(str(message)))

    def warning(self, message, /):
        self.stderr.print(Text(str(message), self._style("log-warning")))

    warn = warning

    def error(self, message, /):
        self.stderr.print(Text(str(message), self._style("log-error")))

    def debug(self, message, /):
        if not self.debug_enabled:
            return
        self.stderr.print(Text(str(message), self._style("log-debug")))


__all__ = (
    "Logger",
    "ConsoleLogger",
)
