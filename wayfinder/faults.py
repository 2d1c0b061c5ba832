"""
Wayfinder faults (the closed error taxonomy) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure kind the
  dispatch pipeline can produce. Codes are grouped by phase to keep copy
  consistent and make logs/searches predictable.
- CommandException: base type that carries message + options and knows how to
  render itself through rich in a short, actionable way.
- trigger(): entry point for embedding code that wants a fault surfaced
  (raised, or printed and exited in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Discipline
- The pipeline phases (parse, validate, execute) return faults as values; they
  never raise them. Presentation is left to the embedding CLI, which can
  print a fault with rich (faults implement __rich__) or call trigger().
- First fault wins; there is no aggregation.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by pipeline phase)
    - parsing (2110x)
      • UNKNOWN_OPTION, UNKNOWN_ARGUMENT, UNKNOWN_COMMAND
    - validation (2120x)
      • MISSING_REQUIRED_OPTION, MISSING_REQUIRED_ARGUMENT, INVALID_CHOICE
    - execution (2130x)
      • HANDLER_ERROR

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- parsing errors (211xx) ---
    UNKNOWN_OPTION              = 21101
    UNKNOWN_ARGUMENT            = 21102
    UNKNOWN_COMMAND             = 21103

    # --- validation errors (212xx) ---
    MISSING_REQUIRED_OPTION     = 21201
    MISSING_REQUIRED_ARGUMENT   = 21202
    INVALID_CHOICE              = 21203

    # --- execution errors (213xx) ---
    HANDLER_ERROR               = 21301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    Base of every fault the engine reports.

    - message: one-sentence, user-facing description.
    - options: read-only mapping with the context of the fault (command,
      input, code, title, hint, and kind-specific entries).
    """
    code = Unset
    title = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "code": type(self).code,
            "title": type(self).title,
        } | options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __getattr__(self, name):
        # Expose fault context (command, input, suggestion, ...) as attributes.
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment if colorful else Text(fragment.plain)
            return Text(str(fragment), style)

        prog = getattr(main, "__prog__", str(self.options.get("command", "")).split(" ")[0])

        code = self.options["code"]

        header = Text.assemble(
            "[ ",
            text(prog, styler("prog-name")),
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else code, styler("code")),
            " | ",
            text(str(coalesce(self.options["title"], "error")).title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        # Kinds take positional context; rebuild through the base initializer.
        replaced = CommandException.__new__(type(self))
        CommandException.__init__(replaced, self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class UnknownOptionError(CommandException):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"

    def __init__(self, command, input, /, **options):
        super().__init__(
            "unknown option: %s for command: %s" % (input, command),
            command=command,
            input=input,
            **{"hint": "run '%s --help' to see all available options" % command} | options
        )


class UnknownArgumentError(CommandException):
    code = FaultCode.UNKNOWN_ARGUMENT
    title = "unknown argument"

    def __init__(self, command, input, /, **options):
        super().__init__(
            "unknown argument: %s for command: %s" % (input, command),
            command=command,
            input=input,
            **{"hint": "remove this extra value or run '%s --help' to see the expected usage" % command} | options
        )


class UnknownCommandError(CommandException):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"

    def __init__(self, command, input, /, suggestion=None, **options):
        message = "'%s' is misspelled or not recognized by %s." % (input, command)
        if suggestion:
            message += " Did you mean '%s %s'?" % (command, suggestion)
        message += " Use '%s -h' for more command information." % command
        super().__init__(
            message,
            command=command,
            input=input,
            suggestion=suggestion,
            **{"hint": "did you mean %r?" % suggestion if suggestion else "run '%s --help' to see available commands" % command} | options
        )


class MissingRequiredOptionError(CommandException):
    code = FaultCode.MISSING_REQUIRED_OPTION
    title = "missing required option"

    def __init__(self, command, name, /, **options):
        super().__init__(
            "command %s missing required option: %s" % (command, name),
            command=command,
            name=name,
            **{"hint": "add --%s or run '%s --help' to see the expected usage" % (name, command)} | options
        )


class MissingRequiredArgumentError(CommandException):
    code = FaultCode.MISSING_REQUIRED_ARGUMENT
    title = "missing required argument"

    def __init__(self, command, name, /, **options):
        super().__init__(
            "command %s missing required argument: %s" % (command, name),
            command=command,
            name=name,
            **{"hint": "run '%s --help' to see the expected order of arguments" % command} | options
        )


class InvalidChoiceError(CommandException):
    code = FaultCode.INVALID_CHOICE
    title = "invalid choice"

    def __init__(self, command, name, value, choices, /, **options):
        super().__init__(
            "command %s has invalid choice '%s' for option/argument '%s', allowed values: %s" % (
                command, value, name, ", ".join(map(str, choices))
            ),
            command=command,
            name=name,
            value=value,
            choices=tuple(choices),
            **{"hint": "pick one of: %s" % ", ".join(map(str, choices))} | options
        )


class HandlerError(CommandException):
    """
    Wraps any exception a command handler raised (or returned) so callers get
    a single failure type. The original exception is kept as __cause__ and in
    options["error"].
    """
    code = FaultCode.HANDLER_ERROR
    title = "command failed"

    def __init__(self, command, error, /, **options):
        super().__init__(
            "command %s failed: %s" % (command, str(error) or type(error).__name__),
            command=command,
            error=error,
            **{"hint": "see the error above; run '%s --help' to check the usage" % command} | options
        )
        self.__cause__ = error


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into a copy of the fault before triggering.
    - shell=False (default): the fault is raised.
    - shell=True: the fault is printed to stderr through rich and the process exits
      with status 1.

    typical options
    - shell, fancy, colorful, hint, and any other context the reporter may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    (fault.__replace__(**options) if options else fault).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "UnknownOptionError",
    "UnknownArgumentError",
    "UnknownCommandError",
    "MissingRequiredOptionError",
    "MissingRequiredArgumentError",
    "InvalidChoiceError",
    "HandlerError",
    "FaultCode",
    "trigger",
    "getdoc",
)
