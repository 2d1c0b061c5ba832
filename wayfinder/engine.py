"""
Dispatch engine: resolve → parse → validate → after_parse → global flags → execute.

- Engine(logger, helper): runs one invocation per start()/astart() call and
  returns an Outcome; faults are values, never raised by the engine itself.
- Outcome: (value, fault) pair with an ok shortcut.
- invoke(): embedding convenience; reports a fault through rich and exits with
  status 1, otherwise returns the handler's value.

Every call builds its own Context; the declaration tree is only read.
"""
import asyncio
import inspect
import shlex
import sys
from collections.abc import Iterable
from typing import Any, NamedTuple

from .arguments import Boolean
from .commands import Context
from .faults import CommandException, HandlerError, trigger
from .helper import DefaultHelper
from .logger import ConsoleLogger
from .parser import parse
from .resolver import resolve
from .utils import Unset
from .validator import validate

DEFAULT_VERSION = "1.0.0"


class Outcome(NamedTuple):
    """
    Result of one invocation.

    - value: what the handler returned (None for help/version short-circuits).
    - fault: the CommandException that ended the invocation, or None.
    """
    value: Any = None
    fault: CommandException | None = None

    @property
    def ok(self):
        return self.fault is None


def _tokens(prompt):
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("start() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("start() argument must be a string or an iterable of strings")


def _flag(root, context, name):
    # Built-in flags only exist when the root declares them as Boolean options.
    for option in root.options:
        if option.name == name and isinstance(option, Boolean):
            return context.values.get(option) is True
    return False


async def _settle(awaitable):
    return await awaitable


class Engine:
    """
    Command dispatcher.

    Parameters
    - logger: Logger, receives help/version text (info) and debug traces.
      Defaults to ConsoleLogger().
    - helper: HelpFormatter, renders help text. Defaults to DefaultHelper().

    Hooks
    - an exception raised by after_parse (or by the awaitable it returns) is
      reported through logger.error; the invocation carries on.

    Usage
        engine = Engine()
        outcome = engine.start(tool, "deploy --env prod")
        if not outcome.ok:
            print(outcome.fault)
    """

    def __init__(self, logger=Unset, helper=Unset):
        self.logger = ConsoleLogger() if logger is Unset else logger
        self.helper = DefaultHelper() if helper is Unset else helper

    def _prepare(self, root, prompt):
        """
        Run every phase up to (not including) the handler.

        Returns (context, pending):
        - pending is an Outcome when parsing or validation failed,
        - an awaitable when after_parse returned one (the caller awaits it),
        - None otherwise.
        An exception raised by after_parse is logged and does not end the
        invocation.
        """
        tokens = _tokens(prompt)
        self.logger.debug("user argument list: %r" % (tokens,))

        command, remaining = resolve(root, tokens)
        self.logger.debug("matched command: %s (remaining: %r)" % (command.full_name, remaining))

        context = Context(command)
        if fault := parse(context, root, remaining, logger=self.logger):
            return context, Outcome(fault=fault)
        if fault := validate(command, context):
            return context, Outcome(fault=fault)

        self.logger.debug("parsed context: %r" % (context.snapshot(),))

        if command.after_parse is not None:
            try:
                result = command.after_parse(context)
            except Exception as error:
                self._hook_failed(context, error)
            else:
                if inspect.isawaitable(result):
                    return context, result

        return context, None

    def _hook_failed(self, context, error):
        # after_parse is a side effect on the context; it never fails the pipeline.
        self.logger.error("after_parse hook failed for %s: %s" % (
            context.command.full_name, str(error) or type(error).__name__,
        ))

    def _short_circuit(self, root, context):
        command = context.command
        if _flag(root, context, "version"):
            self.logger.info(root.version or DEFAULT_VERSION)
            return Outcome()
        if _flag(root, context, "help"):
            self.logger.info(self.helper.format_help(command, None if command.is_root else root))
            return Outcome()
        if command.execute is None:
            self.logger.info(self.helper.format_help(command, None if command.is_root else root))
            return Outcome()
        return None

    def _settled(self, context, result=Unset, error=None):
        # Single place where handler results become outcomes.
        command = context.command
        if error is not None:
            if isinstance(error, CommandException):
                return Outcome(fault=error)
            return Outcome(fault=HandlerError(command.full_name, error))
        if isinstance(result, CommandException):
            return Outcome(fault=result)
        if isinstance(result, BaseException):
            return Outcome(fault=HandlerError(command.full_name, result))
        return Outcome(value=result)

    def start(self, root, prompt=Unset, /):
        """
        Run one invocation synchronously.

        Parameters
        - root: Command, the root of the declaration tree.
        - prompt: Unset (sys.argv[1:]) | str (split with shlex) | Iterable[str].

        Returns
        - Outcome. Awaitables returned by hooks or handlers are driven to
          completion with asyncio.run(); use astart() inside a running loop.
        """
        context, pending = self._prepare(root, prompt)
        if isinstance(pending, Outcome):
            return pending
        if pending is not None:
            try:
                asyncio.run(_settle(pending))
            except Exception as error:
                self._hook_failed(context, error)

        if outcome := self._short_circuit(root, context):
            return outcome

        try:
            result = context.command.execute(context)
            if inspect.isawaitable(result):
                result = asyncio.run(_settle(result))
        except Exception as error:
            return self._settled(context, error=error)
        return self._settled(context, result)

    async def astart(self, root, prompt=Unset, /):
        """
        Coroutine twin of start(): hooks and handlers returning awaitables are
        awaited on the running loop.
        """
        context, pending = self._prepare(root, prompt)
        if isinstance(pending, Outcome):
            return pending
        if pending is not None:
            try:
                await pending
            except Exception as error:
                self._hook_failed(context, error)

        if outcome := self._short_circuit(root, context):
            return outcome

        try:
            result = context.command.execute(context)
            if inspect.isawaitable(result):
                result = await result
        except Exception as error:
            return self._settled(context, error=error)
        return self._settled(context, result)

    def telemetry_enabled(self, context=None, /):
        """
        Whether the embedding application may send telemetry for context.

        False only when a root Boolean option named "telemetry" was explicitly
        set to false (e.g. "--telemetry false"); True otherwise, including when
        no context is given.
        """
        if context is None:
            return True
        for option in context.command.root.options:
            if option.name == "telemetry" and isinstance(option, Boolean):
                return context.values.get(option) is not False
        return True


def invoke(root, prompt=Unset, /, *, fancy=False, colorful=True, logger=Unset, helper=Unset):
    """
    Run root with prompt and surface any fault in shell mode.

    Behavior
    - On success, return the handler's value.
    - On fault, print it to stderr through rich (optionally in a panel) and exit
      the process with status 1.
    """
    outcome = Engine(logger, helper).start(root, prompt)
    if outcome.fault is not None:
        trigger(outcome.fault, shell=True, fancy=fancy, colorful=colorful)
    return outcome.value


__all__ = (
    "Engine",
    "Outcome",
    "invoke",
    "DEFAULT_VERSION",
)
