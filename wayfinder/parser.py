"""
Token parsing against a resolved command.

The parser consumes the tokens left over by the resolver and fills a Context:
the per-invocation value map (spec → value) plus the user-facing mappings
option_values / global_option_values / argument_values.

Token grammar
- "--name" / "-name": flag token; "--" strips two characters, "-" strips one,
  and the rest is looked up among the names and short names in scope.
- "--name=value": split on the first "="; the value is pushed back as the very
  next token, so inline and spaced values go through the same path.
- anything else: the next positional argument, in declaration order.
- empty tokens are skipped.

Value consumption (by kind)
- Boolean: a following "true"/"false" (any casing) is consumed as the value;
  otherwise the option is True and the following token is left alone.
- String: the following token is the value unless it is a known flag.
- Array: like String, split on "," and appended to the values gathered so far.

Faults are returned, never raised; the first one ends parsing.
"""
from collections import deque

from .arguments import Boolean, String, Array
from .distance import suggest
from .faults import UnknownOptionError, UnknownArgumentError, UnknownCommandError
from .logger import ConsoleLogger
from .utils import Unset



def input_key(argument, /):
    """
    Key used for argument in the context mappings: question name, else name.
    """
    return argument.key


def _split(token):
    # "--key=value" -> ("key", "value"); "-k" -> ("k", None)
    trimmed = token[2:] if token.startswith("--") else token[1:]
    key, separator, value = trimmed.partition("=")
    return key, value if separator else None


def _lookup(scope):
    # Later entries win: command-local options shadow root options with the same key.
    table = {}
    for option in scope:
        table[option.name] = option
        if option.short is not Unset:
            table[option.short] = option
    return table


def _materialize(argument, value):
    return list(value) if isinstance(argument, Array) else value


def parse(context, root, tokens, /, logger=Unset):
    """
    Parse tokens for context.command, filling context in place.

    parameters
    - context: Context whose command is the FoundCommand returned by resolve().
    - root: the root Command (owner of the global options).
    - tokens: Iterable[str], the tokens the resolver did not consume.
    - logger: Logger for debug traces (defaults to a ConsoleLogger, whose debug
      output is off).

    returns
    - None on success.
    - UnknownOptionError: a flag names no option in scope.
    - UnknownCommandError: a positional token reached a command without
      positional arguments (carries a did-you-mean suggestion when one is close).
    - UnknownArgumentError: a positional token arrived after every declared
      positional was filled.
    """
    logger = ConsoleLogger() if logger is Unset else logger
    command = context.command
    node = command.node
    values = context.values
    lookup = _lookup(command.scope)
    tokens = deque(tokens)
    index = 0

    def bucket(option):
        # Root options parsed for a subcommand land in the global mapping.
        if option in root.options and not command.is_root:
            return context.global_option_values
        return context.option_values

    def known(token):
        return token.startswith("-") and _split(token)[0] in lookup

    while tokens:
        token = tokens.popleft()
        if not token:
            continue

        if token.startswith("-"):
            key, inline = _split(token)
            if (option := lookup.get(key)) is None:
                return UnknownOptionError(command.full_name, token)
            if inline is not None:
                tokens.appendleft(inline)

            following = tokens[0] if tokens else None
            if isinstance(option, Boolean):
                if following and following.lower() in ("true", "false"):
                    values[option] = tokens.popleft().lower() == "true"
                else:
                    values[option] = True
            elif isinstance(option, String):
                if following and not known(following):
                    values[option] = tokens.popleft()
            elif isinstance(option, Array):
                if following and not known(following):
                    values.setdefault(option, []).extend(tokens.popleft().split(","))
            else:
                raise RuntimeError("unexpected argument kind %r" % type(option).__name__)

            mapping = bucket(option)
            if option in values:
                mapping[option.key] = values[option]
            logger.debug("find option: %r" % {
                "token": token,
                "option": option.name,
                "value": values.get(option),
                "global": mapping is context.global_option_values,
            })
            continue

        if index < len(node.arguments):
            argument = node.arguments[index]
            values[argument] = argument.coerce(token)
            context.argument_values.append(values[argument])
            index += 1
        elif not node.arguments:
            return UnknownCommandError(command.full_name, token, suggest(token, node.children.keys()))
        else:
            return UnknownArgumentError(command.full_name, token)

    for option in command.scope:
        if option in values or option.default is Unset:
            continue
        values[option] = bucket(option)[option.key] = _materialize(option, option.default)
        logger.debug("set option with default value, %s=%r" % (option.name, values[option]))

    for position, argument in enumerate(node.arguments):
        if argument not in values and argument.default is not Unset:
            values[argument] = _materialize(argument, argument.default)
            context.argument_values.extend([None] * (position + 1 - len(context.argument_values)))
            context.argument_values[position] = values[argument]
            logger.debug("set argument with default value, %s=%r" % (argument.name, values[argument]))
        if argument in values:
            context.option_values[argument.key] = values[argument]

    return None


__all__ = (
    "parse",
    "input_key",
)
