"""
Post-parse validation: required-ness and choice membership.
"""
from .arguments import String, Array
from .faults import InvalidChoiceError, MissingRequiredOptionError, MissingRequiredArgumentError
from .utils import Unset


def validate_argument(command, argument, values, /, positional=False):
    """
    Validate one option or positional against the parsed values.

    rules (in this order)
    - required, no default and no value → MissingRequiredOptionError
      (MissingRequiredArgumentError when positional is True).
    - String/Array with choices, a value and skip=False → every value (the string,
      or each array element) must be one of the choices; the first offender
      produces InvalidChoiceError.

    returns
    - None when the argument is valid, otherwise the fault.
    """
    if argument.required and argument.default is Unset and argument not in values:
        if positional:
            return MissingRequiredArgumentError(command.full_name, argument.name)
        return MissingRequiredOptionError(command.full_name, argument.name)

    if not isinstance(argument, String | Array) or not argument.choices or argument.skip:
        return None
    if argument not in values:
        return None

    value = values[argument]
    for item in (value if isinstance(argument, Array) else (value,)):
        if item not in argument.choices:
            return InvalidChoiceError(command.full_name, argument.name, item, argument.choices)
    return None


def validate(command, context, /):
    """
    Validate the resolved command's own options, then its positionals.

    Declaration order within each group; the first fault is returned, None when
    everything is valid. Root options are only checked when the root itself was
    resolved (they are its own options then).
    """
    for option in command.options:
        if fault := validate_argument(command, option, context.values):
            return fault
    for argument in command.arguments:
        if fault := validate_argument(command, argument, context.values, positional=True):
            return fault
    return None


__all__ = (
    "validate",
    "validate_argument",
)
