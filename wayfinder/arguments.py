r"""
Wayfinder argument specifications.

Overview
- Specs (one class per kind, each with its own value type)
  • Boolean: true/false switch, value type bool.
  • String: single textual value, value type str.
  • Array: comma-separated and repeatable values, value type list[str].

  The same classes declare both named options (placed in Command(options=...))
  and positional arguments (placed in Command(arguments=...)). Placement decides
  how the parser feeds them; the kind decides how raw tokens become values.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ via read-only properties.

Metadata (sanitized on construction)
- Shared (all kinds)
  • name: str, required. Matches r"[^\W_][\w-]*" (no leading dashes).
  • short: Unset | str, short alias looked up like the name (options only).
  • question: Unset | str, alternate key used in the result mappings.
  • descr: Unset | str | Text (short help), non-empty when provided.
  • required: bool.
  • default: Unset | value of the kind's value type.
  • hidden: bool (suppresses from help).
- String/Array only
  • choices: Iterable[str] (duplicates rejected).
  • skip: bool, skip choice validation for this spec.

Values
- Specs are declarations: they never hold parsed values. Parsed values are kept in
  a per-invocation mapping keyed by the spec itself (see wayfinder.commands.Context).

Quick example:
    >>> from wayfinder.arguments import Boolean, String, Array
    >>> verbose = Boolean("verbose", "v", descr="print more")
    >>> env = String("env", choices=("dev", "staging"), default="dev")
    >>> tags = Array("tag", "t")
"""
import functools
import operator
import re

from rich.text import Text

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only declarations.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and debug logs.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - string(name='env', short=Unset, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, field, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    elif not re.fullmatch(r"[^\W_][\w-]*", name):
        raise ValueError(f"{cls.__typename__} {field!r} must not start with a dash and must not contain spaces")
    return name


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by every kind.

    - name: required, validated by _sanitize_name.
    - short/question: Unset or validated by _sanitize_name.
    - descr: Unset → None; otherwise a non-empty string (trimmed) or a rich Text.
    - default: Unset, or accepted by cls.__accepts__.

    Raises
    - TypeError: wrong types.
    - ValueError: empty or malformed strings.

    Notes
    - This function mutates the provided metadata dict in place.
    """
    metadata["name"] = _sanitize_name(cls, "name", metadata["name"])

    for field in ("short", "question"):
        if metadata[field] is not Unset:
            metadata[field] = _sanitize_name(cls, field, metadata[field])

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if (default := metadata["default"]) is not Unset:
        metadata["default"] = cls.__accepts__(default)


def _sanitize_choices(cls, metadata, /):
    """
    Internal: validate and normalize choices for String/Array specs.

    - choices must be an iterable of strings; duplicates are rejected.
    - normalized to a tuple to keep declaration order stable in messages/help.
    """
    if isinstance(choices := metadata["choices"], str):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings, not a string")
    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError(f"{cls.__typename__} 'choices' must contain strings")
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    metadata["choices"] = tuple(sanitized)


class Argument(metaclass=ArgumentType):
    """
    Base of the three argument kinds. Not instantiated directly.

    Subclasses set:
    - kind: the tag used in logs and help ("boolean", "string", "array").
    - __accepts__(value): validate/normalize a declared default.
    - coerce(token): turn a raw positional token into a value.
    """
    kind = Unset

    __introspectable__ = (
        "name",
        "short",
        "question",
        "descr",
        "required",
        "default",
        "hidden",
    )

    def __new__(cls, *args, **kwargs):
        if cls is Argument:
            raise TypeError("Argument cannot be instantiated directly; use Boolean, String or Array")
        return super().__new__(cls)

    @property
    def key(self):
        """
        Key under which the value is stored in the context mappings.
        """
        return coalesce(self._question, self._name)

    @classmethod
    def __accepts__(cls, value, /):
        raise NotImplementedError

    def coerce(self, token, /):
        raise NotImplementedError


class Boolean(Argument):
    """
    Boolean specification (value type: bool).

    As an option, a Boolean is set to True by its mere presence; an explicit
    "true"/"false" (any casing) right after it is consumed as its value.
    As a positional, the raw token is coerced by truthiness: any non-empty
    token is True (including "false"), an empty one is False.
    """
    kind = "boolean"

    def __init__(
            self,
            name,
            short=Unset,
            /,
            descr=Unset,
            *,
            question=Unset,
            required=False,
            default=Unset,
            hidden=False
    ):
        metadata = {
            "name": name,
            "short": short,
            "question": question,
            "descr": descr,
            "required": bool(required),
            "default": default,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @classmethod
    def __accepts__(cls, value, /):
        if not isinstance(value, bool):
            raise TypeError(f"{cls.__typename__} 'default' must be a bool")
        return value

    def coerce(self, token, /):
        return bool(token)


class String(Argument):
    """
    String specification (value type: str).

    As an option, the next token is its value unless it is itself a known flag.
    Repeating the option replaces the previous value.
    """
    kind = "string"

    __introspectable__ = Argument.__introspectable__ + (
        "choices",
        "skip",
    )

    def __init__(
            self,
            name,
            short=Unset,
            /,
            descr=Unset,
            *,
            question=Unset,
            required=False,
            default=Unset,
            choices=(),
            skip=False,
            hidden=False
    ):
        metadata = {
            "name": name,
            "short": short,
            "question": question,
            "descr": descr,
            "required": bool(required),
            "default": default,
            "choices": choices,
            "skip": bool(skip),
            "hidden": bool(hidden),
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_choices(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @classmethod
    def __accepts__(cls, value, /):
        if not isinstance(value, str):
            raise TypeError(f"{cls.__typename__} 'default' must be a string")
        return value

    def coerce(self, token, /):
        return token


class Array(Argument):
    """
    Array specification (value type: list[str]).

    As an option, the next token (unless it is a known flag) is split on ","
    and appended to the accumulated values: repeated occurrences accumulate,
    they never replace. As a positional, the token is split on ",".
    """
    kind = "array"

    __introspectable__ = Argument.__introspectable__ + (
        "choices",
        "skip",
    )

    def __init__(
            self,
            name,
            short=Unset,
            /,
            descr=Unset,
            *,
            question=Unset,
            required=False,
            default=Unset,
            choices=(),
            skip=False,
            hidden=False
    ):
        metadata = {
            "name": name,
            "short": short,
            "question": question,
            "descr": descr,
            "required": bool(required),
            "default": default,
            "choices": choices,
            "skip": bool(skip),
            "hidden": bool(hidden),
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_choices(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @classmethod
    def __accepts__(cls, value, /):
        if isinstance(value, str) or not all(isinstance(item, str) for item in value):
            raise TypeError(f"{cls.__typename__} 'default' must be an iterable of strings")
        return list(value)

    def coerce(self, token, /):
        return token.split(",")


__all__ = (
    # Classes (specifications)
    "Argument",
    "Boolean",
    "String",
    "Array",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
