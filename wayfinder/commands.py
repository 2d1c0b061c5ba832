"""
Wayfinder command layer: declare command trees and carry per-invocation state.

What this module provides
- Command: a declaration node of the command tree with
  • identity: name, aliases, descr, version.
  • inputs: options (named) and arguments (positional), built from the specs
    in wayfinder.arguments (Boolean, String, Array).
  • hierarchy: parent/children to model subcommands.
  • behavior: an optional execute handler and an optional after_parse hook.

- Factories and helpers:
  • command(...): create a Command from a handler, or a decorator that does it.
  • Command.command(...): same, mounting the result as a child.

- Per-invocation state:
  • FoundCommand: a resolved node plus its full name (as typed) and its scope
    (the options that apply: root options first, then command-local ones).
  • Context: what the parser fills and the handler receives.

Quick start
    from wayfinder import command, Boolean, String, Engine

    @command("tool", options=[Boolean("help", "h"), Boolean("version", "v")], version="2.1.0")
    def tool(context):
        ...

    @tool.command(options=[String("env", choices=("dev", "staging"), required=True)])
    def deploy(context):
        print(context.option_values["env"])

    if __name__ == "__main__":
        Engine().start(tool)

Design notes
- Declarations are read-only once built; parsing never writes into them. Values
  live in Context.values, keyed by the spec objects themselves.
"""
import inspect
import re

from .arguments import Argument
from .utils import *


class CommandType(type):
    """
    Metaclass wiring read-only properties and stable representations for Command.

    - Every name in __introspectable__ becomes a property mirroring "_{name}".
    - __displayable__ narrows what __rich_repr__/__repr__ show (parent and full
      children objects are left out to avoid cycles).
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return f"{type(self).__typename__}({', '.join('%s=%r' % pair for pair in self.__rich_repr__())})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                value = getattr(self, name)
                if name == "children":
                    value = tuple(value)
                yield name, value
        self.__rich_repr__ = __rich_repr__

        return self


def _check_names(cls, options, arguments, /):
    """
    Internal: enforce name uniqueness inside one node.

    - option names are unique, argument names are unique.
    - a short name collides neither with another option's name nor with
      another option's short name.
    """
    seen = {}
    for option in options:
        if option.name in seen:
            raise ValueError(f"{cls.__typename__} option name {option.name!r} is already in use")
        seen[option.name] = option
    for option in options:
        if option.short is Unset:
            continue
        if (other := seen.get(option.short, option)) is not option:
            raise ValueError(
                f"{cls.__typename__} short name {option.short!r} of option {option.name!r} "
                f"collides with option {other.name!r}"
            )
        seen[option.short] = option

    names = set()
    for argument in arguments:
        if argument.name in names:
            raise ValueError(f"{cls.__typename__} argument name {argument.name!r} is already in use")
        names.add(argument.name)


def _check_scope(cls, node, root, /):
    """
    Internal: enforce short-name uniqueness across a resolved scope.

    node and every command below it parse with root's options in scope, so a
    short name on either side must not match the other side's names or short
    names. A local option may still reuse a root option's long name; the local
    one shadows it.
    """
    names = {option.name for option in root.options}
    shorts = {option.short for option in root.options if option.short is not Unset}
    pending = [node]
    while pending:
        current = pending.pop()
        pending.extend(current._children.values())
        for option in current.options:
            if option.short is not Unset and option.short in names | shorts:
                raise ValueError(
                    f"{cls.__typename__} short name {option.short!r} of option {option.name!r} "
                    f"in {current.name!r} collides with an option of {root.name!r}"
                )
            if option.name in shorts:
                raise ValueError(
                    f"{cls.__typename__} option name {option.name!r} in {current.name!r} "
                    f"collides with a short name of {root.name!r}"
                )


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names and aliases.

    Raises ValueError when the name (or an alias) is already taken by a sibling,
    when one of its short names collides with the root's options, or when the
    command is already mounted elsewhere.
    """
    if self.parent is not None and self.parent is not parent:
        raise ValueError(f"{type(self).__typename__} {self.name!r} is already mounted under {self.parent.name!r}")

    typeof = "subcommand" if parent.parent else "command"
    taken = set()
    for sibling in parent._children.values():
        if sibling is self:
            return
        taken.add(sibling.name)
        taken.update(sibling.aliases)

    for name in (self.name, *self.aliases):
        if name in taken:
            raise ValueError(f"{type(self).__typename__} {typeof} name {name!r} is already in use")
    _check_scope(type(self), self, parent.root)

    parent._children[self.name] = self
    self._parent = parent


class Command(metaclass=CommandType):
    """
    Declaration node of a command tree.

    Responsibilities
    - Introspection: exposes metadata as read-only properties.
    - Composition: parent/child hierarchies model subcommands.
    - Lookup: child(token) finds a direct child by exact name or alias.

    Handlers
    - execute(context) runs after parsing and validation succeeded. It may return
      a value (the success value), return a CommandException (the failure), raise,
      or return an awaitable resolving to any of those.
    - after_parse(context) runs once validation passed and before the built-in
      --help/--version checks; its return value is ignored and an exception it
      raises is logged by the engine.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "descr",
        "version",
        "options",
        "arguments",
        "children",
        "execute",
        "after_parse",
    )

    __displayable__ = (
        "name",
        "aliases",
        "descr",
        "version",
        "options",
        "arguments",
        "children",
    )

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    def __init__(
            self,
            name,
            /,
            aliases=(),
            descr=Unset,
            options=(),
            arguments=(),
            commands=(),
            *,
            execute=Unset,
            after_parse=Unset,
            version=Unset,
            parent=Unset
    ):
        """
        Construct a Command node.

        Parameters
        - name: str
          Exact token that selects this command under its parent (the program
          name for the root).
        - aliases: Iterable[str]
          Alternative exact tokens selecting this command.
        - descr: Unset | str
          Short description for help.
        - options / arguments: Iterable[Boolean | String | Array]
          Named options and positional arguments, in declaration order.
        - commands: Iterable[Command]
          Children mounted under this node (not yet mounted elsewhere).
        - execute / after_parse: Unset | Callable[[Context], Any]
        - version: Unset | str
          Text printed by the built-in --version short-circuit (root only).
        - parent: Unset | Command
          Parent to mount this node under.

        Raises
        - TypeError/ValueError on malformed metadata or name collisions.
        """
        cls = type(self)
        if not isinstance(name, str) or not (name := name.strip()) or re.search(r"\s", name):
            raise ValueError(f"{cls.__typename__} 'name' must be a non-empty string without spaces")
        if isinstance(aliases, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings, not a string")
        aliases = tuple(aliases)
        if not all(isinstance(alias, str) and alias.strip() for alias in aliases):
            raise TypeError(f"{cls.__typename__} 'aliases' must contain non-empty strings")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        if not isinstance(version, str | Unset):
            raise TypeError(f"{cls.__typename__} 'version' must be a string")
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")

        options, arguments = tuple(options), tuple(arguments)
        for spec in options + arguments:
            if not isinstance(spec, Argument):
                raise TypeError(f"{cls.__typename__} options and arguments must be Boolean, String or Array specs")
        for argument in arguments:
            if argument.short is not Unset:
                raise ValueError(f"{cls.__typename__} argument {argument.name!r} cannot have a short name")
        _check_names(cls, options, arguments)

        for handler, callback in (("execute", execute), ("after_parse", after_parse)):
            if callback is not Unset and not callable(callback):
                raise TypeError(f"{cls.__typename__} {handler!r} must be callable")

        self._name = name
        self._aliases = aliases
        self._descr = coalesce(descr and descr.strip() or Unset)
        self._version = coalesce(version)
        self._options = options
        self._arguments = arguments
        self._children = {}
        self._execute = coalesce(execute)
        self._after_parse = coalesce(after_parse)
        self._parent = Unset

        for child in commands:
            if not isinstance(child, Command):
                raise TypeError(f"{cls.__typename__} 'commands' must contain commands")
            _attach_to_parent(child, self)
        if parent:
            _attach_to_parent(self, parent)

    @property
    def parent(self):
        return coalesce(self._parent)

    def child(self, token, /):
        """
        Return the direct child whose name or alias equals token, or None.
        """
        for child in self._children.values():
            if token == child.name or token in child.aliases:
                return child
        return None

    def command(self, source=Unset, /, **kwargs):
        """
        Create a child command (see the module-level command()), mounted under self.

        Forms
        - @parent.command
        - @parent.command("name", options=[...])
        - parent.command(existing_command)   # mount an unmounted Command
        """
        if isinstance(source, Command):
            if kwargs:
                raise TypeError("command() cannot override metadata of an existing command")
            _attach_to_parent(source, self)
            return source
        return command(source, parent=self, **kwargs)


def command(source=Unset, /, **kwargs):
    """
    Create a Command from a handler, or return a decorator that does it later.

    Forms
    - @command                          name from the function, descr from its docstring
    - @command("name", options=[...])   explicit name
    - @command(options=[...])           name from the function

    Parameters
    - source: Unset | str | Callable
    - **kwargs: forwarded to Command(...) (aliases, descr, options, arguments,
      commands, after_parse, version, parent).

    Returns
    - Command | Callable[[Callable], Command]
    """
    name = source if isinstance(source, str) else Unset

    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return Command(
            coalesce(name, getattr(callback, "__name__", Unset)),
            execute=callback,
            **{"descr": inspect.getdoc(callback) or Unset} | kwargs
        )

    if callable(source) and not isinstance(source, Command):
        return wrapper(source)
    if not isinstance(source, str | Unset):
        raise TypeError("command() argument must be a name or a callable")
    return wrapper


class FoundCommand:
    """
    A resolved command node plus the data the parser needs.

    - node: the Command that was resolved.
    - full_name: root name followed by the tokens consumed while resolving.
    - scope: options that apply (root options first, then the node's own).
    - root: the node resolution started from.

    Attribute access falls through to the node, so handlers can read
    context.command.name, context.command.options, and so on.
    """
    __slots__ = ("node", "full_name", "scope", "root")

    def __init__(self, node, full_name, scope, root):
        self.node = node
        self.full_name = full_name
        self.scope = tuple(scope)
        self.root = root

    @property
    def is_root(self):
        return self.node is self.root

    def __getattr__(self, name):
        if name in FoundCommand.__slots__:  # unset slot, avoid recursing through self.node
            raise AttributeError(name)
        return getattr(self.node, name)

    def __repr__(self):
        return f"found-command(full_name={self.full_name!r}, node={self.node.name!r})"


class Context:
    """
    Per-invocation parse state handed to hooks and handlers.

    - command: FoundCommand.
    - option_values: input key → value, for command-scoped options (and
      positionals, mirrored under their key).
    - global_option_values: input key → value, for root options when the
      resolved command is not the root.
    - argument_values: positional values, index-aligned to declaration order.
    - telemetry_properties: free-form mapping for the embedding application.
    - values: spec → value; the parse result keyed by the declaration itself.
    """

    def __init__(self, command):
        self.command = command
        self.option_values = {}
        self.global_option_values = {}
        self.argument_values = []
        self.telemetry_properties = {}
        self.values = {}

    def snapshot(self):
        """
        Return the three user-facing mappings (used by debug logging).
        """
        return {
            "option_values": dict(self.option_values),
            "global_option_values": dict(self.global_option_values),
            "argument_values": list(self.argument_values),
        }

    def __repr__(self):
        return "context(command=%r, %s)" % (
            self.command.full_name,
            ", ".join("%s=%r" % pair for pair in self.snapshot().items()),
        )


__all__ = (
    "Command",
    "command",
    "FoundCommand",
    "Context",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
