"""
Help text rendering.

- HelpFormatter: the protocol the engine calls, format_help(command, root) -> str.
  root is the root Command when the resolved command is a subcommand, else None.
- DefaultHelper: rich-based renderer (usage line, description, subcommand table,
  then argument/option sections with hanging-indent descriptions), exported to
  plain text (or ANSI text when colorful).

Palette keys
- usage-label, program-name, description-section
- group-label, argument-description
- option-name, metavar, choice, required
- children-title, children-table, children, children-description
Define a mapping named __styles__ in __main__ to override any palette entry.
"""
import io
from collections import defaultdict
from typing import Protocol, runtime_checkable

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .arguments import Boolean, Array
from .utils import Unset


@runtime_checkable
class HelpFormatter(Protocol):
    def format_help(self, command, root, /): ...


class DefaultHelper:
    """
    Default HelpFormatter.

    Parameters
    - width: int, wrap width of the rendered text.
    - colorful: bool, keep ANSI styling in the returned text.
    """

    def __init__(self, width=80, colorful=False):
        self.width = int(width)
        self.colorful = bool(colorful)

    def format_help(self, command, root=None, /):
        node = getattr(command, "node", command)
        route = getattr(command, "full_name", None) or " ".join(step.name for step in node.path)

        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "description-section": "italic #A3A3A3",

            "group-label": "bold #FFFFFF",
            "argument-description": "#9CA3AF",

            "option-name": "bold #00E6FF",
            "metavar": "bold #FFD600",
            "choice": "bold #FF4D94",
            "required": "bold #EF4444",

            "children-title": "bold #FFFFFF",
            "children-table": "#4B5563",
            "children": "bold #36C5F0",
            "children-description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styler(style) if style else "")

        def metavar(argument):
            if getattr(argument, "choices", ()):
                return Text.assemble(
                    "{", Text(",").join(text(choice, "choice") for choice in argument.choices), "}"
                )
            label = argument.name.upper()
            if isinstance(argument, Array):
                label += ",..."
            return text("<%s>" % label, "metavar")

        def entry(argument, named):
            names = Text()
            if named:
                names.append(text("--" + argument.name, "option-name"))
                if argument.short is not Unset:
                    names.append(", ").append(text("-" + argument.short, "option-name"))
                if not isinstance(argument, Boolean):
                    names.append(" ").append(metavar(argument))
            else:
                names.append(metavar(argument))

            details = []
            if argument.descr:
                details.append(text(argument.descr, "argument-description"))
            if argument.default is not Unset:
                default = argument.default
                if isinstance(argument, Array):
                    default = ",".join(default)
                details.append(text("[default: %s]" % default, "argument-description"))
            if argument.required:
                details.append(text("(required)", "required"))
            return names, Text(" ").join(details)

        def section(label, arguments, named):
            arguments = [argument for argument in arguments if not argument.hidden]
            if not arguments:
                return None
            padding, indent = 2, 28
            block = Text()
            block.append(text(label, "group-label")).append(":\n")
            for argument in arguments:
                names, descr = entry(argument, named)
                line = Text(" " * padding).append(names)
                if descr:
                    # Wide name columns push the description to its own line.
                    if len(line) >= indent - 1:
                        line.append("\n").append(" " * indent)
                    else:
                        line.append(" " * (indent - len(line)))
                    wrapped = descr.wrap(console, self.width - indent)
                    for index, segment in enumerate(wrapped):
                        if index:
                            line.append("\n").append(" " * indent)
                        line.append(segment)
                block.append(line).append("\n")
            block.rstrip()
            return block

        console = Console(
            file=io.StringIO(),
            width=self.width,
            record=True,
            color_system="truecolor" if self.colorful else None,
            force_terminal=self.colorful,
            highlight=False,
        )

        renders = []

        usage = Text()
        usage.append(text("usage", "usage-label")).append(": ")
        usage.append(text(route, "program-name"))
        if node.options or (root is not None and root.options):
            usage.append(" [options]")
        if node.children:
            usage.append(" <command>")
        for argument in node.arguments:
            if argument.hidden:
                continue
            usage.append(" ").append(Text.assemble("[", metavar(argument), "]") if not argument.required else metavar(argument))
        renders.append(usage)

        if node.descr:
            renders.append(Text.assemble("\n", text(node.descr, "description-section")))

        if node.children:
            table = Table(
                "name", "help",
                title=text("subcommands" if node.parent else "commands", "children-title"),
                box=ROUNDED,
                style=styler("children-table"),
                header_style=styler("children-title"),
            )
            for name, child in node.children.items():
                label = text(name, "children")
                if child.aliases:
                    label = Text.assemble(label, " (", ", ".join(child.aliases), ")")
                summary = child.descr or "run '%s %s --help' for details" % (route, name)
                table.add_row(label, text(summary, "children-description"))
            renders.append(Text(""))
            renders.append(table)

        for label, arguments, named in (
            ("arguments", node.arguments, False),
            ("options", node.options, True),
            ("global options", root.options if root is not None and root is not node else (), True),
        ):
            if block := section(label, arguments, named):
                renders.append(Text(""))
                renders.append(block)

        console.print(Group(*renders))
        return console.export_text(styles=self.colorful).rstrip()


__all__ = (
    "HelpFormatter",
    "DefaultHelper",
)
