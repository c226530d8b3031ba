"""
clitree usage renderer.

Format (exact, single line, no trailing punctuation)
    Usage: <name> [--name|-alias] [--name] [-alias] ... [child|child|...]

- one bracket group per option of the command, in registration order:
  [--name|-alias] when both are set, [--name] or [-alias] otherwise; options
  with neither contribute nothing.
- one trailing group listing the named children in registration order, when
  the command has children.
- only the command's own options are listed, never inherited ones.

Styling
- usage_text() builds a rich Text; styles are applied only when the command is
  colorful. Palette keys: usage-label, program-name, option-name,
  option-alias, children. Hosts may override them through __styles__ in
  __main__, and may rename the root program through __prog__.
- render_usage() returns the plain string and is what tests compare against.
"""
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .utils import *


def usage_text(command, /, *, colorful=Unset):
    main = __import__("__main__")
    colorful = coalesce(colorful, command.colorful)

    styles = defaultdict(str, {
        "usage-label": "bold #FF4D94",  # magenta-pink label
        "program-name": "bold #E6E6F0",  # near-white program name
        "option-name": "#00E6FF",  # cyan long form
        "option-alias": "#36C5F0",  # sky-blue short form
        "children": "#FFD600",  # amber subcommand names
    } | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    name = command.name
    if command.parent is None:
        name = getattr(main, "__prog__", name)

    usage = Text()
    usage.append("Usage:", styler("usage-label")).append(" ")
    usage.append(name, styler("program-name"))

    for option in command.options.values():
        if option.name and option.alias:
            usage.append(" [")
            usage.append("--" + option.name, styler("option-name"))
            usage.append("|")
            usage.append("-" + option.alias, styler("option-alias"))
            usage.append("]")
        elif option.name:
            usage.append(" [").append("--" + option.name, styler("option-name")).append("]")
        elif option.alias:
            usage.append(" [").append("-" + option.alias, styler("option-alias")).append("]")

    if command.children:
        usage.append(" [")
        usage.append(Text("|").join(
            Text(name, styler("children")) for name in command.children if name
        ))
        usage.append("]")

    return usage


def render_usage(command, /):
    """
    Return the usage line of a command as a plain string (deterministic).
    """
    return usage_text(command, colorful=False).plain


def print_usage(command, /):
    """
    Print the usage line of a command to standard output.
    """
    Console(highlight=False).print(usage_text(command), soft_wrap=True)


__all__ = (
    "usage_text",
    "render_usage",
    "print_usage",
)
