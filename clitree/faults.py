"""
clitree faults (dispatch errors and registration conflicts) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing failure, grouped
  by domain so searches in logs stay predictable.
- CommandException: base type for dispatch-time failures. Carries a message
  plus runtime options (command, input, shell, colorful) and knows how to
  render itself through rich.
- UnknownOptionError / UnknownSubcommandError: the two dispatch failures.
- RegistrationConflictError: construction-time failure for duplicate option
  names, aliases or child command names. Always raised, never rendered.
- trigger(): central entry point that merges runtime options into a fault and
  surfaces it (printed in shell mode, raised otherwise).

Output contract
- In shell mode a fault prints its message followed by a blank line on
  standard output; the caller then prints the usage of the failing command.
- No process exit happens here: the dispatcher returns a failed result and
  the host decides the exit code.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (111xx): UNKNOWN_SUBCOMMAND
    - switches (111xx): UNKNOWN_OPTION
    - registration (131xx): REGISTRATION_CONFLICT

    normalize() lets a host remap codes to its own labels through a
    __codes__ mapping in __main__.
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_SUBCOMMAND          = 11102

    # --- option errors (11xxx) ---
    UNKNOWN_OPTION              = 11112

    # --- registration errors (13xxx) ---
    REGISTRATION_CONFLICT       = 13101

    def normalize(self):
        """
        return a host-normalized string for this code.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message or "")
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def input(self):
        return self.options.get("input")

    @property
    def command(self):
        return self.options.get("command")

    def __rich__(self):
        styles = defaultdict(str, {
            "fault-message": "bold #FF4DA6",  # friendly pinky message
            "fault-input": "bold #00E5FF",  # neon cyan offending token
        } | getattr(__import__("__main__"), "__styles__", {}))

        if not self.options.get("colorful", False):
            return Text(str(self.message or ""))

        text = Text(str(self.message or ""), styles["fault-message"])
        if self.input:
            text.highlight_words([self.input], styles["fault-input"])
        return text

    def __trigger__(self) -> None:
        if not self.options.get("shell", True):
            raise self from None
        Console(highlight=False).print(self, end="\n\n", soft_wrap=True)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(CommandException): ...
class UnknownSubcommandError(CommandException): ...


class RegistrationConflictError(ValueError):
    """
    duplicate option name, option alias or child command name.

    raised eagerly while the tree is being built so that a shadowed option or
    an unreachable subcommand never makes it to dispatch.
    """
    code = FaultCode.REGISTRATION_CONFLICT


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods.
    - options are merged into a copy of the fault via copy.replace() before
      triggering; the merged copy is returned when __trigger__ does not raise.

    typical options
    - command, shell, colorful, code, input.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    (fault := copy.replace(fault, **options)).__trigger__()
    return fault


__all__ = (
    "CommandException",
    "UnknownOptionError",
    "UnknownSubcommandError",
    "RegistrationConflictError",
    "FaultCode",
    "trigger",
)
