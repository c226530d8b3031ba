"""
clitree command layer: build a command tree and dispatch argument vectors.

What this module provides
- Command: a node of the dispatch tree with a name, free-text usage, its own
  option Registry, ordered children and an optional action.
- command(...): create a Command from a callable, or a decorator doing so.
- tokenize(prompt): normalize argv, a shell-like string or a token list.
- Outcome / Result: the explicit value returned by every dispatch.

Dispatch, in two steps
- match (pure): walk the tokens left to right from a node.
  • option-shaped tokens are resolved against the visited node's own
    registry; valued options take an inline "=value" or the next token when
    that token does not start with '-'; flags are marked set.
  • the first positional token selects a child by name; the child registry
    is merged into the settings and matching continues inside the child with
    the remaining tokens. The parent never looks at those tokens again.
  • unknown options and unknown subcommands stop the walk with a fault.
  The result is the matched path, the merged Settings and the fault, if any.
- dispatch (side effects): print the fault and the usage of the failing node,
  or invoke the last node's action with the settings, or print its usage when
  it has no action.

Quick start
    from clitree import Runner

    app = Runner(lambda settings: print("root"), version="1.0.0")
    push = app.root.command("push", usage="Push the source code.")
    origin = push.command("origin", action=lambda settings: print(settings.value("url")))
    origin.option("url", "u", valued=True, default="https://example.com")
    app.run(["push", "origin", "--url=https://x.test"])
"""
import builtins
import inspect
import logging
import shlex
import sys
from collections import deque
from collections.abc import Iterable
from enum import Enum
from typing import Any, NamedTuple

from .faults import *
from .options import *
from .usage import print_usage
from .utils import *

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """
    how a dispatch ended.

    - DISPATCHED: an action was invoked.
    - USAGE: usage was printed instead (help requested, or no action bound).
    - FAILED: an unknown option or subcommand stopped the dispatch.
    """
    DISPATCHED = "dispatched"
    USAGE = "usage"
    FAILED = "failed"


class Match(NamedTuple):
    path: tuple
    settings: Settings
    fault: CommandException | None = None


class Result(NamedTuple):
    """
    Value returned by every entry point (Command.__invoke__, Runner.run, invoke).

    - outcome: see Outcome.
    - path: commands matched from the dispatch start to the final node.
    - settings: merged settings at the final node.
    - fault: the triggered fault for FAILED results, else None.
    - returned: whatever the action returned.
    """
    outcome: Outcome
    path: tuple
    settings: Settings | None = None
    fault: CommandException | None = None
    returned: Any = None

    @property
    def command(self):
        return self.path[-1] if self.path else None

    @property
    def ok(self):
        return self.outcome is not Outcome.FAILED

    @property
    def code(self):
        """
        process exit code: 0 unless the dispatch failed.
        """
        return 0 if self.ok else 1


def _sanitize_name(cls, name, parent, /):
    """
    Validate a command name.

    Children must have a non-empty name that can be typed as a positional
    token (no leading '-', no whitespace). A root may carry any string,
    typically the program file name.
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if parent is None:
        return name
    if not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty for a subcommand")
    if name.startswith("-") or any(char.isspace() for char in name):
        raise ValueError(f"{cls.__typename__} 'name' must not start with '-' or contain whitespace")
    return name


def _attach_to_parent(self, parent):
    """
    Register this command under its parent, enforcing unique names.
    """
    if parent is None:
        return
    if parent._children.setdefault(self.name, self) is self:
        return
    typeof = "subcommand" if parent.parent else "command"
    raise RegistrationConflictError(f"{type(self).__typename__} {typeof} name {self.name!r} is already in use")


def tokenize(prompt=Unset, /):
    """
    Normalize a prompt into a list of tokens.

    - Unset: sys.argv[1:].
    - str: shell-like string split with shlex.split.
    - Iterable[str]: used as is (tokens are kept verbatim, including empty
      strings and surrounding spaces, as the shell already split them).
    """
    if prompt is Unset:
        return sys.argv[1:]
    elif isinstance(prompt, str):
        return shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("tokenize() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("tokenize() argument must be a string or an iterable of strings")


class Command(metaclass=IntrospectiveType):
    """
    Node of the dispatch tree.

    Responsibilities
    - Registration: options (option/config_option) and children (command)
      are added before dispatch; duplicates raise RegistrationConflictError.
    - Matching: match() resolves tokens into a path, settings and fault
      without side effects.
    - Invocation: __invoke__ dispatches a prompt starting at this node.

    Runtime flags
    - shell: print faults (True) or raise them to the caller (False).
    - colorful: style usage and fault output.
    Both inherit from the parent when not given; a root defaults to
    shell=True, colorful=False.
    """

    __introspectable__ = (
        "name",
        "usage",
        "action",
        "options",
        "parent",
        "children",
        "shell",
        "colorful",
    )

    __displayable__ = (
        "name",
        "usage",
        "options",
        "children",
    )

    @property
    def root(self):
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    def __new__(
            cls,
            name="",
            /,
            parent=Unset,
            *,
            usage=Unset,
            action=Unset,
            shell=Unset,
            colorful=Unset
    ):
        """
        Construct a command, attaching it under parent when one is given.

        Parameters
        - name: str, required (non-empty) for subcommands.
        - parent: Command | Unset.
        - usage: str | Unset, free text describing the command.
        - action: Callable[[Settings], Any] | Unset.
        - shell, colorful: bool | Unset (inherited when Unset).

        Raises
        - TypeError/ValueError on invalid metadata.
        - RegistrationConflictError when the parent already has a child with
          the same name.
        """
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        parent = coalesce(parent)

        if not isinstance(usage, str | Unset):
            raise TypeError(f"{cls.__typename__} 'usage' must be a string")
        elif isinstance(usage, str) and not (usage := usage.strip()):
            raise ValueError(f"{cls.__typename__} 'usage' cannot be empty")

        if action is not Unset and not callable(action):
            raise TypeError(f"{cls.__typename__} 'action' must be callable")

        metadata = {
            "name": _sanitize_name(cls, name, parent),
            "usage": usage,
            "action": action,
            "options": Registry(),
            "parent": parent,
            "children": {},
            "shell": bool(coalesce(shell, getattr(parent, "shell", True))),
            "colorful": bool(coalesce(colorful, getattr(parent, "colorful", False))),
        }

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        _attach_to_parent(self, parent)
        return self

    def option(self, name, alias="", /, *, valued=False, default=Unset, descr=Unset):
        """
        Register an option on this command and return it.

        Raises RegistrationConflictError when the name or the alias is already
        registered on this command.
        """
        return self._options.add(Option(name, alias, valued=valued, default=default, descr=descr))

    def config_option(self):
        """
        Opt in to the reserved --config/-c option (valued).
        """
        return self.option(CONFIG_NAME, CONFIG_ALIAS, valued=True, descr=CONFIG_DESCR)

    def handler(self, action, /):
        """
        Bind the action once; usable as a decorator (@cmd.handler).
        """
        if not callable(action):
            raise TypeError(f"{type(self).__typename__} handler must be callable")
        if self._action is not None:
            raise TypeError(f"{type(self).__typename__} handler cannot be overridden")
        self._action = action
        return action

    def command(self, source=Unset, /, **kwargs):
        """
        Create or attach a subcommand under this command.

        Modes
        - command("name", usage=..., action=...) -> Command
        - command(callable, ...) / @cmd.command / @cmd.command(name=...) ->
          Command wrapping the callable as its action.
        - command(detached_command) -> mounts an existing top-level command.
        """
        if isinstance(source, str):
            return Command(source, self, **kwargs)
        if isinstance(source, Command):
            if kwargs:
                raise TypeError(f"{type(self).__typename__} mounting a command takes no options")
            if source.parent is not None:
                raise ValueError(f"{type(self).__typename__} {source.name!r} is already mounted")
            if source in self.path:
                raise ValueError(f"{type(self).__typename__} {source.name!r} cannot be mounted under itself")
            source._name = _sanitize_name(type(source), source.name, self)
            _attach_to_parent(source, self)
            source._parent = self
            return source
        return command(source, self, **kwargs)

    def trigger(self, fault, /, **options):
        """
        Surface a fault in the context of this command and return the
        contextualized copy (raised instead when shell is False).
        """
        return trigger(fault, **options, command=self, shell=self.shell, colorful=self.colorful)

    def _helper(self):
        print_usage(self)

    def match(self, tokens, settings=Unset, /):
        """
        Resolve tokens from this command without side effects.

        Returns a Match(path, settings, fault). The walk starts from fresh
        defaults of this command's registry, merged over settings when given.
        """
        if settings is Unset:
            settings = Settings.fresh(self.options)
        else:
            settings = merge(settings, self.options)
        return self._parseargs(deque(tokens), settings, (self,))

    def _parseargs(self, tokens, settings, path):
        while tokens:
            token = tokens.popleft()

            if lookslike(token):
                if (option := resolve(token, self.options)) is None:
                    logger.debug("unknown option %r at %r", token, self.name)
                    return Match(path, settings, UnknownOptionError(
                        "Unknown option: %s" % token,
                        code=FaultCode.UNKNOWN_OPTION,
                        input=token,
                    ))

                if not option.valued:
                    settings = settings.update(Setting(option, None, True))
                    logger.debug("flag %r set at %r", option.name or option.alias, self.name)
                    continue

                if (value := embedded(token)) is None:
                    if tokens and not lookslike(tokens[0]):
                        value = tokens.popleft()
                    else:
                        value = settings[option.name].value
                settings = settings.update(Setting(option, value, True))
                logger.debug("option %r = %r at %r", option.name or option.alias, value, self.name)
                continue

            try:
                child = self._children[token]
            except KeyError:
                logger.debug("unknown subcommand %r at %r", token, self.name)
                return Match(path, settings, UnknownSubcommandError(
                    "Unknown sub command: %s" % token,
                    code=FaultCode.UNKNOWN_SUBCOMMAND,
                    input=token,
                ))

            logger.debug("subcommand %r matched under %r", child.name, self.name)
            return child._parseargs(tokens, merge(settings, child.options), path + (child,))

        return Match(path, settings)

    def _dispatch(self, tokens, settings=Unset):
        path, settings, fault = self.match(tokens, settings)
        command = path[-1]

        if fault is not None:
            fault = command.trigger(fault)
            command._helper()
            return Result(Outcome.FAILED, path, settings, fault)

        if command.action is None:
            logger.debug("no action bound to %r, showing usage", command.name)
            command._helper()
            return Result(Outcome.USAGE, path, settings)

        logger.debug("invoking action of %r", command.name)
        returned = command.action(settings)
        return Result(Outcome.DISPATCHED, path, settings, returned=returned)

    def __invoke__(self, prompt=Unset):
        """
        Dispatch a prompt starting at this command (no reserved-flag handling;
        use a Runner for --help/--version).
        """
        return self._dispatch(tokenize(prompt))


def command(source=Unset, /, parent=Unset, *, name=Unset, usage=Unset, **flags):
    """
    Create a Command from a callable, or return a decorator to build it later.

    Invocation modes
    - Direct:     cmd = command(func, name="x")
    - Decorator:  @command or @command(name="x")

    The callable becomes the action; the name defaults to its __name__ and the
    usage text to its docstring.
    """
    @rename("command")
    def wrapper(source, /):
        if not builtins.callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(
            coalesce(name, getattr(source, "__name__", "")),
            parent,
            usage=coalesce(usage, inspect.getdoc(source) or Unset),
            action=source,
            **flags,
        )

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "Outcome",
    "Result",
    "command",
    "tokenize",
)
