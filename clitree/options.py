r"""
clitree option registry, per-call settings and argument resolver.

Overview
- Option: static definition of one switch attached to a command.
  • name: long form (--name); "" for an alias-only option.
  • alias: short form (-a); "" when absent.
  • valued: True when the option expects a value, False for a flag.
  • default: pre-seeded value (valued options only).
  • descr: display text.
- Registry: ordered mapping name -> Option owned by one command. Names and
  non-empty aliases are unique inside a registry (RegistrationConflictError).
- Setting: resolved state of one option for one dispatch (value, set).
- Settings: immutable, ordered mapping name -> Setting handed to actions. A
  dispatch always starts from fresh settings, so nothing leaks between runs.

Resolver
- resolve(token, registry) finds the Option a token refers to:
  • "--name[=value]" → lookup by name
  • "-alias[=value]" → lookup by alias
  • anything else, "--" and "-" → None
- embedded(token) returns the text after the first '=' (or None).
- merge(settings, registry) overlays fresh defaults of a subcommand registry
  on top of the inherited settings.

Reserved names
- help/h and version/v are registered on every runner root.
- config/c is registered on demand via Command.config_option().
"""
import re
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from .faults import RegistrationConflictError
from .utils import *

CONFIG_NAME = "config"
CONFIG_ALIAS = "c"
CONFIG_DESCR = "Specify the configuration file to use. Supported formats: JSON, YAML, TOML."

HELP_NAME = "help"
HELP_ALIAS = "h"
HELP_DESCR = "Display a list of available commands and global options."

VERSION_NAME = "version"
VERSION_ALIAS = "v"
VERSION_DESCR = "Show the version of the CLI tool."


def _sanitize_identifier(cls, field, metadata, /):
    """
    Internal: validate an option name or alias in place.

    Rules
    - must be a string ("" is accepted and means “absent”).
    - must not start with '-' and must not contain whitespace or '='; such
      spellings could never be matched by the resolver.
    """
    if not isinstance(object := metadata[field], str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    elif object and not re.fullmatch(r"[^\s=-][^\s=]*", object):
        raise ValueError(f"{cls.__typename__} {field!r} must not start with '-' or contain whitespace or '='")


class Option(metaclass=IntrospectiveType):
    """
    Named switch definition, value-bearing or presence-only.

    Options never change after construction; the state observed on a command
    line lives in Setting objects produced per dispatch.
    """

    __introspectable__ = (
        "name",
        "alias",
        "valued",
        "default",
        "descr",
    )

    def __new__(cls, name, alias="", /, *, valued=False, default=Unset, descr=Unset):
        metadata = {
            "name": name,
            "alias": alias,
            "valued": bool(valued),
            "default": default,
            "descr": descr,
        }
        _sanitize_identifier(cls, "name", metadata)
        _sanitize_identifier(cls, "alias", metadata)

        if not isinstance(default, str | Unset):
            raise TypeError(f"{cls.__typename__} 'default' must be a string")
        elif default is not Unset and not valued:
            raise TypeError(f"{cls.__typename__} 'default' requires a valued option")

        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
        metadata["descr"] = descr

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        return self


class Registry(Mapping):
    """
    Ordered option registry of one command (registration order is kept for
    usage rendering).
    """
    __slots__ = ("_options", "_aliases")

    def __init__(self, options=(), /):
        self._options = {}
        self._aliases = {}
        for option in options:
            self.add(option)

    def add(self, option, /):
        if not isinstance(option, Option):
            raise TypeError("registry add() argument must be an option")
        if option.name in self._options:
            raise RegistrationConflictError(f"option name {option.name!r} is already in use")
        if option.alias and option.alias in self._aliases:
            raise RegistrationConflictError(f"option alias {option.alias!r} is already in use")
        self._options[option.name] = option
        if option.alias:
            self._aliases[option.alias] = option
        return option

    def byalias(self, alias, /):
        return self._aliases.get(alias) if alias else None

    def __getitem__(self, name):
        return self._options[name]

    def __iter__(self):
        return iter(self._options)

    def __len__(self):
        return len(self._options)

    def __repr__(self):
        return f"registry({list(self._options.values())!r})"

    def __rich_repr__(self):
        yield from self._options.values()


class Setting(NamedTuple):
    """
    Resolved state of one option during one dispatch.

    - value: the parsed value, the option default, or None (always None for flags).
    - set: True once the option token was seen on the command line.
    """
    option: Option
    value: str | None = None
    set: bool = False

    @classmethod
    def default(cls, option, /):
        return cls(option, option.default if option.valued else None, False)

    @property
    def name(self):
        return self.option.name

    @property
    def alias(self):
        return self.option.alias

    @property
    def valued(self):
        return self.option.valued


class Settings(Mapping):
    """
    Immutable merged option set (name -> Setting), insertion ordered.

    update() and merge() return new instances; the receiver is never touched,
    which is what makes a command tree safe to dispatch repeatedly or from
    several threads at once.
    """
    __slots__ = ("_settings",)

    def __init__(self, settings=(), /):
        if isinstance(settings, Mapping):
            settings = settings.values()
        self._settings = {}
        for setting in settings:
            if not isinstance(setting, Setting):
                raise TypeError("settings() argument must be an iterable of settings")
            self._settings[setting.name] = setting

    @classmethod
    def fresh(cls, registry, /):
        return cls(map(Setting.default, registry.values()))

    def update(self, *settings):
        return type(self)([*self._settings.values(), *settings])

    def value(self, name, default=None, /):
        try:
            value = self._settings[name].value
        except KeyError:
            return default
        return default if value is None else value

    def isset(self, name, /):
        try:
            return self._settings[name].set
        except KeyError:
            return False

    def __getitem__(self, name):
        return self._settings[name]

    def __iter__(self):
        return iter(self._settings)

    def __len__(self):
        return len(self._settings)

    def __repr__(self):
        return f"settings({ {name: (setting.value, setting.set) for name, setting in self._settings.items()}!r})"

    def __rich_repr__(self):
        for name, setting in self._settings.items():
            yield name, setting.value if setting.valued else setting.set


def lookslike(token, /):
    """
    Tell whether a token is option-shaped (starts with '-').
    """
    return token.startswith("-")


def embedded(token, /):
    """
    Return the value embedded after the first '=' of an option token, or None.

    Everything after the first '=' is kept verbatim, including further '='
    and dashes ("--url=a=b" → "a=b", "--url=" → "").
    """
    if not lookslike(token) or "=" not in token:
        return None
    return token.partition("=")[2]


def resolve(token, registry, /):
    """
    Find the option a token refers to inside one registry (pure).

    - "--name" / "--name=value": exact name match.
    - "-alias" / "-alias=value": exact alias match.
    - "--", "-" and non-option tokens never match.
    """
    if token.startswith("--"):
        name = token[2:].partition("=")[0]
        return registry.get(name) if name else None
    elif token.startswith("-"):
        return registry.byalias(token[1:].partition("=")[0])
    return None


def merge(settings, registry, /):
    """
    Overlay fresh defaults of a subcommand registry onto inherited settings.

    Entries of the subcommand registry replace same-named inherited entries;
    every other inherited entry, including values resolved before the
    subcommand token, is kept as is.
    """
    return settings.update(*map(Setting.default, registry.values()))


__all__ = (
    # Types
    "Option",
    "Registry",
    "Setting",
    "Settings",

    # Functions
    "lookslike",
    "embedded",
    "resolve",
    "merge",

    # Constants
    "CONFIG_NAME",
    "CONFIG_ALIAS",
    "CONFIG_DESCR",
    "HELP_NAME",
    "HELP_ALIAS",
    "HELP_DESCR",
    "VERSION_NAME",
    "VERSION_ALIAS",
    "VERSION_DESCR",
)
