"""
clitree utilities (internal helpers shared by the options, commands and runner layers)

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None and "".
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, preserving None/""/0.

- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated methods (clean tracebacks).

- mirror("attr")
  • Read-only property over a private backing field (self._attr); lists are
    exposed as tuples and dicts as read-only mapping views.

- IntrospectiveType
  • Metaclass shared by Option, Command and Runner: derives __typename__,
    publishes __introspectable__ names as mirrored properties and provides
    __repr__/__rich_repr__.

Stability
- Names in __all__ are supported; everything else may change.
"""
import builtins
import functools
import operator
import re
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type representing a value that was not provided.

    Used where None is a legitimate value (an option without default, an
    action-less command) and the API still needs to tell “not given” apart.
    A single instance, Unset, exists per process.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values (None, "", 0) are preserved; only the sentinel is replaced.

    Examples
    - coalesce("origin", "push") -> "origin"
    - coalesce(Unset, "push")    -> "push"
    - coalesce(None, "push")     -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator doing so.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator
    """
    match parameters:
        case (str() as name,):
            def decorator(target):
                return rename(target, name)

            return rename(decorator, "rename")
        case (target, str() as name) if builtins.callable(target):
            try:
                target.__name__ = target.__qualname__ = name
            except (AttributeError, TypeError):
                raise TypeError(f"rename() cannot rename {target!r}") from None
            return target
    raise TypeError("rename() expects a name, or a callable and a name")


def _freeze(object):
    """
    Shallow read-only view of a backing container.

    - list  → tuple
    - dict  → MappingProxyType (keeps insertion order)
    - set   → frozenset
    - other → returned as-is (custom mappings such as Registry are already read-only)
    """
    if isinstance(object, list):
        return tuple(object)
    elif isinstance(object, dict):
        return MappingProxyType(object)
    elif isinstance(object, set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private field "_{name}".

    Containers are returned as read-only views, so callers can iterate a
    command's children or an option's metadata but never change them through
    the public API.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


class IntrospectiveType(type):
    """
    Metaclass publishing selected private fields as read-only properties.

    Conventions
    - __typename__ is the hyphenated lower-case class name ("option",
      "command", "runner") and prefixes every construction-time error message.
    - __introspectable__ lists the mirrored names; __displayable__ (optional)
      narrows what __repr__/__rich_repr__ show.
    """
    __introspectable__ = ()
    __displayable__ = ()

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__displayable__ or type(self).__introspectable__:
                yield name, getattr(self, name)

        if "__repr__" not in namespace:
            self.__repr__ = __repr__
        if "__rich_repr__" not in namespace:
            self.__rich_repr__ = __rich_repr__
        return self


Unset = UnsetType()
"""
Sentinel for “not provided”. Falsey, singleton, never equal to None.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",
    "IntrospectiveType",

    # Constants
    "Unset",
)
