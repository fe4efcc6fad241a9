"""
Schemargs utilities (small helpers shared by every layer)

Scope
- Building blocks used by the argument, schema and parsing layers so that
  defaults, generated callables and public read-only state behave the same
  everywhere.

Overview
- UnsetType / Unset
  • Singleton sentinel meaning "not provided", distinct from None.
  • Falsey, printable as "Unset", and sealed against subclassing.

- coalesce(value, default=None)
  • Replace Unset with a default; None, 0, "" and other falsey values are kept.

- @rename("name")
  • Give generated functions a stable __name__/__qualname__.

- mirror("attr")
  • Read-only property exposing self._attr. Builtin containers are handed out
    frozen (tuple, frozenset, mappingproxy) so the public view cannot be used
    to mutate a spec or a schema behind its back.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import functools
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    Used as a parameter default wherever None is a meaningful user value (for
    example a slot default), so that "omitted" and "explicitly None" can be
    told apart. UnsetType() always returns the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions such as `str | Unset` in isinstance checks.
        """
        try:
            return other | type(self)
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

    Falsey values (None, 0, "", empty containers) are preserved; only the
    Unset sentinel is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator giving the decorated function a fixed __name__ and __qualname__.

    Applied to the functions generated by the metaclass and by mirror().
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("@rename() must decorate a function")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _immortalize(object):
    """
    Freeze builtin containers for public exposure.

    - list/tuple -> tuple (items processed recursively)
    - dict       -> mappingproxy over a processed copy
    - set        -> frozenset
    - anything else (including user types such as TypedList or Slot) is
      returned as-is: those carry their own mutation rules.
    """
    match object:
        case list() | tuple() if type(object) in (list, tuple):
            return tuple(map(_immortalize, object))
        case dict() if type(object) is dict:
            return MappingProxyType({key: _immortalize(value) for key, value in object.items()})
        case set() if type(object) is set:
            return frozenset(object)
        case _:
            return object


def mirror(name, /):
    """
    Define a read-only property reading the private attribute "_{name}".

    Example
    - Given self._choices, declare choices = mirror("choices").
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


Unset = UnsetType()
"""
Sentinel for "not provided".

Singleton, falsey, and never equal to None. Materialize with
coalesce(value, default).
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
