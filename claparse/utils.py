"""
claparse utilities shared by the option, registry, parser and usage layers.

- Unset: the "argument not given" sentinel, distinct from None (a missing
  long name or a None default are real values).
- coalesce(value, default): Unset becomes default, everything else is kept.
- rename(name): decorator giving generated functions a readable name.
- mirror(name): read-only property over self._<name>; containers are handed
  out as immutable copies.
- ordinal(number): "first" ... "tenth", then "11th", "22nd", "103rd".

    >>> coalesce(Unset, 80), coalesce(None, 80)
    (80, None)
    >>> ordinal(3), ordinal(22)
    ('third', '22nd')
"""
import functools
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    type of the Unset singleton: falsy, repr "Unset", usable in isinstance
    unions (str | Unset) and closed to subclassing.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return other | UnsetType
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    return default if object is Unset else object


def rename(name, /):
    """
    decorator setting __name__ and __qualname__ of the decorated function.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string")

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() must decorate a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def _frozen(object):
    # str is a Sequence too, keep it whole
    if isinstance(object, str):
        return object
    if isinstance(object, Sequence):
        return tuple(map(_frozen, object))
    if isinstance(object, Mapping):
        return {key: _frozen(value) for key, value in object.items()}
    if isinstance(object, Set):
        return frozenset(map(_frozen, object))
    return coalesce(object)


def mirror(name, /):
    """
    read-only property exposing the private field "_" + name.

    Unset reads as None; lists, sets and mappings are copied (as tuple,
    frozenset and dict) so callers cannot mutate declared state.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _frozen(getattr(self, "_" + name))

    return property(getter)


_WORDS = ("first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth")


@functools.cache
def ordinal(number, /):
    """
    ordinal label of a 1-based token position.
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f"{number}" + {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)
