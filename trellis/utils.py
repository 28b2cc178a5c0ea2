"""
Trellis helpers shared by the value, argument, flag and fault layers.

- Unset: the "no default given" marker of argument and flag constructors.
  None is a legitimate default there, so a separate falsy singleton is used.
- coalesce(object, default): object, or default when object is Unset.
- pluralize(word, count): the noun form used in messages such as
  "requires at least 2 arguments".

    >>> coalesce(Unset, 3)
    3
    >>> pluralize("argument", 1), pluralize("entry", 2)
    ('argument', 'entries')
"""
import functools
from typing import final


@final
class UnsetType:
    """type of the Unset marker; there is one instance per process and no subclasses."""

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"


def coalesce(object, default=None, /):
    return default if object is Unset else object


@functools.cache
def pluralize(word, count=2, /):
    """
    word when count is one, otherwise its regular English plural
    (box → boxes, entry → entries, argument → arguments).
    """
    if not isinstance(word, str):
        raise TypeError(f"pluralize() expects a string, got {type(word).__name__}")
    if count == 1 or not word:
        return word
    lower = word.lower()
    if lower.endswith(("s", "sh", "ch", "x", "z")):
        return f"{word}es"
    if len(lower) > 1 and lower.endswith("y") and lower[-2] not in "aeiou":
        return f"{word[:-1]}ies"
    return f"{word}s"


Unset = UnsetType()


__all__ = (
    "Unset",
    "UnsetType",
    "coalesce",
    "pluralize",
)
