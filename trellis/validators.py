"""
Trellis validators: named predicates applied to converted argument values.

A Validator is (name, predicate, reason). validate(key, value) raises a
ValidationError reading

    validation for "<key>" failed: [<Name>] <reason>

The same objects double as list breakers (see trellis.inputs.ListBreaker), which
only need accepts(token).
"""
import os
import re

from .faults import ValidationError
from .utils import pluralize


class Validator:
    """
    Parameters
    - name: short CamelCase label shown between brackets in the failure message.
    - predicate: callable(value) -> bool, True when the value is acceptable.
    - reason: failure text, or callable(value) -> str for value-dependent text.
    """

    def __init__(self, name, predicate, reason, /):
        if not callable(predicate):
            raise TypeError("Validator() predicate must be callable")
        self.name = name
        self.predicate = predicate
        self.reason = reason

    def accepts(self, value, /):
        return bool(self.predicate(value))

    def check(self, value, /):
        """return None when value passes, the failure reason otherwise."""
        if self.accepts(value):
            return None
        return self.reason(value) if callable(self.reason) else self.reason

    def validate(self, key, value, /):
        if (reason := self.check(value)) is not None:
            raise ValidationError(key, self.name, reason)

    def __repr__(self):
        return f"Validator({self.name!r})"


class _ListValidator(Validator):
    def __init__(self, validator, /):
        self.element = validator
        super().__init__(validator.name, self._accepts_all, self._first_reason)

    def _accepts_all(self, values):
        return all(self.element.accepts(value) for value in values)

    def _first_reason(self, values):
        for value in values:
            if (reason := self.element.check(value)) is not None:
                return reason


def each(validator, /):
    """lift a single-value validator to a list validator checking every element."""
    return _ListValidator(validator)


def contains(substring, /):
    return Validator("Contains", lambda value: substring in value,
                     f"value doesn't contain substring \"{substring}\"")


def matches_regex(*patterns):
    compiled = [re.compile(pattern) for pattern in patterns]

    def reason(value):
        for pattern in compiled:
            if not pattern.search(value):
                return f"value \"{value}\" doesn't match regex \"{pattern.pattern}\""

    return Validator("MatchesRegex", lambda value: all(p.search(value) for p in compiled), reason)


def _compile_error(value):
    try:
        re.compile(value)
    except re.error as error:
        return error
    return None


def is_regex():
    return Validator("IsRegex", lambda value: _compile_error(value) is None,
                     lambda value: f"value \"{value}\" isn't a valid regex: {_compile_error(value)}")


def in_list(*choices):
    return Validator("InList", lambda value: value in choices, f"argument must be one of {list(choices)}")


def min_length(length, /):
    return Validator("MinLength", lambda value: len(value) >= length,
                     f"value must be at least {length} {pluralize('character', length)}")


def _stat_failure(path):
    try:
        os.stat(path)
    except FileNotFoundError:
        return f"file \"{path}\" does not exist"
    except OSError as error:
        return f"failed to read file \"{path}\": {error}"
    return None


def file_exists():
    return Validator("FileExists", lambda value: _stat_failure(value) is None, _stat_failure)


def is_dir():
    return Validator(
        "IsDir",
        os.path.isdir,
        lambda value: _stat_failure(value) or f"argument \"{value}\" is a file"
    )


def is_file():
    return Validator(
        "IsFile",
        lambda value: _stat_failure(value) is None and not os.path.isdir(value),
        lambda value: _stat_failure(value) or f"argument \"{value}\" is a directory"
    )


def eq(expected, /):
    return Validator("EQ", lambda value: value == expected, f"value isn't equal to {expected}")


def neq(expected, /):
    return Validator("NEQ", lambda value: value != expected, f"value cannot equal {expected}")


def lt(bound, /):
    return Validator("LT", lambda value: value < bound, f"value isn't less than {bound}")


def lte(bound, /):
    return Validator("LTE", lambda value: value <= bound, f"value isn't less than or equal to {bound}")


def gt(bound, /):
    return Validator("GT", lambda value: value > bound, f"value isn't greater than {bound}")


def gte(bound, /):
    return Validator("GTE", lambda value: value >= bound, f"value isn't greater than or equal to {bound}")


def positive():
    return Validator("Positive", lambda value: value > 0, "value isn't positive")


def non_negative():
    return Validator("NonNegative", lambda value: value >= 0, "value isn't non-negative")


def negative():
    return Validator("Negative", lambda value: value < 0, "value isn't negative")


__all__ = (
    "Validator",
    "each",
    "contains",
    "matches_regex",
    "is_regex",
    "in_list",
    "min_length",
    "file_exists",
    "is_dir",
    "is_file",
    "eq",
    "neq",
    "lt",
    "lte",
    "gt",
    "gte",
    "positive",
    "non_negative",
    "negative",
)
