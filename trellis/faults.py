"""
Trellis faults (errors raised while walking a command graph) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every fault kind. Codes are
  grouped by domain to keep copy consistent and make logs/searches predictable.
- CommandFault: base type that carries a message + read-only options and knows how
  to render itself through rich (header, message, hint).
- Concrete kinds:
  • usage faults: ExtraArgsError, NotEnoughArgsError, BranchingError
  • value faults: ValidationError, ConversionError
  • everything else: ProcessorError (opaque, propagated verbatim)
- is_usage_error(): the faults after which a runner should print the usage text.

UX goals
- Messages are a single sentence, stable enough to assert on in tests.
- The rendered form adds a short title, the fault code and one hint.
- Styling is configurable via __styles__ in __main__; the program name via __prog__.
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce, pluralize


class FaultCode(IntEnum):
    """
    canonical fault codes used across the graph engines (stable identifiers).

    grouping (by high-level domain)
    - usage (2110x)
      • EXTRA_ARGS, NOT_ENOUGH_ARGS, BRANCHING
    - values (2120x)
      • VALIDATION, CONVERSION
    - processors (2130x)
      • PROCESSOR

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired.
    """
    # --- usage errors (211xx) ---
    EXTRA_ARGS      = 21101
    NOT_ENOUGH_ARGS = 21102
    BRANCHING       = 21103

    # --- value errors (212xx) ---
    VALIDATION      = 21201
    CONVERSION      = 21202

    # --- processor errors (213xx) ---
    PROCESSOR       = 21301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandFault(Exception):
    """
    base class of every fault raised by processors, edges and engines.

    the message is what str() returns (and what gets written to an output's
    stderr); options carry structured context and rendering switches
    (colorful, fancy, hint, title).
    """
    code = FaultCode.PROCESSOR
    title = "processor error"
    hint = "see the message above"

    def __init__(self, message, /, **options):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",

            # body
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = text(getattr(main, "__prog__", os.path.basename(sys.argv[0]) or "trellis"), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.options.get("title", self.title).title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint", self.hint), "hint"))

        if self.options.get("fancy", False):
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        # Subclasses have their own __init__ signatures, so the replica is
        # built from the raw state instead of calling the constructor again.
        replica = type(self).__new__(type(self), *self.args)
        replica.__dict__.update(self.__dict__, options=MappingProxyType({**self.options, **overrides}))
        return replica


class ExtraArgsError(CommandFault):
    code = FaultCode.EXTRA_ARGS
    title = "extra arguments"
    hint = "remove the unprocessed arguments or check the command usage"

    def __init__(self, remaining, /, **options):
        self.remaining = tuple(remaining)
        super().__init__(f"Unprocessed extra args: {list(self.remaining)}", **options)


class NotEnoughArgsError(CommandFault):
    code = FaultCode.NOT_ENOUGH_ARGS
    title = "not enough arguments"
    hint = "provide the missing arguments"

    def __init__(self, name, required, got, /, **options):
        self.name = name
        self.required = required
        self.got = got
        super().__init__(
            f"Argument \"{name}\" requires at least {required} {pluralize('argument', required)}, got {got}",
            **options
        )


class BranchingError(CommandFault):
    code = FaultCode.BRANCHING
    title = "unknown branch"
    hint = "pick one of the listed branches"

    def __init__(self, choices, /, **options):
        self.choices = sorted(choices)
        super().__init__(f"Branching argument must be one of {self.choices}", **options)


class ValidationError(CommandFault):
    code = FaultCode.VALIDATION
    title = "invalid value"
    hint = "provide a value that satisfies the validator"

    def __init__(self, key, validator, reason, /, **options):
        self.key = key
        self.validator = validator
        self.reason = reason
        super().__init__(f"validation for \"{key}\" failed: [{validator}] {reason}", **options)


class ProcessorError(CommandFault):
    """opaque failure raised by a processor; propagated verbatim by the engines."""


class ConversionError(ProcessorError):
    code = FaultCode.CONVERSION
    title = "invalid value"
    hint = "check the value type expected by the argument"

    def __init__(self, message, /, *, value=Unset, **options):
        self.value = coalesce(value)
        super().__init__(message, **options)


def is_usage_error(fault, /):
    """
    whether the fault is a usage-class fault (extra args, not enough args, branching).

    runners print the full usage text after these.
    """
    return isinstance(fault, ExtraArgsError | NotEnoughArgsError | BranchingError)


def report(fault, /, console=None, **options):
    """
    render a fault on console (a fresh stderr console by default).

    options are merged into the fault (colorful, fancy, hint, title) before printing;
    a colorful ConsoleOutput reports its faults this way.
    """
    if not isinstance(fault, CommandFault):
        raise TypeError("report() argument must be a command fault")
    (console if console is not None else Console(stderr=True)).print(fault.__replace__(**options))


__all__ = (
    "FaultCode",
    "CommandFault",
    "ExtraArgsError",
    "NotEnoughArgsError",
    "BranchingError",
    "ValidationError",
    "ProcessorError",
    "ConversionError",
    "is_usage_error",
    "report",
)
