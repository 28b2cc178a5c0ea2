"""
Trellis flags: named arguments parsed wherever they appear in the command line.

- Flag(name, short, description, type=str, ...): "--name VALUE" / "-n VALUE".
- ListFlag(name, short, description, minimum, optional, type=str, ...): several values.
- OptionalFlag(name, short, description, default_value, ...): "--name" alone stores
  default_value; "--name VALUE" stores VALUE.
- BoolFlag(name, short, description): "--name" stores True. Bool flags are
  combinable: "-qv" is "-q -v".

FlagProcessor(*flags) scans the remaining tokens, pops every flag token it knows and
lets the flag's argument consume the values right after it. Values stop at the next
token that is itself a flag of the processor.

Usage: each flag adds "--name|-n" to the usage line and, when described, a
"[n] name" entry to the Flags section.
"""
import re

from . import engine
from .arguments import Argument
from .completion import Completion
from .faults import NotEnoughArgsError
from .graph import Processor
from .inputs import UNBOUNDED, Input, ListBreaker
from .output import ignore_all_output
from .usage import FLAGS
from .utils import Unset
from .validators import Validator
from .values import ExecuteData

MULTI_FLAG = re.compile(r"^-[a-zA-Z]{2,}$")
SHORT_FLAG = re.compile(r"^[a-zA-Z0-9]$")


class BaseFlag:
    """
    Attributes
    - name / short / description: identity and documentation.
    - combinable: may appear inside a "-abc" multi-flag (evaluated with no input).
    - allows_multiple: may be given more than once.
    - processor: what runs after the flag token (an Argument, usually).
    """
    combinable = False
    allows_multiple = False

    def __init__(self, name, short=None, description=""):
        if not isinstance(name, str) or not name:
            raise TypeError("flag name must be a non-empty string")
        if short is not None and not SHORT_FLAG.match(short):
            raise ValueError(f"Short flag name {short!r} must match regex {SHORT_FLAG.pattern}")
        self.name = name
        self.short = short
        self.description = description

    @property
    def processor(self):
        raise NotImplementedError

    @property
    def token(self):
        return f"--{self.name}"

    @property
    def short_token(self):
        return f"-{self.short}" if self.short is not None else None

    def process_missing(self, data, /):
        """called when the flag was not given."""

    def provided(self, data, /):
        return data.has(self.name)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


class _ValueFlag(BaseFlag):

    def __init__(self, name, short, description, minimum, optional, /, type=str, listed=False, **options):
        super().__init__(name, short, description)
        self.argument = Argument(name, "", minimum, optional, type=type, listed=listed, **options)

    @property
    def processor(self):
        return self.argument

    def get(self, data, /):
        return self.argument.get(data)

    def get_or_default(self, data, default, /):
        return self.get(data) if self.provided(data) else default

    def process_missing(self, data, /):
        self.argument._apply_default(data)


def Flag(name, short=None, description="", /, type=str, **options):
    """a flag taking exactly one value."""
    return _ValueFlag(name, short, description, 1, 0, type=type, **options)


def ListFlag(name, short=None, description="", minimum=1, optional=UNBOUNDED, /, type=str, **options):
    """a flag taking minimum values plus up to optional more."""
    return _ValueFlag(name, short, description, minimum, optional, type=type, listed=True, **options)


class _OptionalValue(Processor):

    def __init__(self, flag):
        self.flag = flag

    def execute(self, input, output, data, execute_data):
        self.flag.argument.execute(input, output, data, execute_data)
        if not data.has(self.flag.name):
            self.flag.argument.set(self.flag.default_value, data)

    def complete(self, input, data):
        if input.num_remaining() <= 1 and (input.peek() or "").startswith("-"):
            return None
        if (completion := self.flag.argument.complete(input, data)) is not None:
            return completion
        if not data.has(self.flag.name):
            self.flag.argument.set(self.flag.default_value, data)
        return None


class OptionalFlag(_ValueFlag):
    """a flag with an optional value; given without one, it stores default_value."""

    def __init__(self, name, short=None, description="", default_value=Unset, /, type=str, **options):
        super().__init__(name, short, description, 0, 1, type=type, **options)
        if default_value is Unset:
            default_value = self.argument.value_type.zero()
        self.default_value = default_value
        self._processor = _OptionalValue(self)

    @property
    def processor(self):
        return self._processor


class BoolFlag(BaseFlag, Processor):
    """a flag without value: present means True."""
    combinable = True

    @property
    def processor(self):
        return self

    def get(self, data, /):
        return data.bool(self.name)

    def execute(self, input, output, data, execute_data):
        data.set(self.name, True)

    def complete(self, input, data):
        data.set(self.name, True)
        return None


class FlagProcessor(Processor):
    """
    Processes every flag of flags found among the remaining tokens.

    Raises (execution)
    - ProcessorError: for a partial multi-flag, a non-combinable flag inside a
      multi-flag, or a repeated flag that doesn't allow it.
    - whatever the flag's argument raises (NotEnoughArgsError, ValidationError...).
    """

    def __init__(self, *flags):
        self.flags = flags
        self._tokens = {}
        for flag in flags:
            # later flags override earlier ones with the same name
            self._tokens[flag.token] = flag
            if flag.short_token is not None:
                self._tokens[flag.short_token] = flag

    def _is_multi_flag(self, token):
        return bool(MULTI_FLAG.match(token)) and all(f"-{code}" in self._tokens for code in token[1:])

    def list_breaker(self):
        """a breaker stopping list values at any token this processor treats as a flag."""
        return ListBreaker(
            Validator("FlagName", lambda token: token not in self._tokens,
                      lambda token: f"value \"{token}\" is a flag in the flag map"),
            Validator("MultiFlag", lambda token: not self._is_multi_flag(token),
                      lambda token: f"value \"{token}\" is a multi-flag argument for the FlagProcessor"),
        )

    def _unique(self):
        return {flag.name: flag for flag in self._tokens.values()}

    def execute(self, input, output, data, execute_data):
        unprocessed = self._unique()
        processed = set()

        def mark(flag):
            unprocessed.pop(flag.name, None)
            if not flag.allows_multiple and flag.name in processed:
                raise output.stderrf("Flag \"%s\" has already been set\n", flag.name)
            processed.add(flag.name)

        index = 0
        while index < input.num_remaining():
            token = input.peek_at(index)
            if MULTI_FLAG.match(token):
                codes = [f"-{code}" for code in token[1:]]
                matches = sum(code in self._tokens for code in codes)
                if matches == 0:
                    index += 1
                    continue
                if matches != len(codes):
                    raise output.stderrln("Either all or no flags in a multi-flag object must be relevant "
                                          "for a FlagProcessor group")
                for code in codes:
                    flag = self._tokens[code]
                    if not flag.combinable:
                        raise output.stderrf("Flag \"%s\" is not combinable\n", flag.name)
                    mark(flag)
                    engine.process_or_execute(flag.processor, Input(), output, data, execute_data)
                input.pop_at(index)
            elif (flag := self._tokens.get(token)) is not None:
                mark(flag)
                input.pop_at(index)
                with input.run_at_offset(index), input.breaking(self.list_breaker()):
                    engine.process_or_execute(flag.processor, input, output, data, execute_data)
            else:
                index += 1

        for name in sorted(unprocessed):
            unprocessed[name].process_missing(data)

    def complete(self, input, data):
        unprocessed = self._unique()
        available = set(unprocessed)

        def mark(flag):
            unprocessed.pop(flag.name, None)
            if not flag.allows_multiple:
                available.discard(flag.name)

        index = 0
        while index < input.num_remaining():
            token = input.peek_at(index)

            if index == input.num_remaining() - 1 and token.startswith("-"):
                return Completion(sorted(f"--{name}" for name in available))

            if MULTI_FLAG.match(token):
                # best effort: unknown or non-combinable codes are skipped
                for code in token[1:]:
                    flag = self._tokens.get(f"-{code}")
                    if flag is None or not flag.combinable:
                        continue
                    mark(flag)
                    engine.process_or_complete(flag.processor, Input(), data)
                input.pop_at(index)
            elif (flag := self._tokens.get(token)) is not None:
                mark(flag)
                input.pop_at(index)
                with input.run_at_offset(index), input.breaking(self.list_breaker()):
                    completion = engine.process_or_complete(flag.processor, input, data)
                if completion is not None:
                    return completion
            else:
                index += 1

        for name in sorted(unprocessed):
            unprocessed[name].process_missing(data)
        return None

    def usage(self, input, data, usage):
        # flag tokens given to get_usage() must not be mistaken for a sub-command
        with ignore_all_output() as output:
            try:
                self.execute(input, output, data, ExecuteData())
            except NotEnoughArgsError:
                pass

        for flag in sorted(self._unique().values(), key=lambda flag: flag.name):
            if flag.short is None:
                if flag.description:
                    usage.add_section(FLAGS, f"    {flag.name}", flag.description)
                usage.flags.append(flag.token)
            else:
                if flag.description:
                    usage.add_section(FLAGS, f"[{flag.short}] {flag.name}", flag.description)
                usage.flags.append(f"{flag.token}|{flag.short_token}")


__all__ = (
    "BaseFlag",
    "Flag",
    "ListFlag",
    "OptionalFlag",
    "BoolFlag",
    "FlagProcessor",
    "MULTI_FLAG",
    "SHORT_FLAG",
)
