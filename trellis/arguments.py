"""
Trellis positional arguments.

An Argument pops a fixed number of tokens (plus optional ones) from the input,
converts them to its value kind, writes the canonical form back into the input cells,
stores the value in Data under its name and validates it.

Constructors
- Arg(name, description, type=str, ...): exactly one token.
- OptionalArg(name, description, type=str, ...): zero or one token.
- ListArg(name, description, minimum, optional, type=str, ...): a list value;
  optional may be UNBOUNDED.
- BoolArg(name, description): one boolean token (true/false/1/0/t/f...).

Options (keyword-only, all constructors)
- default: value (or callable(data) -> value) stored when no token was given.
- validators: Validator objects run on the converted payload.
- completor: Completion or callable(payload, data) used while autocompleting.
- transformers: callables(payload, data) -> payload applied after conversion.
- breaker: ListBreaker ending the token collection early.
- hidden: leave the argument out of the usage text.

Behavior
- Missing required tokens raise NotEnoughArgsError, after the partial value (if any)
  was stored and validated, so later processors still see what was given.
- Every fault is written to the output before it is raised.
"""
from .completion import Completion, bool_completor, run_completion
from .faults import CommandFault, ConversionError, NotEnoughArgsError, ProcessorError, ValidationError
from .graph import Processor
from .inputs import UNBOUNDED
from .usage import ARGUMENTS
from .utils import Unset
from .values import ValueType


class Argument(Processor):
    """
    Generic positional argument; prefer the Arg/OptionalArg/ListArg/BoolArg helpers.

    Parameters
    - name: Data key and usage token.
    - description: shown in the Arguments usage section (omitted when empty).
    - minimum / optional: required and optional token counts (optional may be UNBOUNDED).
    - type: element type (str, int, float, bool); listed selects the list kind.
    """

    def __init__(self, name, description="", minimum=1, optional=0, /, *, type=str, listed=False,
                 default=Unset, validators=(), completor=None, transformers=(), breaker=None, hidden=False):
        if not isinstance(name, str) or not name:
            raise TypeError("argument name must be a non-empty string")
        if optional is not UNBOUNDED and (not isinstance(optional, int) or optional < 0):
            raise ValueError("optional must be a non-negative integer or UNBOUNDED")
        if not isinstance(minimum, int) or minimum < 0:
            raise ValueError("minimum must be a non-negative integer")

        self.name = name
        self.description = description
        self.minimum = minimum
        self.optional = optional
        self.value_type = ValueType.of(type, listed)
        self.default = default
        self.validators = tuple(validators)
        self.completor = completor
        self.transformers = tuple(transformers)
        self.breaker = breaker
        self.hidden = hidden

    def get(self, data, /):
        """the payload stored for this argument (the kind's zero value when unset)."""
        value = data.get(self.name)
        if value is None or value.type is not self.value_type:
            return self.value_type.zero()
        return value.payload

    def set(self, payload, data, /):
        data.set(self.name, self.value_type.wrap(payload))

    def provided(self, data, /):
        return data.has(self.name)

    def convert(self, tokens, data, /, transform=True):
        """
        Convert tokens to a Value, then run the transformers (when transform is set).

        Raises
        - ConversionError: for tokens that don't parse.
        - ProcessorError: when a transformer fails.
        """
        value = self.value_type.convert(tokens)
        if not transform:
            return value
        for transformer in self.transformers:
            try:
                value = self.value_type.wrap(transformer(value.payload, data))
            except CommandFault:
                raise
            except Exception as error:
                raise ProcessorError(f"Custom transformer failed: {error}") from error
        return value

    def validate(self, value, /):
        """
        Raises
        - ValidationError: for the first validator rejecting value.
        """
        for validator in self.validators:
            if (reason := validator.check(value.payload)) is not None:
                raise ValidationError(self.name, validator.name, reason)

    def _apply_default(self, data):
        if self.default is Unset:
            return
        default = self.default(data) if callable(self.default) else self.default
        self.set(default, data)

    def execute(self, input, output, data, execute_data):
        cells, enough = input.pop_n(self.minimum, self.optional, self.breaker)

        if not cells:
            if not enough:
                raise output.err(NotEnoughArgsError(self.name, self.minimum, 0))
            self._apply_default(data)
            return

        try:
            value = self.convert([cell.value for cell in cells], data)
        except CommandFault as fault:
            raise output.err(fault)

        # canonical values are written back so snapshots replay what was parsed
        for cell, token in zip(cells, value.to_args()):
            cell.value = token

        data.set(self.name, value)

        try:
            self.validate(value)
        except ValidationError as fault:
            raise output.err(fault)

        if not enough:
            raise output.err(NotEnoughArgsError(self.name, self.minimum, len(cells)))

    def complete(self, input, data):
        cells, enough = input.pop_n(self.minimum, self.optional, self.breaker)
        completion = self._complete([cell.value for cell in cells], enough, input, data)
        # the walk must stop at the argument holding the word being completed
        if completion is None and (not enough or input.fully_processed()):
            return Completion()
        return completion

    def _complete(self, tokens, enough, input, data):
        final = not enough or input.fully_processed()
        try:
            value = self.convert(tokens, data, transform=False)
        except ConversionError:
            if final:
                return run_completion(self.completor, self.value_type.wrap(self.value_type.zero()), data)
            raise

        if not final:
            # best effort: a failing transformer keeps the value it got so far
            for transformer in self.transformers:
                try:
                    value = self.value_type.wrap(transformer(value.payload, data))
                except Exception:
                    break
            data.set(self.name, value)
            return None

        data.set(self.name, value)
        return run_completion(self.completor, value, data)

    def usage(self, input, data, usage):
        if self.hidden:
            return

        if self.description:
            usage.add_section(ARGUMENTS, self.name, self.description)

        usage.tokens.extend([self.name] * self.minimum)
        if self.optional is UNBOUNDED:
            usage.tokens.append(f"[ {self.name} ... ]")
        elif self.optional > 0:
            usage.tokens.extend(["[", *[self.name] * self.optional, "]"])

        if self.breaker is not None:
            self.breaker.usage(usage)

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"


def Arg(name, description="", /, type=str, **options):
    """an argument taking exactly one token."""
    return Argument(name, description, 1, 0, type=type, **options)


def OptionalArg(name, description="", /, type=str, **options):
    """an argument taking zero or one token."""
    return Argument(name, description, 0, 1, type=type, **options)


def ListArg(name, description="", minimum=1, optional=UNBOUNDED, /, type=str, **options):
    """a list argument taking minimum tokens plus up to optional more."""
    return Argument(name, description, minimum, optional, type=type, listed=True, **options)


def BoolArg(name, description="", /, **options):
    """a boolean argument taking exactly one token."""
    options.setdefault("completor", bool_completor())
    return Argument(name, description, 1, 0, type=bool, **options)


__all__ = (
    "Argument",
    "Arg",
    "OptionalArg",
    "ListArg",
    "BoolArg",
)
