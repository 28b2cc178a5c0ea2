"""
Trellis value store: typed values and the per-invocation Data mapping.

Overview
- ValueType: the closed set of value kinds (String, StringList, Int, IntList, Float,
  FloatList, Bool). Each kind knows its zero value and how to convert raw input tokens.
- Value: a sum type with one concrete class per kind (StringValue, IntListValue, ...).
  Every instance carries exactly one payload. Equality and serialization are
  kind-aware: values of different kinds are never equal, even with "compatible"
  zero payloads.
- Data: insertion-ordered key → Value mapping populated by processors while a graph
  is walked. Typed accessors (string, int, bool, ...) never raise: a missing key or a
  value of another kind yields that kind's zero value.
- ExecuteData: closures and shell lines queued during execution, run (or emitted)
  only after the whole graph was walked successfully.

Notes
- Reading a value through the accessor of another kind returns a zero value instead
  of raising. This mirrors the behaviour callers rely on (a flag that was never set
  reads as False) at the price of hiding some caller mistakes.

Quick example
    >>> data = Data()
    >>> data.set("COUNT", IntValue(3))
    >>> data.int("COUNT"), data.string("COUNT")
    (3, '')
"""
import json
import re
from enum import Enum

from .faults import ConversionError

_BOOL_STRINGS = {
    "1": True,
    "t": True,
    "T": True,
    "true": True,
    "TRUE": True,
    "True": True,
    "0": False,
    "f": False,
    "F": False,
    "false": False,
    "FALSE": False,
    "False": False,
}

BOOL_STRINGS = tuple(_BOOL_STRINGS)


class ValueType(Enum):
    """
    Kind tag of a Value; the enum value is the serialized name of the kind.
    """
    STRING      = "String"
    STRING_LIST = "StringList"
    INT         = "Int"
    INT_LIST    = "IntList"
    FLOAT       = "Float"
    FLOAT_LIST  = "FloatList"
    BOOL        = "Bool"

    @property
    def listed(self):
        return self.value.endswith("List")

    @classmethod
    def of(cls, type, /, listed=False):
        """
        Map a python element type (str, int, float, bool) to its value kind.

        Raises
        - TypeError: for list-of-bool and for any type outside the closed set.
        """
        try:
            return {
                (str, False): cls.STRING,
                (str, True): cls.STRING_LIST,
                (int, False): cls.INT,
                (int, True): cls.INT_LIST,
                (float, False): cls.FLOAT,
                (float, True): cls.FLOAT_LIST,
                (bool, False): cls.BOOL,
            }[type, bool(listed)]
        except (KeyError, TypeError):
            raise TypeError(f"unsupported value type: {getattr(type, '__name__', type)!s}"
                            f"{' list' if listed else ''}") from None

    def zero(self):
        if self.listed:
            return []
        return {
            ValueType.STRING: "",
            ValueType.INT: 0,
            ValueType.FLOAT: 0.0,
            ValueType.BOOL: False,
        }[self]

    def wrap(self, payload, /):
        """build the Value of this kind holding payload."""
        return _VARIANTS[self](payload)

    def convert(self, tokens, /):
        """
        Convert raw input tokens into a Value of this kind.

        Scalar kinds read the first token (the zero value when there is none);
        list kinds convert every token.

        Raises
        - ConversionError: when a token cannot be parsed as the element type.
        """
        tokens = list(tokens)
        if self.listed:
            element = _ELEMENTS[self]
            return _VARIANTS[self]([_parse(element, token) for token in tokens])
        if not tokens:
            return _VARIANTS[self](self.zero())
        return _VARIANTS[self](_parse(self, tokens[0]))


def _parse(type, token, /):
    if type is ValueType.STRING:
        return token
    if type is ValueType.BOOL:
        try:
            return _BOOL_STRINGS[token]
        except KeyError:
            raise ConversionError(f"invalid bool value: \"{token}\"", value=token) from None
    try:
        return int(token) if type is ValueType.INT else float(token)
    except ValueError:
        raise ConversionError(
            f"invalid {'int' if type is ValueType.INT else 'float'} value: \"{token}\"", value=token
        ) from None


def _format_float(number, /):
    return "%.2f" % number


class Value:
    """
    Base of the value sum type. Use one of the concrete kinds, or Value.of().

    Accessors
    - string(), string_list(), int(), int_list(), float(), float_list(), bool()
      return the payload when the kind matches and the kind's zero value otherwise.

    Serialization
    - to_args(): token form (what a user would type to produce this value).
    - to_json()/from_json(): {"Type": "<Kind>", "<Kind>": payload}.
    """
    __slots__ = ("_payload",)

    type = None

    def __init__(self, payload, /):
        if type(self) is Value:
            raise TypeError("Value is abstract; use a concrete kind or Value.of()")
        self._payload = self._check(payload)

    @classmethod
    def _check(cls, payload):
        raise NotImplementedError

    @property
    def payload(self):
        if self.type.listed:
            return list(self._payload)
        return self._payload

    @staticmethod
    def of(object, /):
        """
        Infer the value kind from a python object.

        - Value instances are returned as-is.
        - bool → BoolValue, int → IntValue, float → FloatValue, str → StringValue.
        - lists/tuples of str/int/float become the matching list kind; an empty
          list becomes an empty StringListValue; ints mixed with floats become floats.

        Raises
        - TypeError: for anything else.
        """
        if isinstance(object, Value):
            return object
        if isinstance(object, bool):
            return BoolValue(object)
        if isinstance(object, int):
            return IntValue(object)
        if isinstance(object, float):
            return FloatValue(object)
        if isinstance(object, str):
            return StringValue(object)
        if isinstance(object, list | tuple):
            if all(isinstance(item, str) for item in object):
                return StringListValue(object)
            if any(isinstance(item, bool) for item in object):
                raise TypeError("bool lists are not a supported value type")
            if all(isinstance(item, int) for item in object):
                return IntListValue(object)
            if all(isinstance(item, int | float) for item in object):
                return FloatListValue([float(item) for item in object])
        raise TypeError(f"unsupported value type: {type(object).__name__}")

    def _project(self, type, /):
        if self.type is type:
            return self.payload
        return type.zero()

    def string(self):
        return self._project(ValueType.STRING)

    def string_list(self):
        return self._project(ValueType.STRING_LIST)

    def int(self):
        return self._project(ValueType.INT)

    def int_list(self):
        return self._project(ValueType.INT_LIST)

    def float(self):
        return self._project(ValueType.FLOAT)

    def float_list(self):
        return self._project(ValueType.FLOAT_LIST)

    def bool(self):
        return self._project(ValueType.BOOL)

    def to_args(self):
        """
        Return the value as input tokens (used to write canonical values back into
        the input and to replay recorded invocations).
        """
        match self.type:
            case ValueType.STRING:
                return [self._payload]
            case ValueType.STRING_LIST:
                return list(self._payload)
            case ValueType.BOOL:
                return ["true" if self._payload else "false"]
            case ValueType.INT | ValueType.FLOAT:
                return [repr(self._payload)]
            case _:
                return [repr(item) for item in self._payload]

    def to_json(self):
        return {"Type": self.type.value, self.type.value: self.payload}

    @staticmethod
    def from_json(object, /):
        """
        Build a Value from its serialized form (a mapping or a JSON string).

        Raises
        - ValueError: for unknown kinds or a missing payload.
        """
        if isinstance(object, str | bytes):
            object = json.loads(object)
        try:
            type = ValueType(object["Type"])
        except (KeyError, TypeError, ValueError):
            raise ValueError(f"unknown value type in {object!r}") from None
        try:
            return _VARIANTS[type](object[type.value])
        except KeyError:
            raise ValueError(f"missing {type.value!r} payload in {object!r}") from None

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self.type is other.type and self._payload == other._payload

    def __hash__(self):
        return hash((self.type, self._payload))

    def __str__(self):
        match self.type:
            case ValueType.STRING:
                return self._payload
            case ValueType.INT:
                return "%d" % self._payload
            case ValueType.FLOAT:
                return _format_float(self._payload)
            case ValueType.BOOL:
                return "true" if self._payload else "false"
            case ValueType.FLOAT_LIST:
                return ", ".join(map(_format_float, self._payload))
            case _:
                return ", ".join(map(str, self._payload))

    def __repr__(self):
        return f"{type(self).__name__}({self.payload!r})"


class StringValue(Value):
    __slots__ = ()
    type = ValueType.STRING

    @classmethod
    def _check(cls, payload):
        if not isinstance(payload, str):
            raise TypeError("StringValue payload must be a string")
        return payload


class StringListValue(Value):
    __slots__ = ()
    type = ValueType.STRING_LIST

    @classmethod
    def _check(cls, payload):
        payload = tuple(payload)
        if not all(isinstance(item, str) for item in payload):
            raise TypeError("StringListValue payload must only contain strings")
        return payload


class IntValue(Value):
    __slots__ = ()
    type = ValueType.INT

    @classmethod
    def _check(cls, payload):
        if not isinstance(payload, int) or isinstance(payload, bool):
            raise TypeError("IntValue payload must be an integer")
        return payload


class IntListValue(Value):
    __slots__ = ()
    type = ValueType.INT_LIST

    @classmethod
    def _check(cls, payload):
        payload = tuple(payload)
        if not all(isinstance(item, int) and not isinstance(item, bool) for item in payload):
            raise TypeError("IntListValue payload must only contain integers")
        return payload


class FloatValue(Value):
    __slots__ = ()
    type = ValueType.FLOAT

    @classmethod
    def _check(cls, payload):
        if not isinstance(payload, int | float) or isinstance(payload, bool):
            raise TypeError("FloatValue payload must be a number")
        return float(payload)


class FloatListValue(Value):
    __slots__ = ()
    type = ValueType.FLOAT_LIST

    @classmethod
    def _check(cls, payload):
        payload = tuple(payload)
        if not all(isinstance(item, int | float) and not isinstance(item, bool) for item in payload):
            raise TypeError("FloatListValue payload must only contain numbers")
        return tuple(map(float, payload))


class BoolValue(Value):
    __slots__ = ()
    type = ValueType.BOOL

    @classmethod
    def _check(cls, payload):
        if not isinstance(payload, bool):
            raise TypeError("BoolValue payload must be a boolean")
        return payload


_VARIANTS = {
    ValueType.STRING: StringValue,
    ValueType.STRING_LIST: StringListValue,
    ValueType.INT: IntValue,
    ValueType.INT_LIST: IntListValue,
    ValueType.FLOAT: FloatValue,
    ValueType.FLOAT_LIST: FloatListValue,
    ValueType.BOOL: BoolValue,
}

_ELEMENTS = {
    ValueType.STRING_LIST: ValueType.STRING,
    ValueType.INT_LIST: ValueType.INT,
    ValueType.FLOAT_LIST: ValueType.FLOAT,
}


class Data:
    """
    Per-invocation, insertion-ordered store of typed values.

    Created empty by the engines, written by processors as they run, discarded when
    the call returns. Entries are never removed; a later set() on the same key
    overwrites the earlier value.
    """

    def __init__(self, values=None, /):
        self._values = {}
        for key, value in (values or {}).items():
            self.set(key, value)

    def set(self, key, value, /):
        """
        Store value under key. Raw python objects are converted with Value.of().
        """
        if not isinstance(key, str):
            raise TypeError("Data keys must be strings")
        self._values[key] = Value.of(value)

    def get(self, key, /):
        return self._values.get(key)

    def has(self, key, /):
        return key in self._values

    def keys(self):
        return list(self._values)

    def items(self):
        return list(self._values.items())

    def _project(self, key, type):
        if (value := self._values.get(key)) is None:
            return type.zero()
        return value._project(type)

    def string(self, key, /):
        return self._project(key, ValueType.STRING)

    def string_list(self, key, /):
        return self._project(key, ValueType.STRING_LIST)

    def int(self, key, /):
        return self._project(key, ValueType.INT)

    def int_list(self, key, /):
        return self._project(key, ValueType.INT_LIST)

    def float(self, key, /):
        return self._project(key, ValueType.FLOAT)

    def float_list(self, key, /):
        return self._project(key, ValueType.FLOAT_LIST)

    def bool(self, key, /):
        return self._project(key, ValueType.BOOL)

    def regexp(self, key, /):
        """Compile the string stored under key (pair with the is_regex validator)."""
        return re.compile(self.string(key))

    def regexp_list(self, key, /):
        return [re.compile(pattern) for pattern in self.string_list(key)]

    def __contains__(self, key):
        return key in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        if not isinstance(other, Data):
            return NotImplemented
        return self._values == other._values

    def __repr__(self):
        return f"Data({self._values!r})"


class ExecuteData:
    """
    Work queued while a graph is executed.

    - executor: closures f(output, data) run in order after a successful traversal.
    - executable: shell lines for a sourcing wrapper to evaluate.
    - function_wrap: whether a wrapper should run executable inside a function.
    """

    def __init__(self, executor=(), executable=(), function_wrap=False):
        self.executor = list(executor)
        self.executable = list(executable)
        self.function_wrap = function_wrap

    def __repr__(self):
        return (f"ExecuteData(executor={self.executor!r}, executable={self.executable!r}, "
                f"function_wrap={self.function_wrap!r})")


__all__ = (
    "ValueType",
    "Value",
    "StringValue",
    "StringListValue",
    "IntValue",
    "IntListValue",
    "FloatValue",
    "FloatListValue",
    "BoolValue",
    "Data",
    "ExecuteData",
    "BOOL_STRINGS",
)
