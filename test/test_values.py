# python
"""
Value and Data behavioral tests.

Scope
- Value kinds: inference, kind-aware equality, token and text forms, JSON form.
- ValueType: conversion of raw tokens, zero values, unsupported types.
- Data: typed accessors (zero value on a missing key or another kind).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from trellis import (
    BoolValue,
    ConversionError,
    Data,
    ExecuteData,
    FloatListValue,
    FloatValue,
    IntListValue,
    IntValue,
    StringListValue,
    StringValue,
    Value,
    ValueType,
)


class TestValue(TestCase):
    """the Value sum type."""

    def testInference(self):
        self.assertEqual(Value.of("a"), StringValue("a"))
        self.assertEqual(Value.of(3), IntValue(3))
        self.assertEqual(Value.of(2.5), FloatValue(2.5))
        self.assertEqual(Value.of(True), BoolValue(True))
        self.assertEqual(Value.of(["a", "b"]), StringListValue(["a", "b"]))
        self.assertEqual(Value.of([1, 2]), IntListValue([1, 2]))
        self.assertEqual(Value.of([1, 2.5]), FloatListValue([1.0, 2.5]))

    def testUnsupportedPayloads(self):
        with self.assertRaises(TypeError):
            Value.of({"a": 1})
        with self.assertRaises(TypeError):
            Value.of([True, False])
        with self.assertRaises(TypeError):
            IntValue(True)
        with self.assertRaises(TypeError):
            Value("abstract")

    def testKindsNeverCompareEqual(self):
        self.assertNotEqual(IntValue(0), FloatValue(0.0))
        self.assertNotEqual(StringListValue([]), IntListValue([]))
        self.assertEqual(len({IntValue(1), IntValue(1), FloatValue(1.0)}), 2)

    def testPayloadListsAreCopies(self):
        value = StringListValue(["a"])
        value.payload.append("b")
        self.assertEqual(value.payload, ["a"])

    def testAccessorOfAnotherKindReturnsZero(self):
        value = IntValue(7)
        self.assertEqual(value.int(), 7)
        self.assertEqual(value.string(), "")
        self.assertEqual(value.float_list(), [])
        self.assertIs(value.bool(), False)

    def testToArgs(self):
        self.assertEqual(StringValue("x").to_args(), ["x"])
        self.assertEqual(IntValue(12).to_args(), ["12"])
        self.assertEqual(FloatValue(3).to_args(), ["3.0"])
        self.assertEqual(BoolValue(False).to_args(), ["false"])
        self.assertEqual(IntListValue([1, 2]).to_args(), ["1", "2"])

    def testStr(self):
        self.assertEqual(str(FloatValue(1.5)), "1.50")
        self.assertEqual(str(StringListValue(["a", "b"])), "a, b")
        self.assertEqual(str(FloatListValue([1, 2])), "1.00, 2.00")
        self.assertEqual(str(BoolValue(True)), "true")

    def testJson(self):
        self.assertEqual(IntListValue([1, 2]).to_json(), {"Type": "IntList", "IntList": [1, 2]})
        self.assertEqual(Value.from_json('{"Type": "String", "String": "hi"}'), StringValue("hi"))
        with self.assertRaises(ValueError):
            Value.from_json({"Type": "Nope"})
        with self.assertRaises(ValueError):
            Value.from_json({"Type": "Int"})


class TestValueType(TestCase):
    """conversion of raw tokens."""

    def testOf(self):
        self.assertIs(ValueType.of(int), ValueType.INT)
        self.assertIs(ValueType.of(float, listed=True), ValueType.FLOAT_LIST)
        with self.assertRaises(TypeError):
            ValueType.of(bool, listed=True)
        with self.assertRaises(TypeError):
            ValueType.of(bytes)

    def testConvertScalar(self):
        self.assertEqual(ValueType.INT.convert(["42"]), IntValue(42))
        self.assertEqual(ValueType.BOOL.convert(["t"]), BoolValue(True))
        self.assertEqual(ValueType.STRING.convert([]), StringValue(""))

    def testConvertList(self):
        self.assertEqual(ValueType.FLOAT_LIST.convert(["1", "2.5"]), FloatListValue([1.0, 2.5]))

    def testConversionErrors(self):
        with self.assertRaises(ConversionError) as context:
            ValueType.INT.convert(["four"])
        self.assertEqual(str(context.exception), "invalid int value: \"four\"")
        self.assertEqual(context.exception.value, "four")
        with self.assertRaises(ConversionError):
            ValueType.BOOL.convert(["yes"])
        with self.assertRaises(ConversionError):
            ValueType.FLOAT_LIST.convert(["1", "x"])


class TestData(TestCase):
    """the per-invocation store."""

    def testSetCoercesPayloads(self):
        data = Data()
        data.set("N", 3)
        self.assertEqual(data.get("N"), IntValue(3))
        self.assertEqual(data.int("N"), 3)
        self.assertTrue(data.has("N"))
        self.assertIn("N", data)

    def testMissingKeys(self):
        data = Data()
        self.assertIsNone(data.get("missing"))
        self.assertEqual(data.string("missing"), "")
        self.assertEqual(data.int_list("missing"), [])
        self.assertIs(data.bool("missing"), False)

    def testWrongKindReadsZero(self):
        data = Data({"S": "text"})
        self.assertEqual(data.int("S"), 0)
        self.assertEqual(data.string("S"), "text")

    def testOrderAndOverwrite(self):
        data = Data()
        data.set("b", 1)
        data.set("a", 2)
        data.set("b", 3)
        self.assertEqual(data.keys(), ["b", "a"])
        self.assertEqual(data.int("b"), 3)
        self.assertEqual(len(data), 2)

    def testEquality(self):
        self.assertEqual(Data({"a": 1}), Data({"a": IntValue(1)}))
        self.assertNotEqual(Data({"a": 1}), Data({"a": 1.0}))

    def testKeysMustBeStrings(self):
        with self.assertRaises(TypeError):
            Data().set(1, "x")

    def testRegexp(self):
        data = Data({"P": "^a+$", "L": ["b", "c+"]})
        self.assertTrue(data.regexp("P").match("aaa"))
        self.assertEqual([pattern.pattern for pattern in data.regexp_list("L")], ["b", "c+"])

    def testExecuteDataDefaults(self):
        execute_data = ExecuteData()
        self.assertEqual(execute_data.executor, [])
        self.assertEqual(execute_data.executable, [])
        self.assertFalse(execute_data.function_wrap)


if __name__ == "__main__":
    unittest.main()
