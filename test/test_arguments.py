# python
"""
Positional argument tests.

Scope
- Conversion to the value kinds and canonical write-back into the input.
- Optional / list / unbounded token counts, defaults.
- Validators and transformers, and the faults they produce.
- Constructor checks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from trellis import (
    UNBOUNDED,
    Arg,
    Argument,
    BoolArg,
    BufferedOutput,
    ConversionError,
    Data,
    ListArg,
    NotEnoughArgsError,
    OptionalArg,
    ProcessorError,
    ValidationError,
    execute,
    list_until_symbol,
    parse_args,
    positive,
    serial_nodes,
)


def run_node(*processors, args=(), data=None):
    """execute processors as a serial chain; return (data, input, stderr text)."""
    data = Data() if data is None else data
    input = parse_args(args)
    with BufferedOutput() as output:
        try:
            execute(serial_nodes(*processors), input, output, data=data)
        finally:
            output.flush()
    return data, input, output.stderr_text


class TestConversion(TestCase):
    """typed arguments."""

    def testStringArgument(self):
        data, _, _ = run_node(Arg("NAME"), args=["bob"])
        self.assertEqual(data.string("NAME"), "bob")

    def testIntIsWrittenBackCanonically(self):
        data, input, _ = run_node(Arg("N", type=int), args=["007"])
        self.assertEqual(data.int("N"), 7)
        self.assertEqual(input.converted_args(), ["7"])

    def testFloatAndBool(self):
        data, input, _ = run_node(Arg("F", type=float), BoolArg("B"), args=["2", "T"])
        self.assertEqual(data.float("F"), 2.0)
        self.assertIs(data.bool("B"), True)
        self.assertEqual(input.converted_args(), ["2.0", "true"])

    def testConversionFault(self):
        with self.assertRaises(ConversionError) as context:
            run_node(Arg("N", type=int), args=["x"])
        self.assertEqual(str(context.exception), "invalid int value: \"x\"")

    def testConversionFaultIsWritten(self):
        input = parse_args(["x"])
        with BufferedOutput() as output:
            with self.assertRaises(ConversionError):
                execute(serial_nodes(Arg("N", type=int)), input, output)
        self.assertEqual(output.stderr_text, "invalid int value: \"x\"\n")

    def testGetAndProvided(self):
        argument = Arg("N", type=int)
        data = Data()
        self.assertEqual(argument.get(data), 0)
        self.assertFalse(argument.provided(data))
        argument.set(4, data)
        self.assertEqual(argument.get(data), 4)
        self.assertTrue(argument.provided(data))


class TestCounts(TestCase):
    """optional and list arguments."""

    def testOptionalArgumentMissing(self):
        data, _, _ = run_node(OptionalArg("O"))
        self.assertFalse(data.has("O"))

    def testDefaults(self):
        data, _, _ = run_node(
            Arg("A"),
            OptionalArg("O", default="fallback"),
            OptionalArg("C", default=lambda data: data.string("A") + "!"),
            args=["hey"],
        )
        self.assertEqual(data.string("O"), "fallback")
        self.assertEqual(data.string("C"), "hey!")

    def testListArgument(self):
        data, _, _ = run_node(ListArg("L", "", 1, UNBOUNDED, type=int), args=["1", "2", "3"])
        self.assertEqual(data.int_list("L"), [1, 2, 3])

    def testListArgumentWithOptionalBound(self):
        data, input, _ = run_node(ListArg("L", "", 1, 1), Arg("REST"), args=["a", "b", "c"])
        self.assertEqual(data.string_list("L"), ["a", "b"])
        self.assertEqual(data.string("REST"), "c")

    def testListBreaker(self):
        data, _, _ = run_node(
            ListArg("L", "", 0, UNBOUNDED, breaker=list_until_symbol(";", discard=True)),
            Arg("AFTER"),
            args=["a", "b", ";", "c"],
        )
        self.assertEqual(data.string_list("L"), ["a", "b"])
        self.assertEqual(data.string("AFTER"), "c")

    def testPartialListIsStoredBeforeTheFault(self):
        data = Data()
        with self.assertRaises(NotEnoughArgsError) as context:
            run_node(ListArg("L", "", 2, 1), args=["a"], data=data)
        self.assertEqual(str(context.exception), "Argument \"L\" requires at least 2 arguments, got 1")
        self.assertEqual(data.string_list("L"), ["a"])


class TestChecks(TestCase):
    """validators and transformers."""

    def testValidatorFault(self):
        data = Data()
        with self.assertRaises(ValidationError) as context:
            run_node(Arg("N", type=int, validators=[positive()]), args=["-1"], data=data)
        self.assertEqual(str(context.exception), "validation for \"N\" failed: [Positive] value isn't positive")
        self.assertEqual(data.int("N"), -1)

    def testTransformers(self):
        data, input, _ = run_node(
            Arg("P", transformers=[lambda payload, data: payload.strip(), lambda payload, data: payload.upper()]),
            args=["  x "],
        )
        self.assertEqual(data.string("P"), "X")
        self.assertEqual(input.converted_args(), ["X"])

    def testFailingTransformer(self):
        def explode(payload, data):
            raise OSError("disk on fire")

        with self.assertRaises(ProcessorError) as context:
            run_node(Arg("P", transformers=[explode]), args=["x"])
        self.assertEqual(str(context.exception), "Custom transformer failed: disk on fire")


class TestConstruction(TestCase):
    """constructor checks."""

    def testNameIsRequired(self):
        with self.assertRaises(TypeError):
            Argument("")

    def testCountsAreChecked(self):
        with self.assertRaises(ValueError):
            Argument("A", "", -1)
        with self.assertRaises(ValueError):
            Argument("A", "", 1, -1)

    def testBoolListIsUnsupported(self):
        with self.assertRaises(TypeError):
            ListArg("B", type=bool)


if __name__ == "__main__":
    unittest.main()
