# python
"""
Stock processor tests.

Scope
- SimpleProcessor / super_simple_processor.
- Executable lines, function wrapping and EchoExecuteData.
- PrintlnProcessor.
- InputTransformer and file_number_transformer().

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from trellis import (
    Arg,
    BufferedOutput,
    Data,
    EchoExecuteData,
    ExecutableProcessor,
    InputTransformer,
    ListArg,
    PrintlnProcessor,
    ProcessorError,
    SimpleProcessor,
    execute,
    file_number_transformer,
    function_wrap,
    get_usage,
    parse_args,
    serial_nodes,
    simple_executable_processor,
    super_simple_processor,
)


class TestSimpleProcessors(TestCase):
    """processors built from callables."""

    def testSimpleProcessorDescription(self):
        node = serial_nodes(SimpleProcessor(description="does things"))
        self.assertEqual(str(get_usage(node)), "does things")

    def testSuperSimpleProcessorWritesItsErrors(self):
        def explode(input, data):
            raise ValueError("boom")

        with BufferedOutput() as output:
            with self.assertRaises(ValueError):
                execute(serial_nodes(super_simple_processor(explode)), parse_args([]), output)
        self.assertEqual(output.stderr_text, "boom\n")

    def testSuperSimpleProcessorSeesTheInput(self):
        def shout(input, data):
            data.set("WORD", input.pop().upper())

        data = Data()
        with BufferedOutput() as output:
            execute(serial_nodes(super_simple_processor(shout)), parse_args(["hi"]), output, data=data)
        self.assertEqual(data.string("WORD"), "HI")

    def testPrintln(self):
        with BufferedOutput() as output:
            execute(serial_nodes(PrintlnProcessor("hello")), parse_args([]), output)
        self.assertEqual(output.stdout_text, "hello\n")


class TestExecutable(TestCase):
    """shell lines for a sourcing wrapper."""

    def testExecutableLines(self):
        node = serial_nodes(
            Arg("DIR"),
            ExecutableProcessor(lambda output, data: [f"cd {data.string('DIR')}"]),
            simple_executable_processor("ls", "pwd"),
            function_wrap(),
        )
        with BufferedOutput() as output:
            execute_data = execute(node, parse_args(["/tmp"]), output)
        self.assertEqual(execute_data.executable, ["cd /tmp", "ls", "pwd"])
        self.assertTrue(execute_data.function_wrap)

    def testEchoExecuteData(self):
        node = serial_nodes(simple_executable_processor("x", "y"), EchoExecuteData())
        with BufferedOutput() as output:
            execute(node, parse_args([]), output)
        self.assertEqual(output.stdout_text, "x\ny\n")

    def testEchoExecuteDataFormatToStderr(self):
        node = serial_nodes(simple_executable_processor("x", "y"), EchoExecuteData(stderr=True, format="run:\n%s\n"))
        with BufferedOutput() as output:
            execute(node, parse_args([]), output)
        self.assertEqual(output.stdout_text, "")
        self.assertEqual(output.stderr_text, "run:\nx\ny\n")


class TestInputTransformer(TestCase):
    """rewriting tokens before they are parsed."""

    def testFileNumber(self):
        data = Data()
        node = serial_nodes(file_number_transformer(), Arg("FILE"), Arg("LINE", type=int))
        with BufferedOutput() as output:
            execute(node, parse_args(["main.py:12"]), output, data=data)
        self.assertEqual(data.string("FILE"), "main.py")
        self.assertEqual(data.int("LINE"), 12)

    def testFileNumberTooManyParts(self):
        node = serial_nodes(file_number_transformer(), Arg("FILE"))
        with BufferedOutput() as output:
            with self.assertRaises(ProcessorError) as context:
                execute(node, parse_args(["a:b:c"]), output)
        self.assertEqual(str(context.exception), "Expected either 1 or 2 parts, got 3")
        self.assertEqual(output.stderr_text, "Expected either 1 or 2 parts, got 3\n")

    def testUpToIndexCountsTransformedTokens(self):
        input = parse_args(["a:1", "b:2", "c:3"])
        with BufferedOutput() as output:
            file_number_transformer(2).transform(input, output, Data())
        self.assertEqual(input.remaining(), ["a", "1", "b", "2", "c:3"])

    def testNegativeUpToIndexTransformsEverything(self):
        data = Data()
        node = serial_nodes(
            InputTransformer(lambda output, data, token: token.split(":"), -1),
            ListArg("A", "", 1),
        )
        with BufferedOutput() as output:
            execute(node, parse_args(["a:1", "b:2"]), output, data=data)
        self.assertEqual(data.string_list("A"), ["a", "1", "b", "2"])

    def testEmptyTransformation(self):
        transformer = InputTransformer(lambda output, data, token: [])
        with BufferedOutput() as output:
            with self.assertRaises(ProcessorError):
                transformer.transform(parse_args(["x"]), output, Data())
        self.assertEqual(output.stderr_text, "input transformer returned no values\n")


if __name__ == "__main__":
    unittest.main()
