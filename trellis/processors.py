"""
Trellis stock processors.

- SimpleProcessor: a processor from plain execute/complete callables.
- Description: the one-line description shown in the usage text.
- ExecutorProcessor / ExecutableProcessor: queue a closure / shell lines in the
  ExecuteData (they only run once the whole graph was walked successfully).
- function_wrap(), EchoExecuteData, PrintlnProcessor: small helpers around the above.
- InputTransformer: rewrites the next input tokens before they get parsed
  (file_number_transformer() turns "file.py:12" into "file.py" "12").
"""
from .faults import ProcessorError
from .graph import Processor
from .output import ignore_all_output


class SimpleProcessor(Processor):
    """
    Parameters
    - execute: callable(input, output, data, execute_data) or None.
    - complete: callable(input, data) -> Completion | None, or None.
    - description: usage description set by this processor, if any.
    """

    def __init__(self, execute=None, complete=None, description=None):
        self._execute = execute
        self._complete = complete
        self.description = description

    def execute(self, input, output, data, execute_data):
        if self._execute is not None:
            self._execute(input, output, data, execute_data)

    def complete(self, input, data):
        if self._complete is None:
            return None
        return self._complete(input, data)

    def usage(self, input, data, usage):
        if self.description:
            usage.description = self.description


def super_simple_processor(function, /):
    """a processor running function(input, data) in both execution and completion."""

    def execute(input, output, data, execute_data):
        try:
            function(input, data)
        except Exception as error:
            raise output.err(error)

    def complete(input, data):
        function(input, data)
        return None

    return SimpleProcessor(execute, complete)


class Description(Processor):
    """sets the command description of the usage text."""

    def __init__(self, text, /, *args):
        self.text = text % args if args else text

    def usage(self, input, data, usage):
        usage.description = self.text

    def __repr__(self):
        return f"Description({self.text!r})"


class ExecutorProcessor(Processor):
    """queues function(output, data) to run after a successful walk."""

    def __init__(self, function, /):
        self.function = function

    def execute(self, input, output, data, execute_data):
        execute_data.executor.append(self.function)


class ExecutableProcessor(Processor):
    """
    Appends the shell lines returned by function(output, data) to the executable.

    Lines are meant to be sourced by a shell wrapper: declare variables with local and
    use return rather than exit.
    """

    def __init__(self, function, /):
        self.function = function

    def execute(self, input, output, data, execute_data):
        execute_data.executable.extend(self.function(output, data))


def simple_executable_processor(*lines):
    return ExecutableProcessor(lambda output, data: lines)


def function_wrap():
    """a processor asking the sourcing wrapper to run the executable in a function."""

    def execute(input, output, data, execute_data):
        execute_data.function_wrap = True

    return SimpleProcessor(execute)


class EchoExecuteData(Processor):
    """
    Writes the executable collected so far, one line per entry (or once through
    format, a %-format with a single %s receiving the newline-joined lines).
    """

    def __init__(self, stderr=False, format=None):
        self.stderr = stderr
        self.format = format

    def execute(self, input, output, data, execute_data):
        if self.format and execute_data.executable:
            text = self.format % "\n".join(execute_data.executable)
            if self.stderr:
                output.stderr(text)
            else:
                output.stdout(text)
            return
        for line in execute_data.executable:
            if self.stderr:
                output.stderrln(line)
            else:
                output.stdoutln(line)


class PrintlnProcessor(Processor):
    """writes text and a newline to stdout when executed."""

    def __init__(self, text, /):
        self.text = text

    def execute(self, input, output, data, execute_data):
        output.stdoutln(self.text)


class InputTransformer(Processor):
    """
    Rewrites upcoming tokens in place: each of the first up_to_index + 1 remaining
    tokens (every remaining token when up_to_index is negative) is replaced by the
    values function(output, data, token) returns.

    While completing, the last token (the one being completed) is left untouched and
    errors are raised without being written anywhere.

    Raises
    - ProcessorError: when function returns no value.
    """

    def __init__(self, function, /, up_to_index=0):
        self.function = function
        self.up_to_index = up_to_index

    def transform(self, input, output, data, complete=False):
        skip = 1 if complete else 0
        index = 0
        while index < input.num_remaining() - skip and (self.up_to_index < 0 or index <= self.up_to_index):
            values = list(self.function(output, data, input.peek_at(index)))
            if not values:
                raise output.err(ProcessorError("input transformer returned no values"))
            input.rewrite_at(index, values[-1])
            input.push_front_at(index, *values[:-1])
            index += len(values)

    def execute(self, input, output, data, execute_data):
        self.transform(input, output, data)

    def complete(self, input, data):
        with ignore_all_output() as output:
            self.transform(input, output, data, complete=True)
        return None


def file_number_transformer(up_to_index=0, /):
    """an InputTransformer splitting "path:line" tokens into "path" and "line"."""

    def split(output, data, token):
        parts = token.split(":")
        if len(parts) <= 2:
            return parts
        raise output.stderrf("Expected either 1 or 2 parts, got %d\n", len(parts))

    return InputTransformer(split, up_to_index)


__all__ = (
    "SimpleProcessor",
    "super_simple_processor",
    "Description",
    "ExecutorProcessor",
    "ExecutableProcessor",
    "simple_executable_processor",
    "function_wrap",
    "EchoExecuteData",
    "PrintlnProcessor",
    "InputTransformer",
    "file_number_transformer",
)
