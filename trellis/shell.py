"""
Trellis shell commands: processors whose value comes from a bash script.

ShellCommand(name, script, type=str, ...)
- Runs script (a string or a sequence of lines) with bash under "set -e" and
  "set -o pipefail", splits stdout into stripped lines and converts them into a
  Value of the requested kind (scalar kinds read the first line), which is then
  validated and stored in Data under name.
- format_args: callables(data) -> str; when given, the script is %-formatted with
  their results before it runs.
- hide_stderr: the script's stderr and the processor's faults are not written.
- forward_stdout: the script's stdout is also written to the output.
- run_on_complete: run the script during completion as well (default), so that
  later completors can read the value.

The process is started by a runner (SubprocessRunner by default): any callable
taking the full script and returning an object with returncode, stdout and stderr.
Tests inject a fake one.

Setting TRELLIS_DEBUG in the environment logs every script before it runs.
"""
import logging
import os
import subprocess

from .completion import Completion
from .faults import CommandFault, ProcessorError, ValidationError
from .graph import Processor
from .output import ignore_all_output
from .values import ValueType

logger = logging.getLogger(__name__)

PRELUDE = (
    "set -e",
    "set -o pipefail",
)


def debug_mode():
    return bool(os.environ.get("TRELLIS_DEBUG"))


class SubprocessRunner:
    """runs scripts with the bash executable found on PATH."""

    def __init__(self, executable="bash"):
        self.executable = executable

    def __call__(self, script, /):
        return subprocess.run([self.executable, "-c", script], capture_output=True, text=True, check=False)


def output_lines(text, /):
    """stdout split into stripped lines; a trailing newline adds no empty line."""
    if not text:
        return []
    return [line.strip() for line in text.removesuffix("\n").split("\n")]


class ShellCommand(Processor):

    def __init__(self, name, script, /, type=str, *, listed=False, description="", validators=(), format_args=(),
                 runner=None, hide_stderr=False, forward_stdout=False, run_on_complete=True):
        self.name = name
        self.script = [script] if isinstance(script, str) else list(script)
        self.value_type = ValueType.of(type, listed)
        self.description = description
        self.validators = tuple(validators)
        self.format_args = tuple(format_args)
        self.runner = SubprocessRunner() if runner is None else runner
        self.hide_stderr = hide_stderr
        self.forward_stdout = forward_stdout
        self.run_on_complete = run_on_complete

    def get(self, data, /):
        value = data.get(self.name)
        if value is None or value.type is not self.value_type:
            return self.value_type.zero()
        return value.payload

    def contents(self, data, /):
        """
        The full script sent to the runner.

        Raises
        - ProcessorError: when a format argument fails.
        """
        contents = "\n".join([*PRELUDE, *self.script])
        if not self.format_args:
            return contents
        try:
            arguments = tuple(format_arg(data) for format_arg in self.format_args)
        except Exception as error:
            raise ProcessorError(f"failed to get string for bash formatting: {error}") from error
        return contents % arguments

    def run(self, output, data, /):
        """
        Run the script and return its converted, validated Value.

        Raises
        - ProcessorError: when the script can't be started or exits with an error.
        - ConversionError / ValidationError: for unexpected script output.
        """
        contents = self.contents(data)
        if debug_mode():
            logger.info("bash execution script:\n%s", contents)
        else:
            logger.debug("running bash command for %r", self.name)

        try:
            result = self.runner(contents)
        except OSError as error:
            raise ProcessorError(f"failed to execute bash command: {error}") from error

        if result.stderr and not self.hide_stderr:
            output.stderr(result.stderr)
        if result.stdout and self.forward_stdout:
            output.stdout(result.stdout)
        if result.returncode != 0:
            raise ProcessorError(f"failed to execute bash command: exit status {result.returncode}")

        value = self.value_type.convert(output_lines(result.stdout))
        for validator in self.validators:
            if (reason := validator.check(value.payload)) is not None:
                raise ValidationError(self.name, validator.name, reason)
        return value

    def execute(self, input, output, data, execute_data):
        try:
            data.set(self.name, self.run(output, data))
        except CommandFault as fault:
            if self.hide_stderr:
                raise
            raise output.err(fault)

    def complete(self, input, data):
        if self.run_on_complete:
            with ignore_all_output() as output:
                data.set(self.name, self.run(output, data))
        return None

    def usage(self, input, data, usage):
        if self.description:
            usage.description = self.description

    def __repr__(self):
        return f"ShellCommand({self.name!r})"


def shell_completor(*script, runner=None, **options):
    """
    A completor suggesting the stdout lines of script.

    options are Completion switches (case_insensitive, distinct, ...).
    """
    command = ShellCommand("", script, str, listed=True, runner=runner, hide_stderr=True)

    def completor(payload, data):
        with ignore_all_output() as output:
            try:
                lines = command.run(output, data).payload
            except CommandFault as fault:
                raise ProcessorError(f"failed to fetch autocomplete suggestions with bash command: {fault}") from fault
        return Completion(lines, **options)

    return completor


__all__ = (
    "ShellCommand",
    "SubprocessRunner",
    "shell_completor",
    "output_lines",
    "debug_mode",
)
