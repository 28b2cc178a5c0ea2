"""
Trellis output sinks: where processors write while a graph is executed.

Overview
- Output forwards stdout and stderr writes through two queues, each drained by its
  own thread, so a processor never blocks on the terminal. close() stops both
  forwarders and waits for them; flush() waits for everything queued so far.
- Writes to stderr return a ProcessorError carrying the same (stripped) text, so a
  processor can both report and fail in one statement:

      raise output.stderrf("unknown target %r\\n", name)

- err(fault) writes a fault to stderr and returns it unchanged (raise output.err(e)).
- terminate(fault) requests the end of the execution: the fault is written to
  stderr and recorded; the engine stops after the running processor returns and
  raises the recorded fault.

Flavours
- ConsoleOutput: the real terminal, through rich consoles; faults are rendered with
  their __rich__ form when colorful.
- BufferedOutput: collects the text (tests, nested runs).
- ignore_all_output(): discards everything (deferred completion graphs).
- IgnoreErrOutput: wraps another output and drops err() writes matched by filters.
"""
import logging
import queue
import threading

from rich.console import Console

from .faults import CommandFault, ProcessorError, report

logger = logging.getLogger(__name__)

_STOP = object()


class Output:
    """
    Base output: two queue-fed forwarder threads calling write_stdout/write_stderr.

    Subclasses implement the two sinks. Items are plain strings, or CommandFault
    instances queued by err()/terminate() so that a sink can render them richly.
    """

    def __init__(self):
        self._closed = False
        self.termination = None
        self._stdout = queue.Queue()
        self._stderr = queue.Queue()
        self._threads = (
            threading.Thread(target=self._forward, args=(self._stdout, self.write_stdout),
                             name="trellis-stdout", daemon=True),
            threading.Thread(target=self._forward, args=(self._stderr, self.write_stderr),
                             name="trellis-stderr", daemon=True),
        )
        for thread in self._threads:
            thread.start()

    @staticmethod
    def _forward(channel, sink):
        # a failing sink loses its item, never the forwarder
        while True:
            item = channel.get()
            try:
                if item is _STOP:
                    return
                sink(item)
            except Exception:
                logger.exception("output sink %r failed on %r", sink, item)
            finally:
                channel.task_done()

    def write_stdout(self, item, /):
        raise NotImplementedError

    def write_stderr(self, item, /):
        raise NotImplementedError

    def _put(self, channel, item):
        if self._closed:
            raise RuntimeError("write to a closed output")
        channel.put(item)

    @property
    def terminated(self):
        return self.termination is not None

    @property
    def closed(self):
        return self._closed

    # --- stdout ---

    def stdout(self, text, /):
        self._put(self._stdout, text)

    def stdoutf(self, format, /, *args):
        self.stdout(format % args if args else format)

    def stdoutln(self, *objects):
        self.stdout(" ".join(map(str, objects)) + "\n")

    # --- stderr ---

    def stderr(self, text, /):
        """write text to stderr and return a ProcessorError with the same message."""
        self._put(self._stderr, text)
        return ProcessorError(text.strip())

    def stderrf(self, format, /, *args):
        return self.stderr(format % args if args else format)

    def stderrln(self, *objects):
        return self.stderr(" ".join(map(str, objects)) + "\n")

    def err(self, error, /):
        """write error to stderr and return it unchanged (None is ignored)."""
        if error is None:
            return None
        if isinstance(error, CommandFault):
            self._put(self._stderr, error)
        else:
            self._put(self._stderr, f"{error}\n")
        return error

    def annotate(self, error, message, /):
        """write "message: error" to stderr and return it as a ProcessorError."""
        if error is None:
            return None
        return self.stderrf("%s: %s\n", message, error)

    # --- termination ---

    def terminate(self, error, /):
        """
        Request the end of the execution with error (None is ignored).

        The error is written to stderr immediately; only the first request is kept.
        """
        if error is None:
            return
        if not isinstance(error, BaseException):
            raise TypeError("terminate() argument must be an exception")
        self.err(error)
        if self.termination is None:
            self.termination = error

    def terminatef(self, format, /, *args):
        self.terminate(ProcessorError((format % args if args else format).strip()))

    def tannotate(self, error, message, /):
        if error is not None:
            self.terminate(ProcessorError(f"{message}: {error}"))

    # --- lifecycle ---

    def flush(self):
        """block until every item queued so far reached its sink."""
        self._stdout.join()
        self._stderr.join()

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._stdout.put(_STOP)
        self._stderr.put(_STOP)
        for thread in self._threads:
            thread.join()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class ConsoleOutput(Output):
    """
    Output bound to the terminal through rich consoles.

    Parameters
    - colorful: render faults with colours and layout through report() (plain
      message otherwise).
    - fancy: draw colorful faults inside a panel.
    - stdout/stderr: consoles to write to (fresh stdout/stderr consoles by default).
    """

    def __init__(self, colorful=True, stdout=None, stderr=None, fancy=False):
        self.colorful = colorful
        self.fancy = fancy
        self.stdout_console = stdout if stdout is not None else Console()
        self.stderr_console = stderr if stderr is not None else Console(stderr=True)
        super().__init__()

    def _write(self, console, item):
        if isinstance(item, CommandFault):
            if self.colorful:
                report(item, console, fancy=self.fancy)
            else:
                console.out(f"{item}\n", end="", highlight=False)
            return
        console.out(item, end="", highlight=False)

    def write_stdout(self, item, /):
        self._write(self.stdout_console, item)

    def write_stderr(self, item, /):
        self._write(self.stderr_console, item)


class BufferedOutput(Output):
    """
    Output that keeps everything written, for tests and nested runs.

    Reading stdout_text/stderr_text flushes the queues first.
    """

    def __init__(self):
        self._out = []
        self._err = []
        super().__init__()

    def write_stdout(self, item, /):
        self._out.append(str(item) if not isinstance(item, CommandFault) else f"{item}\n")

    def write_stderr(self, item, /):
        self._err.append(str(item) if not isinstance(item, CommandFault) else f"{item}\n")

    @property
    def stdout_text(self):
        if not self._closed:
            self.flush()
        return "".join(self._out)

    @property
    def stderr_text(self):
        if not self._closed:
            self.flush()
        return "".join(self._err)

    def stdout_lines(self):
        return self.stdout_text.splitlines()

    def stderr_lines(self):
        return self.stderr_text.splitlines()


class _DiscardingOutput(Output):
    def write_stdout(self, item, /):
        pass

    def write_stderr(self, item, /):
        pass


def ignore_all_output():
    """an output that accepts every write and drops it."""
    return _DiscardingOutput()


class IgnoreErrOutput:
    """
    Wraps output and swallows err() writes for errors matched by any filter.

    The error is still returned to the caller; only the stderr write is skipped.
    Every other attribute is delegated to the wrapped output.
    """

    def __init__(self, output, /, *filters):
        self._output = output
        self._filters = filters

    def err(self, error, /):
        if error is not None and any(match(error) for match in self._filters):
            return error
        return self._output.err(error)

    def __getattr__(self, name):
        return getattr(self._output, name)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self._output.close()


__all__ = (
    "Output",
    "ConsoleOutput",
    "BufferedOutput",
    "IgnoreErrOutput",
    "ignore_all_output",
)
