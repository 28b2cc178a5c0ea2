"""
Trellis engines: the three walks over a command graph.

- execute(): runs processors and follows next() edges, then requires every token to
  be consumed and finally runs the queued executors.
- autocomplete(): asks each node for a Completion until one answers, following
  next() edges otherwise.
- get_usage(): collects a Usage tree, following usage_next() edges.

The *_graph() functions are the bare loops (shared with nodes that walk nested
graphs); process_or_*() dispatch a processor either as a step or, when it is itself
a Node, as a sub-graph.

run() is the command-line entry point built on execute().
"""
import logging
import sys

from . import graph
from .faults import CommandFault, ExtraArgsError, ProcessorError, is_usage_error
from .inputs import parse_args, parse_comp_line
from .output import ConsoleOutput, ignore_all_output
from .usage import Usage
from .values import Data, ExecuteData

logger = logging.getLogger(__name__)

USAGE_ERROR_HEADER = "======= Command Usage ======="


def _check_termination(output):
    if output.terminated:
        raise output.termination


# --- execution ---

def process_or_execute(processor, input, output, data, execute_data, /):
    if isinstance(processor, graph.Node):
        execute_graph(processor, input, output, data, execute_data)
    else:
        processor.execute(input, output, data, execute_data)


def execute_graph(root, input, output, data, execute_data, /):
    """
    Walk root in execution mode, without the final consumption check.

    Faults raised by edges are written to output before propagating; processors
    write their own. A termination requested on output stops the walk after the
    running processor returns.
    """
    node = root
    while node is not None:
        node.execute(input, output, data, execute_data)
        _check_termination(output)
        try:
            node = node.next(input, data)
        except CommandFault as fault:
            raise output.err(fault)


def execute(node, input, output, /, data=None):
    """
    Execute the graph rooted at node against input.

    Returns
    - the ExecuteData collected during the walk (executors already ran).

    Raises
    - the first fault of the walk, unchanged;
    - ExtraArgsError when tokens are left over (written to stderr, followed by the
      usage text); no executor runs in that case.
    """
    data = Data() if data is None else data
    execute_data = ExecuteData()

    logger.debug("executing %r with %r", node, input)
    execute_graph(node, input, output, data, execute_data)

    if not input.fully_processed():
        fault = ExtraArgsError(input.remaining())
        output.err(fault)
        show_usage_after_error(node, output)
        raise fault

    for executor in execute_data.executor:
        executor(output, data)
        _check_termination(output)
    return execute_data


# --- completion ---

def process_or_complete(processor, input, data, /):
    if isinstance(processor, graph.Node):
        return complete_graph(processor, input, data, check_input=False)
    return processor.complete(input, data)


def _complete_deferred(deferred, input, data):
    with ignore_all_output() as output:
        try:
            execute_graph(deferred.graph, input, output, data, ExecuteData())
        except Exception as error:
            raise ProcessorError(f"failed to execute DeferredCompletion graph: {error}") from error
    return deferred.function(data)


def complete_graph(root, input, data, /, check_input=True):
    """
    Walk root in completion mode.

    Returns
    - the first Completion a node produced (a deferred one is resolved first), or
      None when the graph ended without one.

    Raises
    - the first exception of the walk;
    - ExtraArgsError when check_input is set and the graph ended with tokens left.
    """
    node = root
    while node is not None:
        if (completion := node.complete(input, data)) is not None:
            if completion.deferred is not None:
                return _complete_deferred(completion.deferred, input, data)
            return completion
        node = node.next(input, data)

    if check_input:
        input.check_for_extra_args()
    return None


def autocomplete(node, comp_line, /, passthrough=(), data=None):
    """
    Return the shell suggestions for the completion line comp_line.

    passthrough tokens are inserted before the line's words (aliases).
    """
    input = parse_comp_line(comp_line, passthrough)
    completion = complete_graph(node, input, Data() if data is None else data)
    if completion is None:
        return []
    return completion.process(input)


# --- usage ---

def process_or_usage(processor, input, data, usage, /):
    if isinstance(processor, graph.Node):
        usage_graph(processor, input, data, usage)
    else:
        processor.usage(input, data, usage)


def usage_graph(root, input, data, usage, /):
    """walk root in usage mode, filling usage."""
    node = root
    while node is not None:
        node.usage(input, data, usage)
        node = node.usage_next(input, data)
    return usage


def get_usage(node, /, args=()):
    """
    Build the Usage of the graph rooted at node.

    args select a path first (e.g. the usage of one sub-command); leftover tokens
    are not an error here.
    """
    return usage_graph(node, parse_args(args), Data(), Usage())


def show_usage_after_error(node, output, /):
    """write the usage text of node to stderr, under a header."""
    try:
        usage = get_usage(node)
    except CommandFault as fault:
        output.stderrf("\n%s\nfailed to get command usage: %s\n", USAGE_ERROR_HEADER, fault)
        return
    if text := str(usage).strip():
        output.stderrf("\n%s\n%s\n", USAGE_ERROR_HEADER, text)


# --- entry point ---

def run(node, /, argv=None, output=None, colorful=True, fancy=False):
    """
    Execute node with argv (sys.argv[1:] by default) and return an exit status.

    Behavior
    - 0 on success, 1 on any CommandFault (already written to stderr by then);
    - usage faults are followed by the usage text (extra args already include it);
    - an output created here is a ConsoleOutput (colorful and fancy are its fault
      rendering switches) and is closed before returning.
    """
    argv = sys.argv[1:] if argv is None else argv
    owned = output is None
    if owned:
        output = ConsoleOutput(colorful=colorful, fancy=fancy)
    try:
        execute(node, parse_args(argv), output)
    except CommandFault as fault:
        logger.debug("execution failed: %r", fault)
        if is_usage_error(fault) and not isinstance(fault, ExtraArgsError):
            show_usage_after_error(node, output)
        return 1
    finally:
        if owned:
            output.close()
    return 0


__all__ = (
    "execute",
    "execute_graph",
    "process_or_execute",
    "autocomplete",
    "complete_graph",
    "process_or_complete",
    "get_usage",
    "usage_graph",
    "process_or_usage",
    "show_usage_after_error",
    "run",
    "USAGE_ERROR_HEADER",
)
