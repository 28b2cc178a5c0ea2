"""
Trellis command graph: processors, edges and the nodes built from them.

Model
- Processor: does the work of one step. execute() parses/acts, complete() may return
  a Completion to stop the completion walk, usage() describes itself.
- Edge: routes to the next node. next() is used by execution and completion;
  usage_next() by the usage engine (it may follow a different path, e.g. skip a
  wrapper that only makes sense at run time).
- Node: both at once. A processor that is itself a Node is walked as a sub-graph.

Building blocks
- SimpleNode(processor, edge) + SimpleEdge(node): the plain linked-list step.
- serial_nodes(*processors): a chain of SimpleNodes.
- BranchNode: routes on the next token (sub-commands), with synonyms and an
  optional default path.
- resolve_branch(): the one routine every BranchNode path (execute, complete,
  usage) uses to pick the child.

Notes
- Nodes keep no state across calls, so a graph can be walked any number of times
  (and shared between several parents). The one exception lives inside a single
  completion walk: a BranchNode that completed through its default tells its own
  next() to end the walk.
"""
import logging

from . import engine
from .completion import Completion
from .faults import BranchingError
from .usage import BRANCH_SYMBOL, SYMBOLS, Usage
from .values import Data

logger = logging.getLogger(__name__)


class Processor:
    """base processor: does nothing, completes nothing, documents nothing."""

    def execute(self, input, output, data, execute_data):
        pass

    def complete(self, input, data):
        return None

    def usage(self, input, data, usage):
        pass


class Edge:
    """base edge: the end of the graph."""

    def next(self, input, data):
        return None

    def usage_next(self, input, data):
        return self.next(input, data)


class Node(Processor, Edge):
    """a processor with an outgoing edge."""


class SimpleEdge(Edge):
    """an edge that always leads to node."""

    def __init__(self, node, /):
        self.node = node

    def next(self, input, data):
        return self.node

    def usage_next(self, input, data):
        return self.node


class SimpleNode(Node):
    """
    Node made of an optional processor and an optional edge.

    A missing processor is a no-op; a missing edge ends the walk.
    """

    def __init__(self, processor=None, edge=None):
        self.processor = processor
        self.edge = edge

    def execute(self, input, output, data, execute_data):
        if self.processor is not None:
            engine.process_or_execute(self.processor, input, output, data, execute_data)

    def complete(self, input, data):
        if self.processor is None:
            return None
        return engine.process_or_complete(self.processor, input, data)

    def usage(self, input, data, usage):
        if self.processor is not None:
            engine.process_or_usage(self.processor, input, data, usage)

    def next(self, input, data):
        if self.edge is None:
            return None
        return self.edge.next(input, data)

    def usage_next(self, input, data):
        if self.edge is None:
            return None
        return self.edge.usage_next(input, data)

    def __repr__(self):
        return f"SimpleNode({self.processor!r})"


def serial_nodes(*processors):
    """
    Chain processors into a linked list of SimpleNodes and return its head.

    With no processors, a single processor-less node is returned.
    """
    if not processors:
        return SimpleNode()
    head = node = SimpleNode(processors[0])
    for processor in processors[1:]:
        node.edge = SimpleEdge(following := SimpleNode(processor))
        node = following
    return head


def branch_synonyms(mapping, /):
    """invert {"name": ["s1", "s2"]} into {"s1": "name", "s2": "name"}."""
    return {synonym: name for name, synonyms in mapping.items() for synonym in synonyms}


def _split(key):
    name, *synonyms = key.split(" ")
    return name, synonyms


class BranchNode(Node):
    """
    Sub-command router.

    Parameters
    - branches: mapping of branch key → node. A key is a name optionally followed by
      space separated inline synonyms ("delete d rm").
    - synonyms: extra synonym → name mapping (see branch_synonyms()).
    - default: node followed when the next token is missing or is no branch.
    - default_completion: when completing the branching token, complete through
      default instead of suggesting branch names. When default produces nothing
      the walk ends there, and leftover tokens are reported as extra arguments.
    - hide_usage: only show the default's usage (no branch listing).

    Raises
    - ValueError: when a synonym targets an unknown branch name.
    """

    def __init__(self, branches, /, synonyms=None, default=None, default_completion=False, hide_usage=False):
        self.branches = dict(branches)
        self.synonyms = dict(synonyms or {})
        self.default = default
        self.default_completion = default_completion
        self.hide_usage = hide_usage
        self._completed_default = False

        names = self.names()
        for synonym, name in self.synonyms.items():
            if name not in names:
                raise ValueError(f"synonym {synonym!r} refers to unknown branch {name!r}")

    def names(self):
        """canonical branch names, sorted."""
        return sorted(_split(key)[0] for key in self.branches)

    def aliases(self):
        """canonical name → sorted synonyms (inline ones and registered ones)."""
        aliases = {}
        for key in self.branches:
            name, synonyms = _split(key)
            aliases[name] = list(synonyms)
        for synonym, name in self.synonyms.items():
            aliases[name].append(synonym)
        return {name: sorted(synonyms) for name, synonyms in aliases.items()}

    def execute(self, input, output, data, execute_data):
        # routing happens in next()
        pass

    def next(self, input, data):
        if self._completed_default:
            # default was already walked by complete()
            self._completed_default = False
            return None
        return resolve_branch(self, input)

    def complete(self, input, data):
        if input.num_remaining() > 1:
            return None

        if self.default_completion:
            completion = None
            if self.default is not None:
                completion = engine.complete_graph(self.default, input, data, check_input=False)
            self._completed_default = completion is None
            return completion

        return Completion(self.names(), case_insensitive=True)

    def usage(self, input, data, usage):
        if input.num_remaining() > 0 or self.hide_usage:
            return

        usage.set_section(SYMBOLS, BRANCH_SYMBOL, "Start of subcommand branches")
        usage.tokens.append(BRANCH_SYMBOL)

        if self.default is not None:
            engine.usage_graph(self.default, input, data, usage)

        children = {_split(key)[0]: node for key, node in self.branches.items()}
        for name, synonyms in sorted(self.aliases().items()):
            subsection = Usage()
            engine.usage_graph(children[name], input, Data(), subsection)
            subsection.tokens.insert(0, f"[{name}|{'|'.join(synonyms)}]" if synonyms else name)
            usage.subsections.append(subsection)

    def usage_next(self, input, data):
        if input.num_remaining() > 0:
            return resolve_branch(self, input)
        if self.hide_usage:
            return self.default
        return None

    def __repr__(self):
        return f"BranchNode({self.names()!r})"


def resolve_branch(branch, input, /):
    """
    Pick the child of branch for the next input token.

    Behavior
    1. no token: the default, or BranchingError when there is none;
    2. a registered synonym is translated to its branch name;
    3. a token equal to a branch name or inline synonym is consumed and that branch's
       node returned;
    4. anything else: the default (the token is left for it), or BranchingError.
    """
    if (token := input.peek()) is None:
        if branch.default is None:
            raise BranchingError(branch.names())
        return branch.default

    token = branch.synonyms.get(token, token)
    for key, node in branch.branches.items():
        name, synonyms = _split(key)
        if token == name or token in synonyms:
            input.pop()
            logger.debug("branch %r selected by token %r", name, token)
            return node

    if branch.default is not None:
        logger.debug("token %r is no branch; following the default", token)
        return branch.default
    raise BranchingError(branch.names())


__all__ = (
    "Processor",
    "Edge",
    "Node",
    "SimpleNode",
    "SimpleEdge",
    "serial_nodes",
    "BranchNode",
    "branch_synonyms",
    "resolve_branch",
)
