"""
Trellis cache node: remembers the arguments of previous runs of a sub-graph.

CacheNode(name, cachable, node, history=100)
- "cmd ARGS...": node runs with ARGS; the tokens it consumed (after conversion) are
  appended to cachable.cache()[name] unless they equal the latest entry. Only the
  last history entries are kept and cachable.mark_changed() is called.
- "cmd": node runs with the latest cached entry pushed in front of the input.
- "cmd history" / "cmd h": prints the cached entries (--cache-len|-n sets how many,
  --cache-prefix|-p prefixes every line with the tokens in front of "history").

Runs that fail on missing or leftover arguments are not cached (repeating them
can't succeed); any other failure still is.

Persisting the mapping is up to the Cachable; MemoryCache keeps it in memory.
"""
import logging

from . import engine
from .faults import CommandFault, ExtraArgsError, NotEnoughArgsError
from .flags import BoolFlag, Flag, FlagProcessor
from .graph import BranchNode, Node, branch_synonyms, serial_nodes
from .processors import SimpleProcessor
from .usage import SYMBOLS

logger = logging.getLogger(__name__)

DEFAULT_HISTORY = 100
CACHE_SYMBOL = "^"

history_length_flag = Flag("cache-len", "n", "Number of historical elements to display from the cache",
                           type=int, default=1)
print_prefix_flag = BoolFlag("cache-prefix", "p", "Include prefix arguments in print statement")

_PREFIX = "CACHE_PREFIX_DATA"


class Cachable:
    """what a CacheNode stores its entries in."""

    def cache(self):
        """the mutable mapping of cache name → list of token lists (oldest first)."""
        raise NotImplementedError

    def mark_changed(self):
        """called after the mapping was modified."""
        raise NotImplementedError


class MemoryCache(Cachable):
    """a Cachable keeping entries in a dict; changed tells whether it was modified."""

    def __init__(self, entries=None, /):
        self.entries = {} if entries is None else entries
        self.changed = False

    def cache(self):
        return self.entries

    def mark_changed(self):
        self.changed = True


class _CommandCache(Node):

    def __init__(self, name, cachable, node, history):
        self.name = name
        self.cachable = cachable
        self.node = node
        self.history = history

    def _store(self, tokens):
        entries = self.cachable.cache().get(self.name, [])
        if entries and entries[-1] == tokens:
            return
        entries = [*entries, tokens][-self.history:]
        self.cachable.cache()[self.name] = entries
        self.cachable.mark_changed()
        logger.debug("cached %r for %r (%d entries)", tokens, self.name, len(entries))

    def execute(self, input, output, data, execute_data):
        if input.fully_processed():
            if entries := self.cachable.cache().get(self.name):
                logger.debug("replaying %r for %r", entries[-1], self.name)
                input.push_front(*entries[-1])
            engine.execute_graph(self.node, input, output, data, execute_data)
            return

        snapshot = input.snapshot()
        try:
            engine.execute_graph(self.node, input, output, data, execute_data)
        except (ExtraArgsError, NotEnoughArgsError):
            raise
        except CommandFault:
            self._store(input.get_snapshot(snapshot))
            raise

        # leftover tokens fail the whole run once the graph ends
        if input.fully_processed():
            self._store(input.get_snapshot(snapshot))

    def complete(self, input, data):
        return engine.complete_graph(self.node, input, data, check_input=False)

    def usage(self, input, data, usage):
        usage.add_section(SYMBOLS, CACHE_SYMBOL, "Start of new cachable section")
        usage.tokens.append(CACHE_SYMBOL)

    def next(self, input, data):
        return None

    def usage_next(self, input, data):
        return self.node

    def print_history(self, input, output, data, execute_data):
        entries = self.cachable.cache().get(self.name, [])
        start = max(len(entries) - history_length_flag.get(data), 0)
        prefix = data.string(_PREFIX) if print_prefix_flag.get(data) else ""
        for entry in entries[start:]:
            output.stdoutf("%s%s\n", prefix, " ".join(entry))


def _record_prefix(input, output, data, execute_data):
    # everything in front of the "history" token
    used = input.used()[:-1]
    data.set(_PREFIX, f"{' '.join(used)} " if used else "")


def CacheNode(name, cachable, node, /, history=DEFAULT_HISTORY):
    """
    Wrap node so its runs are cached under name in cachable.

    Raises
    - ValueError: when history is not a positive integer.
    """
    if not isinstance(history, int) or history < 1:
        raise ValueError("history must be a positive integer")

    command_cache = _CommandCache(name, cachable, node, history)
    return BranchNode(
        {
            "history": serial_nodes(
                SimpleProcessor(_record_prefix),
                FlagProcessor(history_length_flag, print_prefix_flag),
                SimpleProcessor(command_cache.print_history),
            ),
        },
        synonyms=branch_synonyms({"history": ["h"]}),
        default=command_cache,
        default_completion=True,
        hide_usage=True,
    )


__all__ = (
    "Cachable",
    "MemoryCache",
    "CacheNode",
    "DEFAULT_HISTORY",
)
