"""
Trellis aliases: user-defined shorthands for the leading arguments of a sub-graph.

AliasNode(name, aliasable, node)
- "cmd a ALIAS ARGS...": ARGS are run through node (stopping quietly where node
  runs out of arguments); the tokens it consumed, after conversion, are saved
  as ALIAS in the aliasable's group name.
- "cmd d ALIAS..." deletes, "cmd g ALIAS..." prints, "cmd l" lists and
  "cmd s REGEXP..." searches the aliases of the group.
- "cmd ARGS...": when the first token is an alias it is replaced by its values,
  then node runs. Completing the first word suggests the sub-commands above.

Aliaser(alias, cli, *values)
- A shell-level alias: running it runs cli with values in front of the given
  arguments, and completing it passes values as passthrough tokens.

Persisting the mapping is up to the Aliasable; MemoryAliases keeps it in memory.
"""
import logging
import re

from . import engine
from .arguments import Arg, ListArg
from .completion import Completion
from .faults import ExtraArgsError, NotEnoughArgsError
from .graph import BranchNode, Processor, serial_nodes
from .output import IgnoreErrOutput
from .processors import ExecutorProcessor
from .validators import min_length
from .values import ExecuteData

logger = logging.getLogger(__name__)

ALIAS_ARG = "ALIAS"
REGEXP_ARG = "REGEXP"


class Aliasable:
    """what an AliasNode stores its aliases in."""

    def aliases(self):
        """the mutable mapping of group name → {alias: values}."""
        raise NotImplementedError

    def mark_changed(self):
        """called after the mapping was modified."""
        raise NotImplementedError


class MemoryAliases(Aliasable):
    """an Aliasable keeping groups in a dict; changed tells whether it was modified."""

    def __init__(self, entries=None, /):
        self.entries = {} if entries is None else entries
        self.changed = False

    def aliases(self):
        return self.entries

    def mark_changed(self):
        self.changed = True


def _line(alias, values):
    return f"{alias}: {' '.join(values)}"


class _AliasGroup:

    def __init__(self, name, aliasable, node):
        self.name = name
        self.aliasable = aliasable
        self.node = node

    @property
    def group(self):
        return self.aliasable.aliases().get(self.name)

    def lines(self):
        return sorted(_line(alias, values) for alias, values in (self.group or {}).items())

    def completor(self, payload, data):
        return Completion(sorted(self.group or ()), distinct=True)

    def add(self, input, output, data, execute_data):
        alias = data.string(ALIAS_ARG)
        if alias in (self.group or {}):
            raise output.stderrf("Alias \"%s\" already exists\n", alias)

        snapshot = input.snapshot()
        quiet = IgnoreErrOutput(output, lambda error: isinstance(error, NotEnoughArgsError))
        try:
            engine.execute_graph(self.node, input, quiet, data, ExecuteData())
        except NotEnoughArgsError:
            pass
        if not input.fully_processed():
            raise output.err(ExtraArgsError(input.remaining()))

        if not (values := input.get_snapshot(snapshot)):
            raise output.stderrf("Alias \"%s\" must stand for at least one argument\n", alias)
        self.aliasable.aliases().setdefault(self.name, {})[alias] = values
        self.aliasable.mark_changed()
        logger.debug("alias %r of %r set to %r", alias, self.name, values)

    def delete(self, output, data):
        if not self.group:
            raise output.stderrln("Alias group has no aliases yet.")
        for alias in data.string_list(ALIAS_ARG):
            if alias not in self.group:
                output.stderrf("Alias \"%s\" does not exist\n", alias)
                continue
            del self.group[alias]
            self.aliasable.mark_changed()

    def get(self, output, data):
        if self.group is None:
            raise output.stderrf("No aliases exist for alias type \"%s\"\n", self.name)
        for alias in data.string_list(ALIAS_ARG):
            if (values := self.group.get(alias)) is None:
                output.stderrf("Alias \"%s\" does not exist\n", alias)
            else:
                output.stdoutln(_line(alias, values))

    def list(self, output, data):
        for line in self.lines():
            output.stdoutln(line)

    def search(self, output, data):
        try:
            patterns = [re.compile(pattern) for pattern in data.string_list(REGEXP_ARG)]
        except re.error as error:
            raise output.stderrf("Invalid regexp: %s\n", error)
        for line in self.lines():
            if all(pattern.search(line) for pattern in patterns):
                output.stdoutln(line)


class _AliasAdder(Processor):

    def __init__(self, group):
        self.group = group

    def execute(self, input, output, data, execute_data):
        self.group.add(input, output, data, execute_data)

    def complete(self, input, data):
        return engine.complete_graph(self.group.node, input, data, check_input=False)


class _AliasExpander(Processor):
    """replaces a leading alias token with the values it stands for."""

    def __init__(self, group):
        self.group = group

    def expand(self, input):
        if (token := input.peek()) is None:
            return
        if (values := (self.group.group or {}).get(token)) is None:
            return
        logger.debug("expanding alias %r to %r", token, values)
        input.rewrite_at(0, values[-1])
        input.push_front(*values[:-1])

    def execute(self, input, output, data, execute_data):
        self.expand(input)

    def complete(self, input, data):
        self.expand(input)
        return None


def AliasNode(name, aliasable, node, /):
    """Wrap node so that aliases of its leading arguments can be managed and used."""
    group = _AliasGroup(name, aliasable, node)
    aliases = ListArg(ALIAS_ARG, "", 1, completor=group.completor)
    return BranchNode(
        {
            "a": serial_nodes(Arg(ALIAS_ARG, validators=[min_length(1)]), _AliasAdder(group)),
            "d": serial_nodes(aliases, ExecutorProcessor(group.delete)),
            "g": serial_nodes(aliases, ExecutorProcessor(group.get)),
            "l": serial_nodes(ExecutorProcessor(group.list)),
            "s": serial_nodes(ListArg(REGEXP_ARG, ""), ExecutorProcessor(group.search)),
        },
        default=serial_nodes(_AliasExpander(group), node),
    )


class Aliaser:
    """A shell alias standing for cli followed by values."""

    def __init__(self, alias, cli, /, *values):
        self.alias = alias
        self.cli = cli
        self.values = values

    def argv(self, args=(), /):
        """the argument vector cli receives when the alias is run with args."""
        return [*self.values, *args]

    def autocomplete(self, node, comp_line, /, data=None):
        """suggestions for comp_line typed after the alias."""
        return engine.autocomplete(node, comp_line, passthrough=self.values, data=data)

    def __repr__(self):
        return f"Aliaser({self.alias!r}, {self.cli!r}, *{list(self.values)!r})"


__all__ = (
    "Aliasable",
    "MemoryAliases",
    "AliasNode",
    "Aliaser",
)
