"""
Trellis input cursor: the mutable, history-aware view of the tokens being parsed.

Overview
- Input keeps every token cell it ever saw. Consuming a token only drops its index
  from the "remaining" list, so used() and snapshots can still see it later.
- The soft cursor (offset) lets a processor read and consume tokens further to the
  right without touching the ones in front of it (flags use this). All positional
  operations (peek_at, pop, pop_n, push_front_at, snapshot, remaining) are relative
  to the current offset.
- Snapshots stamp an integer id on every remaining cell; get_snapshot(id) returns
  the current values of the stamped cells, which makes it possible to record the
  exact tokens a sub-graph consumed (after any in-place rewriting).
- parse_comp_line() turns a shell completion line into an Input, honouring quotes
  and escaped spaces, and remembers an unterminated quote as the delimiter.

Notes
- Running out of tokens is never an error at this layer: pop()/peek() return None
  and pop_n() reports enough=False. Callers decide whether that is fatal.
"""
import contextlib

from .faults import ExtraArgsError
from .validators import neq

UNBOUNDED = ...

_QUOTES = frozenset("\"'")
_BREAKS = frozenset(" ")


class Token:
    """a single input cell: its (rewritable) value and the snapshots stamped on it."""
    __slots__ = ("value", "snapshots")

    def __init__(self, value, snapshots=()):
        self.value = value
        self.snapshots = set(snapshots)

    def __repr__(self):
        return f"Token({self.value!r})"


class Input:
    """
    Token cursor shared by every processor of a traversal.

    Parameters
    - tokens: the raw argument strings.
    - delimiter: the pending quote character of a completion line, if any.
    """

    def __init__(self, tokens=(), /, delimiter=None):
        self._cells = [Token(token) for token in tokens]
        self._remaining = list(range(len(self._cells)))
        self._offset = 0
        self._snapshots = 0
        self._breakers = []
        self.delimiter = delimiter

    def _at(self, index):
        return self._cells[self._remaining[index]]

    @property
    def offset(self):
        return self._offset

    @contextlib.contextmanager
    def run_at_offset(self, index, /):
        """
        Temporarily move the soft cursor index tokens to the right.

        The previous offset is restored on exit, even when the body raises.
        """
        previous = self._offset
        self._offset += index
        try:
            yield self
        finally:
            self._offset = previous

    @contextlib.contextmanager
    def breaking(self, *breakers):
        """
        Apply breakers to every pop_n() call made inside the block (on top of the
        breaker passed to the call itself).
        """
        self._breakers.extend(breakers)
        try:
            yield self
        finally:
            del self._breakers[len(self._breakers) - len(breakers):]

    def snapshot(self):
        """stamp every remaining cell with a fresh snapshot id and return it."""
        self._snapshots += 1
        for index in range(self._offset, len(self._remaining)):
            self._at(index).snapshots.add(self._snapshots)
        return self._snapshots

    def get_snapshot(self, id, /):
        """values of all cells (used or not) stamped with id, in input order."""
        return [cell.value for cell in self._cells if id in cell.snapshots]

    def num_snapshots(self):
        return self._snapshots

    def fully_processed(self):
        return self._offset >= len(self._remaining)

    def num_remaining(self):
        return max(len(self._remaining) - self._offset, 0)

    def remaining(self):
        return [self._cells[index].value for index in self._remaining[self._offset:]]

    def used(self):
        remaining = set(self._remaining)
        return [cell.value for index, cell in enumerate(self._cells) if index not in remaining]

    def converted_args(self):
        """every cell value (consumed or not) in input order, after rewriting."""
        return [cell.value for cell in self._cells]

    def peek(self):
        return self.peek_at(0)

    def peek_at(self, index, /):
        index += self._offset
        if index < self._offset or index >= len(self._remaining):
            return None
        return self._at(index).value

    def rewrite_at(self, index, value, /):
        """replace the value of the remaining token at index, keeping its snapshots."""
        index += self._offset
        if index < self._offset or index >= len(self._remaining):
            raise IndexError("input index out of range")
        self._at(index).value = value

    def push_front(self, *values):
        self.push_front_at(0, *values)

    def push_front_at(self, index, /, *values):
        """
        Insert values in front of the remaining token at index.

        New cells inherit the snapshot ids of the cell they are inserted before, so
        a snapshot taken earlier still covers tokens expanded in its range.
        """
        if not values:
            return
        with self.run_at_offset(index):
            start = len(self._cells)
            snapshots = ()
            if self._offset < len(self._remaining):
                start = self._remaining[self._offset]
                snapshots = self._cells[start].snapshots
            self._cells[start:start] = [Token(value, snapshots) for value in values]
            for position in range(self._offset, len(self._remaining)):
                self._remaining[position] += len(values)
            self._remaining[self._offset:self._offset] = range(start, start + len(values))

    def pop(self):
        return self.pop_at(0)

    def pop_at(self, index, /):
        cells, enough = self.pop_n(1, 0, at=index)
        if not enough:
            return None
        return cells[0].value

    def pop_n(self, n, optional=0, /, breaker=None, *, at=0):
        """
        Consume up to n + optional tokens (all of them when optional is UNBOUNDED).

        Returns
        - (cells, enough): the consumed Token cells (their value may be rewritten in
          place) and whether at least n tokens were consumed.

        Behavior
        - A breaker stops the collection at the first token it rejects; that token
          stays in the input unless the breaker discards it.
        """
        with self.run_at_offset(at):
            available = len(self._remaining) - self._offset
            shift = available if optional is UNBOUNDED else min(n + optional, available)
            if shift <= 0:
                return [], n == 0

            breakers = [breaker, *self._breakers] if breaker is not None else list(self._breakers)
            cells = []
            broken = None
            for index in range(self._offset, self._offset + shift):
                cell = self._at(index)
                if broken := next((b for b in breakers if b.breaks(cell.value)), None):
                    break
                cells.append(cell)
            del self._remaining[self._offset:self._offset + len(cells)]

            if broken is not None and broken.discard:
                del self._remaining[self._offset]
            return cells, len(cells) >= n

    def check_for_extra_args(self):
        """
        Raises
        - ExtraArgsError: when tokens are left at or after the current offset.
        """
        if not self.fully_processed():
            raise ExtraArgsError(self.remaining())

    def __repr__(self):
        return f"Input(remaining={self.remaining()!r}, used={self.used()!r}, offset={self._offset})"


def parse_args(tokens, /):
    """build an Input from an argument vector (no quote processing)."""
    return Input(tokens)


class _Words:
    def __init__(self):
        self.words = []
        self.current = []
        self.open = False

    def end(self):
        self.words.append("".join(self.current))
        self.current = []
        self.open = False


def parse_comp_line(line, /, passthrough=()):
    """
    Split a shell completion line into an Input.

    Behavior
    - Words are separated by spaces; single and double quotes group characters.
    - A backslash escapes a following space; before anything else it is kept.
    - A backslash ending the line is kept (the user is still typing the word).
    - The first word (the command name) is dropped; passthrough tokens are put in
      front of the remaining words.
    - A line ending between words (or holding only the command) gets an empty
      trailing token: that is the word being completed.
    - An unterminated quote is recorded as the input's delimiter.
    """
    words = _Words()
    state, quote, escaped_from = "space", None, None

    for char in line:
        if state == "backslash":
            if char != " ":
                words.current.append("\\")
            words.current.append(char)
            state = escaped_from
        elif state == "quote":
            if char == quote:
                state, quote = "word", None
            else:
                words.current.append(char)
        elif char in _BREAKS:
            if state == "word":
                words.end()
            state = "space"
        else:
            if state == "space":
                words.open = True
            if char in _QUOTES:
                state, quote = "quote", char
            elif char == "\\":
                state, escaped_from = "backslash", "word"
            else:
                words.current.append(char)
                state = "word"

    if state == "backslash":
        words.current.append("\\")
    if words.open:
        words.end()
        tokens = words.words
    else:
        tokens = words.words + [""]
    if len(tokens) == 1:
        tokens.append("")

    return Input([*passthrough, *tokens[1:]], delimiter=quote)


class ListBreaker:
    """
    Stops list collection (Input.pop_n) at the first token any validator rejects.

    Parameters
    - validators: objects with an accepts(token) predicate (see trellis.validators).
    - discard: also consume the breaking token.
    - usage: optional callable(usage) adding tokens/sections to the usage text.
    """

    def __init__(self, *validators, discard=False, usage=None):
        self.validators = validators
        self.discard = discard
        self._usage = usage

    def breaks(self, token, /):
        return any(not validator.accepts(token) for validator in self.validators)

    def usage(self, usage, /):
        if self._usage is not None:
            self._usage(usage)


def list_until(*validators, discard=False):
    """a breaker that ends the list once a token fails any of validators."""
    return ListBreaker(*validators, discard=discard)


def list_until_symbol(symbol, /, discard=False):
    """a breaker that ends the list at symbol, documenting the symbol in the usage."""
    def usage(usage):
        usage.tokens.append(symbol)
        usage.add_section("Symbols", symbol, "List breaker")

    return ListBreaker(neq(symbol), discard=discard, usage=usage)


__all__ = (
    "UNBOUNDED",
    "Token",
    "Input",
    "parse_args",
    "parse_comp_line",
    "ListBreaker",
    "list_until",
    "list_until_symbol",
)
