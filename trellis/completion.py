"""
Trellis completion results and completors.

Completion
- The result a processor hands back while autocompleting: candidate suggestions and
  switches controlling how they are filtered, sorted and quoted.
- process(input) turns it into the final list of strings sent back to the shell.

DeferredCompletion
- Lets a completor depend on values parsed later in the command: the engine first
  runs graph (execution mode, output discarded) and then calls function(data).

Completors
- Arguments accept either a Completion (static suggestions) or a callable
  f(payload, data) -> Completion | None. run_completion() invokes either form and
  applies the distinct filter.
"""
from .values import BOOL_STRINGS


class DeferredCompletion:
    """
    Parameters
    - graph: node executed (with an output that discards everything) before completing.
    - function: callable(data) -> Completion | None producing the real completion.
    """

    def __init__(self, graph, function, /):
        self.graph = graph
        self.function = function

    def __repr__(self):
        return f"DeferredCompletion({self.graph!r}, {self.function!r})"


class Completion:
    """
    Options
    - suggestions: candidate strings.
    - ignore_filter: keep suggestions that don't start with the word being completed.
    - dont_complete: add a " " suggestion so the shell never auto-fills a common prefix.
    - case_insensitive: prefix filtering ignores case.
    - case_insensitive_sort: sort ignoring case (stable).
    - distinct: drop suggestions already given earlier in a list argument.
    - deferred: a DeferredCompletion to resolve instead of this completion.
    """

    def __init__(self, suggestions=(), /, *, ignore_filter=False, dont_complete=False, case_insensitive=False,
                 case_insensitive_sort=False, distinct=False, deferred=None):
        self.suggestions = list(suggestions)
        self.ignore_filter = ignore_filter
        self.dont_complete = dont_complete
        self.case_insensitive = case_insensitive
        self.case_insensitive_sort = case_insensitive_sort
        self.distinct = distinct
        self.deferred = deferred

    def clone(self, **overrides):
        suggestions = overrides.pop("suggestions", self.suggestions)
        options = {
            "ignore_filter": self.ignore_filter,
            "dont_complete": self.dont_complete,
            "case_insensitive": self.case_insensitive,
            "case_insensitive_sort": self.case_insensitive_sort,
            "distinct": self.distinct,
            "deferred": self.deferred,
        }
        return Completion(suggestions, **(options | overrides))

    def process(self, input, /):
        """
        Produce the shell-ready suggestions for input.

        Behavior
        - the word being completed is the last input cell (consumed or not);
        - filtering by prefix (unless ignore_filter), then sorting;
        - suggestions with spaces are wrapped in the pending quote delimiter, or have
          their spaces backslash-escaped when no quote is open;
        - dont_complete appends a single " ".
        """
        args = input.converted_args() if input is not None else []
        last = args[-1] if args else ""
        delimiter = input.delimiter if input is not None else None

        results = list(self.suggestions)
        if not self.ignore_filter:
            if self.case_insensitive:
                results = [result for result in results if result.lower().startswith(last.lower())]
            else:
                results = [result for result in results if result.startswith(last)]

        if self.case_insensitive_sort:
            results.sort(key=str.lower)
        else:
            results.sort()

        for index, result in enumerate(results):
            if " " in result:
                if delimiter is None:
                    results[index] = result.replace(" ", "\\ ")
                else:
                    results[index] = f"{delimiter}{result}{delimiter}"

        if self.dont_complete:
            results.append(" ")
        return results

    def __eq__(self, other):
        if not isinstance(other, Completion):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return f"Completion({self.suggestions!r})"


def simple_completor(*suggestions):
    """a completor always suggesting the given strings."""
    return Completion(suggestions)


def distinct_completor(*suggestions):
    """like simple_completor, skipping values already given to the list argument."""
    return Completion(suggestions, distinct=True)


def bool_completor():
    return Completion(BOOL_STRINGS)


def run_completion(completor, value, data, /):
    """
    Invoke completor (a Completion or a callable(payload, data)) for an argument Value.

    With distinct, every element of value except the last (the one being completed)
    is removed from the suggestions.
    """
    if completor is None:
        return None
    if isinstance(completor, Completion):
        completion = completor.clone()
    else:
        completion = completor(value.payload, data)
    if completion is None:
        return None

    if completion.distinct:
        given = set(value.to_args()[:-1])
        completion.suggestions = [suggestion for suggestion in completion.suggestions if suggestion not in given]
    return completion


__all__ = (
    "Completion",
    "DeferredCompletion",
    "simple_completor",
    "distinct_completor",
    "bool_completor",
    "run_completion",
)
