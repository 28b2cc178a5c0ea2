"""
Trellis file arguments: completion of paths from the filesystem.

FileCompletor(directory="", ...)
- Completes the last token as a path: entries of its directory (relative paths
  are resolved against directory, the current directory by default) whose name
  starts with the typed basename, ignoring case. Directories get a trailing "/".
- A single match is completed in full. When it is a directory, a second
  "<dir>/_" suggestion keeps the shell from adding a space after it.
- Several matches sharing more letters than typed are reduced to that common
  prefix (plus the "_" variant); otherwise they are listed as they are.
- Options: pattern (names must match), file_types (allowed suffixes, e.g. ".py"),
  ignore_files, ignore_directories, distinct (skip paths given earlier in a list
  argument) and ignore(full_path, name, data) -> bool.

FileArg / FileListArg
- Arguments completed with a FileCompletor whose values are made absolute;
  FileArg also checks that the file exists.
"""
import os

from .arguments import Arg, ListArg
from .completion import Completion
from .faults import ProcessorError
from .inputs import UNBOUNDED
from .validators import file_exists

SUFFIX = "_"


def _autofill(typed, names, /):
    """the common prefix of names (ignoring case) when it is longer than typed."""
    position = len(typed)
    while all(len(name) > position for name in names) and len({name[position].lower() for name in names}) == 1:
        position += 1
    if position <= len(typed):
        return None
    spelling = next((name for name in names if name.startswith(typed)), names[0])
    return spelling[:position]


class FileCompletor:

    def __init__(self, directory="", /, *, pattern=None, file_types=(), ignore_files=False, ignore_directories=False,
                 distinct=False, ignore=None):
        self.directory = directory
        self.pattern = pattern
        self.file_types = frozenset(file_types)
        self.ignore_files = ignore_files
        self.ignore_directories = ignore_directories
        self.distinct = distinct
        self.ignore = ignore

    def _absolute(self, path):
        return os.path.abspath(os.path.join(self.directory, path))

    def _names(self, directory, typed):
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as error:
            raise ProcessorError(f"failed to read dir: {error}") from error

        names = []
        for entry in entries:
            is_directory = entry.is_dir() or entry.is_symlink()
            if (is_directory and self.ignore_directories) or (not is_directory and self.ignore_files):
                continue
            if self.pattern is not None and not self.pattern.search(entry.name):
                continue
            if not entry.name.lower().startswith(typed.lower()):
                continue
            if is_directory:
                names.append(f"{entry.name}/")
            elif not self.file_types or os.path.splitext(entry.name)[1] in self.file_types:
                names.append(entry.name)
        return names

    def __call__(self, payload, data):
        """
        Raises
        - ProcessorError: when the directory can't be read.
        """
        tokens = payload if isinstance(payload, list) else [payload]
        last = tokens[-1] if tokens else ""
        head, separator, typed = last.rpartition("/")
        prefix = f"{head}{separator}"
        directory = prefix if os.path.isabs(prefix) else self._absolute(prefix)

        names = self._names(directory, typed)

        given, given_absolute = set(), set()
        if self.distinct:
            given = set(tokens[:-1])
            given_absolute = {os.path.abspath(token) for token in given}
        names = [
            name for name in names
            if f"{prefix}{name}" not in given
            and self._absolute(f"{prefix}{name}") not in given_absolute
            and not (self.ignore is not None and self.ignore(f"{prefix}{name}", name, data))
        ]
        if not names:
            return None

        if len(names) == 1:
            suggestions = [f"{prefix}{names[0]}"]
            if names[0].endswith("/"):
                suggestions.append(f"{suggestions[0]}{SUFFIX}")
            return Completion(suggestions, ignore_filter=True, case_insensitive_sort=True)

        if (common := _autofill(typed, names)) is None:
            return Completion(names, ignore_filter=True, case_insensitive_sort=True, dont_complete=True)
        return Completion([f"{prefix}{common}", f"{prefix}{common}{SUFFIX}"], ignore_filter=True,
                          case_insensitive_sort=True)

    def __repr__(self):
        return f"FileCompletor({self.directory!r})"


def _absolute_path(path, data):
    return os.path.abspath(path)


def _absolute_paths(paths, data):
    return [os.path.abspath(path) for path in paths]


def FileArg(name, description="", /, **options):
    """a path argument: completed from the filesystem, made absolute, required to exist."""
    options.setdefault("completor", FileCompletor())
    options["transformers"] = [_absolute_path, *options.get("transformers", ())]
    options["validators"] = [file_exists(), *options.get("validators", ())]
    return Arg(name, description, **options)


def FileListArg(name, description="", minimum=1, optional=UNBOUNDED, /, **options):
    """a list of paths, completed from the filesystem and made absolute."""
    options.setdefault("completor", FileCompletor())
    options["transformers"] = [_absolute_paths, *options.get("transformers", ())]
    return ListArg(name, description, minimum, optional, **options)


__all__ = (
    "FileCompletor",
    "FileArg",
    "FileListArg",
)
