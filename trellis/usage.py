"""
Trellis usage tree and its text rendering.

A Usage is filled by the processors of a graph while the usage engine walks it:
- description: one line of prose shown above the usage line.
- tokens / flags: the words of the usage line (arguments first, then flags).
- subsections: one Usage per branch of a BranchNode, drawn below the line.
- sections: section → key → [values] (Arguments, Flags, Symbols, ...).

str(usage) renders

    <usage line>
    ┃
    ┣━━ <branch usage line>
    ┃
    ┗━━ <branch usage line>

    Arguments:
      NAME: description

Sections of subsections are merged into the parent's when rendering; a subsection's
entry replaces the parent's entry with the same key.
"""
ARGUMENTS = "Arguments"
FLAGS = "Flags"
SYMBOLS = "Symbols"

BRANCH_SYMBOL = "<"

_PRE_ITEM = "┃   "
_MIDDLE_ITEM = "┣━━ "
_FINAL_ITEM = "┗━━ "
_FINAL_POST_ITEM = "    "


class Usage:

    def __init__(self, description=None, tokens=(), flags=()):
        self.description = description
        self.tokens = list(tokens)
        self.flags = list(flags)
        self.subsections = []
        self.sections = {}

    def add_section(self, section, key, /, *values):
        """append values to section[key]."""
        self.sections.setdefault(section, {}).setdefault(key, []).extend(values)

    def set_section(self, section, key, /, *values):
        """replace section[key] with values."""
        self.sections.setdefault(section, {})[key] = list(values)

    def _branch_index(self):
        if BRANCH_SYMBOL not in self.tokens:
            return 0
        before = self.tokens[:self.tokens.index(BRANCH_SYMBOL)]
        return len(" ".join(before)) + (1 if before else 0)

    def _render(self, lines, pre, item, post, sections):
        for section, entries in self.sections.items():
            for key, values in entries.items():
                sections.setdefault(section, {})[key] = list(values)

        if self.description:
            lines.append(pre + self.description)

        line = " ".join(self.tokens + self.flags)
        lines.append(item + line)

        if not self.subsections:
            return lines

        if index := self._branch_index():
            lines.append(post + "┏" + "━" * (index - 1) + "┛")
        lines.append(post + "┃")

        for position, subsection in enumerate(self.subsections):
            final = position == len(self.subsections) - 1
            subsection._render(
                lines,
                post + _PRE_ITEM,
                post + (_FINAL_ITEM if final else _MIDDLE_ITEM),
                post + (_FINAL_POST_ITEM if final else _PRE_ITEM),
                sections
            )
            if not final:
                lines.append((post + _PRE_ITEM).rstrip())
        return lines

    def __str__(self):
        sections = {}
        lines = self._render([], "", "", "", sections)

        if sections:
            lines.append("")
            for section in sorted(sections):
                lines.append(f"{section}:")
                entries = sections[section]
                if section == FLAGS:
                    # "[c] name" and "    name" both sort by the full flag name
                    keys = sorted(entries, key=lambda key: key[4:])
                else:
                    keys = sorted(entries)
                for key in keys:
                    for position, value in enumerate(entries[key]):
                        if position == 0:
                            lines.append(f"  {key}: {value}")
                        else:
                            lines.append(f"    {value}")
                lines.append("")

        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines)

    def __repr__(self):
        return f"Usage(tokens={self.tokens!r}, flags={self.flags!r}, subsections={len(self.subsections)})"


__all__ = (
    "Usage",
    "ARGUMENTS",
    "FLAGS",
    "SYMBOLS",
    "BRANCH_SYMBOL",
)
