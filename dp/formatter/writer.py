"""
Output buffer for the dp formatter.

Alignment is computed in two passes: a measure pass renders into a
forked writer, growing shared column and comment widths, and the emit
pass renders the same nodes into the real writer with the final widths.
A fork starts with the text and the number of the current output line,
so line queries give the same answers in both passes.

Author: xwest
"""

from typing import List


class Writer:
    """Append-only text buffer."""

    def __init__(self, line_prefix: str = "", line: int = 0):
        self._parts: List[str] = []
        self._line_prefix = line_prefix
        self._line = line

    def write(self, text: str):
        self._parts.append(text)
        self._line += text.count("\n")

    def getvalue(self) -> str:
        """Text written to this writer (excluding the line prefix of a fork)."""
        return "".join(self._parts)

    def fork(self) -> 'Writer':
        """Create a throwaway writer positioned like this one."""
        return Writer(self.current_line(), self._line)

    def line_number(self) -> int:
        """Zero-based number of the current output line."""
        return self._line

    def current_line(self) -> str:
        tail: List[str] = []
        for part in reversed(self._parts):
            i = part.rfind("\n")
            if i >= 0:
                tail.append(part[i + 1:])
                return "".join(reversed(tail))
            tail.append(part)
        tail.append(self._line_prefix)
        return "".join(reversed(tail))

    def current_line_len(self) -> int:
        """Length of the current output line in code points."""
        return len(self.current_line())

    def last_char(self) -> str:
        """Last written character, "" if there is none."""
        for part in reversed(self._parts):
            if part:
                return part[-1]
        return self._line_prefix[-1:]

    def pad(self, amount: int):
        if amount > 0:
            self.write(" " * amount)

    def indent(self, level: int):
        if level > 0:
            self.write("\t" * level)
