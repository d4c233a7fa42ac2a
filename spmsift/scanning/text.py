"""Line-oriented scanning primitives shared by every source detector.

Brace counting is a heuristic, not a parser. A small tokenizer skips braces
inside double-quoted string literals, quoted single characters, and anything
after a ``//`` line comment. Block comments (``/* ... */``) and multi-line
string literals (``\"\"\"``) are not recognised, so braces inside them are
still counted.
"""

from __future__ import annotations

import re
from typing import List, Pattern, Sequence, Union


def contains(line: str, literal: str) -> bool:
    return literal in line


def matches(line: str, pattern: Union[str, Pattern[str]]) -> bool:
    if isinstance(pattern, str):
        return re.search(pattern, line) is not None
    return pattern.search(line) is not None


def is_blank_or_comment(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("//")


def strip_line_comment(line: str) -> str:
    """Return the code portion of ``line``, dropping a trailing ``//`` comment."""
    end = _code_end(line)
    return line[:end]


def brace_delta(line: str) -> int:
    """Count of ``{`` minus ``}`` outside string literals and line comments."""
    delta = 0
    for char in _code_chars(line):
        if char == "{":
            delta += 1
        elif char == "}":
            delta -= 1
    return delta


def closing_brace_count(line: str) -> int:
    return sum(1 for char in _code_chars(line) if char == "}")


def extract_block(lines: Sequence[str], start: int = 0) -> List[str]:
    """Return the brace-delimited block beginning at ``lines[start]``.

    Lines are accumulated while summing :func:`brace_delta`. Once the running
    balance has been positive, the block ends at (and includes) the first
    line where it drops back to zero or below. An unterminated block runs to
    the end of the input.
    """
    block: List[str] = []
    balance = 0
    opened = False
    for line in lines[start:]:
        block.append(line)
        balance += brace_delta(line)
        if balance > 0:
            opened = True
        if opened and balance <= 0:
            break
    return block


def _code_chars(line: str) -> str:
    """Characters of ``line`` that are code (not inside literals or comments)."""
    out: List[str] = []
    index = 0
    length = len(line)
    in_string = False
    while index < length:
        char = line[index]
        if in_string:
            if char == "\\":
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            index += 1
            continue
        if char == "/" and line.startswith("//", index):
            break
        if char == "'" and index + 2 < length and line[index + 2] == "'":
            # quoted single character such as '{'
            index += 3
            continue
        out.append(char)
        index += 1
    return "".join(out)


def _code_end(line: str) -> int:
    index = 0
    length = len(line)
    in_string = False
    while index < length:
        char = line[index]
        if in_string:
            if char == "\\":
                index += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "/" and line.startswith("//", index):
            return index
        index += 1
    return length


__all__ = [
    "brace_delta",
    "closing_brace_count",
    "contains",
    "extract_block",
    "is_blank_or_comment",
    "matches",
    "strip_line_comment",
]
