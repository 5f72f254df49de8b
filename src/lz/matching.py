"""Glob matching on '/'-separated relative paths.

Supported syntax: ``*`` (within one path segment), ``?``, ``[...]`` classes
with ``!`` or ``^`` negation, ``{a,b}`` alternatives, ``\\`` escapes, and
``**`` as a whole segment matching any number of directories, including none
(``**/*.rs`` matches both ``b.rs`` and ``sub/c.rs``).
"""

import os
import re
from dataclasses import dataclass

from lz.errors import GlobSyntaxError

# Matching follows the platform's path case rules and is fixed for the run.
CASE_INSENSITIVE = os.path.normcase("A") == "a"


@dataclass(slots=True, frozen=True)
class GlobMatcher:
    """A compiled --filter pattern."""

    pattern: str
    regex: re.Pattern[str]

    def matches(self, relative_path: str) -> bool:
        """Check a relative path against the whole pattern."""
        return self.regex.fullmatch(relative_path.replace("\\", "/")) is not None


def compile_glob(pattern: str, case_insensitive: bool = CASE_INSENSITIVE) -> GlobMatcher:
    """
    Compile a glob pattern.

    Raises:
        GlobSyntaxError: if the pattern is empty or malformed.
    """
    if not pattern:
        raise GlobSyntaxError(pattern, "empty pattern")
    flags = re.IGNORECASE if case_insensitive else 0
    try:
        regex = re.compile(_translate(pattern), flags)
    except re.error as exc:
        raise GlobSyntaxError(pattern, str(exc)) from exc
    return GlobMatcher(pattern=pattern, regex=regex)


def _translate(pattern: str) -> str:
    out: list[str] = []
    in_group = False
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "*":
            if pattern.startswith("**", i):
                j = i + 2
                whole_segment = (i == 0 or pattern[i - 1] == "/") and (j == n or pattern[j] == "/")
                if whole_segment and j < n:
                    out.append("(?:.*/)?")
                    i = j + 1
                    continue
                if whole_segment:
                    out.append(".*")
                    i = j
                    continue
                i = j
            else:
                i += 1
            out.append("[^/]*")
            continue
        if c == "?":
            out.append("[^/]")
        elif c == "[":
            i = _translate_class(pattern, i, out)
            continue
        elif c == "{":
            if in_group:
                raise GlobSyntaxError(pattern, "nested alternatives are not supported")
            in_group = True
            out.append("(?:")
        elif c == "," and in_group:
            out.append("|")
        elif c == "}" and in_group:
            in_group = False
            out.append(")")
        elif c == "\\":
            if i + 1 == n:
                raise GlobSyntaxError(pattern, "dangling escape")
            i += 1
            out.append(re.escape(pattern[i]))
        else:
            out.append(re.escape(c))
        i += 1
    if in_group:
        raise GlobSyntaxError(pattern, "unclosed alternative group")
    return "".join(out)


def _translate_class(pattern: str, start: int, out: list[str]) -> int:
    """Translate ``[...]`` starting at ``start``; return the index after ``]``."""
    i = start + 1
    negate = i < len(pattern) and pattern[i] in "!^"
    if negate:
        i += 1
    body: list[str] = []
    # A ']' right after the opening bracket is a literal member.
    if i < len(pattern) and pattern[i] == "]":
        body.append("\\]")
        i += 1
    while i < len(pattern) and pattern[i] != "]":
        c = pattern[i]
        if c == "-":
            body.append("-")
        else:
            body.append(re.escape(c))
        i += 1
    if i >= len(pattern):
        raise GlobSyntaxError(pattern, "unclosed character class")
    if not body:
        raise GlobSyntaxError(pattern, "empty character class")
    # Like * and ?, a class never matches the separator
    out.append("(?!/)[" + ("^" if negate else "") + "".join(body) + "]")
    return i + 1
