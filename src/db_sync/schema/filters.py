"""Include/exclude glob filtering of relation names.

Pure logic -- no I/O.  Pattern syntax:

- ``*`` matches any run of characters (including none)
- ``?`` matches exactly one character
- ``[...]`` matches one character from a class of single characters and
  ``lo-hi`` ranges; ``[^...]`` negates the class
- ``\\`` escapes the next character

There are no path-segment semantics and matching is case-sensitive.  A
malformed pattern (unclosed ``[``, empty class, dangling ``-`` or a
trailing ``\\``) falls back to exact string equality.

Usage:
    from db_sync.schema.filters import is_in_scope

    is_in_scope("logs_2024", include=[], exclude=["logs_*"])   # False
    is_in_scope("user1", include=["user?"], exclude=[])        # True
"""

import re
from collections.abc import Sequence
from functools import lru_cache


def _class_member(pattern: str, i: int) -> tuple[str, int] | None:
    """Read one class character at *i*; None if the pattern is malformed there."""
    if i >= len(pattern) or pattern[i] in "-]":
        return None
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            return None
    return pattern[i], i + 1


def _translate_class(pattern: str, i: int) -> tuple[str, int] | None:
    """Translate the class starting just after ``[`` at index *i*.

    Returns the regex fragment and the index after the closing ``]``.
    """
    n = len(pattern)
    negated = i < n and pattern[i] == "^"
    if negated:
        i += 1

    members: list[str] = []
    count = 0
    while True:
        if count > 0 and i < n and pattern[i] == "]":
            i += 1
            break
        member = _class_member(pattern, i)
        if member is None:
            return None
        lo, i = member
        hi = lo
        if i < n and pattern[i] == "-":
            member = _class_member(pattern, i + 1)
            if member is None:
                return None
            hi, i = member
        count += 1
        if lo == hi:
            members.append(re.escape(lo))
        elif lo < hi:
            members.append(f"{re.escape(lo)}-{re.escape(hi)}")
        # A reversed range matches nothing

    if not members:
        return ("." if negated else "(?!)"), i
    return "[" + ("^" if negated else "") + "".join(members) + "]", i


def translate(pattern: str) -> str | None:
    """Translate a glob into an anchored regex, or None if it is malformed.

    Examples:
        >>> translate("user?")
        '(?s:user.)\\\\Z'
        >>> translate("a*[") is None
        True
    """
    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        char = pattern[i]
        i += 1
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "\\":
            if i >= n:
                return None
            parts.append(re.escape(pattern[i]))
            i += 1
        elif char == "[":
            translated = _translate_class(pattern, i)
            if translated is None:
                return None
            fragment, i = translated
            parts.append(fragment)
        else:
            parts.append(re.escape(char))
    return "(?s:" + "".join(parts) + ")\\Z"


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    regex = translate(pattern)
    if regex is None:
        return None
    return re.compile(regex)


def match_pattern(name: str, pattern: str) -> bool:
    """Return True if *name* matches the glob *pattern*.

    Examples:
        >>> match_pattern("users", "user??")
        False
        >>> match_pattern("tmp_table", "tmp_*")
        True
        >>> match_pattern("abc[", "a*[")
        False
    """
    compiled = _compile(pattern)
    if compiled is None:
        return name == pattern
    return compiled.match(name) is not None


def _matches_any(name: str, patterns: Sequence[str]) -> bool:
    return any(match_pattern(name, pattern) for pattern in patterns)


def is_in_scope(
    name: str,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> bool:
    """Decide whether a relation takes part in the sync.

    With a non-empty *include* list the name must match at least one include
    pattern; in every case it must match none of the *exclude* patterns.

    Args:
        name: Relation name.
        include: Include patterns (empty or None means "everything").
        exclude: Exclude patterns.

    Returns:
        ``True`` if the relation is in scope.
    """
    if include and not _matches_any(name, include):
        return False
    return not _matches_any(name, exclude or ())
