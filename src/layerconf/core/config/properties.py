"""
Line-oriented properties parser.

Yields ``(key, value)`` pairs in source order so callers can act on each pair
(for example an ``include`` directive) before the next one is read.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _ends_with_continuation(line: str) -> bool:
    count = 0
    for char in reversed(line):
        if char != "\\":
            break
        count += 1
    return count % 2 == 1


def _logical_lines(text: str) -> Iterator[str]:
    pending: List[str] = []
    for raw in text.splitlines():
        line = raw.lstrip(_WHITESPACE) if pending else raw
        if not pending:
            stripped = line.lstrip(_WHITESPACE)
            if not stripped or stripped[0] in "#!":
                continue
        if _ends_with_continuation(line):
            pending.append(line[:-1])
            continue
        pending.append(line)
        yield "".join(pending)
        pending = []
    if pending:
        yield "".join(pending)


def _unescape(text: str) -> str:
    out: List[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char != "\\" or index + 1 >= length:
            out.append(char)
            index += 1
            continue
        nxt = text[index + 1]
        if nxt == "u":
            digits = text[index + 2 : index + 6]
            if len(digits) != 4:
                raise ValueError(f"Malformed \\uxxxx encoding: {text!r}")
            try:
                out.append(chr(int(digits, 16)))
            except ValueError as exc:
                raise ValueError(f"Malformed \\uxxxx encoding: {text!r}") from exc
            index += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        index += 2
    return "".join(out)


def split_line(line: str) -> Tuple[str, str]:
    """Split one logical line into its raw (still escaped) key and value."""
    line = line.lstrip(_WHITESPACE)
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return key, rest


def iter_properties(text: str) -> Iterator[Tuple[str, str]]:
    """
    Iterate the key/value pairs of properties-file ``text``.

    Supports ``#``/``!`` comments, ``=``, ``:`` or whitespace separators,
    backslash line continuation and the usual escapes including ``\\uXXXX``.

    Raises:
        ValueError: on a malformed ``\\u`` escape.
    """
    for line in _logical_lines(text):
        key, value = split_line(line)
        yield _unescape(key), _unescape(value)


def parse_properties(text: str) -> dict:
    """Parse ``text`` into a dict, later keys overriding earlier ones."""
    return dict(iter_properties(text))


def split_list(value: str | None) -> List[str]:
    """Split a comma-separated value, trimming items and dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
