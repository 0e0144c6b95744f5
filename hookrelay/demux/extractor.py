"""Extraction of concatenated top-level JSON objects from a text buffer."""

from __future__ import annotations

import re

# Only these characters can change brace depth or string state
_SIGNIFICANT = re.compile(r'[{}"\\]')


def _find_object_end(text: str, start: int) -> int:
    """Return the index of the ``}`` closing the object opened at ``start``.

    Returns -1 when the object is not complete yet.
    """
    depth = 0
    in_string = False
    escaped_index = -1

    for match in _SIGNIFICANT.finditer(text, start):
        i = match.start()
        if i == escaped_index:
            continue
        char = match.group()

        if char == "\\":
            if in_string:
                escaped_index = i + 1
            continue

        if char == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if char == "{":
            depth += 1
        else:
            depth -= 1
            if depth == 0:
                return i

    return -1


def extract_json_objects(buffer: str) -> tuple[list[str], str]:
    """Split complete ``{...}`` objects off the front of ``buffer``.

    Braces and quotes inside JSON strings (including escaped quotes) do not
    affect the brace depth. Text in front of an extracted object is
    discarded. Scanning stops at the first object without a matching ``}``;
    everything after the last extracted object is returned as the remainder.

    Returns:
        A tuple of (extracted objects in order, remainder).
    """
    extracted: list[str] = []
    remainder = buffer

    while True:
        start = remainder.find("{")
        if start == -1:
            break
        end = _find_object_end(remainder, start)
        if end == -1:
            break
        extracted.append(remainder[start:end + 1])
        remainder = remainder[end + 1:]

    return extracted, remainder
