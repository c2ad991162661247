"""
Dotted field-path access for nested records.

Paths address nested fields the same way server field errors do,
e.g. "auszugsadresse.plz" or "line_items.0.description".
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Optional

_MISSING = object()


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(segment, _MISSING)
    if isinstance(container, (list, tuple)) and segment.isdigit():
        index = int(segment)
        return container[index] if index < len(container) else _MISSING
    return _MISSING


def get_value(record: Any, path: Optional[str], default: Any = None) -> Any:
    """
    Read the value at ``path``.

    Returns ``default`` as soon as a segment is missing or its parent is not
    a container; never raises for malformed records.
    """
    if record is None or not path:
        return default

    current = record
    for segment in path.split("."):
        current = _child(current, segment)
        if current is _MISSING:
            return default
    return current


def set_value(record: Any, path: str, value: Any) -> Any:
    """
    Return a copy of ``record`` with ``value`` stored at ``path``.

    Only the containers along the path are copied; sibling branches are
    shared with the original. Missing intermediate objects are created as
    empty dicts. ``record`` itself is never mutated.

    List and tuple parents are copied as lists. An index equal to the
    length appends; anything further out raises IndexError.
    """
    if not path:
        raise ValueError("Field path must not be empty")
    return _assign(record, path.split("."), value)


def _assign(container: Any, segments: List[str], value: Any) -> Any:
    head, rest = segments[0], segments[1:]

    if isinstance(container, (list, tuple)) and head.isdigit():
        updated_list = list(container)
        index = int(head)
        if index > len(updated_list):
            raise IndexError(
                f"Index {index} is past the end of a list of length {len(updated_list)}"
            )
        if index == len(updated_list):
            updated_list.append(_assign(None, rest, value) if rest else value)
        else:
            updated_list[index] = _assign(updated_list[index], rest, value) if rest else value
        return updated_list

    updated = dict(container) if isinstance(container, Mapping) else {}
    updated[head] = _assign(updated.get(head), rest, value) if rest else value
    return updated
