"""Copy-on-write edits of JSON documents addressed by key/index paths.

A document is any JSON-compatible tree (dict, list, str, int, float, bool,
None). A path is a sequence of segments: ``str`` segments address mapping
keys, ``int`` segments address list positions.

    >>> update_nested({"a": {"b": "x"}}, ["a", "c", 0], "y")
    {'a': {'b': 'x', 'c': ['y']}}

Missing intermediate containers are created on demand, typed by the *next*
segment (``int`` -> list, ``str`` -> dict). Lists indexed past their end are
padded with ``None``. The input document is never mutated.
"""

import copy
import json
from typing import Any, Dict, List, Sequence, Union

from ._utils import logger
from .errors import InvalidPathError

JSONValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]
PathSegment = Union[str, int]
Path = Sequence[PathSegment]


def _is_index(segment: PathSegment) -> bool:
    return isinstance(segment, int) and not isinstance(segment, bool)


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _prepare_slot(container: Any, segment: PathSegment, path: Path) -> PathSegment:
    """Make ``container[slot]`` addressable and return the slot to use."""
    if isinstance(container, dict):
        key = str(segment) if _is_index(segment) else segment
        if not isinstance(key, str):
            raise InvalidPathError(path, segment, "dict")
        container.setdefault(key, None)
        return key

    if isinstance(container, list):
        if not _is_index(segment) or segment < 0:
            raise InvalidPathError(path, segment, "list")
        while len(container) <= segment:
            container.append(None)
        return segment

    raise InvalidPathError(path, segment, _describe(container))


def update_nested(document: JSONValue, path: Path, value: Any, strict: bool = False) -> JSONValue:
    """Return a copy of ``document`` with ``value`` set at ``path``.

    Args:
        document: Root document, normally a dict or list
        path: Keys (str) and indices (int) leading to the target slot
        value: New value for the target slot
        strict: Raise InvalidPathError on a path conflict instead of
            logging a warning and returning the original document

    Returns:
        The updated copy, or ``document`` itself when ``path`` is empty or
        the update was dropped.
    """
    if not path:
        return document

    updated = copy.deepcopy(document)
    try:
        container = updated
        for position, segment in enumerate(path[:-1]):
            slot = _prepare_slot(container, segment, path)
            child = container[slot]
            if child is None:
                child = [] if _is_index(path[position + 1]) else {}
                container[slot] = child
            elif not isinstance(child, (dict, list)):
                raise InvalidPathError(path, path[position + 1], _describe(child))
            container = child

        slot = _prepare_slot(container, path[-1], path)
        container[slot] = copy.deepcopy(value)
    except InvalidPathError as e:
        if strict:
            raise
        logger.warning(f"Dropped document update: {e}")
        return document

    return updated


def get_nested(document: JSONValue, path: Path, default: Any = None) -> Any:
    """Read the value at ``path``; ``default`` if any segment does not resolve."""
    current = document
    for segment in path:
        if isinstance(current, dict):
            key = str(segment) if _is_index(segment) else segment
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, list) and _is_index(segment):
            if not 0 <= segment < len(current):
                return default
            current = current[segment]
        else:
            return default
    return current


def flatten_document(document: Dict[str, Any], parent_key: str = "") -> Dict[str, str]:
    """Flatten nested mappings into dotted keys.

    Lists are kept whole as JSON strings and scalars are stringified, which is
    the row shape of a key/value translation table.
    """
    entries: Dict[str, str] = {}
    for key, value in document.items():
        full_key = f"{parent_key}.{key}" if parent_key else str(key)
        if isinstance(value, dict):
            entries.update(flatten_document(value, full_key))
        elif isinstance(value, list):
            entries[full_key] = json.dumps(value, ensure_ascii=False)
        elif isinstance(value, str):
            entries[full_key] = value
        else:
            entries[full_key] = json.dumps(value)
    return entries
