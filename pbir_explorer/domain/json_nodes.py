"""Helpers for walking free-form JSON payloads.

Two tools live here:

  - ``get_path``: reads a single value at a dotted path with optional list
    indexes, e.g. ``'visual.visualContainerObjects.title[0].properties'``.
  - ``visit``: a pre-order visitor over a small node sum type
    (object / array / scalar). All shape sniffing of arbitrary JSON goes
    through ``classify`` so callers never test ``isinstance`` themselves.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Union

_INDEX_RE = re.compile(r'^(?P<key>[^\[]*)\[(?P<index>\d+)\]$')


@dataclass(frozen=True)
class ObjectNode:
    value: dict[str, Any]


@dataclass(frozen=True)
class ArrayNode:
    value: list[Any]


@dataclass(frozen=True)
class ScalarNode:
    value: Any


JSONNode = Union[ObjectNode, ArrayNode, ScalarNode]


def classify(value: Any) -> JSONNode:
    """Wrap a decoded JSON value in its node variant."""
    if isinstance(value, dict):
        return ObjectNode(value)
    if isinstance(value, list):
        return ArrayNode(value)
    return ScalarNode(value)


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Return the value at a dotted path, or ``default`` if any step is missing.

    Args:
        data: Decoded JSON value to read from.
        path: Dotted key path; a step may end with ``[n]`` to index a list.
        default: Returned when the path does not resolve.
    """
    node = data
    for part in path.split('.'):
        m = _INDEX_RE.match(part)
        key, index = (m.group('key'), int(m.group('index'))) if m else (part, None)
        if key:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        if index is not None:
            if not isinstance(node, list) or index >= len(node):
                return default
            node = node[index]
    return node


def get_str(data: Any, path: str) -> str | None:
    """Return the value at ``path`` if it is a non-empty string."""
    value = get_path(data, path)
    if isinstance(value, str) and value:
        return value
    return None


def visit(
    value: Any,
    on_object: Callable[[dict[str, Any]], bool],
    filter_array: Callable[[list[Any]], list[Any]] | None = None,
) -> None:
    """Walk a JSON value depth-first, pre-order.

    Args:
        value: Root value.
        on_object: Called for every object; returning True stops descent
            into that object's values.
        filter_array: Optional hook that narrows an array's elements before
            they are visited.
    """
    node = classify(value)
    if isinstance(node, ObjectNode):
        if on_object(node.value):
            return
        for child in node.value.values():
            visit(child, on_object, filter_array)
    elif isinstance(node, ArrayNode):
        items = filter_array(node.value) if filter_array else node.value
        for child in items:
            visit(child, on_object, filter_array)


def iter_objects(value: Any) -> Iterator[dict[str, Any]]:
    """Yield every object inside ``value``, pre-order."""
    found: list[dict[str, Any]] = []
    visit(value, lambda obj: found.append(obj) or False)
    yield from found
