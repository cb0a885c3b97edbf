"""Extracts the data fields a visual is bound to.

A visual's query is a tree of heterogeneous nodes. Any object that carries
a ``field`` wrapper and a ``nativeQueryRef``/``queryRef`` name is a field
reference; its wrapper is one of the variants listed in
``FIELD_VARIANTS`` (Column, Measure, Hierarchy, HierarchyLevel, and the
Aggregation-of-Column implicit measure).

Arrays whose elements carry an ``active`` flag are narrowed when at least
one element is explicitly active: explicitly inactive elements are dropped.
Arrays without any ``active: true`` are walked as they are.
"""

from typing import Any

from pbir_explorer.domain.constants import (
    ACTIVE_KEY,
    FIELD_KEY,
    FIELD_VARIANTS,
    NAME_KEYS,
    PROJECTIONS_KEY,
    QUERY_STATE_KEY,
    QUERY_STATE_PATH,
)
from pbir_explorer.domain.enums import FieldType
from pbir_explorer.domain.json_nodes import get_path, get_str, iter_objects, visit
from pbir_explorer.domain.models import Field

# Bucket name used when a payload has no projection buckets
FLAT_BUCKET = ''


def filter_active(items: list[Any]) -> list[Any]:
    """Drop explicitly inactive elements when another element is explicitly active."""
    flags = [item.get(ACTIVE_KEY) if isinstance(item, dict) else None for item in items]
    if not any(flag is True for flag in flags):
        return items
    return [item for item, flag in zip(items, flags) if flag is not False]


def reference_name(node: dict[str, Any]) -> str | None:
    """Return the display name of a field reference node, if it is one."""
    for key in NAME_KEYS:
        value = node.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def classify_field(name: str, wrapper: dict[str, Any]) -> Field:
    """Turn a ``field`` wrapper into a Field of the matching variant.

    Variants are tried in order; the Aggregation fallback only applies when
    none of the direct variants yields an entity or property.
    """
    for key, field_type, entity_path, property_path, level_path in FIELD_VARIANTS:
        if key not in wrapper:
            continue
        entity = get_str(wrapper, entity_path)
        prop = get_str(wrapper, property_path)
        if entity is None and prop is None:
            continue
        level = get_str(wrapper, level_path) if level_path else None
        return Field(name=name, field_type=field_type, entity=entity, property=prop, level=level)
    return Field(name=name, field_type=FieldType.UNRECOGNIZED)


class FieldExtractor:
    """Recovers bound fields from a visual payload, grouped by query bucket."""

    def extract(self, payload: dict[str, Any]) -> dict[str, list[Field]]:
        """By-bucket fields when a queryState has projection buckets, otherwise a single flat bucket."""
        buckets = self.extract_by_bucket(payload)
        if buckets:
            return buckets
        flat = self.extract_flat(payload)
        return {FLAT_BUCKET: flat} if flat else {}

    def extract_by_bucket(self, payload: dict[str, Any]) -> dict[str, list[Field]]:
        """Fields per bucket, each list sorted by name.

        Returns an empty mapping when the payload has no queryState.
        """
        query_state = self.find_query_state(payload)
        if query_state is None:
            return {}

        buckets: dict[str, list[Field]] = {}
        for bucket, state in query_state.items():
            projections = state.get(PROJECTIONS_KEY) if isinstance(state, dict) else None
            if not isinstance(projections, list):
                continue
            buckets[bucket] = self._collect(filter_active(projections))
        return buckets

    def extract_flat(self, payload: Any) -> list[Field]:
        """Every field reference anywhere in ``payload``, sorted by name."""
        return self._collect(payload)

    @staticmethod
    def find_query_state(payload: Any) -> dict[str, Any] | None:
        """Locate the queryState object, preferring ``visual.query.queryState``."""
        query_state = get_path(payload, QUERY_STATE_PATH)
        if isinstance(query_state, dict):
            return query_state
        for obj in iter_objects(payload):
            candidate = obj.get(QUERY_STATE_KEY)
            if isinstance(candidate, dict):
                return candidate
        return None

    @staticmethod
    def _collect(value: Any) -> list[Field]:
        found: dict[str, Field] = {}

        def on_object(node: dict[str, Any]) -> bool:
            wrapper = node.get(FIELD_KEY)
            name = reference_name(node)
            if not isinstance(wrapper, dict) or name is None:
                return False
            found.setdefault(name, classify_field(name, wrapper))
            return True

        visit(value, on_object, filter_active)
        return [found[name] for name in sorted(found)]
