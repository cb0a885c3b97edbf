"""Domain enums for the report explorer."""
from enum import Enum


class LoadFailure(Enum):
    """Reasons a loader could not produce a value."""
    NOT_FOUND = "NOT_FOUND"
    PARSE_FAILURE = "PARSE_FAILURE"
    DIRECTORY_UNAVAILABLE = "DIRECTORY_UNAVAILABLE"


class FieldType(Enum):
    """Variants of a visual's field reference wrapper."""
    COLUMN = "Column"
    MEASURE = "Measure"
    HIERARCHY = "Hierarchy"
    HIERARCHY_LEVEL = "HierarchyLevel"
    IMPLICIT_MEASURE = "ImplicitMeasure"
    UNRECOGNIZED = "Unrecognized"


class EntryKind(Enum):
    """Bookmark index entry shapes."""
    GROUP = "group"
    LEAF = "leaf"
