"""Shared constants: on-disk layout, JSON key paths and field variants.

Centralizes the names of files and keys read from a PBIR project so that
the loaders and the field extractor agree on a single source.
"""

from pbir_explorer.domain.enums import FieldType

# ── Project Layout ───────────────────────────────────────────────────────

REPORT_SUFFIX = '.Report'

# Relative to a report container directory
BOOKMARKS_FILE_PARTS = ('definition', 'bookmarks', 'bookmarks.json')

BOOKMARK_FILE_SUFFIX = '.bookmark.json'
PAGES_DIR = 'pages'
PAGE_FILE = 'page.json'
VISUALS_DIR = 'visuals'
VISUAL_FILE = 'visual.json'

UNKNOWN_PAGE = 'Unknown'

# ── Bookmark Keys ────────────────────────────────────────────────────────

# Containers that may hold the index entry array
INDEX_ARRAY_KEYS = ('items', 'bookmarks')

BOOKMARK_TARGET_PAGE_PATH = 'explorationState.activeSection'

# option key → BookmarkOptions attribute
BOOKMARK_OPTION_FLAGS: dict[str, str] = {
    'applyOnlyToTargetVisuals': 'apply_only_to_target_visuals',
    'suppressActiveSection': 'suppress_active_section',
    'suppressData': 'suppress_data',
    'suppressDisplay': 'suppress_display',
}
BOOKMARK_TARGET_VISUALS_KEY = 'targetVisualNames'

# ── Visual Keys ──────────────────────────────────────────────────────────

VISUAL_GROUP_NAME_PATH = 'visualGroup.displayName'
VISUAL_TITLE_PATH = 'visual.visualContainerObjects.title[0].properties.text.expr.Literal.Value'
VISUAL_PARENT_KEY = 'parentGroupName'
VISUAL_TYPE_PATH = 'visual.visualType'
QUERY_STATE_PATH = 'visual.query.queryState'
QUERY_STATE_KEY = 'queryState'
PROJECTIONS_KEY = 'projections'

# ── Field References ─────────────────────────────────────────────────────

FIELD_KEY = 'field'
NAME_KEYS = ('nativeQueryRef', 'queryRef')
ACTIVE_KEY = 'active'

# (wrapper key, field type, entity path, property path, level path)
# Paths are relative to the `field` wrapper. Order is precedence order;
# Aggregation is the implicit-measure fallback and must stay last.
FIELD_VARIANTS: tuple[tuple[str, FieldType, str, str, str | None], ...] = (
    ('Column', FieldType.COLUMN,
     'Column.Expression.SourceRef.Entity', 'Column.Property', None),
    ('Measure', FieldType.MEASURE,
     'Measure.Expression.SourceRef.Entity', 'Measure.Property', None),
    ('Hierarchy', FieldType.HIERARCHY,
     'Hierarchy.Expression.SourceRef.Entity', 'Hierarchy.Hierarchy', None),
    ('HierarchyLevel', FieldType.HIERARCHY_LEVEL,
     'HierarchyLevel.Expression.Hierarchy.Expression.SourceRef.Entity',
     'HierarchyLevel.Expression.Hierarchy.Hierarchy',
     'HierarchyLevel.Level'),
    ('Aggregation', FieldType.IMPLICIT_MEASURE,
     'Aggregation.Expression.Column.Expression.SourceRef.Entity',
     'Aggregation.Expression.Column.Property', None),
)
