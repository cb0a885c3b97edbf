"""Shared data models used across loader and resolution modules."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pbir_explorer.domain.constants import REPORT_SUFFIX, UNKNOWN_PAGE
from pbir_explorer.domain.enums import EntryKind, FieldType


@dataclass
class ResolveOptions:
    """Options controlling a resolution run."""

    report_suffix: str = REPORT_SUFFIX
    max_workers: int = 8
    deadline_seconds: float | None = None
    unknown_page_label: str = UNKNOWN_PAGE


@dataclass(frozen=True)
class BookmarkIndexEntry:
    """One entry of the bookmark index, a group or a single bookmark."""

    kind: EntryKind
    name: str
    display_name: str = ''
    children: tuple[str, ...] = ()

    @property
    def is_group(self) -> bool:
        return self.kind is EntryKind.GROUP

    @property
    def bookmark_ids(self) -> tuple[str, ...]:
        return self.children if self.is_group else (self.name,)


@dataclass(frozen=True)
class BookmarkOptions:
    """Per-bookmark visual targeting flags."""

    apply_only_to_target_visuals: bool = False
    suppress_active_section: bool = False
    suppress_data: bool = False
    suppress_display: bool = False
    target_visual_ids: frozenset[str] = frozenset()


@dataclass(frozen=True)
class BookmarkDefinition:
    """A saved view state, identified by its index reference."""

    id: str
    display_name: str
    target_page_id: str | None = None
    options: BookmarkOptions = field(default_factory=BookmarkOptions)

    @classmethod
    def fallback(cls, bookmark_id: str) -> 'BookmarkDefinition':
        return cls(id=bookmark_id, display_name=bookmark_id)


@dataclass(frozen=True)
class Page:
    """A report page."""

    id: str
    display_name: str


@dataclass(frozen=True)
class Field:
    """A data field bound to a visual."""

    name: str
    field_type: FieldType
    entity: str | None = None
    property: str | None = None
    level: str | None = None


@dataclass(frozen=True)
class Visual:
    """A single visual (or visual group) placed on a page."""

    id: str
    name: str
    parent_id: str | None = None
    visual_type: str | None = None
    fields: dict[str, list[Field]] = field(default_factory=dict, compare=False)


@dataclass
class VisualNode:
    """A visual and the visuals grouped under it."""

    visual: Visual
    children: list['VisualNode'] = field(default_factory=list)

    def walk(self, depth: int = 0):
        """Yield ``(depth, node)`` pairs in pre-order."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)


@dataclass
class SkippedVisual:
    """A visual left out of the forest because its definition was unusable."""

    visual_id: str
    reason: str


@dataclass
class VisualForest:
    """Visual trees of one page plus the raw payloads they were built from."""

    roots: list[VisualNode] = field(default_factory=list)
    payloads: dict[str, dict[str, Any]] = field(default_factory=dict)
    skipped: list[SkippedVisual] = field(default_factory=list)

    def walk(self):
        for root in self.roots:
            yield from root.walk()


@dataclass(frozen=True)
class PageGroup:
    """Bookmarks targeting one page, split into named groups and the rest."""

    page_name: str
    groups: dict[str, list[BookmarkDefinition]]
    ungrouped: list[BookmarkDefinition]

    @property
    def bookmark_count(self) -> int:
        return sum(len(b) for b in self.groups.values()) + len(self.ungrouped)


@dataclass
class ProjectOverview:
    """Result of resolving a project's bookmarks against its pages."""

    root: Path
    bookmarks_file: Path | None = None
    entries: list[BookmarkIndexEntry] = field(default_factory=list)
    bookmarks: dict[str, BookmarkDefinition] = field(default_factory=dict)
    pages: dict[str, Page] = field(default_factory=dict)
    page_groups: dict[str, PageGroup] = field(default_factory=dict)
    empty_groups: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.bookmarks_file is not None

    @property
    def definition_folder(self) -> Path | None:
        if self.bookmarks_file is None:
            return None
        return self.bookmarks_file.parent.parent


@dataclass
class PageDetail:
    """Visual hierarchy of the page a bookmark targets."""

    bookmark: BookmarkDefinition
    page: Page | None
    visuals: list[VisualNode] = field(default_factory=list)
    visuals_available: bool = True
    skipped_visuals: list[SkippedVisual] = field(default_factory=list)

    @property
    def targeted_visual_ids(self) -> frozenset[str]:
        return self.bookmark.options.target_visual_ids
