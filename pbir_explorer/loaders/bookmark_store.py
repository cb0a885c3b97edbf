"""Bookmark index and per-bookmark definition loading."""

import logging
import os
from pathlib import Path
from typing import Any

from pbir_explorer.domain.constants import (
    BOOKMARK_FILE_SUFFIX,
    BOOKMARK_OPTION_FLAGS,
    BOOKMARK_TARGET_PAGE_PATH,
    BOOKMARK_TARGET_VISUALS_KEY,
    INDEX_ARRAY_KEYS,
)
from pbir_explorer.domain.enums import EntryKind, LoadFailure
from pbir_explorer.domain.json_nodes import get_str
from pbir_explorer.domain.models import BookmarkDefinition, BookmarkIndexEntry, BookmarkOptions
from pbir_explorer.domain.result import LoadResult
from pbir_explorer.loaders.json_loader import read_json, read_json_object
from pbir_explorer.run_context import RunContext

logger = logging.getLogger(__name__)


class BookmarkStore:
    """Reads ``bookmarks.json`` and the ``<id>.bookmark.json`` files beside it.

    Group and leaf entries of the index are told apart by shape: a group
    carries ``displayName`` and a ``children`` array, a leaf only a name.
    """

    def load_index(self, bookmarks_file: str | os.PathLike) -> LoadResult[list[BookmarkIndexEntry]]:
        """Load the ordered index entries.

        Returns:
            The entries in file order, or the failure reason.
        """
        result = read_json(bookmarks_file)
        if not result.ok:
            return LoadResult.fail(result.failure, result.detail)

        raw_entries = self._entry_array(result.value)
        if raw_entries is None:
            return LoadResult.fail(
                LoadFailure.PARSE_FAILURE, f"{bookmarks_file}: no bookmark entry array",
            )

        entries = []
        for raw in raw_entries:
            entry = self.parse_entry(raw)
            if entry is None:
                logger.debug("Ignoring unrecognized bookmark index entry: %r", raw)
                continue
            entries.append(entry)
        return LoadResult.success(entries)

    def load_definition(self, bookmark_folder: str | os.PathLike, bookmark_id: str) -> BookmarkDefinition:
        """Load one bookmark, falling back to an id-named default on any failure."""
        result = self.read_definition(bookmark_folder, bookmark_id)
        if not result.ok:
            logger.debug("Bookmark %s unavailable (%s): %s",
                         bookmark_id, result.failure.value, result.detail)
        return result.unwrap_or(BookmarkDefinition.fallback(bookmark_id))

    def read_definition(
        self, bookmark_folder: str | os.PathLike, bookmark_id: str,
    ) -> LoadResult[BookmarkDefinition]:
        """Load one bookmark definition without applying any fallback."""
        path = Path(bookmark_folder) / f"{bookmark_id}{BOOKMARK_FILE_SUFFIX}"
        result = read_json_object(path)
        if not result.ok:
            return LoadResult.fail(result.failure, result.detail)
        return LoadResult.success(self.parse_definition(bookmark_id, result.value))

    def load_definitions(
        self,
        bookmark_folder: str | os.PathLike,
        bookmark_ids: list[str],
        context: RunContext | None = None,
    ) -> dict[str, BookmarkDefinition]:
        """Load many definitions concurrently; keys follow ``bookmark_ids`` order."""
        context = context or RunContext()
        unique_ids = list(dict.fromkeys(bookmark_ids))
        definitions = context.map(lambda bid: self.load_definition(bookmark_folder, bid), unique_ids)
        return dict(zip(unique_ids, definitions))

    # ── Parsing ──────────────────────────────────────────────────────────

    @staticmethod
    def parse_entry(raw: Any) -> BookmarkIndexEntry | None:
        """Classify one raw index entry as a group or a leaf."""
        if not isinstance(raw, dict):
            return None

        name = raw.get('name') or raw.get('id')
        display_name = raw.get('displayName')
        children = raw.get('children')

        if isinstance(display_name, str) and isinstance(children, list):
            child_ids = tuple(c for c in children if isinstance(c, str) and c)
            return BookmarkIndexEntry(
                kind=EntryKind.GROUP,
                name=name if isinstance(name, str) and name else display_name,
                display_name=display_name,
                children=child_ids,
            )

        if isinstance(name, str) and name:
            return BookmarkIndexEntry(kind=EntryKind.LEAF, name=name)
        return None

    @staticmethod
    def parse_definition(bookmark_id: str, data: dict[str, Any]) -> BookmarkDefinition:
        """Build a definition from a decoded ``.bookmark.json`` payload."""
        raw_options = data.get('options')
        if not isinstance(raw_options, dict):
            raw_options = {}

        flags = {
            attr: raw_options.get(key) is True
            for key, attr in BOOKMARK_OPTION_FLAGS.items()
        }
        targets = raw_options.get(BOOKMARK_TARGET_VISUALS_KEY)
        target_ids = frozenset(
            t for t in targets if isinstance(t, str)
        ) if isinstance(targets, list) else frozenset()

        return BookmarkDefinition(
            id=bookmark_id,
            display_name=get_str(data, 'displayName') or bookmark_id,
            target_page_id=get_str(data, BOOKMARK_TARGET_PAGE_PATH),
            options=BookmarkOptions(target_visual_ids=target_ids, **flags),
        )

    @staticmethod
    def _entry_array(data: Any) -> list[Any] | None:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in INDEX_ARRAY_KEYS:
                if isinstance(data.get(key), list):
                    return data[key]
        return None
