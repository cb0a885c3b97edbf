"""Composition root: bookmarks grouped by page, and per-bookmark page detail.

Wires FileLocator, BookmarkStore, PageResolver, VisualGraphBuilder and
FieldExtractor together. Every call builds fresh results; nothing is
cached between runs.
"""

import dataclasses
import logging
import os
from pathlib import Path

from pbir_explorer.domain.models import (
    BookmarkDefinition,
    PageDetail,
    PageGroup,
    ProjectOverview,
    ResolveOptions,
)
from pbir_explorer.file_locator import FileLocator
from pbir_explorer.loaders.bookmark_store import BookmarkStore
from pbir_explorer.loaders.page_resolver import PageResolver
from pbir_explorer.loaders.visual_graph_builder import VisualGraphBuilder
from pbir_explorer.resolution.field_extractor import FieldExtractor
from pbir_explorer.run_context import RunContext

logger = logging.getLogger(__name__)


class ProjectIndex:
    """Resolves a PBIR project folder into browsable bookmark and visual trees.

    Args:
        options: Run options; defaults to ``ResolveOptions()``.
    """

    def __init__(self, options: ResolveOptions | None = None) -> None:
        self.options = options or ResolveOptions()
        self._locator = FileLocator(self.options.report_suffix)
        self._bookmarks = BookmarkStore()
        self._pages = PageResolver()
        self._visuals = VisualGraphBuilder()
        self._fields = FieldExtractor()

    def new_context(self) -> RunContext:
        return RunContext(self.options.max_workers, self.options.deadline_seconds)

    # ── Overview ─────────────────────────────────────────────────────────

    def build_overview(
        self, root: str | os.PathLike, context: RunContext | None = None,
    ) -> ProjectOverview:
        """Locate the bookmarks index and group every bookmark under its page."""
        context = context or self.new_context()
        root = Path(root)
        overview = ProjectOverview(root=root)

        bookmarks_file = self._locator.locate(root, context)
        if bookmarks_file is None:
            logger.info("No bookmarks file under %s", root)
            return overview
        overview.bookmarks_file = bookmarks_file

        context.check()
        index = self._bookmarks.load_index(bookmarks_file)
        if not index.ok:
            logger.warning("Bookmark index unreadable (%s): %s",
                           index.failure.value, index.detail)
        overview.entries = index.unwrap_or([])

        bookmark_ids = [bid for entry in overview.entries for bid in entry.bookmark_ids]
        overview.bookmarks = self._bookmarks.load_definitions(
            bookmarks_file.parent, bookmark_ids, context,
        )

        page_ids = [b.target_page_id for b in overview.bookmarks.values() if b.target_page_id]
        overview.pages = self._pages.resolve_many(overview.definition_folder, page_ids, context)

        context.check()
        overview.page_groups, overview.empty_groups = self._group_by_page(overview)
        logger.info("Resolved %d bookmarks across %d pages in %s",
                    len(overview.bookmarks), len(overview.page_groups), bookmarks_file)
        return overview

    def page_name_for(self, overview: ProjectOverview, bookmark: BookmarkDefinition) -> str:
        """Name of the page bucket a bookmark belongs to."""
        page = overview.pages.get(bookmark.target_page_id) if bookmark.target_page_id else None
        return page.display_name if page else self.options.unknown_page_label

    def _group_by_page(self, overview: ProjectOverview) -> tuple[dict[str, PageGroup], list[str]]:
        groups: dict[str, dict[str, list[BookmarkDefinition]]] = {}
        ungrouped: dict[str, list[BookmarkDefinition]] = {}
        order: list[str] = []
        empty_groups: list[str] = []
        placed: set[str] = set()

        def bucket(page_name: str) -> None:
            if page_name not in groups:
                order.append(page_name)
                groups[page_name] = {}
                ungrouped[page_name] = []

        for entry in overview.entries:
            if entry.is_group and not entry.children:
                empty_groups.append(entry.display_name)
                continue
            for bid in entry.bookmark_ids:
                # A bookmark listed twice stays where it first appeared
                if bid in placed:
                    continue
                placed.add(bid)
                bookmark = overview.bookmarks[bid]
                page_name = self.page_name_for(overview, bookmark)
                bucket(page_name)
                if entry.is_group:
                    groups[page_name].setdefault(entry.display_name, []).append(bookmark)
                else:
                    ungrouped[page_name].append(bookmark)

        page_groups = {
            name: PageGroup(page_name=name, groups=groups[name], ungrouped=ungrouped[name])
            for name in order
        }
        return page_groups, empty_groups

    # ── Page Detail ──────────────────────────────────────────────────────

    def page_detail(
        self,
        overview: ProjectOverview,
        bookmark_id: str,
        context: RunContext | None = None,
    ) -> PageDetail:
        """Visual forest, with field bindings, of the page a bookmark targets.

        Raises:
            KeyError: ``bookmark_id`` is not part of the overview.
        """
        bookmark = overview.bookmarks[bookmark_id]
        if not bookmark.target_page_id or overview.definition_folder is None:
            return PageDetail(bookmark=bookmark, page=None)

        context = context or self.new_context()
        definition_folder = overview.definition_folder
        page = self._pages.resolve(definition_folder, bookmark.target_page_id)

        context.check()
        page_folder = self._pages.page_folder(definition_folder, page.id)
        result = self._visuals.build(page_folder, context)
        if not result.ok:
            return PageDetail(bookmark=bookmark, page=page, visuals_available=False)

        forest = result.value
        for _, node in forest.walk():
            payload = forest.payloads.get(node.visual.id, {})
            node.visual = dataclasses.replace(node.visual, fields=self._fields.extract(payload))

        return PageDetail(
            bookmark=bookmark,
            page=page,
            visuals=forest.roots,
            skipped_visuals=forest.skipped,
        )

    # ── Search ───────────────────────────────────────────────────────────

    @staticmethod
    def find_bookmarks(overview: ProjectOverview, query: str) -> list[BookmarkDefinition]:
        """Bookmarks whose display name or id contains ``query`` (case-insensitive)."""
        needle = query.lower()
        return [
            b for b in overview.bookmarks.values()
            if needle in b.display_name.lower() or needle in b.id.lower()
        ]
