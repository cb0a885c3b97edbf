"""Builds a page's visual forest from ``visuals/<id>/visual.json`` files.

Visual groups are not nested on disk; a member visual points at its group
through ``parentGroupName``. The builder reads every visual first and then
links each one to its parent, so the order of files never matters.
"""

import logging
import os
from pathlib import Path
from typing import Any

from pbir_explorer.domain.constants import (
    VISUAL_FILE,
    VISUAL_GROUP_NAME_PATH,
    VISUAL_PARENT_KEY,
    VISUAL_TITLE_PATH,
    VISUAL_TYPE_PATH,
    VISUALS_DIR,
)
from pbir_explorer.domain.enums import LoadFailure
from pbir_explorer.domain.json_nodes import get_str
from pbir_explorer.domain.models import SkippedVisual, Visual, VisualForest, VisualNode
from pbir_explorer.domain.result import LoadResult
from pbir_explorer.loaders.json_loader import read_json_object
from pbir_explorer.run_context import RunContext

logger = logging.getLogger(__name__)


def strip_literal_quotes(value: str) -> str:
    """Unwrap a formatting-expression string literal such as ``"'Sales'"``."""
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        text = text[1:-1]
    return text


def visual_display_name(visual_id: str, payload: dict[str, Any]) -> str:
    """Pick a visual's display name.

    Precedence: group display name, title literal, payload ``name``,
    then the directory name.
    """
    group_name = get_str(payload, VISUAL_GROUP_NAME_PATH)
    if group_name:
        return group_name

    title = get_str(payload, VISUAL_TITLE_PATH)
    if title:
        title = strip_literal_quotes(title)
        if title:
            return title

    return get_str(payload, 'name') or visual_id


class VisualGraphBuilder:
    """Reads the visuals of one page and assembles them into a forest."""

    def build(
        self, page_folder: str | os.PathLike, context: RunContext | None = None,
    ) -> LoadResult[VisualForest]:
        """Load all visuals under ``page_folder/visuals`` and link them.

        A missing visuals directory is an empty forest. A directory that
        exists but cannot be listed is DIRECTORY_UNAVAILABLE.
        """
        context = context or RunContext()
        visuals_dir = Path(page_folder) / VISUALS_DIR

        listing = self._list_visual_dirs(visuals_dir)
        if not listing.ok:
            if listing.failure is LoadFailure.NOT_FOUND:
                return LoadResult.success(VisualForest())
            logger.warning("Visuals unavailable for %s: %s", page_folder, listing.detail)
            return LoadResult.fail(listing.failure, listing.detail)

        visual_ids = listing.value
        loaded = context.map(lambda vid: read_json_object(visuals_dir / vid / VISUAL_FILE), visual_ids)

        forest = VisualForest()
        by_id: dict[str, VisualNode] = {}

        # Pass 1: every readable visual, in listing order
        for visual_id, result in zip(visual_ids, loaded):
            if not result.ok:
                logger.warning("Skipping visual %s (%s): %s",
                               visual_id, result.failure.value, result.detail)
                forest.skipped.append(SkippedVisual(visual_id, result.failure.value))
                continue
            payload = result.value
            forest.payloads[visual_id] = payload
            by_id[visual_id] = VisualNode(self._to_visual(visual_id, payload))

        # Pass 2: attach to parents; unresolved or looping parents become roots
        for visual_id, node in by_id.items():
            parent_id = node.visual.parent_id
            if parent_id in by_id and not self._loops(visual_id, by_id):
                by_id[parent_id].children.append(node)
            else:
                forest.roots.append(node)

        return LoadResult.success(forest)

    @staticmethod
    def _to_visual(visual_id: str, payload: dict[str, Any]) -> Visual:
        return Visual(
            id=visual_id,
            name=visual_display_name(visual_id, payload),
            parent_id=get_str(payload, VISUAL_PARENT_KEY),
            visual_type=get_str(payload, VISUAL_TYPE_PATH),
        )

    @staticmethod
    def _loops(visual_id: str, by_id: dict[str, VisualNode]) -> bool:
        """True if following parent pointers from ``visual_id`` comes back to it."""
        seen = {visual_id}
        current = by_id[visual_id].visual.parent_id
        while current in by_id:
            if current in seen:
                return current == visual_id
            seen.add(current)
            current = by_id[current].visual.parent_id
        return False

    @staticmethod
    def _list_visual_dirs(visuals_dir: Path) -> LoadResult[list[str]]:
        try:
            with os.scandir(visuals_dir) as it:
                names = sorted(e.name for e in it if e.is_dir())
        except FileNotFoundError:
            return LoadResult.fail(LoadFailure.NOT_FOUND, str(visuals_dir))
        except OSError as e:
            return LoadResult.fail(LoadFailure.DIRECTORY_UNAVAILABLE, f"{visuals_dir}: {e}")
        return LoadResult.success(names)
