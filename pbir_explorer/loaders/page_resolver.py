"""Page display-name resolution."""

import logging
import os
from pathlib import Path

from pbir_explorer.domain.constants import PAGE_FILE, PAGES_DIR
from pbir_explorer.domain.json_nodes import get_str
from pbir_explorer.domain.models import Page
from pbir_explorer.domain.result import LoadResult
from pbir_explorer.loaders.json_loader import read_json_object
from pbir_explorer.run_context import RunContext

logger = logging.getLogger(__name__)


class PageResolver:
    """Resolves page ids to pages via ``pages/<id>/page.json``."""

    def resolve(self, definition_folder: str | os.PathLike, page_id: str) -> Page:
        """Return the page, named after its id when the definition is unusable."""
        result = self.read_page(definition_folder, page_id)
        if not result.ok:
            logger.debug("Page %s unavailable (%s): %s",
                         page_id, result.failure.value, result.detail)
        return result.unwrap_or(Page(id=page_id, display_name=page_id))

    def read_page(self, definition_folder: str | os.PathLike, page_id: str) -> LoadResult[Page]:
        result = read_json_object(self.page_folder(definition_folder, page_id) / PAGE_FILE)
        if not result.ok:
            return LoadResult.fail(result.failure, result.detail)
        name = get_str(result.value, 'displayName') or page_id
        return LoadResult.success(Page(id=page_id, display_name=name))

    def resolve_many(
        self,
        definition_folder: str | os.PathLike,
        page_ids: list[str],
        context: RunContext | None = None,
    ) -> dict[str, Page]:
        """Resolve distinct page ids concurrently."""
        context = context or RunContext()
        unique_ids = list(dict.fromkeys(page_ids))
        pages = context.map(lambda pid: self.resolve(definition_folder, pid), unique_ids)
        return dict(zip(unique_ids, pages))

    @staticmethod
    def page_folder(definition_folder: str | os.PathLike, page_id: str) -> Path:
        return Path(definition_folder) / PAGES_DIR / page_id
