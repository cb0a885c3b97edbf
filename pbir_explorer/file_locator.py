"""Locates the bookmarks index inside a PBIR project folder."""

import logging
import os
from pathlib import Path
from typing import Iterator

from pbir_explorer.domain.constants import BOOKMARKS_FILE_PARTS, REPORT_SUFFIX
from pbir_explorer.run_context import RunContext

logger = logging.getLogger(__name__)


class FileLocator:
    """Depth-first search for ``<name>.Report/definition/bookmarks/bookmarks.json``.

    Directories are visited pre-order in name order. A report container
    without a bookmarks file does not end the search; its children and its
    later siblings are still searched. Unreadable directories are skipped.
    """

    def __init__(self, report_suffix: str = REPORT_SUFFIX):
        self.report_suffix = report_suffix

    def locate(self, root: str | os.PathLike, context: RunContext | None = None) -> Path | None:
        """Return the first bookmarks file under ``root``, or None."""
        return next(self.locate_all(root, context), None)

    def locate_all(
        self, root: str | os.PathLike, context: RunContext | None = None,
    ) -> Iterator[Path]:
        """Yield every bookmarks file under ``root`` in traversal order."""
        root = Path(root)
        # The chosen folder may itself be the report container
        candidate = self._bookmarks_file(root)
        if candidate:
            yield candidate
        yield from self._walk(root, context)

    def _walk(self, directory: Path, context: RunContext | None) -> Iterator[Path]:
        if context is not None:
            context.check()
        try:
            with os.scandir(directory) as it:
                subdirs = sorted(
                    (Path(e.path) for e in it if self._is_dir(e)),
                    key=lambda p: p.name,
                )
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            return

        for subdir in subdirs:
            candidate = self._bookmarks_file(subdir)
            if candidate:
                yield candidate
            yield from self._walk(subdir, context)

    def _bookmarks_file(self, directory: Path) -> Path | None:
        if not directory.name.endswith(self.report_suffix):
            return None
        candidate = directory.joinpath(*BOOKMARKS_FILE_PARTS)
        return candidate if candidate.is_file() else None

    @staticmethod
    def _is_dir(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False
