"""Interfaces to the host shell: folder picking and last-folder persistence.

The core never opens dialogs or decides where state lives; it talks to
these two collaborators only.
"""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path

from pbir_explorer.domain.models import ProjectOverview
from pbir_explorer.resolution.project_index import ProjectIndex

STATE_ENV_VAR = 'PBIR_EXPLORER_STATE'
DEFAULT_STATE_FILE = Path.home() / '.pbir_explorer' / 'state.json'


class FolderPicker(ABC):
    """Asks the user for a project folder."""

    @abstractmethod
    def select_folder(self) -> str | None:
        """Return an absolute folder path, or None if the user cancelled."""


class StaticFolderPicker(FolderPicker):
    """Answers with a folder chosen up front (command line, tests)."""

    def __init__(self, path: str | None):
        self._path = path

    def select_folder(self) -> str | None:
        return os.path.abspath(self._path) if self._path else None


class LastFolderStore(ABC):
    """Remembers the most recently opened project folder."""

    @abstractmethod
    def get(self) -> str | None:
        """Return the stored folder, if any."""

    @abstractmethod
    def set(self, path: str) -> None:
        """Store ``path`` as the last opened folder."""


class MemoryLastFolderStore(LastFolderStore):

    def __init__(self, path: str | None = None):
        self._path = path

    def get(self) -> str | None:
        return self._path

    def set(self, path: str) -> None:
        self._path = path


class JSONFileLastFolderStore(LastFolderStore):
    """Keeps ``{"last_path": ...}`` in a small JSON state file."""

    def __init__(self, state_file: str | os.PathLike | None = None):
        self._file = Path(state_file or os.environ.get(STATE_ENV_VAR) or DEFAULT_STATE_FILE)

    @property
    def state_file(self) -> Path:
        return self._file

    def get(self) -> str | None:
        try:
            with open(self._file, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            return None
        value = data.get('last_path') if isinstance(data, dict) else None
        return value if isinstance(value, str) and value else None

    def set(self, path: str) -> None:
        self._file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._file, 'w', encoding='utf-8') as f:
            json.dump({'last_path': path}, f, indent=2, ensure_ascii=False)


def open_project(
    picker: FolderPicker, store: LastFolderStore, index: ProjectIndex,
) -> ProjectOverview | None:
    """Ask for a folder, remember it, and resolve it.

    Returns None when the user cancels the picker.
    """
    folder = picker.select_folder()
    if folder is None:
        return None
    store.set(folder)
    return index.build_overview(folder)
