"""File loaders for PBIR report definitions."""

from pbir_explorer.loaders.json_loader import read_json, read_json_object
from pbir_explorer.loaders.bookmark_store import BookmarkStore
from pbir_explorer.loaders.page_resolver import PageResolver
from pbir_explorer.loaders.visual_graph_builder import VisualGraphBuilder

__all__ = [
    'read_json', 'read_json_object',
    'BookmarkStore', 'PageResolver', 'VisualGraphBuilder',
]
