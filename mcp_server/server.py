"""
PBIR Explorer MCP Server.

Exposes resolved bookmark, page and visual hierarchies of a PBIR project
to LLM clients via the Model Context Protocol.

Usage:
    python -m mcp_server.server --root /path/to/project
"""

from __future__ import annotations

import json
import os
import sys

from mcp.server.fastmcp import FastMCP

from pbir_explorer.output.json_dumper import JSONDumper, bookmark_to_dict
from pbir_explorer.resolution.project_index import ProjectIndex

# ── Globals ─────────────────────────────────────────────────────────────

_root: str | None = None
_index = ProjectIndex()
mcp = FastMCP("pbir-explorer")


def _folder(folder: str | None) -> str:
    path = folder or _root
    if not path:
        raise RuntimeError("No project folder given and no default root configured")
    if not os.path.isdir(path):
        raise FileNotFoundError(f"Folder not found: {path}")
    return path


def _truncate(data: dict | list, max_chars: int = 80_000) -> dict | list:
    text = json.dumps(data, ensure_ascii=False)
    if len(text) <= max_chars:
        return data
    return {
        "_truncated": True,
        "_message": f"Response too large ({len(text):,} chars). Ask for a single bookmark page instead.",
    }


# ── Tools ───────────────────────────────────────────────────────────────


@mcp.tool()
def get_project_overview(folder: str | None = None) -> dict:
    """Get every bookmark of a PBIR project grouped by target page and bookmark group.

    Call this first; bookmark ids from the result feed get_bookmark_page.

    Args:
        folder: Project folder. Defaults to the server's --root.
    """
    overview = _index.build_overview(_folder(folder))
    if not overview.found:
        return {"error": "No bookmarks file found", "folder": str(overview.root)}
    return _truncate(JSONDumper.overview_to_dict(overview))


@mcp.tool()
def get_bookmark_page(bookmark_id: str, folder: str | None = None) -> dict:
    """Get the visual hierarchy, with bound data fields, of the page a bookmark targets.

    Args:
        bookmark_id: Bookmark id (from get_project_overview).
        folder: Project folder. Defaults to the server's --root.
    """
    overview = _index.build_overview(_folder(folder))
    if bookmark_id not in overview.bookmarks:
        return {"error": f"Bookmark '{bookmark_id}' not found", "bookmark_id": bookmark_id}
    detail = _index.page_detail(overview, bookmark_id)
    return _truncate(JSONDumper.page_detail_to_dict(detail))


@mcp.tool()
def search_bookmarks(query: str, folder: str | None = None) -> list[dict]:
    """Search bookmarks by display name or id (case-insensitive substring).

    Args:
        query: Text to look for.
        folder: Project folder. Defaults to the server's --root.
    """
    overview = _index.build_overview(_folder(folder))
    return [
        {**bookmark_to_dict(b), "page_name": _index.page_name_for(overview, b)}
        for b in _index.find_bookmarks(overview, query)
    ]


# ── Entry point ─────────────────────────────────────────────────────────

def main():
    import argparse

    parser = argparse.ArgumentParser(description="PBIR Explorer MCP Server")
    parser.add_argument("--root", help="Default project folder for tools called without one")
    args = parser.parse_args()

    global _root
    if args.root:
        root = os.path.abspath(args.root)
        if not os.path.isdir(root):
            print(f"Error: {root} is not a directory", file=sys.stderr)
            sys.exit(1)
        _root = root

    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
