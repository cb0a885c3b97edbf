"""JSON and text output for resolved projects.

Turns ProjectOverview and PageDetail results into plain JSON documents,
and renders the indented text trees printed by the CLI.
"""

import json
import os
from datetime import datetime, timezone
from typing import Any

from pbir_explorer import __version__
from pbir_explorer.domain.models import (
    BookmarkDefinition,
    Field,
    PageDetail,
    ProjectOverview,
    VisualNode,
)


def bookmark_to_dict(bookmark: BookmarkDefinition) -> dict[str, Any]:
    opts = bookmark.options
    return {
        'id': bookmark.id,
        'display_name': bookmark.display_name,
        'target_page_id': bookmark.target_page_id,
        'options': {
            'apply_only_to_target_visuals': opts.apply_only_to_target_visuals,
            'suppress_active_section': opts.suppress_active_section,
            'suppress_data': opts.suppress_data,
            'suppress_display': opts.suppress_display,
            'target_visual_ids': sorted(opts.target_visual_ids),
        },
    }


def field_to_dict(f: Field) -> dict[str, Any]:
    data = {
        'name': f.name,
        'field_type': f.field_type.value,
        'entity': f.entity,
        'property': f.property,
    }
    if f.level is not None:
        data['level'] = f.level
    return data


def visual_to_dict(node: VisualNode, targeted: frozenset[str] = frozenset()) -> dict[str, Any]:
    v = node.visual
    return {
        'id': v.id,
        'name': v.name,
        'visual_type': v.visual_type,
        'parent_id': v.parent_id,
        'targeted': v.id in targeted,
        'fields': {
            bucket: [field_to_dict(f) for f in fields]
            for bucket, fields in v.fields.items()
        },
        'children': [visual_to_dict(c, targeted) for c in node.children],
    }


class JSONDumper:
    """Serializes resolution results.

    Args:
        pretty: Whether to pretty-print JSON (default True).
    """

    def __init__(self, pretty: bool = True) -> None:
        self._indent = 2 if pretty else None

    @staticmethod
    def overview_to_dict(overview: ProjectOverview) -> dict[str, Any]:
        return {
            '_metadata': {
                'explorer_version': __version__,
                'generated_at': datetime.now(timezone.utc).isoformat(),
                'root': str(overview.root),
                'bookmarks_file': str(overview.bookmarks_file) if overview.bookmarks_file else None,
                'total_bookmarks': len(overview.bookmarks),
                'total_pages': len(overview.page_groups),
            },
            'pages': [
                {
                    'page_name': group.page_name,
                    'groups': [
                        {'name': name, 'bookmarks': [bookmark_to_dict(b) for b in bookmarks]}
                        for name, bookmarks in group.groups.items()
                    ],
                    'ungrouped': [bookmark_to_dict(b) for b in group.ungrouped],
                }
                for group in overview.page_groups.values()
            ],
            'empty_groups': list(overview.empty_groups),
        }

    @staticmethod
    def page_detail_to_dict(detail: PageDetail) -> dict[str, Any]:
        targeted = detail.targeted_visual_ids
        return {
            'bookmark': bookmark_to_dict(detail.bookmark),
            'page': {'id': detail.page.id, 'display_name': detail.page.display_name}
            if detail.page else None,
            'visuals_available': detail.visuals_available,
            'visuals': [visual_to_dict(n, targeted) for n in detail.visuals],
            'skipped_visuals': [
                {'visual_id': s.visual_id, 'reason': s.reason} for s in detail.skipped_visuals
            ],
        }

    def dumps(self, data: Any) -> str:
        return json.dumps(data, indent=self._indent, ensure_ascii=False, default=str)

    def write(self, path: str, data: Any) -> None:
        """Write data as JSON to ``path``, creating parent directories."""
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=self._indent, ensure_ascii=False, default=str)


# ── Text Rendering ───────────────────────────────────────────────────────

def render_overview_text(overview: ProjectOverview) -> str:
    lines: list[str] = []
    for group in overview.page_groups.values():
        lines.append(f"{group.page_name} ({group.bookmark_count})")
        for name, bookmarks in group.groups.items():
            lines.append(f"  [{name}]")
            lines.extend(f"    - {b.display_name}  <{b.id}>" for b in bookmarks)
        lines.extend(f"  - {b.display_name}  <{b.id}>" for b in group.ungrouped)
    if overview.empty_groups:
        lines.append("Empty groups: " + ", ".join(overview.empty_groups))
    return "\n".join(lines)


def render_page_text(detail: PageDetail) -> str:
    if detail.page is None:
        return f"{detail.bookmark.display_name}: no target page"
    lines = [f"{detail.page.display_name}  <{detail.page.id}>"]
    if not detail.visuals_available:
        lines.append("  (visuals could not be loaded)")
        return "\n".join(lines)
    if not detail.visuals:
        lines.append("  (no visuals)")

    targeted = detail.targeted_visual_ids
    for root in detail.visuals:
        for depth, node in root.walk():
            indent = "  " * (depth + 1)
            mark = "*" if node.visual.id in targeted else "-"
            lines.append(f"{indent}{mark} {node.visual.name}")
            for bucket, fields in node.visual.fields.items():
                label = f"{bucket}: " if bucket else ""
                names = ", ".join(f.name for f in fields)
                lines.append(f"{indent}    {label}{names}")
    for skipped in detail.skipped_visuals:
        lines.append(f"  ! skipped {skipped.visual_id} ({skipped.reason})")
    return "\n".join(lines)
