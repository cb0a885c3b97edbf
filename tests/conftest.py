"""Shared test fixtures."""

import json
from pathlib import Path

import pytest


# ── Sample Payloads ──────────────────────────────────────────────────────

def column_ref(entity: str, prop: str, query_ref: str | None = None,
               native: str | None = None, **extra) -> dict:
    """A Column-variant field reference projection."""
    node = {
        'field': {
            'Column': {
                'Expression': {'SourceRef': {'Entity': entity}},
                'Property': prop,
            },
        },
        'queryRef': query_ref or f'{entity}.{prop}',
    }
    if native:
        node['nativeQueryRef'] = native
    node.update(extra)
    return node


def measure_ref(entity: str, prop: str, **extra) -> dict:
    node = {
        'field': {
            'Measure': {
                'Expression': {'SourceRef': {'Entity': entity}},
                'Property': prop,
            },
        },
        'queryRef': f'{entity}.{prop}',
        'nativeQueryRef': prop,
    }
    node.update(extra)
    return node


def visual_payload(name: str, title: str | None = None, parent: str | None = None,
                   query_state: dict | None = None, visual_type: str = 'barChart') -> dict:
    visual: dict = {'visualType': visual_type}
    if query_state is not None:
        visual['query'] = {'queryState': query_state}
    if title is not None:
        visual['visualContainerObjects'] = {
            'title': [{'properties': {'text': {'expr': {'Literal': {'Value': f"'{title}'"}}}}}],
        }
    payload = {'name': name, 'position': {'x': 0, 'y': 0}, 'visual': visual}
    if parent:
        payload['parentGroupName'] = parent
    return payload


def group_payload(name: str, display_name: str, parent: str | None = None) -> dict:
    payload = {'name': name, 'visualGroup': {'displayName': display_name, 'groupMode': 'ScaleMode'}}
    if parent:
        payload['parentGroupName'] = parent
    return payload


def bookmark_payload(display_name: str, page_id: str | None, **options) -> dict:
    payload = {
        'displayName': display_name,
        'name': display_name.replace(' ', '_'),
        'explorationState': {'version': '1.3'},
        'options': options,
    }
    if page_id:
        payload['explorationState']['activeSection'] = page_id
    return payload


# ── Project Builder ──────────────────────────────────────────────────────

class ProjectBuilder:
    """Writes a PBIR project tree under a temporary folder."""

    def __init__(self, root: Path, report: str = 'Sales.Report'):
        self.root = root
        self.report_dir = root / report
        self.definition = self.report_dir / 'definition'
        self.bookmarks_dir = self.definition / 'bookmarks'

    @staticmethod
    def _write(path: Path, data) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data, encoding='utf-8')
        else:
            path.write_text(json.dumps(data), encoding='utf-8')
        return path

    def index(self, entries) -> Path:
        return self._write(self.bookmarks_dir / 'bookmarks.json', {'items': entries})

    def bookmark(self, bookmark_id: str, data) -> Path:
        return self._write(self.bookmarks_dir / f'{bookmark_id}.bookmark.json', data)

    def page(self, page_id: str, display_name: str | None = None, raw: str | None = None) -> Path:
        data = raw if raw is not None else {'name': page_id, 'displayName': display_name or page_id}
        return self._write(self.definition / 'pages' / page_id / 'page.json', data)

    def visual(self, page_id: str, visual_id: str, data) -> Path:
        return self._write(
            self.definition / 'pages' / page_id / 'visuals' / visual_id / 'visual.json', data,
        )


@pytest.fixture
def project(tmp_path):
    """A ProjectBuilder rooted at a fresh project folder."""
    return ProjectBuilder(tmp_path / 'project')


@pytest.fixture
def sample_project(project):
    """A small project with grouped, ungrouped and page-less bookmarks."""
    project.page('p1', 'Sales Overview')
    project.page('p2', 'Details')
    project.index([
        {'name': 'g1', 'displayName': 'Filters', 'children': ['b1', 'b2']},
        {'name': 'b3'},
        {'name': 'b4'},
    ])
    project.bookmark('b1', bookmark_payload('Region filter', 'p1', targetVisualNames=['v_chart']))
    project.bookmark('b2', bookmark_payload('Year filter', 'p1'))
    project.bookmark('b3', bookmark_payload('Drill down', 'p2', suppressData=True))
    project.bookmark('b4', bookmark_payload('Orphan', None))

    project.visual('p1', 'v_group', group_payload('v_group', 'Header group'))
    project.visual('p1', 'v_chart', visual_payload(
        'v_chart', title='Sales by Region', parent='v_group',
        query_state={
            'Category': {'projections': [column_ref('Geo', 'Region', active=True)]},
            'Y': {'projections': [measure_ref('Sales', 'Total Sales')]},
        },
    ))
    project.visual('p1', 'v_card', visual_payload('v_card'))
    return project
