"""Tests for ProjectIndex (integration of all loaders)."""

import pytest

from pbir_explorer.domain.enums import FieldType
from pbir_explorer.domain.models import ResolveOptions
from pbir_explorer.resolution.project_index import ProjectIndex
from pbir_explorer.run_context import DeadlineExceeded, ResolutionCancelled, RunContext
from tests.conftest import bookmark_payload, visual_payload


@pytest.fixture
def index():
    return ProjectIndex(ResolveOptions(max_workers=4))


class TestBuildOverview:
    """Tests for page → group → bookmark grouping."""

    def test_group_with_missing_definitions(self, index, project):
        project.page('p1', 'Sales Overview')
        project.index([{'name': 'g1', 'displayName': 'Filters', 'children': ['b1', 'b2']}])
        # b1/b2 have no definition files, so no target page: they land in Unknown
        overview = index.build_overview(project.root)
        group = overview.page_groups['Unknown']
        assert [b.display_name for b in group.groups['Filters']] == ['b1', 'b2']

    def test_filters_group_under_resolved_page(self, index, project):
        project.page('p1', 'Sales Overview')
        project.index([{'name': 'g1', 'displayName': 'Filters', 'children': ['b1', 'b2']}])
        project.bookmark('b1', {'explorationState': {'activeSection': 'p1'}})
        project.bookmark('b2', {'explorationState': {'activeSection': 'p1'}})

        overview = index.build_overview(project.root)

        assert list(overview.page_groups) == ['Sales Overview']
        group = overview.page_groups['Sales Overview']
        assert list(group.groups) == ['Filters']
        assert [(b.id, b.display_name) for b in group.groups['Filters']] == [('b1', 'b1'), ('b2', 'b2')]
        assert group.ungrouped == []

    def test_sample_project_grouping(self, index, sample_project):
        overview = index.build_overview(sample_project.root)

        assert overview.found
        assert list(overview.page_groups) == ['Sales Overview', 'Details', 'Unknown']
        sales = overview.page_groups['Sales Overview']
        assert [b.display_name for b in sales.groups['Filters']] == ['Region filter', 'Year filter']
        assert sales.ungrouped == []
        assert [b.id for b in overview.page_groups['Details'].ungrouped] == ['b3']
        assert [b.id for b in overview.page_groups['Unknown'].ungrouped] == ['b4']

    def test_every_bookmark_in_exactly_one_bucket(self, index, sample_project):
        overview = index.build_overview(sample_project.root)
        placed = [
            b.id
            for group in overview.page_groups.values()
            for b in [*group.ungrouped, *(x for bs in group.groups.values() for x in bs)]
        ]
        assert sorted(placed) == sorted(overview.bookmarks)

    def test_group_split_across_pages(self, index, project):
        project.page('p1', 'One')
        project.page('p2', 'Two')
        project.index([{'name': 'g', 'displayName': 'Mixed', 'children': ['b1', 'b2']}])
        project.bookmark('b1', bookmark_payload('B1', 'p1'))
        project.bookmark('b2', bookmark_payload('B2', 'p2'))
        overview = index.build_overview(project.root)
        assert [b.id for b in overview.page_groups['One'].groups['Mixed']] == ['b1']
        assert [b.id for b in overview.page_groups['Two'].groups['Mixed']] == ['b2']

    def test_missing_page_file_uses_page_id(self, index, project):
        project.index([{'name': 'b1'}])
        project.bookmark('b1', bookmark_payload('B1', 'ReportSection123'))
        overview = index.build_overview(project.root)
        assert list(overview.page_groups) == ['ReportSection123']

    def test_empty_group_recorded(self, index, project):
        project.index([
            {'name': 'g', 'displayName': 'Nothing here', 'children': []},
            {'name': 'b1'},
        ])
        overview = index.build_overview(project.root)
        assert overview.empty_groups == ['Nothing here']
        assert [b.id for b in overview.page_groups['Unknown'].ungrouped] == ['b1']

    def test_duplicate_reference_placed_once(self, index, project):
        project.index([
            {'name': 'g', 'displayName': 'G', 'children': ['b1']},
            {'name': 'b1'},
        ])
        overview = index.build_overview(project.root)
        group = overview.page_groups['Unknown']
        assert [b.id for b in group.groups['G']] == ['b1']
        assert group.ungrouped == []

    def test_custom_unknown_label(self, project):
        project.index([{'name': 'b1'}])
        overview = ProjectIndex(ResolveOptions(unknown_page_label='(none)')).build_overview(project.root)
        assert list(overview.page_groups) == ['(none)']

    def test_no_bookmarks_file(self, index, tmp_path):
        overview = index.build_overview(tmp_path)
        assert not overview.found
        assert overview.page_groups == {}

    def test_unreadable_index_gives_empty_overview(self, index, project):
        project.bookmarks_dir.mkdir(parents=True)
        (project.bookmarks_dir / 'bookmarks.json').write_text('{oops', encoding='utf-8')
        overview = index.build_overview(project.root)
        assert overview.found
        assert overview.entries == []
        assert overview.page_groups == {}

    def test_cancelled_run_raises(self, index, sample_project):
        context = index.new_context()
        context.cancel()
        with pytest.raises(ResolutionCancelled):
            index.build_overview(sample_project.root, context)

    def test_expired_deadline_raises(self, index, sample_project):
        with pytest.raises(DeadlineExceeded):
            index.build_overview(sample_project.root, RunContext(deadline_seconds=-1))

    def test_find_bookmarks(self, index, sample_project):
        overview = index.build_overview(sample_project.root)
        assert [b.id for b in index.find_bookmarks(overview, 'FILTER')] == ['b1', 'b2']
        assert [b.id for b in index.find_bookmarks(overview, 'b4')] == ['b4']


class TestPageDetail:
    """Tests for the bookmark → page → visual view."""

    def test_visual_forest_with_fields(self, index, sample_project):
        overview = index.build_overview(sample_project.root)
        detail = index.page_detail(overview, 'b1')

        assert detail.page.display_name == 'Sales Overview'
        assert detail.visuals_available
        assert [n.visual.name for n in detail.visuals] == ['v_card', 'Header group']

        group = detail.visuals[1]
        chart = group.children[0].visual
        assert chart.name == 'Sales by Region'
        assert [f.name for f in chart.fields['Category']] == ['Geo.Region']
        assert chart.fields['Y'][0].field_type is FieldType.MEASURE
        assert detail.targeted_visual_ids == {'v_chart'}

    def test_visual_without_query_has_no_fields(self, index, sample_project):
        overview = index.build_overview(sample_project.root)
        detail = index.page_detail(overview, 'b1')
        assert detail.visuals[0].visual.fields == {}

    def test_bookmark_without_page(self, index, sample_project):
        overview = index.build_overview(sample_project.root)
        detail = index.page_detail(overview, 'b4')
        assert detail.page is None
        assert detail.visuals == []

    def test_page_without_visuals(self, index, sample_project):
        overview = index.build_overview(sample_project.root)
        detail = index.page_detail(overview, 'b3')
        assert detail.page.display_name == 'Details'
        assert detail.visuals_available
        assert detail.visuals == []

    def test_skipped_visual_reported(self, index, sample_project):
        sample_project.visual('p1', 'v_broken', '{')
        overview = index.build_overview(sample_project.root)
        detail = index.page_detail(overview, 'b2')
        assert [s.visual_id for s in detail.skipped_visuals] == ['v_broken']

    def test_visuals_unavailable(self, index, project):
        project.index([{'name': 'b1'}])
        project.bookmark('b1', bookmark_payload('B1', 'p1'))
        page = project.page('p1', 'Page').parent
        (page / 'visuals').write_text('not a directory')
        overview = index.build_overview(project.root)
        detail = index.page_detail(overview, 'b1')
        assert not detail.visuals_available
        assert detail.visuals == []

    def test_unknown_bookmark_raises_key_error(self, index, sample_project):
        overview = index.build_overview(sample_project.root)
        with pytest.raises(KeyError):
            index.page_detail(overview, 'nope')

    def test_flat_fields_without_query_state(self, index, project):
        project.index([{'name': 'b1'}])
        project.bookmark('b1', bookmark_payload('B1', 'p1'))
        payload = visual_payload('v1')
        payload['visual']['objects'] = {'data': [{'field': {'Measure': {
            'Expression': {'SourceRef': {'Entity': 'Sales'}}, 'Property': 'Total'}},
            'queryRef': 'Sales.Total'}]}
        project.visual('p1', 'v1', payload)
        overview = index.build_overview(project.root)
        fields = index.page_detail(overview, 'b1').visuals[0].visual.fields
        assert [f.name for f in fields['']] == ['Sales.Total']
