"""Tests for the JSON node helpers."""

from pbir_explorer.domain.json_nodes import (
    ArrayNode,
    ObjectNode,
    ScalarNode,
    classify,
    get_path,
    get_str,
    iter_objects,
    visit,
)


class TestGetPath:
    """Tests for get_path (read-only dotted lookup)."""

    def test_simple_key(self):
        assert get_path({'name': 'v1'}, 'name') == 'v1'

    def test_nested_key(self):
        assert get_path({'a': {'b': {'c': 1}}}, 'a.b.c') == 1

    def test_list_index(self):
        data = {'title': [{'text': 'first'}, {'text': 'second'}]}
        assert get_path(data, 'title[1].text') == 'second'

    def test_index_out_of_range(self):
        assert get_path({'title': []}, 'title[0].text', 'dflt') == 'dflt'

    def test_index_on_non_list(self):
        assert get_path({'title': {'text': 'x'}}, 'title[0].text') is None

    def test_missing_key_returns_default(self):
        assert get_path({}, 'missing') is None
        assert get_path({'a': 1}, 'a.b', 'x') == 'x'

    def test_none_data(self):
        assert get_path(None, 'key') is None


class TestGetStr:

    def test_non_empty_string(self):
        assert get_str({'a': 'x'}, 'a') == 'x'

    def test_rejects_empty_and_non_strings(self):
        assert get_str({'a': ''}, 'a') is None
        assert get_str({'a': 3}, 'a') is None
        assert get_str({'a': ['x']}, 'a') is None


class TestVisit:
    """Tests for the pre-order visitor."""

    def test_classify(self):
        assert isinstance(classify({}), ObjectNode)
        assert isinstance(classify([]), ArrayNode)
        assert isinstance(classify('s'), ScalarNode)
        assert isinstance(classify(None), ScalarNode)

    def test_pre_order(self):
        data = {'id': 1, 'kids': [{'id': 2, 'kids': [{'id': 3}]}, {'id': 4}]}
        assert [o['id'] for o in iter_objects(data)] == [1, 2, 3, 4]

    def test_stop_descent(self):
        data = {'id': 1, 'stop': True, 'kids': [{'id': 2}]}
        seen = []

        def on_object(obj):
            seen.append(obj['id'])
            return obj.get('stop', False)

        visit(data, on_object)
        assert seen == [1]

    def test_filter_array_hook(self):
        data = [{'id': 1}, {'id': 2}, {'id': 3}]
        seen = []
        visit(data, lambda o: seen.append(o['id']) or False, lambda items: items[:1])
        assert seen == [1]
