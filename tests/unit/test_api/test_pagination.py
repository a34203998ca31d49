"""
Unit tests for cursor pagination.
"""

from unittest.mock import Mock

import pytest

from actorgate.api.pagination import PageResult, PaginationIterator
from tests.fixtures.sample_data import make_queue_requests


class PagedSource:
    """Page fetch function serving pages of the given sizes in order"""

    def __init__(self, page_sizes):
        self.page_sizes = list(page_sizes)
        self.calls = []
        self._served = 0

    def __call__(self, exclusive_start_id=None, limit=None):
        self.calls.append({'exclusive_start_id': exclusive_start_id, 'limit': limit})
        size = self.page_sizes.pop(0) if self.page_sizes else 0
        size = min(size, limit) if limit else size
        items = [{'id': f'item-{self._served + i}'} for i in range(size)]
        self._served += size
        return PageResult(items=items, limit=limit, exclusive_start_id=exclusive_start_id)


class TestPageResult:
    """Test suite for PageResult"""

    def test_from_dict(self):
        page = PageResult.from_dict({
            'items': make_queue_requests(2),
            'limit': 2,
            'exclusiveStartId': 'req-0',
            'count': 2
        })

        assert [item['id'] for item in page.items] == ['req-0', 'req-1']
        assert page.limit == 2
        assert page.exclusive_start_id == 'req-0'
        assert page.extra == {'count': 2}
        assert page.has_more

    def test_empty_page_has_no_more(self):
        assert not PageResult.from_dict({'items': []}).has_more
        assert not PageResult.from_dict({}).has_more


class TestPaginationIterator:
    """Test suite for PaginationIterator"""

    def test_stops_at_empty_page(self):
        source = PagedSource([3, 3, 3, 0])
        pages = list(PaginationIterator(max_page_limit=3, get_page=source))

        assert [len(page.items) for page in pages] == [3, 3, 3]
        assert sum(len(page.items) for page in pages) == 9
        assert len(source.calls) == 4

    def test_overall_limit_caps_last_page(self):
        source = PagedSource([3, 3, 3, 0])
        pages = list(PaginationIterator(max_page_limit=3, get_page=source, limit=7))

        assert [len(page.items) for page in pages] == [3, 3, 1]
        assert [call['limit'] for call in source.calls] == [3, 3, 1]

    def test_cursor_is_last_item_of_previous_page(self):
        source = PagedSource([2, 2, 0])
        list(PaginationIterator(max_page_limit=2, get_page=source))

        assert [call['exclusive_start_id'] for call in source.calls] == [None, 'item-1', 'item-3']

    def test_starts_after_given_cursor(self):
        source = PagedSource([2, 0])
        list(PaginationIterator(max_page_limit=2, get_page=source, exclusive_start_id='req-41'))

        assert source.calls[0]['exclusive_start_id'] == 'req-41'
        assert source.calls[1]['exclusive_start_id'] == 'item-1'

    def test_is_lazy(self):
        source = PagedSource([3, 3, 0])
        iterator = iter(PaginationIterator(max_page_limit=3, get_page=source))

        assert source.calls == []
        next(iterator)
        assert len(source.calls) == 1

    def test_stopping_early_issues_no_further_fetches(self):
        source = PagedSource([3, 3, 3, 0])
        for _ in PaginationIterator(max_page_limit=3, get_page=source):
            break

        assert len(source.calls) == 1

    def test_iterate_items(self):
        source = PagedSource([2, 1, 0])
        items = list(PaginationIterator(max_page_limit=2, get_page=source).iterate_items())

        assert [item['id'] for item in items] == ['item-0', 'item-1', 'item-2']

    def test_objects_with_id_attribute(self):
        item = Mock(id='obj-1')
        get_page = Mock(side_effect=[PageResult(items=[item]), PageResult(items=[])])
        list(PaginationIterator(max_page_limit=10, get_page=get_page))

        assert get_page.call_args_list[1].kwargs == {'exclusive_start_id': 'obj-1', 'limit': 10}

    def test_invalid_page_limit(self):
        with pytest.raises(ValueError):
            PaginationIterator(max_page_limit=0, get_page=Mock())
