#
# tests/unit/test_query.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for tablemeta.query
'''
import threading

import pytest

from fake_tables import TABLE_NAME
from tablemeta.query import (EntityQuery,
                             QueryOptions,
                            )

class TestQueryOptions():
    '''
    QueryOptions
    '''
    def test_coerce_none(self):
        assert QueryOptions.coerce(None) == QueryOptions()
        assert QueryOptions().sdk_kwargs() == dict()

    def test_coerce_dict_aliases(self):
        opts = QueryOptions.coerce({'filter' : "PartitionKey eq 'a'", 'select' : 'RowKey, color'})
        assert opts.query_filter == "PartitionKey eq 'a'"
        assert opts.select == ['RowKey', 'color']

    def test_coerce_copies(self):
        orig = QueryOptions(query_filter="RowKey eq @rk", parameters={'rk' : 'x'})
        opts = QueryOptions.coerce(orig)
        assert opts == orig
        assert opts is not orig
        orig.parameters['rk'] = 'y'
        assert opts.parameters == {'rk' : 'x'}

    def test_coerce_rejects(self):
        with pytest.raises(ValueError):
            QueryOptions.coerce({'top' : 5})
        with pytest.raises(ValueError):
            QueryOptions.coerce({'filter' : 'a', 'query_filter' : 'b'})
        with pytest.raises(TypeError):
            QueryOptions.coerce("PartitionKey eq 'a'")
        with pytest.raises(ValueError):
            QueryOptions(results_per_page=0)

    def test_parameters_need_filter(self):
        with pytest.raises(ValueError):
            QueryOptions(parameters={'a' : 1})
        with pytest.raises(ValueError):
            QueryOptions.coerce({'parameters' : {'a' : 1}, 'select' : 'RowKey'})
        assert QueryOptions(parameters={}).sdk_kwargs() == dict()

    def test_parameters_with_filter(self):
        kwargs = QueryOptions(query_filter='x eq @a', parameters={'a' : 1}, results_per_page=10).sdk_kwargs()
        assert kwargs == {'parameters' : {'a' : 1}, 'results_per_page' : 10}

def _fill(service, count):
    table = service.tables[TABLE_NAME]
    for i in range(count):
        table[('p', 'r%02d' % i)] = {'PartitionKey' : 'p', 'RowKey' : 'r%02d' % i}

class TestEntityQuery():
    '''
    EntityQuery via TableManager.iter_entities()
    '''
    def test_lazy(self, manager, service):
        service.page_size = 2
        _fill(service, 5)
        query = manager.iter_entities(TABLE_NAME)
        assert isinstance(query, EntityQuery)
        assert service.request_count('query') == 0
        it = iter(query)
        next(it)
        next(it)
        assert service.request_count('query') == 1
        next(it)
        assert service.request_count('query') == 2

    def test_limit_stops_requests(self, manager, service):
        service.page_size = 2
        _fill(service, 10)
        result = list(manager.iter_entities(TABLE_NAME, limit=3))
        assert [x['RowKey'] for x in result] == ['r00', 'r01', 'r02']
        assert service.request_count('query') == 2

    def test_limit_zero(self, manager, service):
        _fill(service, 3)
        assert list(manager.iter_entities(TABLE_NAME, limit=0)) == []
        assert service.request_count('query') == 0

    def test_limit_invalid(self, manager):
        with pytest.raises(ValueError):
            manager.iter_entities(TABLE_NAME, limit=-1)

    def test_restartable(self, manager, service):
        service.page_size = 2
        _fill(service, 3)
        query = manager.iter_entities(TABLE_NAME)
        first = list(query)
        assert query.pages_fetched == 2
        second = list(query)
        assert first == second
        assert query.pages_fetched == 2
        assert service.request_count('query') == 4
        # every iteration begins without a continuation token
        assert [r[1] for r in service.requests if r[0] == 'query'] == [None, '2', None, '2']

    def test_interleaved_iterations(self, manager, service):
        service.page_size = 2
        _fill(service, 3)
        query = manager.iter_entities(TABLE_NAME)
        it1 = iter(query)
        first = [next(it1)['RowKey']]
        it2 = iter(query)
        second = [x['RowKey'] for x in it2]
        first.extend([x['RowKey'] for x in it1])
        # each iteration keeps its own continuation token
        assert first == second == ['r00', 'r01', 'r02']
        assert [r[1] for r in service.requests if r[0] == 'query'] == [None, None, '2', '2']

    def test_cancel(self, manager, service):
        service.page_size = 2
        _fill(service, 6)
        cancel_event = threading.Event()
        seen = list()
        for entity in manager.iter_entities(TABLE_NAME, cancel_event=cancel_event):
            seen.append(entity['RowKey'])
            if len(seen) == 3:
                cancel_event.set()
        # the page in hand is finished; no further page is requested
        assert seen == ['r00', 'r01', 'r02', 'r03']
        assert service.request_count('query') == 2

    def test_cancel_before_start(self, manager, service):
        _fill(service, 2)
        cancel_event = threading.Event()
        cancel_event.set()
        assert list(manager.iter_entities(TABLE_NAME, cancel_event=cancel_event)) == []
        assert service.request_count('query') == 0

    def test_default_limit_from_manager(self, manager, service):
        manager.query_max_entities = 4
        _fill(service, 6)
        assert len(list(manager.iter_entities(TABLE_NAME))) == 4

    def test_no_filter_lists(self, manager, service):
        _fill(service, 1)
        list(manager.iter_entities(TABLE_NAME, {'select' : ['RowKey']}))
        ops = [op for op, _ in service.calls]
        assert ops == ['list_entities']
