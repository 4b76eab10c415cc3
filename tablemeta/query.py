#
# tablemeta/query.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Query options and lazy, page-at-a-time entity queries.
'''
import copy

from tablemeta.btypes import ReadOnlyDict
from tablemeta.msapicall import tablecall

class QueryOptions():
    '''
    What to query:
      query_filter: OData filter string (eg "PartitionKey eq @pk"); None queries the whole table
      select: list of property names to project; None returns all properties
      parameters: dict of values substituted for @name in query_filter
      results_per_page: page size hint for the service
    '''
    def __init__(self, query_filter=None, select=None, parameters=None, results_per_page=None):
        self.query_filter = query_filter or None
        if isinstance(select, str):
            select = [x.strip() for x in select.split(',') if x.strip()]
        self.select = list(select) if select else None
        self.parameters = dict(parameters) if parameters else None
        if self.parameters and not self.query_filter:
            raise ValueError("parameters %r given without query_filter" % sorted(self.parameters))
        if results_per_page is not None:
            if isinstance(results_per_page, bool) or (not isinstance(results_per_page, int)) or (results_per_page <= 0):
                raise ValueError("results_per_page must be a positive int, not %r" % results_per_page)
        self.results_per_page = results_per_page

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ', '.join(["%s=%r" % (k, v) for k, v in self.to_dict().items()]))

    def __eq__(self, other):
        if not isinstance(other, QueryOptions):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    # Alternate spellings accepted by coerce()
    _KEY_ALIASES = {'filter' : 'query_filter',
                   }

    @classmethod
    def coerce(cls, value):
        '''
        Return value as QueryOptions. Accepts None, QueryOptions, or a dict.
        '''
        if value is None:
            return cls()
        if isinstance(value, cls):
            return copy.deepcopy(value)
        if isinstance(value, dict):
            kwargs = dict()
            for k, v in value.items():
                name = cls._KEY_ALIASES.get(k, k)
                if name not in ('query_filter', 'select', 'parameters', 'results_per_page'):
                    raise ValueError("%s: unexpected key %r" % (cls.__name__, k))
                if name in kwargs:
                    raise ValueError("%s: %r given more than once" % (cls.__name__, name))
                kwargs[name] = v
            return cls(**kwargs)
        raise TypeError("cannot coerce %s to %s" % (type(value).__name__, cls.__name__))

    def to_dict(self):
        '''
        Return a dict of the options that are set
        '''
        return {k : v for k, v in vars(self).items() if v is not None}

    def sdk_kwargs(self):
        '''
        Return kwargs for TableClient.query_entities() / TableClient.list_entities()
        '''
        ret = dict()
        if self.select:
            ret['select'] = list(self.select)
        if self.results_per_page:
            ret['results_per_page'] = self.results_per_page
        if self.parameters:
            ret['parameters'] = dict(self.parameters)
        return ret

def entity_copy(entity):
    '''
    Return a read-only copy of an entity as returned by the SDK.
    The SDK's TableEntity keeps service metadata (etag, timestamp) on a
    separate attribute; only the properties are copied.
    '''
    return ReadOnlyDict(entity)

class EntityQuery():
    '''
    Lazy, restartable sequence of the entities matching query_options.

    Each iteration starts again from the first page. Pages are fetched
    one request at a time; each request re-supplies the original options
    plus the continuation token from the previous page. Iteration ends
    when the service returns no continuation token, after limit entities,
    or when cancel_event is set. Entities come back in service order.

    pages_fetched is the number of requests issued by the most recently
    started iteration. Iterations share it, so one EntityQuery must not be
    iterated from several threads at once; give each thread its own
    (TableManager.iter_entities() is cheap and issues no request).
    '''
    def __init__(self, manager, table_name, query_options=None, limit=None, cancel_event=None):
        if limit is not None:
            if isinstance(limit, bool) or (not isinstance(limit, int)) or (limit < 0):
                raise ValueError("limit must be a non-negative int, not %r" % limit)
        self._manager = manager
        self.table_name = table_name
        self.query_options = QueryOptions.coerce(query_options)
        self.limit = limit
        self.cancel_event = cancel_event
        self.pages_fetched = 0

    def __repr__(self):
        return "%s(%r, %r, limit=%r)" % (type(self).__name__, self.table_name, self.query_options, self.limit)

    def cancelled(self):
        '''
        Return whether the caller asked us to stop
        '''
        return (self.cancel_event is not None) and self.cancel_event.is_set()

    def _page_get(self, table_client, continuation_token):
        '''
        Issue one request. Return (entities, next_continuation_token).
        '''
        opts = self.query_options
        kwargs = opts.sdk_kwargs()
        kwargs.update(self._manager.common_options())
        logger = self._manager.logger
        if opts.query_filter:
            logger.info("query_entities: Calling query_entities(%s, %r, %s, continuation_token=%r)", self.table_name, opts.query_filter, kwargs, continuation_token)
            paged = table_client.query_entities(opts.query_filter, **kwargs)
        else:
            logger.info("query_entities: Calling list_entities(%s, %s, continuation_token=%r)", self.table_name, kwargs, continuation_token)
            paged = table_client.list_entities(**kwargs)
        pages = paged.by_page(continuation_token=continuation_token)
        params = {'table_name' : self.table_name, 'query_options' : opts.to_dict(), 'continuation_token' : continuation_token}
        page = tablecall(logger, 'query_entities', next, pages, None, params=params)
        if page is None:
            return list(), None
        # Entities within a page are already in memory; iterating them issues no requests.
        entities = [entity_copy(x) for x in page]
        return entities, pages.continuation_token

    def __iter__(self):
        self.pages_fetched = 0
        yielded = 0
        if self.limit == 0:
            return
        table_client = self._manager.table_client_get(self.table_name)
        continuation_token = None
        while True:
            if self.cancelled():
                self._manager.logger.info("query_entities(%s): cancelled after %d page(s)", self.table_name, self.pages_fetched)
                return
            entities, continuation_token = self._page_get(table_client, continuation_token)
            self.pages_fetched += 1
            for entity in entities:
                yield entity
                yielded += 1
                if (self.limit is not None) and (yielded >= self.limit):
                    return
            if not continuation_token:
                return
