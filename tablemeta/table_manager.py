#
# tablemeta/table_manager.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
TableManager: small, retry-aware access to Azure table storage.

Expected outcomes are return values:
  table_exists()  -> False when the table is missing
  insert_entity() -> False when an entity with the same keys already exists
  delete_entity() -> returns normally when the entity is missing
Every other failure raises TableManagerError.
'''
import logging
import uuid

from azure.core.credentials import AzureNamedKeyCredential
from azure.data.tables import (TableServiceClient,
                               UpdateMode,
                              )

from tablemeta.base_defaults import LOGGER_NAME_DEFAULT
import tablemeta.clouds
from tablemeta.exceptions import TableManagerError
from tablemeta.msapicall import (FaultKind,
                                 Tolerated,
                                 tablecall,
                                )
from tablemeta.naming import (entity_keys,
                              storage_account_name_valid,
                              table_name_normalize,
                             )
from tablemeta.query import EntityQuery
import tablemeta.util

# Unit tests replace this
TABLE_SERVICE_CLIENT = TableServiceClient

class TableManager():
    '''
    Wraps one TableServiceClient bound to one storage account.
    Holds no per-call state, so one instance may be shared across threads
    as long as the underlying transport may be.
    '''
    def __init__(self, table_service_client, logger=None, query_max_entities=None):
        self._table_service_client = table_service_client
        self.logger = logger if logger is not None else logging.getLogger(LOGGER_NAME_DEFAULT)
        self.query_max_entities = query_max_entities

    def __repr__(self):
        return "<%s,%s,%r>" % (type(self).__name__, hex(id(self)), self._table_service_client)

    @classmethod
    def from_storage_account(cls, config, storage_account_name, key_resolver, logger=None):
        '''
        Build a TableManager for storage_account_name.
        key_resolver(storage_account_name) returns the account keys;
        the first one is used.
        Without a logger, one is created from config.log_level.
        config.debug_mode opens the SDK loggers either way.
        '''
        if logger is None:
            logger = tablemeta.util.logger_create(log_level=config.log_level, debug_mode=config.debug_mode)
        else:
            tablemeta.util.logging_adjust_other_loggers(debug_mode=config.debug_mode)
        if not storage_account_name_valid(storage_account_name):
            raise ValueError("invalid storage_account_name %r" % storage_account_name)
        keys = key_resolver(storage_account_name)
        if not keys:
            raise TableManagerError('from_storage_account', params={'storage_account_name' : storage_account_name}, note='no account keys')
        credential = AzureNamedKeyCredential(storage_account_name, keys[0])
        endpoint = tablemeta.clouds.table_endpoint(storage_account_name, config.storage_suffix)
        callpolicy = config.call_policy()
        kwargs = callpolicy.client_kwargs()
        if config.debug_mode:
            # Log request and response bodies (HttpLoggingPolicy/NetworkTraceLoggingPolicy)
            kwargs['logging_enable'] = True
        logger.info("%s: endpoint=%s %r debug_mode=%s", cls.__name__, endpoint, callpolicy, config.debug_mode)
        client = TABLE_SERVICE_CLIENT(endpoint, credential=credential, **kwargs)
        return cls(client, logger=logger, query_max_entities=config.query_max_entities)

    @staticmethod
    def common_options():
        '''
        Per-request options applied to every SDK call.
        The client request id lets service-side logs be matched to ours.
        '''
        return {'headers' : {'x-ms-client-request-id' : str(uuid.uuid4())}}

    def table_client_get(self, table_name):
        '''
        Return a TableClient for table_name. This is local; no request is issued.
        '''
        return self._table_service_client.get_table_client(table_name_normalize(table_name))

    def table_exists(self, table_name):
        '''
        Return whether the table exists
        '''
        self.logger.info("table_exists(%s)", table_name)
        table_client = self.table_client_get(table_name)
        options = self.common_options()
        self.logger.info("table_exists: Calling get_table_access_policy(%s, %s)", table_name, options)
        ret = tablecall(self.logger, 'table_exists', table_client.get_table_access_policy,
                        tolerate=(FaultKind.MISSING,), params={'table_name' : table_name}, **options)
        return not isinstance(ret, Tolerated)

    def iter_entities(self, table_name, query_options=None, limit=None, cancel_event=None):
        '''
        Return a lazy EntityQuery over the entities matching query_options.
        limit defaults to query_max_entities. See EntityQuery.
        '''
        table_name_normalize(table_name)
        if limit is None:
            limit = self.query_max_entities
        return EntityQuery(self, table_name, query_options=query_options, limit=limit, cancel_event=cancel_event)

    def query_entities(self, table_name, query_options=None):
        '''
        Return a list of all entities matching query_options, in service order.
        Follows continuation tokens until the service returns none.
        If query_max_entities is set and more entities match, raises
        TableManagerError rather than returning a partial result.
        '''
        self.logger.info("query_entities(%s, %s)", table_name, query_options)
        limit = None
        if self.query_max_entities is not None:
            # One extra to tell "exactly at the bound" from "over the bound"
            limit = self.query_max_entities + 1
        query = self.iter_entities(table_name, query_options=query_options, limit=limit)
        ret = list(query)
        self.logger.info("query_entities(%s): %d entities in %d page(s)", table_name, len(ret), query.pages_fetched)
        if (limit is not None) and (len(ret) >= limit):
            raise TableManagerError('query_entities',
                                    params={'table_name' : table_name,
                                            'query_options' : query.query_options.to_dict(),
                                            'query_max_entities' : self.query_max_entities,
                                           },
                                    note="more than %d entities match" % self.query_max_entities)
        return ret

    def insert_entity(self, table_name, entity):
        '''
        Insert an entity to the table.
        Return True on success; False if the entity already exists.
        Never overwrites.
        '''
        self.logger.info("insert_entity(%s, %s)", table_name, entity)
        entity_keys(entity)
        table_client = self.table_client_get(table_name)
        options = self.common_options()
        self.logger.info("insert_entity: Calling create_entity(%s, %s, %s)", table_name, entity, options)
        ret = tablecall(self.logger, 'insert_entity', table_client.create_entity, entity,
                        tolerate=(FaultKind.CONFLICT,), params={'table_name' : table_name, 'entity' : dict(entity)}, **options)
        return not isinstance(ret, Tolerated)

    def delete_entity(self, table_name, partition_key, row_key):
        '''
        Delete one entity. Deleting an entity that does not exist is not an error.
        '''
        self.logger.info("delete_entity(%s, %s, %s)", table_name, partition_key, row_key)
        table_client = self.table_client_get(table_name)
        options = self.common_options()
        self.logger.info("delete_entity: Calling delete_entity(%s, %s, %s, %s)", table_name, partition_key, row_key, options)
        tablecall(self.logger, 'delete_entity', table_client.delete_entity, partition_key, row_key,
                  tolerate=(FaultKind.MISSING,),
                  params={'table_name' : table_name, 'partition_key' : partition_key, 'row_key' : row_key},
                  **options)

    def update_entity(self, table_name, entity):
        '''
        Update an existing entity, identified by the keys in entity.
        Properties not in entity are left alone (merge).
        Nothing is tolerated; updating a missing entity raises TableManagerError.
        '''
        self.logger.info("update_entity(%s, %s)", table_name, entity)
        entity_keys(entity)
        table_client = self.table_client_get(table_name)
        options = self.common_options()
        self.logger.info("update_entity: Calling update_entity(%s, %s, %s)", table_name, entity, options)
        tablecall(self.logger, 'update_entity', table_client.update_entity, entity,
                  mode=UpdateMode.MERGE, params={'table_name' : table_name, 'entity' : dict(entity)}, **options)
