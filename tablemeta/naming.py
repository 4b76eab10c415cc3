#
# tablemeta/naming.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Support for naming things in Azure table storage.
https://docs.microsoft.com/en-us/rest/api/storageservices/understanding-the-table-service-data-model
'''
import re

from tablemeta.exceptions import (EntityKeyMissingException,
                                  TableNameInvalidException,
                                 )

def re_abs(txt):
    '''
    Given regexp text, return a string that is that
    same regexp with begin and end applied.
    '''
    return '^' + txt + '$'

RE_STORAGE_ACCOUNT_TXT = r'([a-z0-9]{3,24})'
RE_STORAGE_ACCOUNT_ABS = re.compile(re_abs(RE_STORAGE_ACCOUNT_TXT))

RE_TABLE_NAME_TXT = r'([A-Za-z][A-Za-z0-9]{2,62})'
RE_TABLE_NAME_ABS = re.compile(re_abs(RE_TABLE_NAME_TXT))

# Compared case-insensitively
TABLE_NAMES_RESERVED = ('tables',
                       )

PARTITION_KEY = 'PartitionKey'
ROW_KEY = 'RowKey'

def storage_account_name_valid(name):
    '''
    Return whether name is syntactically valid as a storage account name
    '''
    return isinstance(name, str) and bool(RE_STORAGE_ACCOUNT_ABS.search(name))

def table_name_valid(name):
    '''
    Return whether name is syntactically valid as a table name
    '''
    if not isinstance(name, str):
        return False
    if not RE_TABLE_NAME_ABS.search(name):
        return False
    return name.lower() not in TABLE_NAMES_RESERVED

def table_name_normalize(name):
    '''
    Return name if it is a valid table name; otherwise raise TableNameInvalidException.
    Table names are case-preserving, so no case folding happens here.
    '''
    if not isinstance(name, str):
        raise TableNameInvalidException("table_name must be str, not %s" % type(name).__name__)
    if not table_name_valid(name):
        raise TableNameInvalidException("table_name (invalid) (%r)" % name)
    return name

def entity_keys(entity):
    '''
    Return (partition_key, row_key) for entity.
    Raises EntityKeyMissingException if either is missing or not a str.
    '''
    try:
        items = [(k, entity.get(k, None)) for k in (PARTITION_KEY, ROW_KEY)]
    except AttributeError as exc:
        raise TypeError("entity must be a mapping, not %s" % type(entity).__name__) from exc
    missing = [k for k, v in items if not isinstance(v, str)]
    if missing:
        raise EntityKeyMissingException("entity missing %s" % ', '.join(missing), missing)
    return tuple(v for _, v in items)
