#
# tests/unit/test_naming.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for tablemeta.naming and tablemeta.btypes
'''
import pytest

from tablemeta.btypes import ReadOnlyDict
from tablemeta.exceptions import (EntityKeyMissingException,
                                  TableNameInvalidException,
                                 )
from tablemeta.naming import (entity_keys,
                              storage_account_name_valid,
                              table_name_normalize,
                              table_name_valid,
                             )

@pytest.mark.parametrize('name', ['abc', 'Stemcells', 'vmMetadata2', 'a' * 63])
def test_table_name_valid(name):
    assert table_name_valid(name)
    assert table_name_normalize(name) == name

@pytest.mark.parametrize('name', ['', 'ab', '1abc', 'has-dash', 'has_underscore', 'a' * 64, 'tables', 'Tables', None, 7])
def test_table_name_invalid(name):
    assert not table_name_valid(name)
    with pytest.raises(TableNameInvalidException):
        table_name_normalize(name)

def test_storage_account_name():
    assert storage_account_name_valid('abc123')
    assert not storage_account_name_valid('ABC')
    assert not storage_account_name_valid('ab')
    assert not storage_account_name_valid(None)

def test_entity_keys():
    assert entity_keys({'PartitionKey' : 'p', 'RowKey' : '', 'x' : 1}) == ('p', '')
    with pytest.raises(EntityKeyMissingException) as exc_info:
        entity_keys({'x' : 1})
    assert exc_info.value.missing == ['PartitionKey', 'RowKey']
    with pytest.raises(EntityKeyMissingException):
        entity_keys({'PartitionKey' : 1, 'RowKey' : 'r'})
    with pytest.raises(TypeError):
        entity_keys(['PartitionKey', 'RowKey'])

def test_read_only_dict():
    d = ReadOnlyDict({'a' : 1})
    for op in (lambda: d.__setitem__('a', 2),
               lambda: d.__delitem__('a'),
               d.clear,
               lambda: d.pop('a'),
               d.popitem,
               lambda: d.setdefault('b', 2),
               lambda: d.update(b=2),
              ):
        with pytest.raises(TypeError):
            op()
    assert d == {'a' : 1}
    c = d.copy()
    c['a'] = 2
    assert d['a'] == 1
