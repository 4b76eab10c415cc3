#
# tests/unit/conftest.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Shared fixtures for tablemeta unit tests
'''
import logging

import pytest

from fake_tables import (TABLE_NAME,
                         FakeTableServiceClient,
                        )
from tablemeta.table_manager import TableManager

@pytest.fixture
def logger():
    '''
    Logger handed to TableManager so caplog can see its output
    '''
    ret = logging.getLogger('tablemeta.test')
    ret.setLevel(logging.DEBUG)
    return ret

@pytest.fixture
def service():
    '''
    Fake table service with one empty table
    '''
    ret = FakeTableServiceClient()
    ret.create_table(TABLE_NAME)
    return ret

@pytest.fixture
def manager(service, logger):
    '''
    TableManager over the fake service
    '''
    return TableManager(service, logger=logger)

@pytest.fixture
def logger_levels():
    '''
    Restore the levels of loggers that from_storage_account() adjusts
    '''
    names = ('tablemeta', 'azure', 'azure.core.pipeline.policies.http_logging_policy')
    saved = {name : logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)
