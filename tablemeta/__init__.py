#
# tablemeta/__init__.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Base tablemeta import
'''
from .config import TableManagerConfig
from .exceptions import TableManagerError
from .msapicall import FaultKind
from .query import (EntityQuery,
                    QueryOptions,
                   )
from .table_manager import TableManager

__all__ = ['EntityQuery',
           'FaultKind',
           'QueryOptions',
           'TableManager',
           'TableManagerConfig',
           'TableManagerError',
          ]
