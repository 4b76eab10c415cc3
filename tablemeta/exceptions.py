#
# tablemeta/exceptions.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Exception classes shared across tablemeta modules
'''
import copy

class ApplicationException(Exception):
    '''
    Base class for application exceptions
    '''

class TableManagerError(ApplicationException):
    '''
    A table operation failed in a way the caller is not expected to handle.
    This is the single fatal error channel for TableManager. It carries:
      operation: name of the TableManager operation (eg 'insert_entity')
      params: dict of the request parameters
      cause: the underlying SDK exception (also available as __cause__)
      kind: tablemeta.msapicall.FaultKind for cause, or None
      trace: indented human-readable traceback of cause
      note: extra text for failures that have no cause
    '''
    def __init__(self, operation, params=None, cause=None, kind=None, trace='', note=''):
        self.note = note or ''
        self.operation = operation
        self.params = copy.deepcopy(params) if params else dict()
        self.cause = cause
        self.kind = kind
        self.trace = trace or ''
        super().__init__(self._txt())

    def _txt(self):
        '''
        Generate the human-readable message
        '''
        ret = "%s(%s) failed" % (self.operation, ', '.join(["%s=%r" % (k, v) for k, v in self.params.items()]))
        if self.kind is not None:
            ret += " [%s]" % self.kind.value
        if self.note:
            ret += ": %s" % self.note
        if self.cause is not None:
            ret += ": %s: %s" % (type(self.cause).__name__, self.cause)
        if self.trace:
            ret += "\n" + self.trace
        return ret

    def __repr__(self):
        return "%s(%r, %r, cause=%r)" % (type(self).__name__, self.operation, self.params, self.cause)

class ConfigError(ApplicationException):
    '''
    The configuration provided does not pass validation.
    '''
    # no specialization here

class TableNameInvalidException(ValueError):
    '''
    table_name is not valid
    '''
    # no specialization here

class EntityKeyMissingException(ValueError):
    '''
    An entity does not carry both PartitionKey and RowKey
    '''
    def __init__(self, txt, missing):
        super().__init__(txt)
        self.missing = missing
