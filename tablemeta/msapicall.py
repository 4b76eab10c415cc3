#
# tablemeta/msapicall.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Classify Azure SDK faults and invoke table operations with them.

Retries for transient faults (throttling, 5xx, connection resets) happen
inside the SDK pipeline, configured from CallPolicy. By the time a fault
reaches tablecall() the transport has given up, so tablecall() never
retries; it only decides whether the fault is an expected outcome
for the operation or a fatal error.

Classification looks at structured data on the exception: the exception
class, the HTTP status code, and the service error code. Message text is
never inspected.
'''
import enum
import http.client

import azure.core.exceptions
from azure.core.pipeline.policies import RetryMode

from tablemeta.base_defaults import (CONNECTION_TIMEOUT_DEFAULT,
                                     READ_TIMEOUT_DEFAULT,
                                     RETRY_BACKOFF_FACTOR_DEFAULT,
                                     RETRY_BACKOFF_MAX_DEFAULT,
                                     RETRY_TOTAL_DEFAULT,
                                    )
from tablemeta.exceptions import TableManagerError
from tablemeta.util import (getframe,
                            indent_exc,
                           )

AZURE_SDK_EXCEPTIONS = (azure.core.exceptions.AzureError,
                       )

class FaultKind(enum.Enum):
    '''
    Bucketed reason for an SDK fault
    '''
    AUTH = 'auth'
    MISSING = 'missing'
    CONFLICT = 'conflict'
    THROTTLE = 'throttle'
    TRANSPORT = 'transport'
    OTHER = 'other'

class CallPolicy():
    '''
    Transport retry policy. The SDK applies this to every request
    it issues, including each page of a query.
    '''
    def __init__(self,
                 retry_total=RETRY_TOTAL_DEFAULT,
                 retry_backoff_factor=RETRY_BACKOFF_FACTOR_DEFAULT,
                 retry_backoff_max=RETRY_BACKOFF_MAX_DEFAULT,
                 connection_timeout=CONNECTION_TIMEOUT_DEFAULT,
                 read_timeout=READ_TIMEOUT_DEFAULT):
        self.retry_total = retry_total
        self.retry_backoff_factor = retry_backoff_factor
        self.retry_backoff_max = retry_backoff_max
        self.connection_timeout = connection_timeout
        self.read_timeout = read_timeout

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ', '.join(["%s=%r" % (k, v) for k, v in vars(self).items()]))

    def client_kwargs(self):
        '''
        Return kwargs for constructing an SDK service client
        '''
        return {'retry_total' : self.retry_total,
                'retry_backoff_factor' : self.retry_backoff_factor,
                'retry_backoff_max' : self.retry_backoff_max,
                'retry_mode' : RetryMode.Exponential,
                'connection_timeout' : self.connection_timeout,
                'read_timeout' : self.read_timeout,
               }

class Caught():
    '''
    Capture an exception. Called from the exception context.
    '''
    def __init__(self, exc):
        self.exc = exc
        self.status_code = getattr(self.exc, 'status_code', None)
        try:
            self.status_code_int = int(self.status_code)
        except (TypeError, ValueError):
            self.status_code_int = -1
        self.error_code = None

        error_code = getattr(exc, 'error_code', None)
        if error_code:
            self.error_code = str(getattr(error_code, 'value', error_code))
        else:
            try:
                if exc.error.code:
                    self.error_code = str(exc.error.code)
            except AttributeError:
                pass

    def __repr__(self):
        return "<%s %s status_code=%r error_code=%r %r>" % (type(self).__name__, self.kind().value, self.status_code, self.error_code, self.exc)

    def any_code_matches(self, *args):
        '''
        Return whether any code in args (strings) matches self.error_code.
        '''
        if not self.error_code:
            return False
        error_code = self.error_code.lower()
        return any(error_code == code.lower() for code in args)

    def is_server_rejected_auth(self):
        '''
        Return whether this error is server rejected authentication
        '''
        if isinstance(self.exc, azure.core.exceptions.ClientAuthenticationError):
            return True
        if self.status_code_int in (http.client.UNAUTHORIZED, http.client.FORBIDDEN):
            return True
        return self.any_code_matches('AuthenticationFailed', 'AuthorizationFailure', 'InsufficientAccountPermissions')

    _missing_codes = ('EntityNotFound',
                      'ResourceNotFound',
                      'TableNotFound',
                     )

    def is_missing(self):
        '''
        Return whether this exception is caused by a missing resource
        '''
        if self.status_code_int == http.client.NOT_FOUND:
            return True
        if isinstance(self.exc, azure.core.exceptions.ResourceNotFoundError):
            return True
        return self.any_code_matches(*self._missing_codes)

    # 409 codes that do not mean "the thing you are creating is already there"
    _conflict_not_exists_codes = ('TableBeingDeleted',
                                 )

    def is_conflict(self):
        '''
        Return whether this is an "already exists" conflict.
        '''
        if self.any_code_matches(*self._conflict_not_exists_codes):
            return False
        if self.status_code_int == http.client.CONFLICT:
            return True
        if isinstance(self.exc, azure.core.exceptions.ResourceExistsError):
            return True
        return self.any_code_matches('EntityAlreadyExists', 'TableAlreadyExists')

    def is_throttle(self):
        '''
        Endpoint wants us to throttle
        '''
        if self.status_code_int == http.client.TOO_MANY_REQUESTS:
            return True
        return self.any_code_matches('ServerBusy')

    def is_transport(self):
        '''
        Return whether the request never got a response
        '''
        return isinstance(self.exc, (azure.core.exceptions.ServiceRequestError,
                                     azure.core.exceptions.ServiceResponseError,
                                    ))

    def kind(self):
        '''
        Return the FaultKind for this exception.
        The ordering here matters: an auth failure that happens
        to carry a 404 is still an auth failure.
        '''
        for checker, kind in (('is_server_rejected_auth', FaultKind.AUTH),
                              ('is_missing', FaultKind.MISSING),
                              ('is_conflict', FaultKind.CONFLICT),
                              ('is_throttle', FaultKind.THROTTLE),
                              ('is_transport', FaultKind.TRANSPORT),
                             ):
            if getattr(self, checker)():
                return kind
        return FaultKind.OTHER

class Tolerated():
    '''
    Returned by tablecall() in place of a result when the
    operation failed with an expected FaultKind.
    '''
    def __init__(self, caught):
        self.caught = caught

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.caught)

    def __bool__(self):
        return False

    @property
    def kind(self):
        '''
        Getter
        '''
        return self.caught.kind()

def tablecall(logger, opname, op, *args, tolerate=(), params=None, **kwargs):
    '''
    Execute op(*args, **kwargs) on behalf of TableManager operation opname
    and return the result.
    If op raises an SDK exception whose FaultKind is in tolerate, return
    Tolerated. Any other SDK exception becomes TableManagerError.
    Exceptions that do not come from the SDK propagate unchanged.
    '''
    try:
        return op(*args, **kwargs)
    except AZURE_SDK_EXCEPTIONS as exc:
        caught = Caught(exc)
        kind = caught.kind()
        if kind in tolerate:
            logger.info("%s: %s tolerated [%s] %r", opname, getattr(op, '__name__', op), kind.value, exc)
            return Tolerated(caught)
        trace = indent_exc()
        logger.error("%s %s: %s failed [%s] %r\n%s", getframe(0), opname, getattr(op, '__name__', op), kind.value, exc, trace)
        raise TableManagerError(opname, params=params, cause=exc, kind=kind, trace=trace) from exc
