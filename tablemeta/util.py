#
# tablemeta/util.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Various utility functions.
'''
import logging
import sys
import traceback

from tablemeta.base_defaults import (EXC_VALUE_DEFAULT,
                                     LOG_LEVEL_DEFAULT,
                                     LOGGER_NAME_DEFAULT,
                                     PF,
                                    )

LOG_FORMAT_LOC = "%(asctime)s %(levelname).3s %(name)s:%(module)s:%(funcName)s:%(lineno)s: %(message)s"

LOG_LEVEL_CHOICES = ('debug', 'info', 'warning', 'error', 'critical')

def getframe(idx):
    '''
    Return a string of the form caller_name:linenumber.
    idx is the number of frames up the stack, so 1 = immediate caller.
    '''
    f = sys._getframe(idx+1) # pylint: disable=protected-access
    return "%s:%s" % (f.f_code.co_name, f.f_lineno)

def indent_simple(item, prefix=PF):
    '''
    Returns each thing in item indented
    '''
    sep = '\n' + prefix
    if isinstance(item, (list, set, tuple)):
        return prefix + sep.join(item)
    return prefix + sep.join([str(x) for x in item])

def indent_exc(prefix=PF):
    '''
    Indented human-readable exception stack.
    Only meaningful when called from an exception context.
    '''
    return indent_simple([x.rstrip() for x in traceback.format_exc().splitlines()], prefix=prefix)

def truthy(value):
    '''
    Return whether value should be considered True
    '''
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        if value.lower() in ('true', 'yes', 'on', '1'):
            return True
        if value.lower() in ('false', 'no', 'off', '0'):
            return False
        raise ValueError("cannot determine truthiness of %r" % value)
    raise TypeError("cannot determine truthiness of %s" % type(value))

def log_level_normalize(log_level, exc_value=EXC_VALUE_DEFAULT):
    '''
    Given log_level as a logging level (int) or a name
    such as 'debug' or 'INFO', return the int level.
    '''
    if isinstance(log_level, bool):
        raise exc_value("invalid log_level %r" % log_level)
    if isinstance(log_level, int):
        return log_level
    if isinstance(log_level, str):
        if log_level.lower() in LOG_LEVEL_CHOICES:
            return getattr(logging, log_level.upper())
        try:
            return int(log_level)
        except ValueError:
            pass
    raise exc_value("invalid log_level %r" % log_level)

# Azure SDK loggers that are noisy at INFO. debug_mode opens them
# up to DEBUG so request/response traces come through.
_NOISY_LOGGERS = ('azure.core.pipeline.policies.http_logging_policy',
                 )

def logging_adjust_other_loggers(debug_mode=False):
    '''
    Adjust log levels in known-noisy loggers.
    '''
    for logger_name in _NOISY_LOGGERS:
        logger = logging.getLogger(name=logger_name)
        logger.setLevel(logging.DEBUG if debug_mode else logging.WARNING)
    if debug_mode:
        # The SDK emits request/response traces at DEBUG on its own loggers.
        logging.getLogger('azure').setLevel(logging.DEBUG)

def logger_create(log_level=None, log_fmt=LOG_FORMAT_LOC, stream=None, name=LOGGER_NAME_DEFAULT, debug_mode=False):
    '''
    Return a logger suitable for handing to TableManager.
    Configures the root handler iff it is not already configured.
    '''
    logging.basicConfig(format=log_fmt, stream=stream if stream is not None else sys.stderr)
    logger = logging.getLogger(name=name)
    logging_adjust_other_loggers(debug_mode=debug_mode)
    logger.setLevel(log_level_normalize(log_level if log_level is not None else LOG_LEVEL_DEFAULT))
    return logger
