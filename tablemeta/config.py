#
# tablemeta/config.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Configuration for TableManager.
Values come from, in increasing precedence:
  - defaults (tablemeta.base_defaults)
  - a YAML document (top-level mapping, optionally nested under 'tablemeta')
  - TABLEMETA_* environment variables
'''
import os
import threading

import yaml

from tablemeta.base_defaults import (CLOUD_DEFAULT,
                                     CONNECTION_TIMEOUT_DEFAULT,
                                     LOG_LEVEL_DEFAULT,
                                     READ_TIMEOUT_DEFAULT,
                                     RETRY_BACKOFF_FACTOR_DEFAULT,
                                     RETRY_BACKOFF_MAX_DEFAULT,
                                     RETRY_TOTAL_DEFAULT,
                                    )
from tablemeta.btypes import ReadOnlyDict
import tablemeta.clouds
from tablemeta.exceptions import ConfigError
from tablemeta.msapicall import CallPolicy
import tablemeta.util

ENV_PREFIX = 'TABLEMETA_'

class TableManagerConfig():
    '''
    Validated TableManager settings. Read values as attributes
    (config.debug_mode) or with get().
    '''
    DEFAULTS = ReadOnlyDict({'connection_timeout' : CONNECTION_TIMEOUT_DEFAULT,
                             'debug_mode' : False,
                             'environment' : CLOUD_DEFAULT,
                             'log_level' : LOG_LEVEL_DEFAULT,
                             'query_max_entities' : None,
                             'read_timeout' : READ_TIMEOUT_DEFAULT,
                             'retry_backoff_factor' : RETRY_BACKOFF_FACTOR_DEFAULT,
                             'retry_backoff_max' : RETRY_BACKOFF_MAX_DEFAULT,
                             'retry_total' : RETRY_TOTAL_DEFAULT,
                             'storage_endpoint_suffix' : None,
                            })

    # Keys that may be set from the environment as ENV_PREFIX + key.upper()
    ENV_KEYS = ('debug_mode',
                'environment',
                'log_level',
                'storage_endpoint_suffix',
               )

    def __init__(self, data=None, environ=None, exc_value=ConfigError):
        '''
        data is a dict as loaded from the config file.
        environ defaults to os.environ; pass a dict to isolate unit tests.
        '''
        self._vlock = threading.RLock()
        merged = dict(self.DEFAULTS)
        if data:
            if not isinstance(data, dict):
                raise exc_value("configuration must be a mapping, not %s" % type(data).__name__)
            for k in data:
                if k not in self.DEFAULTS:
                    raise exc_value("unexpected configuration key %r" % k)
            merged.update(data)
        environ = os.environ if environ is None else environ
        for k in self.ENV_KEYS:
            ev = environ.get(ENV_PREFIX + k.upper(), '')
            if ev:
                merged[k] = ev
        self._vdata = ReadOnlyDict({k : self._data_validate(k, v, exc_value) for k, v in merged.items()})

    @classmethod
    def from_yaml(cls, txt, environ=None):
        '''
        Construct from YAML text
        '''
        try:
            data = yaml.safe_load(txt)
        except yaml.YAMLError as exc:
            raise ConfigError("cannot parse configuration: %s" % exc) from exc
        if isinstance(data, dict) and ('tablemeta' in data):
            data = data['tablemeta']
        return cls(data=data or None, environ=environ)

    @classmethod
    def from_file(cls, path, environ=None):
        '''
        Construct from the YAML file at path
        '''
        try:
            with open(path, 'r') as f:
                txt = f.read()
        except OSError as exc:
            raise ConfigError("cannot read configuration %r: %s" % (path, exc)) from exc
        return cls.from_yaml(txt, environ=environ)

    def _data_validate(self, key, value, exc_value):
        '''
        If there is a handler named _dh__KEY, it validates and
        returns the value. Otherwise the value is accepted as-is.
        '''
        handler = getattr(self, '_dh__' + key, None)
        if handler:
            return handler(key, value, exc_value)
        return value

    @staticmethod
    def _dh__debug_mode(key, value, exc_value):
        '''
        Validate debug_mode as bool
        '''
        try:
            return tablemeta.util.truthy(value)
        except (TypeError, ValueError) as exc:
            raise exc_value("%s: %s" % (key, exc)) from exc

    @staticmethod
    def _dh__environment(key, value, exc_value):
        '''
        Validate environment as a known cloud name
        '''
        if not isinstance(value, str):
            raise exc_value("%s must be str, not %s" % (key, type(value).__name__))
        tablemeta.clouds.cloud_get(value, exc_value=exc_value)
        return value

    @staticmethod
    def _dh__storage_endpoint_suffix(key, value, exc_value):
        '''
        Optional override of the cloud's storage endpoint suffix
        '''
        if value is None:
            return None
        if (not isinstance(value, str)) or (not value.strip('.')):
            raise exc_value("%s must be a non-empty str" % key)
        return value.strip('.')

    @staticmethod
    def _dh__log_level(key, value, exc_value):
        '''
        Validate log_level; keep the name, not the int
        '''
        tablemeta.util.log_level_normalize(value, exc_value=exc_value)
        return value

    @staticmethod
    def _positive(key, value, exc_value, dtype):
        '''
        Validate value as a positive number of type dtype
        '''
        if isinstance(value, bool) or (not isinstance(value, dtype)):
            raise exc_value("%s must be a number, not %r" % (key, value))
        if value <= 0:
            raise exc_value("%s must be positive, not %r" % (key, value))
        return value

    def _dh__retry_total(self, key, value, exc_value):
        if isinstance(value, bool) or (not isinstance(value, int)) or (value < 0):
            raise exc_value("%s must be a non-negative int, not %r" % (key, value))
        return value

    def _dh__retry_backoff_factor(self, key, value, exc_value):
        return self._positive(key, value, exc_value, (int, float))

    def _dh__retry_backoff_max(self, key, value, exc_value):
        return self._positive(key, value, exc_value, (int, float))

    def _dh__connection_timeout(self, key, value, exc_value):
        return self._positive(key, value, exc_value, (int, float))

    def _dh__read_timeout(self, key, value, exc_value):
        return self._positive(key, value, exc_value, (int, float))

    def _dh__query_max_entities(self, key, value, exc_value):
        if value is None:
            return None
        return self._positive(key, value, exc_value, int)

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        with self._vlock:
            try:
                return self._vdata[name]
            except KeyError as exc:
                raise AttributeError("%r object has no attribute %r" % (type(self).__name__, name)) from exc

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, dict(self._vdata))

    def get(self, name, defaultvalue):
        '''
        If name is set in the config, return the corresponding value.
        Otherwise, return defaultvalue.
        '''
        with self._vlock:
            return self._vdata.get(name, defaultvalue)

    def to_dict(self) -> dict:
        '''
        Return config contents in dict form
        '''
        with self._vlock:
            return dict(self._vdata)

    @property
    def storage_suffix(self):
        '''
        Storage endpoint suffix to use, eg 'core.windows.net'
        '''
        return self.storage_endpoint_suffix or tablemeta.clouds.storage_endpoint_suffix(self.environment, exc_value=ConfigError)

    def call_policy(self):
        '''
        Return CallPolicy for the SDK transport
        '''
        return CallPolicy(retry_total=self.retry_total,
                          retry_backoff_factor=self.retry_backoff_factor,
                          retry_backoff_max=self.retry_backoff_max,
                          connection_timeout=self.connection_timeout,
                          read_timeout=self.read_timeout)
