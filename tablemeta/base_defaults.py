#
# tablemeta/base_defaults.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Default settings that are not loaded from any configuration.
To keep dependencies simple, use only Python built-in types here.
'''
# Cloud used when the configuration does not name one
CLOUD_DEFAULT = 'AzureCloud'

EXC_VALUE_DEFAULT = ValueError

LOG_LEVEL_DEFAULT = 'info'

LOGGER_NAME_DEFAULT = 'tablemeta'

# Prefix for item expansion
PF = '  '

# Transport retry defaults. The SDK retry policy sleeps
# backoff_factor * 2**(attempt-1) seconds, capped at backoff_max.
RETRY_TOTAL_DEFAULT = 10
RETRY_BACKOFF_FACTOR_DEFAULT = 0.8
RETRY_BACKOFF_MAX_DEFAULT = 120

# Transport timeouts (seconds)
CONNECTION_TIMEOUT_DEFAULT = 30
READ_TIMEOUT_DEFAULT = 240
