#
# tablemeta/clouds.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Wrappers to manage fetching msrestazure.azure_cloud.Cloud objects
'''
import inspect

import msrestazure.azure_cloud

import tablemeta.base_defaults

_CLOUDS = {tup[1].name : tup[1] for tup in inspect.getmembers(msrestazure.azure_cloud) if isinstance(tup[1], msrestazure.azure_cloud.Cloud)}

# We get AzurePublicCloud back from the metadata service as azEnvironment
_CLOUDS['AzurePublicCloud'] = msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD

_CLOUDS_LOWER = {k.lower() : v for k, v in _CLOUDS.items()}

def cloud_get(name, exc_value=tablemeta.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Return the named cloud object
    '''
    try:
        return _CLOUDS_LOWER[name.lower()]
    except KeyError as exc:
        raise exc_value("unknown cloud %r" % name) from exc

def storage_endpoint_suffix(name, exc_value=tablemeta.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Return the storage endpoint suffix (eg 'core.windows.net') for the named cloud
    '''
    cloud = cloud_get(name, exc_value=exc_value)
    suffix = cloud.suffixes.storage_endpoint
    if not suffix:
        raise exc_value("cloud %r has no storage endpoint" % name)
    return suffix.lstrip('.')

def table_endpoint(storage_account_name, suffix):
    '''
    Return the table service URL for the given storage account
    '''
    return "https://%s.table.%s" % (storage_account_name, suffix)
