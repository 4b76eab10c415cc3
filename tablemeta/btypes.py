#
# tablemeta/btypes.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Basic types. No dependencies within the repo.
'''
class ReadOnlyDict(dict):
    '''
    dict that does not allow updates.
    Entities handed back to callers are ReadOnlyDict copies; changes
    to a stored entity go through TableManager.update_entity().
    '''
    ro_error_class = TypeError
    ro_error_str = 'attempt to modify read-only dict'

    def _error_readonly(self, *args, **kwargs):
        '''
        This is used to replace methods of this object
        that would otherwise modify it.
        '''
        raise self.ro_error_class(self.ro_error_str)

    __delitem__ = _error_readonly
    __setitem__ = _error_readonly
    clear = _error_readonly
    pop = _error_readonly
    popitem = _error_readonly
    setdefault = _error_readonly
    update = _error_readonly

    def __ior__(self, other):
        self._error_readonly()

    def copy(self):
        '''
        Return a plain (mutable) dict copy
        '''
        return dict(self)
