##
# Copyright (c) 2005-2017 Apple Inc. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
##

"""
Permission options of an access control list, in the form server
configuration gives them.
"""

__all__ = [
    "profileOptions",
    "sharingOptions",
    "ACLOptions",
]

from davacl.iacl import InvalidConfiguration

profileOptions = ("owner", "authenticated", "unauthenticated")
sharingOptions = ("share_read", "share_rw")



class ACLOptions(dict):
    """
    Permission lists keyed by option name, which can also be used as
    attributes::

        options.owner = ["read", "write"]
        options["share_rw"]

    Only the names in L{profileOptions} and L{sharingOptions} can be set.
    """
    def __init__(self, mapping=None):
        if mapping is not None:
            self.update(mapping)


    def __repr__(self):
        return "%s(%s)" % (self.__class__.__name__, dict.__repr__(self))


    def __setitem__(self, key, value):
        if key not in profileOptions and key not in sharingOptions:
            raise InvalidConfiguration("Unknown permission option: %r" % (key,))
        dict.__setitem__(self, key, value)


    def update(self, mapping):
        for key, value in mapping.items():
            self[key] = value


    def __getattr__(self, attr):
        try:
            return self[attr]
        except KeyError:
            raise AttributeError(attr)


    def __setattr__(self, attr, value):
        self[attr] = value
