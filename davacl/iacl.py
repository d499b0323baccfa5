##
# Copyright (c) 2010-2017 Apple Inc. All rights reserved.
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
Access control list interfaces
"""

__all__ = [
    "ACLError",
    "InvalidConfiguration",
    "InvalidArgument",
    "MalformedDocument",
    "IACL",
]

from zope.interface import Attribute, Interface

#
# Exceptions
#

class ACLError(ValueError):
    """
    Access control list error.
    """



class InvalidConfiguration(ACLError):
    """
    The default permissions given for the special profiles are unusable.
    """



class InvalidArgument(ACLError):
    """
    A principal or permission set given to an ACL is unusable.
    """



class MalformedDocument(ACLError):
    """
    An XML document does not describe an ACL.
    """



#
# Interfaces
#

class IACL(Interface):
    """
    Access control list of a calendar resource.

    Holds the permissions granted to the special profiles (owner,
    authenticated and unauthenticated users) and to individual principals,
    and converts them to and from a DAV:acl XML document.
    """
    namespaces = Attribute("Mapping of XML prefixes to namespace URIs")

    def getProfileDefaults(): #@NoSelf
        """
        Return the permissions granted to each special profile.

        @return: a L{davacl.acl.ProfileDefaults}
        """

    def setProfileDefaults(options): #@NoSelf
        """
        Replace the permissions granted to the special profiles.

        @param options: a mapping with C{owner}, C{authenticated} and
            C{unauthenticated} keys, each a list of permission names.
        @raise InvalidConfiguration: if C{options} is unusable, in which case
            nothing is changed.
        """

    def addPrincipal(href, permissions): #@NoSelf
        """
        Grant permissions to a principal, replacing any previous grant.

        @param href: the principal URL.
        @type href: C{str}
        @param permissions: a list of permission names.
        @raise InvalidArgument: if C{href} or C{permissions} is unusable.
        """

    def removePrincipal(href): #@NoSelf
        """
        Remove the grant for a principal.

        @return: C{True} if a grant was removed, C{False} if there was none.
        """

    def toxml(): #@NoSelf
        """
        Serialize this ACL.

        @return: a C{str} containing a DAV:acl XML document.
        """

    def parse(document): #@NoSelf
        """
        Replace this ACL's permissions with those described by a DAV:acl XML
        document.

        @param document: a C{str} or C{bytes} XML document.
        @raise MalformedDocument: if the document does not describe an ACL,
            in which case nothing is changed.
        """
