##
# Copyright (c) 2005-2017 Apple Computer, Inc. All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
##

"""
RFC 3744 (WebDAV Access Control Protocol) XML Elements

Only the elements an access control list is made of are defined here;
privileges are named by elements of their own, which are left unregistered
and built as L{WebDAVUnknownElement}s.

See RFC 3744: http://www.ietf.org/rfc/rfc3744.txt
"""

__all__ = [
    "dav_namespace",
    "caldav_namespace",
    "lookupElement",
    "WebDAVUnknownElement",
    "HRef",
    "Owner",
    "Property",
    "Authenticated",
    "Unauthenticated",
    "Principal",
    "Invert",
    "Privilege",
    "Grant",
    "Deny",
    "ACE",
    "ACL",
]

from davacl.xml.base import dav_namespace, caldav_namespace
from davacl.xml.base import registerElement, lookupElement
from davacl.xml.base import WebDAVElement, WebDAVUnknownElement
from davacl.xml.base import WebDAVEmptyElement, WebDAVTextElement



@registerElement
class HRef (WebDAVTextElement):
    """
    Identifies the content of the element as a URI. (RFC 4918, section 14.7)
    """
    name = "href"



@registerElement
class Owner (WebDAVEmptyElement):
    """
    Property which identifies a principal as being the owner principal of a
    resource.  Only used by name here, inside DAV:property.
    (RFC 3744, section 5.1)
    """
    name = "owner"



@registerElement
class Property (WebDAVElement):
    """
    Principal which matches the principal identified by the value of a
    property of the resource. (RFC 3744, section 5.5.1)
    """
    name = "property"



@registerElement
class Authenticated (WebDAVEmptyElement):
    """
    Principal which matches authenticated users. (RFC 3744, section 5.5.1)
    """
    name = "authenticated"



@registerElement
class Unauthenticated (WebDAVEmptyElement):
    """
    Principal which matches unauthenticated users. (RFC 3744, section 5.5.1)
    """
    name = "unauthenticated"



@registerElement
class Principal (WebDAVElement):
    """
    Identifies the principals to which an ACE applies.
    (RFC 3744, section 5.5.1)
    """
    name = "principal"



@registerElement
class Invert (WebDAVElement):
    """
    Applies an ACE to all principals except the one it contains.
    (RFC 3744, section 5.5.1)
    """
    name = "invert"



@registerElement
class Privilege (WebDAVElement):
    """
    Wraps the element naming a single privilege. (RFC 3744, section 5.5.2)
    """
    name = "privilege"



@registerElement
class Grant (WebDAVElement):
    """
    Privileges granted by an ACE. (RFC 3744, section 5.5.2)
    """
    name = "grant"



@registerElement
class Deny (WebDAVElement):
    """
    Privileges denied by an ACE. (RFC 3744, section 5.5.2)
    """
    name = "deny"



@registerElement
class ACE (WebDAVElement):
    """
    Specifies the privileges to be granted or denied to a single principal.
    (RFC 3744, section 5.5)

    The parts of the ACE are sorted out as it is built:

      - C{principal}: the L{Principal}, or C{None} unless there is exactly
        one (possibly inside DAV:invert);
      - C{invert}: whether the principal is inverted;
      - C{allow}: C{True} for a grant, C{False} for a deny, or C{None}
        unless there is exactly one of them;
      - C{privileges}: the children of the grant or deny.

    Anything else, such as DAV:protected, is kept as a child but otherwise
    ignored.
    """
    name = "ace"

    def __init__(self, *children):
        super(ACE, self).__init__(*children)

        self.principal  = None
        self.invert     = False
        self.allow      = None
        self.privileges = ()

        principals = self.childrenOfType((Principal, Invert))
        if len(principals) == 1:
            principal = principals[0]
            if isinstance(principal, Invert):
                self.invert = True
                inverted = principal.childrenOfType(Principal)
                if len(inverted) == 1:
                    self.principal = inverted[0]
            else:
                self.principal = principal

        grants = self.childrenOfType((Grant, Deny))
        if len(grants) == 1:
            self.allow = isinstance(grants[0], Grant)
            self.privileges = grants[0].children



@registerElement
class ACL (WebDAVElement):
    """
    Property which specifies the list of access control entries which define
    what privileges are granted to which users for a resource.
    (RFC 3744, section 5.5)
    """
    name = "acl"

    def aces(self):
        return self.childrenOfType(ACE)
