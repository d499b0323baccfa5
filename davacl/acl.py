# -*- test-case-name: davacl.test.test_acl -*-
##
# Copyright (c) 2012-2017 Apple Inc. All rights reserved.
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
Access control list of a calendar resource.

An L{ACL} grants permissions to the three special profiles (the resource
owner, any authenticated user and anonymous users) and to any number of
principals identified by their URL.  It is written out as a DAV:acl document
(RFC 3744, section 5.5) such as::

    <acl xmlns="DAV:" xmlns:C="urn:ietf:params:xml:ns:caldav">
      <ace>
        <principal><property><owner/></property></principal>
        <grant><privilege><read/></privilege></grant>
      </ace>
      ...
    </acl>

and can be read back from one.

Permissions are privilege names.  A plain name (C{"read"}) is a DAV:
privilege, a name with a prefix from L{aclNamespaces} (C{"C:read-free-busy"})
lives in that prefix's namespace, and any other namespace is given in
"{namespace}name" form.  Privilege names are not checked against a list of
known privileges.
"""

__all__ = [
    "aclNamespaces",
    "Profile",
    "PermissionSet",
    "ProfileDefaults",
    "ACL",
]

import re
from collections.abc import Mapping
from types import MappingProxyType

from constantly import NamedConstant, Names
from twisted.logger import Logger
from zope.interface import implementer

from davacl.config import ACLOptions, sharingOptions
from davacl.iacl import IACL
from davacl.iacl import InvalidArgument, InvalidConfiguration, MalformedDocument
from davacl.xml import element as davxml
from davacl.xml.base import decodeXMLName, encodeXMLName
from davacl.xml.parser import WebDAVDocument

log = Logger()

aclNamespaces = MappingProxyType({
    "": davxml.dav_namespace,
    "C": davxml.caldav_namespace,
})

_localName = re.compile(r"^[^\W\d][\w.\-]*$")

# Whitespace, controls and anything else that can't appear in an XML 1.0
# document or a URI
_invalidURIChars = re.compile(r"[\s\x00-\x1f\x7f\ud800-\udfff\ufffe\uffff]")



class Profile(Names):
    """
    The special principals an ACL always grants permissions to, in the order
    their entries are written.
    """
    owner = NamedConstant()
    authenticated = NamedConstant()
    unauthenticated = NamedConstant()

    @classmethod
    def fromKey(cls, key):
        """
        Look up a profile from either a constant or its name.

        @raise ValueError: if C{key} names no profile.
        """
        if isinstance(key, NamedConstant):
            if key in cls.iterconstants():
                return key
        elif isinstance(key, str):
            return cls.lookupByName(key)
        raise ValueError("No such profile: %r" % (key,))



def permissionQName(permission):
    """
    Resolve a permission name to the qualified name of its privilege element.

    @return: C{tuple} of namespace and local name.
    @raise ValueError: if C{permission} can't be used as an element name.
    """
    if not isinstance(permission, str):
        raise ValueError("Permission must be a string: %r" % (permission,))

    if permission.startswith("{"):
        namespace, name = decodeXMLName(permission)
        if namespace is None:
            raise ValueError("Permission has an empty namespace: %r" % (permission,))
        if _invalidURIChars.search(namespace):
            raise ValueError("Invalid permission namespace: %r" % (permission,))
    elif ":" in permission:
        prefix, name = permission.split(":", 1)
        if not prefix or prefix not in aclNamespaces:
            raise ValueError("Permission has an unknown prefix: %r" % (permission,))
        namespace = aclNamespaces[prefix]
    else:
        namespace, name = davxml.dav_namespace, permission

    if not _localName.match(name):
        raise ValueError("Invalid permission name: %r" % (permission,))

    return namespace, name



def permissionName(namespace, name):
    """
    Turn the qualified name of a privilege element into a permission name;
    the reverse of L{permissionQName}.
    """
    if namespace == davxml.dav_namespace:
        return name
    for prefix, uri in aclNamespaces.items():
        if prefix and uri == namespace:
            return "%s:%s" % (prefix, name)
    return encodeXMLName(namespace, name)



def checkHref(href, errorClass):
    """
    Make sure C{href} can be used as a principal URL: a non-empty string
    without whitespace or characters XML can't carry, so that it reads back
    exactly as it was written.

    @return: C{href}
    @raise errorClass: if it can't.
    """
    if not isinstance(href, str) or not href:
        raise errorClass("Principal URL must be a non-empty string: %r" % (href,))
    if _invalidURIChars.search(href):
        raise errorClass("Invalid character in principal URL: %r" % (href,))
    return href



class PermissionSet(tuple):
    """
    Ordered permission names.

    Names are checked and normalized once, when the set is created:
    C{"{urn:ietf:params:xml:ns:caldav}read-free-busy"} and
    C{"C:read-free-busy"} make the same set.
    """
    def __new__(cls, permissions=()):
        if isinstance(permissions, PermissionSet):
            return permissions

        if not isinstance(permissions, (list, tuple)):
            raise TypeError(
                "Permissions must be a list or tuple, not %r" % (permissions,)
            )

        return tuple.__new__(cls, [
            permissionName(*permissionQName(permission))
            for permission in permissions
        ])


    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, list(self))


    def privileges(self):
        """
        @return: C{list} of L{davxml.Privilege} elements, one per permission.
        """
        return [
            davxml.Privilege(
                davxml.WebDAVUnknownElement.withName(*permissionQName(permission))
            )
            for permission in self
        ]



def _permissionSet(permissions, errorClass, what):
    try:
        return PermissionSet(permissions)
    except (TypeError, ValueError) as e:
        raise errorClass("Invalid permissions for %s: %s" % (what, e)) from e



class ProfileDefaults(Mapping):
    """
    Read-only mapping of each L{Profile} to its L{PermissionSet}.

    Built from configuration options: a mapping with C{owner},
    C{authenticated} and C{unauthenticated} keys (names or L{Profile}
    constants), each a list of permission names.  The optional
    C{share_read} and C{share_rw} keys give the permissions granted when a
    resource is shared read-only or read-write.
    """
    def __init__(self, options):
        if not isinstance(options, Mapping):
            raise InvalidConfiguration(
                "Permission options must be a mapping, not %r" % (options,)
            )

        profiles = {}
        for profile in Profile.iterconstants():
            if profile in options:
                permissions = options[profile]
            elif profile.name in options:
                permissions = options[profile.name]
            else:
                raise InvalidConfiguration(
                    "No permissions given for the %s profile" % (profile.name,)
                )
            profiles[profile] = _permissionSet(
                permissions, InvalidConfiguration, "the %s profile" % (profile.name,)
            )

        if isinstance(options, ProfileDefaults):
            sharing = dict(options._sharing)
        else:
            sharing = {}
            for preset in sharingOptions:
                if preset in options:
                    sharing[preset] = _permissionSet(
                        options[preset], InvalidConfiguration, preset
                    )

        self._profiles = profiles
        self._sharing = sharing


    def __getitem__(self, key):
        try:
            return self._profiles[Profile.fromKey(key)]
        except ValueError:
            raise KeyError(key)


    def __iter__(self):
        return Profile.iterconstants()


    def __len__(self):
        return len(self._profiles)


    def __repr__(self):
        return "<%s %s>" % (
            self.__class__.__name__,
            ", ".join([
                "%s=%r" % (profile.name, list(permissions))
                for profile, permissions in self.items()
            ]),
        )


    def sharing(self, writable=False):
        """
        @return: the L{PermissionSet} granted to principals a resource is
            shared with, or C{None} if that kind of sharing isn't configured.
        """
        return self._sharing.get("share_rw" if writable else "share_read")


    def options(self):
        """
        @return: an L{ACLOptions} of these defaults in the form they are
            configured.
        """
        options = ACLOptions()
        for profile, permissions in self.items():
            options[profile.name] = list(permissions)
        for preset in sharingOptions:
            if preset in self._sharing:
                options[preset] = list(self._sharing[preset])
        return options



@implementer(IACL)
class ACL(object):
    """
    Access control list of a calendar resource.
    """
    namespaces = aclNamespaces

    def __init__(self, options):
        """
        @param options: default permissions, see L{ProfileDefaults}.
        @raise InvalidConfiguration: if C{options} is unusable.
        """
        self._defaults = ProfileDefaults(options)
        self._principals = {}


    @classmethod
    def fromXML(cls, document):
        """
        Build a new ACL from a DAV:acl XML document.

        @raise MalformedDocument: if the document does not describe an ACL.
        """
        defaults, principals = _parseACL(document)
        acl = cls(defaults)
        acl._principals = principals
        return acl


    def __repr__(self):
        return "<%s %r principals=%r>" % (
            self.__class__.__name__, self._defaults, self.principals(),
        )


    def __eq__(self, other):
        if isinstance(other, ACL):
            return (
                self._defaults == other._defaults and
                self.principals() == other.principals()
            )
        else:
            return NotImplemented


    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None


    def getProfileDefaults(self):
        return self._defaults


    def setProfileDefaults(self, options):
        self._defaults = ProfileDefaults(options)


    def updateProfileDefaults(self, options):
        """
        Change some of the configured permissions, keeping the others.

        @param options: a mapping with any of the keys accepted by
            L{ProfileDefaults}.
        @raise InvalidConfiguration: if a key isn't a permission option or
            the result is unusable, in which case nothing is changed.
        """
        if not isinstance(options, Mapping):
            raise InvalidConfiguration(
                "Permission options must be a mapping, not %r" % (options,)
            )

        merged = self.getOptions()
        for key, value in options.items():
            if isinstance(key, NamedConstant) and key in Profile.iterconstants():
                key = key.name
            merged[key] = value

        self.setProfileDefaults(merged)


    def getOptions(self):
        return self._defaults.options()


    def addPrincipal(self, href, permissions):
        checkHref(href, InvalidArgument)

        self._principals[href] = _permissionSet(
            permissions, InvalidArgument, "principal %s" % (href,)
        )


    def shareWith(self, href, writable=False):
        """
        Grant a principal the permissions configured for sharing this
        resource.

        @param writable: whether to grant C{share_rw} rather than
            C{share_read} permissions.
        @raise InvalidConfiguration: if that kind of sharing isn't configured.
        """
        permissions = self._defaults.sharing(writable)
        if permissions is None:
            raise InvalidConfiguration(
                "No %s permissions configured"
                % ("share_rw" if writable else "share_read",)
            )
        self.addPrincipal(href, permissions)


    def removePrincipal(self, href):
        if isinstance(href, str) and href in self._principals:
            del self._principals[href]
            return True
        else:
            return False


    def getPrincipal(self, href):
        """
        @return: the L{PermissionSet} granted to C{href}, or C{None}.
        """
        if not isinstance(href, str):
            return None
        return self._principals.get(href)


    def principals(self):
        """
        @return: C{list} of C{(href, PermissionSet)} in the order principals
            were added.
        """
        return list(self._principals.items())


    def generateACE(self, kind, principalHref=None, permissions=None):
        """
        Build the DAV:ace element for a special profile or a principal.

        @param kind: a L{Profile} (or its name), or C{"principal"}.
        @param principalHref: the principal URL, when C{kind} is
            C{"principal"}.
        @param permissions: the permissions granted to C{principalHref}.
            Special profiles always use their configured permissions.
        @return: a L{davxml.ACE}
        """
        if kind == "principal":
            checkHref(principalHref, InvalidArgument)
            principal = davxml.HRef.fromString(principalHref)
            if permissions is None:
                permissions = ()
            permissions = _permissionSet(
                permissions, InvalidArgument, "principal %s" % (principalHref,)
            )
        else:
            try:
                profile = Profile.fromKey(kind)
            except ValueError:
                raise InvalidArgument("Unknown ACE kind: %r" % (kind,))

            if profile is Profile.owner:
                principal = davxml.Property(davxml.Owner())
            elif profile is Profile.authenticated:
                principal = davxml.Authenticated()
            else:
                principal = davxml.Unauthenticated()
            permissions = self._defaults[profile]

        return davxml.ACE(
            davxml.Principal(principal),
            davxml.Grant(*permissions.privileges()),
        )


    def element(self):
        """
        @return: the L{davxml.ACL} element for this ACL.
        """
        aces = [
            self.generateACE(profile)
            for profile in Profile.iterconstants()
        ]
        aces.extend([
            self.generateACE("principal", href, permissions)
            for href, permissions in self._principals.items()
        ])
        return davxml.ACL(*aces)


    def document(self):
        return WebDAVDocument(self.element(), dict(self.namespaces))


    def toxml(self, pretty=False):
        return self.document().toxml(pretty)


    def tobytes(self, pretty=False):
        return self.document().tobytes(pretty)


    def parse(self, document):
        defaults, principals = _parseACL(document)

        # Sharing presets are configuration, not part of the document
        options = self.getOptions()
        for profile, permissions in defaults.items():
            options[profile.name] = permissions

        self._defaults = ProfileDefaults(options)
        self._principals = principals



def _parseACL(document):
    """
    Read the profile permissions and principal grants from a DAV:acl XML
    document.

    @return: C{tuple} of a C{dict} mapping L{Profile}s to L{PermissionSet}s
        and a C{dict} mapping principal URLs to L{PermissionSet}s.
    @raise MalformedDocument: if the document does not describe an ACL.
    """
    if not isinstance(document, (str, bytes)):
        raise MalformedDocument("ACL document must be a string: %r" % (document,))

    try:
        root = WebDAVDocument.fromString(document).root_element
    except ValueError as e:
        raise MalformedDocument("Unable to parse ACL document: %s" % (e,)) from e

    if root.qname() != davxml.ACL.qname():
        raise MalformedDocument("Expected a %s document, got %s" % (davxml.ACL.sname(), root.sname()))

    defaults = {}
    principals = {}

    for ace in root.children:
        if not isinstance(ace, davxml.ACE):
            log.debug("Ignoring {element} in ACL document", element=ace.sname())
            continue

        if ace.principal is None or ace.allow is None:
            raise MalformedDocument("ACE needs one principal and one of grant or deny: %r" % (ace,))
        if ace.invert:
            raise MalformedDocument("Inverted principals are not supported: %r" % (ace,))
        if not ace.allow:
            raise MalformedDocument("Only grant ACEs are supported: %r" % (ace,))

        permissions = _acePermissions(ace)
        kind = _acePrincipal(ace)
        if isinstance(kind, NamedConstant):
            defaults[kind] = permissions
        else:
            principals[kind] = permissions

    missing = [
        profile.name for profile in Profile.iterconstants()
        if profile not in defaults
    ]
    if missing:
        raise MalformedDocument("ACL document has no ACE for %s" % (", ".join(missing),))

    log.debug(
        "Parsed ACL document with {count} principal grants",
        count=len(principals),
    )
    return defaults, principals



def _acePrincipal(ace):
    """
    @return: the L{Profile} an ACE applies to, or the principal URL.
    """
    children = ace.principal.children
    if len(children) == 1:
        child = children[0]
        if isinstance(child, davxml.HRef):
            return checkHref(str(child).strip(), MalformedDocument)
        elif isinstance(child, davxml.Authenticated):
            return Profile.authenticated
        elif isinstance(child, davxml.Unauthenticated):
            return Profile.unauthenticated
        elif isinstance(child, davxml.Property):
            if len(child.children) == 1 and isinstance(child.children[0], davxml.Owner):
                return Profile.owner

    raise MalformedDocument("Unrecognized principal in ACE: %r" % (ace.principal,))



def _acePermissions(ace):
    permissions = []
    for privilege in ace.privileges:
        if not isinstance(privilege, davxml.Privilege) or len(privilege.children) != 1:
            raise MalformedDocument("Invalid privilege in ACE: %r" % (privilege,))
        namespace, name = privilege.children[0].qname()
        if not namespace:
            raise MalformedDocument("Privilege has no namespace: %r" % (privilege,))
        permissions.append(permissionName(namespace, name))

    return _permissionSet(permissions, MalformedDocument, "ACE")
