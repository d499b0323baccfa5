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
Element tree for access control documents.

Every node is an instance of an element class which names the element it
stands for.  Nodes are built bottom-up, either by code assembling a document
or by the parser, and write themselves out as XML.
"""

__all__ = [
    "dav_namespace",
    "caldav_namespace",
    "encodeXMLName",
    "decodeXMLName",
    "registerElement",
    "lookupElement",
    "WebDAVElement",
    "PCDATAElement",
    "WebDAVUnknownElement",
    "WebDAVEmptyElement",
    "WebDAVTextElement",
]

import io
from xml.sax.saxutils import escape

dav_namespace = "DAV:"
caldav_namespace = "urn:ietf:params:xml:ns:caldav"

_elements_by_qname = {}


def registerElement(elementClass):
    """
    Make the parser build C{elementClass} for its qualified name.
    """
    qname = elementClass.qname()
    if qname in _elements_by_qname:
        raise AssertionError(
            "Element %s is already registered as %r"
            % (elementClass.sname(), _elements_by_qname[qname])
        )
    _elements_by_qname[qname] = elementClass
    return elementClass


def lookupElement(qname):
    """
    @return: the element class registered for C{qname}, or C{None}.
    """
    return _elements_by_qname.get(qname)


def encodeXMLName(namespace, name):
    """
    Encode a namespace and name as C{"{namespace}name"}, or just C{"name"}
    when there is no namespace.
    """
    if not namespace:
        return name
    return "{%s}%s" % (namespace, name)


def decodeXMLName(name):
    """
    Split a name encoded by L{encodeXMLName}.

    @return: C{tuple} of namespace (C{None} if there is none) and local name.
    @raise ValueError: if C{name} isn't an encoded name.
    """
    if name.startswith("{"):
        namespace, found, localname = name[1:].partition("}")
        if not found:
            raise ValueError("Invalid encoded name: %r" % (name,))
    else:
        namespace, localname = None, name

    if not localname or "{" in localname or "}" in localname:
        raise ValueError("Invalid encoded name: %r" % (name,))

    return (namespace or None, localname)


def _quoteAttribute(value):
    return escape(value, {'"': "&quot;"})



class PCDATAElement(object):
    """
    Character data within an element.
    """
    def __init__(self, data):
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        self.data = data

    def __str__(self):
        return self.data

    def __repr__(self):
        return "<%s: %r>" % (self.__class__.__name__, self.data)

    def __eq__(self, other):
        if isinstance(other, PCDATAElement):
            return self.data == other.data
        elif isinstance(other, str):
            return self.data == other
        else:
            return NotImplemented

    def isWhitespace(self):
        return not self.data.strip()

    def _writeToStream(self, output, ns, prefixes, level, pretty):
        # Carriage returns would be turned into newlines by a parser
        output.write(escape(self.data, {"\r": "&#13;"}))



class WebDAVElement(object):
    """
    WebDAV XML element. (RFC 4918, section 14)

    Subclasses name the element with the C{namespace} and C{name} class
    variables.  Only subclasses which set C{allowPCDATA} may contain text;
    whitespace between child elements is dropped from the others.
    """
    namespace   = dav_namespace
    name        = None
    allowPCDATA = False

    def __init__(self, *children):
        my_children = []

        for child in children:
            if isinstance(child, (str, bytes)):
                child = PCDATAElement(child)

            if isinstance(child, PCDATAElement) and not self.allowPCDATA:
                if not child.isWhitespace():
                    raise ValueError(
                        "Text is not allowed in %s element: %r"
                        % (self.sname(), child.data)
                    )
                continue

            my_children.append(child)

        self.children = tuple(my_children)

    @classmethod
    def qname(cls):
        return (cls.namespace, cls.name)

    @classmethod
    def sname(cls):
        return encodeXMLName(cls.namespace, cls.name)

    def __repr__(self):
        return "<%s: %r>" % (self.sname(), self.children)

    def __eq__(self, other):
        if isinstance(other, WebDAVElement):
            return (
                self.qname()  == other.qname() and
                self.children == other.children
            )
        else:
            return NotImplemented

    def childrenOfType(self, child_type):
        return [c for c in self.children if isinstance(c, child_type)]

    def toxml(self, pretty=False, namespaces=None):
        output = io.StringIO()
        self.writeXML(output, pretty, namespaces)
        return output.getvalue()

    def writeXML(self, output, pretty=False, namespaces=None):
        """
        Write this element to C{output} as the root of an XML document.

        @param output: C{stream} to write text to.
        @param pretty: C{bool} whether to indent nested elements.
        @param namespaces: C{dict} mapping prefixes to the namespace URIs
            declared on this element.  The C{""} prefix is the default
            namespace.  Descendants in a prefixed namespace are written with
            that prefix.
        """
        namespaces = dict(namespaces or {})
        prefixes = dict([
            (uri, prefix)
            for prefix, uri in namespaces.items()
            if prefix
        ])

        output.write('<?xml version="1.0" encoding="UTF-8"?>\n')
        self._writeToStream(
            output, namespaces.get(""), prefixes, 0, pretty,
            declarations=sorted(namespaces.items()),
        )

    def _writeToStream(self, output, ns, prefixes, level, pretty, declarations=()):
        """
        @param ns: the default namespace in scope.
        @param prefixes: C{dict} mapping namespace URIs to declared prefixes.
        @param level: nesting depth, C{0} for the root.
        @param declarations: C{(prefix, uri)} pairs to declare on this element.
        """
        if pretty and level:
            output.write("\n" + "  " * level)

        namespace = self.namespace or ""
        if namespace == (ns or ""):
            tag = self.name
        elif namespace in prefixes:
            tag = "%s:%s" % (prefixes[namespace], self.name)
        else:
            # Becomes the default namespace of this subtree
            tag = self.name
            declarations = list(declarations) + [("", namespace)]
            ns = namespace

        output.write("<" + tag)
        for prefix, uri in declarations:
            output.write(' %s="%s"' % (
                "xmlns:" + prefix if prefix else "xmlns", _quoteAttribute(uri),
            ))

        if not self.children:
            output.write("/>")
            return

        output.write(">")

        # Whitespace can't be added around text without changing it
        indent = pretty and not self.childrenOfType(PCDATAElement)
        for child in self.children:
            child._writeToStream(output, ns, prefixes, level + 1, indent)
        if indent:
            output.write("\n" + "  " * level)

        output.write("</%s>" % (tag,))



class WebDAVUnknownElement(WebDAVElement):
    """
    Element with a name no class is registered for.
    """
    allowPCDATA = True

    def __init__(self, *children):
        super(WebDAVUnknownElement, self).__init__(*children)

        # Whitespace between child elements is only formatting
        if self.childrenOfType(WebDAVElement):
            self.children = tuple([
                c for c in self.children
                if not (isinstance(c, PCDATAElement) and c.isWhitespace())
            ])

    @classmethod
    def withName(cls, namespace, name, *children):
        element = cls(*children)
        element.namespace = namespace
        element.name = name
        return element

    def qname(self):
        return (self.namespace, self.name)

    def sname(self):
        return encodeXMLName(self.namespace, self.name)



class WebDAVEmptyElement(WebDAVElement):
    """
    WebDAV element with no contents.
    """
    def __init__(self, *children):
        super(WebDAVEmptyElement, self).__init__(*children)

        if self.children:
            raise ValueError("%s element must be empty" % (self.sname(),))



class WebDAVTextElement(WebDAVElement):
    """
    WebDAV element containing only text.
    """
    allowPCDATA = True

    @classmethod
    def fromString(cls, string):
        return cls(PCDATAElement(string))

    def __init__(self, *children):
        super(WebDAVTextElement, self).__init__(*children)

        for child in self.children:
            if not isinstance(child, PCDATAElement):
                raise ValueError(
                    "%s element may only contain text, not %s"
                    % (self.sname(), child.sname())
                )

    def __str__(self):
        return "".join([c.data for c in self.children])

    def __repr__(self):
        return "<%s: %r>" % (self.sname(), str(self))
