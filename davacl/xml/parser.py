##
# Copyright (c) 2012-2017 Apple Computer, Inc. All rights reserved.
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
Reading and writing access control documents with ElementTree's parser.
"""

__all__ = [
    "WebDAVDocument",
]

import io
from functools import partial
from xml.etree.ElementTree import TreeBuilder, XMLParser, ParseError

from twisted.logger import Logger

from davacl.xml.base import WebDAVElement, WebDAVUnknownElement, PCDATAElement
from davacl.xml.base import lookupElement

log = Logger()


def QNameSplit(qname):
    return tuple(qname[1:].split("}", 1)) if "}" in qname else (None, qname,)



class WebDAVContentHandler(TreeBuilder):
    """
    Parser target which builds typed elements rather than ElementTree
    nodes.  Each open element is kept on a stack together with the children
    read so far, and is built when it is closed.
    """
    def __init__(self):
        TreeBuilder.__init__(self)
        self.stack = [(None, [])]
        self._characterBuffer = []

    def start(self, tag, attrs):
        self._flushCharacters()

        qname = QNameSplit(tag)
        if attrs:
            log.debug(
                "Ignoring attributes {names} of {element} element",
                names=sorted(attrs), element=tag,
            )

        elementClass = lookupElement(qname)
        if elementClass is None:
            elementClass = partial(WebDAVUnknownElement.withName, *qname)

        self.stack.append((elementClass, []))

    def end(self, tag):
        self._flushCharacters()

        elementClass, children = self.stack.pop()
        self.stack[-1][1].append(elementClass(*children))

    def data(self, data):
        self._characterBuffer.append(data)

    def _flushCharacters(self):
        if self._characterBuffer:
            pcdata = PCDATAElement("".join(self._characterBuffer))
            self.stack[-1][1].append(pcdata)
            self._characterBuffer = []

    def close(self):
        self._flushCharacters()

        roots = [
            child for child in self.stack[0][1]
            if not isinstance(child, PCDATAElement)
        ]
        if len(roots) != 1:
            raise ValueError("Must have exactly one root element, got %d" % (len(roots),))

        return WebDAVDocument(roots[0])



class WebDAVDocument(object):
    """
    WebDAV XML document: a root element and the namespaces to declare on it
    when it is written.
    """
    @classmethod
    def fromStream(cls, source):
        parser = XMLParser(target=WebDAVContentHandler())
        try:
            while 1:
                data = source.read(65536)
                if not data:
                    break
                parser.feed(data)
            return parser.close()
        except ParseError as e:
            raise ValueError("Not a well-formed XML document: %s" % (e,)) from e

    @classmethod
    def fromString(cls, source):
        if isinstance(source, bytes):
            source = io.BytesIO(source)
        else:
            source = io.StringIO(source)
        with source:
            return cls.fromStream(source)

    def __init__(self, root_element, namespaces=None):
        if not isinstance(root_element, WebDAVElement):
            raise ValueError("Not a WebDAVElement: %r" % (root_element,))

        self.root_element = root_element
        self.namespaces = namespaces

    def __eq__(self, other):
        if isinstance(other, WebDAVDocument):
            return self.root_element == other.root_element
        else:
            return NotImplemented

    def writeXML(self, output, pretty=False):
        self.root_element.writeXML(output, pretty, self.namespaces)

    def toxml(self, pretty=False):
        output = io.StringIO()
        self.writeXML(output, pretty)
        return output.getvalue()

    def tobytes(self, pretty=False):
        return self.toxml(pretty).encode("utf-8")
