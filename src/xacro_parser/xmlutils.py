#!/usr/bin/env python3

# Copyright 2018 Open Source Robotics Foundation, Inc.
# Copyright (c) 2015, Open Source Robotics Foundation, Inc.
# Copyright (c) 2013, Willow Garage, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import xml.dom.minidom

from .color import warning
from .exceptions import XacroException

# node types whose data is run through substitution
TEXT_NODE_TYPES = (xml.dom.Node.TEXT_NODE,
                   xml.dom.Node.CDATA_SECTION_NODE,
                   xml.dom.Node.COMMENT_NODE)


def is_element(node):
    return node is not None and node.nodeType == xml.dom.Node.ELEMENT_NODE


def child_elements(elt):
    c = elt.firstChild
    while c:
        if c.nodeType == xml.dom.Node.ELEMENT_NODE:
            yield c
        c = c.nextSibling


def find_elements(elt, match, prune=None):
    """
    Collect all elements below elt (in document order) for which match(e) holds.

    :param match: predicate selecting elements
    :param prune: optional predicate; the subtree of a matching element is not searched
    """
    result = []
    for c in child_elements(elt):
        if match(c):
            result.append(c)
        if prune is None or not prune(c):
            result.extend(find_elements(c, match, prune))
    return result


def deep_clone(node, skip=None):
    """
    Deep copy a node within its document, leaving out all elements for which skip(e) holds.
    """
    if skip is None or not is_element(node):
        return node.cloneNode(True)
    result = node.cloneNode(False)
    for c in node.childNodes:
        if is_element(c) and skip(c):
            continue
        result.appendChild(deep_clone(c, skip))
    return result


def attribute(tag, a):
    """
    Fetch a single attribute value from tag.

    :param tag (xml.dom.Element): DOM element node
    :param a (str): attribute name
    :return: attribute value if present, otherwise None
    """
    if tag.hasAttribute(a):
        # getAttribute returns empty string for non-existent attributes,
        # which makes it impossible to distinguish with empty values
        return tag.getAttribute(a)
    else:
        return None


def opt_attrs(tag, attrs):
    """
    Fetch optional tag attributes.

    :param tag (xml.dom.Element): DOM element node
    :param attrs [str]: list of attributes to fetch
    """
    return [attribute(tag, a) for a in attrs]


def reqd_attrs(tag, attrs):
    """
    Fetch required tag attributes.

    :param tag (xml.dom.Element): DOM element node
    :param attrs [str]: list of attributes to fetch
    :raise XacroException: if required attribute is missing
    """
    result = opt_attrs(tag, attrs)
    for (res, name) in zip(result, attrs):
        if res is None:
            raise XacroException(
                '%s: missing attribute "%s"' % (tag.nodeName, name))
    return result


def check_attrs(tag, required, optional):
    """
    Fetch required and optional attributes.

    and complain about any additional attributes.
    :param tag (xml.dom.Element): DOM element node
    :param required [str]: list of required attributes
    :param optional [str]: list of optional attributes
    """
    result = reqd_attrs(tag, required)
    result.extend(opt_attrs(tag, optional))
    allowed = required + optional
    extra = [
        a for a in tag.attributes.keys() if a not in allowed and not a.startswith('xmlns:')]
    if extra:
        warning('%s: unknown attribute(s): %s' %
                (tag.nodeName, ', '.join(extra)))
    return result


def parse(inp, filename=None):
    """
    Parse input or filename into a DOM tree.

    If inp is None, open filename and load from there.
    Otherwise, parse inp, either as string or file object.
    If inp is already a DOM tree, this function is a noop.
    :return:xml.dom.minidom.Document
    :raise: xml.parsers.expat.ExpatError
    """
    if inp is None:
        try:
            with open(filename) as f:
                return xml.dom.minidom.parse(f)
        except IOError as e:
            raise XacroException(e.strerror + ': ' + e.filename)

    if isinstance(inp, (str, bytes)):
        return xml.dom.minidom.parseString(inp)
    elif hasattr(inp, 'read'):
        return xml.dom.minidom.parse(inp)
    return inp


# Better pretty printing of xml
# Taken from
# http://ronrothman.com/public/leftbraned/xml-dom-minidom-toprettyxml-and-silly-whitespace/
def fixed_writexml(self, writer, indent='', addindent='', newl=''):
    # indent = current indentation
    # addindent = indentation to add to higher levels
    # newl = newline string
    writer.write(indent + '<' + self.tagName)

    attrs = self._get_attributes()

    for a_name in attrs.keys():
        writer.write(' %s=\"' % a_name)
        xml.dom.minidom._write_data(writer, attrs[a_name].value)
        writer.write('\"')
    if self.childNodes:
        if len(self.childNodes) == 1 \
           and self.childNodes[0].nodeType == xml.dom.minidom.Node.TEXT_NODE:
            writer.write('>')
            self.childNodes[0].writexml(writer, '', '', '')
            writer.write('</%s>%s' % (self.tagName, newl))
            return
        writer.write('>%s' % newl)
        for node in self.childNodes:
            # skip whitespace-only text nodes
            if node.nodeType == xml.dom.minidom.Node.TEXT_NODE and \
                    (not node.data or node.data.isspace()):
                continue
            node.writexml(writer, indent + addindent, addindent, newl)
        writer.write('%s</%s>%s' % (indent, self.tagName, newl))
    else:
        writer.write('/>%s' % newl)


# replace minidom's function with ours
xml.dom.minidom.Element.writexml = fixed_writexml
