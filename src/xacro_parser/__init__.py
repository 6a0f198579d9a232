# Copyright (c) 2015, Open Source Robotics Foundation, Inc.
# Copyright (c) 2013, Willow Garage, Inc.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#     * Redistributions of source code must retain the above copyright
#       notice, this list of conditions and the following disclaimer.
#     * Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#     * Neither the name of the Open Source Robotics Foundation, Inc.
#       nor the names of its contributors may be used to endorse or promote
#       products derived from this software without specific prior
#       written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT OWNER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

import enum
import os
import re
import sys
import xml.dom.minidom
import xml.parsers.expat
from collections import OrderedDict, namedtuple
from concurrent.futures import ThreadPoolExecutor

from . import color
from .cli import make_config, process_args
from .color import debug, error, set_verbosity, warning
from .config import XacroConfig
from .exceptions import (CyclicReference, EvaluationError, IncludeLoadFailure,
                         MacroNotFound, MissingParameter, UnboundBlockReference,
                         UnknownCommand, UnsupportedFeature, XacroException)
from .expressions import Evaluator, is_valid_name
from .substitution_args import default_commands
from .xmlutils import (attribute, check_attrs, deep_clone, find_elements,
                       is_element, parse, reqd_attrs, TEXT_NODE_TYPES)

__all__ = [
    'CyclicReference', 'EvaluationError', 'IncludeLoadFailure', 'MacroNotFound',
    'MissingParameter', 'UnboundBlockReference', 'UnknownCommand',
    'UnsupportedFeature', 'XacroException', 'XacroConfig', 'XacroExpander',
    'Table', 'Macro', 'MacroParam', 'ParamKind', 'Directive', 'IncludeRecord',
    'expand', 'is_absolute', 'abs_filename_spec', 'get_url_base', 'read_file',
    'parse_macro_arg', 'parse_macro_params', 'get_boolean_value', 'main',
]


PLACEMENTS = ('local', 'global', 'parent')


class Table(object):
    """
    Property bindings of one scope.

    A new table starts as a copy of the bindings of the table it is created
    from, which becomes its parent. The global table is its own parent.
    Lookup only consults this table and the global one.
    """

    def __init__(self, parent=None):
        if parent is None:
            self.table = {'True': '1', 'False': '0'}
            self.parent = self
            self.root = self
            self.depth = 0
        else:
            self.table = dict(parent.table)
            self.parent = parent
            self.root = parent.root
            self.depth = parent.depth + 1

    def __getitem__(self, key):
        if key in self.table:
            return self.table[key]
        return self.root.table[key]

    def __contains__(self, key):
        return key in self.table or key in self.root.table

    def resolve(self, key):
        try:
            value = self[key]
        except KeyError:
            raise MissingParameter(key)
        debug('{indent}use {key}: {value}'.format(indent=self.depth * ' ', key=key, value=value))
        return value

    def _setitem(self, key, value):
        self.table[key] = value
        debug('{indent}set {key}: {value}'.format(indent=self.depth * ' ', key=key, value=value))

    def define(self, key, value, placement='local'):
        if placement == 'global':
            target_table = self.root
        elif placement == 'parent':
            target_table = self.parent
        else:
            target_table = self
        target_table._setitem(key, value)

    def __str__(self):
        s = str(self.table)
        if self.parent is not self:
            s += '\n  parent: '
            s += str(self.parent)
        return s


class ParamKind(enum.Enum):
    SCALAR = 'scalar'
    BLOCK = 'block'
    MULTI_BLOCK = 'multi_block'


class MacroParam(namedtuple('MacroParam', ['kind', 'default', 'forward'])):

    def __new__(cls, kind=ParamKind.SCALAR, default=None, forward=False):
        return super(MacroParam, cls).__new__(cls, kind, default, forward)


class Macro(object):
    def __init__(self, name, params=None, body=None):
        self.name = name
        self.params = params if params is not None else OrderedDict()  # name -> MacroParam
        self.body = body if body is not None else []  # template nodes
        self.history = []  # definition history


IncludeRecord = namedtuple('IncludeRecord', ['filename', 'working_path', 'root'])


class Directive(enum.Enum):
    PROPERTY = 'property'
    MACRO = 'macro'
    INSERT_BLOCK = 'insert_block'
    IF = 'if'
    UNLESS = 'unless'
    INCLUDE = 'include'
    ARG = 'arg'
    CALL = 'call'
    ELEMENT = 'element'
    ATTRIBUTE = 'attribute'
    INVOKE = '<invoke>'
    OPAQUE = '<opaque>'


_prefixed_directives = {d.value: d for d in Directive
                        if d not in (Directive.INVOKE, Directive.OPAQUE)}

# directives recognized without xacro: prefix in permissive mode
_bare_directives = {d.value: d for d in [
    Directive.PROPERTY, Directive.MACRO, Directive.INSERT_BLOCK, Directive.IF,
    Directive.UNLESS, Directive.INCLUDE, Directive.ELEMENT, Directive.ATTRIBUTE]}


def is_plain_include(elt):
    # Gazebo's <include><uri>..</uri></include> is a plain element
    return bool(elt.childNodes) and not (
        len(elt.childNodes) == 1 and elt.childNodes[0].nodeType == elt.TEXT_NODE)


re_macro_arg = re.compile(r'''\s*([^\s:=]+?):?=(\^\|?)?((?:(?:'[^']*')?[^\s'"]*?)*)(?:\s+|$)(.*)''',
                          re.DOTALL)
#                           space   param    :=   ^|   <--      default      -->   space    rest


def parse_macro_arg(s):
    """
    parse the first param spec from a macro parameter string s
    accepting the following syntax: <param>[:=|=][^|]<default>
    :param s: param spec string
    :return: param, (forward, default), rest-of-string
             forward will be either param or None (depending on whether ^ was specified)
             default will be the default string or None
             If there is no default spec at all, the middle pair will be replaced by None
    """
    m = re_macro_arg.match(s)
    if m:
        # there is a default value specified for param
        param, forward, default, rest = m.groups()
        if not default:
            default = None
        return param, (param if forward else None, default), rest
    else:
        # there is no default specified at all
        result = s.split(None, 1)
        return result[0], None, result[1] if len(result) > 1 else ''


def parse_macro_params(params):
    """Parse the params attribute of a macro into an OrderedDict name -> MacroParam."""
    result = OrderedDict()
    while params and params.strip():
        param, value, params = parse_macro_arg(params)
        if param.startswith('**'):
            kind, param = ParamKind.MULTI_BLOCK, param[2:]
        elif param.startswith('*'):
            kind, param = ParamKind.BLOCK, param[1:]
        else:
            kind = ParamKind.SCALAR

        forward, default = value if value is not None else (None, None)
        if default is not None and len(default) > 1 and default[0] == default[-1] == "'":
            default = default[1:-1]
        result[param] = MacroParam(kind, default, forward is not None)
    return result


re_leading_number = re.compile(r'\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)')


def get_boolean_value(value):
    """
    Return the boolean value of an evaluated condition.

    A value starting with a number is true iff that number is nonzero
    ('0abc' is false), 'true' and 'false' map directly,
    all other non-empty strings are true.
    """
    m = re_leading_number.match(value)
    if m:
        return float(m.group(1)) != 0
    if value == 'true':
        return True
    if value == 'false':
        return False
    return bool(value)


re_absolute = re.compile(r'^[/\\]|^[A-Za-z]+:/')


def is_absolute(filename):
    return re_absolute.match(filename) is not None


def abs_filename_spec(filename, working_path):
    """
    Prepend the working path to filename if it is not yet absolute.

    The paths are concatenated as they are, without normalization.
    """
    if is_absolute(filename):
        return filename
    return working_path + filename


def get_url_base(path):
    """Return the directory part of path, including a trailing slash."""
    tokens = re.split(r'[\\/]', path)
    tokens.pop()
    if not tokens:
        return './'
    return '/'.join(tokens) + '/'


def read_file(path):
    with open(path) as f:
        return f.read()


class XacroExpander(object):
    """
    Expands a single document.

    :param config: XacroConfig of this run
    :param fetcher: callable(path) -> str returning the content of included files
    :param filename: name of the processed document, if any
    """

    def __init__(self, config=None, fetcher=None, filename=None):
        self.config = config if config is not None else XacroConfig()
        self.fetcher = fetcher if fetcher is not None else read_file
        self.local_properties = self.config.local_properties
        self.working_path = self.config.working_path

        # substitution args and current file for $(...) commands
        self.context = {'arg': dict(self.config.mappings), 'filename': filename}
        self.commands = default_commands(self.context)
        self.commands.update(self.config.rospack_commands)

        self.filestack = [filename]
        self.macro_stack = []  # currently instantiated macros
        self.all_includes = []
        self.preloaded = {}  # path -> IncludeRecord
        self.failed = {}  # path -> exception of a failed preload
        self.out_doc = None

        self.handlers = {
            Directive.PROPERTY: self.grab_property,
            Directive.MACRO: self.grab_macro,
            Directive.INSERT_BLOCK: self.handle_insert_block,
            Directive.IF: self.handle_if,
            Directive.UNLESS: self.handle_unless,
            Directive.INCLUDE: self.process_include,
            Directive.ARG: self.handle_arg,
            Directive.CALL: self.handle_dynamic_macro_call,
            Directive.ELEMENT: self.handle_unsupported,
            Directive.ATTRIBUTE: self.handle_unsupported,
            Directive.INVOKE: self.handle_macro_call,
            Directive.OPAQUE: self.handle_element,
        }

    # diagnostics

    def push_file(self, filename):
        """
        Push a new filename to the filestack.

        Instead of modifying the filestack in place, a copy is extended and
        the old filestack is returned. This allows to store the filestack
        that was active when a macro is defined.
        """
        oldstack = self.filestack
        self.filestack = oldstack + [filename]
        self.context['filename'] = filename
        return oldstack

    def restore_filestack(self, oldstack):
        self.filestack = oldstack
        self.context['filename'] = oldstack[-1]

    def warn(self, msg):
        warning(str(msg))
        if color.verbosity > 1:
            print_location(self.filestack, list(reversed(self.macro_stack)))

    # classification and dispatch

    def classify(self, elt, macros):
        tag = elt.tagName
        if tag.startswith('xacro:'):
            return _prefixed_directives.get(tag[len('xacro:'):], Directive.INVOKE)
        if not self.config.require_prefix:
            directive = _bare_directives.get(tag)
            if directive is Directive.INCLUDE and is_plain_include(elt):
                return Directive.OPAQUE
            if directive is not None:
                return directive
            if tag in macros:
                return Directive.INVOKE
        return Directive.OPAQUE

    def eval_node(self, node, scope, macros):
        """Expand a single node, returning the list of resulting output nodes."""
        if not is_element(node):
            return [self.eval_leaf(node, scope)]

        handler = self.handlers[self.classify(node, macros)]
        try:
            return handler(node, scope, macros)
        except XacroException as e:
            self.warn(e)
            return []

    def eval_children(self, nodes, scope, macros):
        result = []
        for node in list(nodes):
            result.extend(self.eval_node(node, scope, macros))
        return result

    def eval_text(self, text, scope):
        """
        Substitute all ${...} and $(...) spans of text.

        Failures are reported and leave the text unchanged.
        """
        if '$' not in text:
            return text
        try:
            return Evaluator(scope.resolve, self.commands).eval_text(text)
        except XacroException as e:
            self.warn(XacroException('Failed to process expression "%s":' % text, exc=e))
            return text

    def eval_leaf(self, node, scope):
        result = self.out_doc.importNode(node, False)
        if node.nodeType in TEXT_NODE_TYPES:
            result.data = self.eval_text(node.data, scope)
        return result

    def handle_element(self, node, scope, macros):
        result = self.out_doc.importNode(node, False)
        for name, value in list(result.attributes.items()):
            result.setAttribute(name, self.eval_text(value, scope))
        for child in self.eval_children(node.childNodes, scope, macros):
            result.appendChild(child)
        return [result]

    # directives

    def grab_property(self, elt, scope, macros):
        name, value, default, placement = check_attrs(
            elt, ['name'], ['value', 'default', 'scope'])
        if not is_valid_name(name):
            self.warn('Property name cannot be referenced in expressions: %s' % name)

        if value is None:
            value = default
        if value is None:
            value = [c.cloneNode(True) for c in elt.childNodes]

        if placement is None:
            placement = 'local'
        elif placement not in PLACEMENTS:
            self.warn('%s: unknown property scope "%s"' % (name, placement))
            placement = 'local'
        if not self.local_properties:
            placement = 'global'

        # local values are evaluated at the point of use
        if placement != 'local' and isinstance(value, str):
            value = self.eval_text(value, scope)

        scope.define(name, value, placement)
        return []

    def grab_macro(self, elt, scope, macros):
        name, params = check_attrs(elt, ['name'], ['params'])
        if name.startswith('xacro:'):
            name = name[len('xacro:'):]
        if name == 'call':
            self.warn("deprecated use of macro name 'call'; xacro:call is a keyword")

        macro = Macro(name, parse_macro_params(params),
                      [c.cloneNode(True) for c in elt.childNodes])
        if name in macros:
            macro.history = list(macros[name].history)
        macro.history.append(self.filestack)
        macros[name] = macro
        return []

    def handle_insert_block(self, elt, scope, macros):
        name, = check_attrs(elt, ['name'], [])
        try:
            block = scope.resolve(name)
        except MissingParameter:
            raise UnboundBlockReference('Undefined block "%s"' % name)
        if isinstance(block, str):
            raise UnboundBlockReference('"%s" is not a block' % name)
        return self.eval_children(block, scope, macros)

    def handle_if(self, elt, scope, macros):
        return self._handle_conditional(elt, scope, macros, negate=False)

    def handle_unless(self, elt, scope, macros):
        return self._handle_conditional(elt, scope, macros, negate=True)

    def _handle_conditional(self, elt, scope, macros, negate):
        cond, = check_attrs(elt, ['value'], [])
        keep = get_boolean_value(self.eval_text(cond, scope))
        if negate:
            keep = not keep
        if keep:
            return self.eval_children(elt.childNodes, scope, macros)
        return []

    def handle_arg(self, elt, scope, macros):
        name, default = check_attrs(elt, ['name', 'default'], [])
        args = self.context.setdefault('arg', {})
        if name not in args:
            args[name] = self.eval_text(default, scope)
        return []

    def handle_unsupported(self, elt, scope, macros):
        raise UnsupportedFeature('%s tags are not supported' % elt.tagName)

    # includes

    def load_include(self, path):
        """
        Fetch and parse an included file.

        :return: root element of the included document
        :raise IncludeLoadFailure: if the file cannot be fetched
        :raise xml.parsers.expat.ExpatError: if the file is not well-formed
        """
        try:
            text = self.fetcher(path)
        except Exception as e:
            raise IncludeLoadFailure(path, exc=e)
        self.all_includes.append(path)
        return parse(text).documentElement

    def process_include(self, elt, scope, macros):
        filename, namespace = check_attrs(elt, ['filename'], ['ns'])
        if namespace is not None:
            self.warn('xacro:include name spaces are not supported, ignoring ns="%s"' % namespace)

        path = abs_filename_spec(self.eval_text(filename, scope), self.working_path)
        if path in self.failed:
            raise IncludeLoadFailure(path, exc=self.failed[path])
        if path in self.preloaded:
            root = self.preloaded[path].root
        else:
            root = self.load_include(path)

        # the same file may be included from several working paths
        record = IncludeRecord(path, self.working_path, root)
        self.working_path = get_url_base(record.filename)
        oldstack = self.push_file(record.filename)
        try:
            return self.eval_children(record.root.childNodes, scope, macros)
        finally:
            self.restore_filestack(oldstack)
            self.working_path = record.working_path

    # macro invocation

    def handle_macro_call(self, node, scope, macros):
        name = node.tagName
        if name.startswith('xacro:'):
            name = name[len('xacro:'):]
        try:
            m = macros[name]
        except KeyError:
            raise MacroNotFound(name)
        return self.instantiate(m, node, node.attributes.items(), scope, macros)

    def handle_dynamic_macro_call(self, node, scope, macros):
        name, = reqd_attrs(node, ['macro'])
        name = self.eval_text(name, scope)
        if name.startswith('xacro:'):
            name = name[len('xacro:'):]
        try:
            m = macros[name]
        except KeyError:
            raise MacroNotFound(name)
        attrs = [(k, v) for k, v in node.attributes.items() if k != 'macro']
        return self.instantiate(m, node, attrs, scope, macros)

    def eval_default_arg(self, name, param, scope, macro):
        if param.forward:
            try:
                value = scope[name]
            except KeyError:
                if param.default is None:
                    raise XacroException('Undefined property to forward: ' + name, macro=macro)
            else:
                if isinstance(value, str):
                    value = self.eval_text(value, scope)
                return value
        return self.eval_text(param.default, scope)

    def instantiate(self, m, node, attrs, scope, macros):
        attrs = OrderedDict((k, v) for k, v in attrs if not k.startswith('xmlns'))

        # expand block arguments in the caller's scope
        pool = [c for c in self.eval_children(node.childNodes, scope, macros) if is_element(c)]

        # multi-block params pick their named container first
        multi_blocks = {}
        for name, param in m.params.items():
            if param.kind is ParamKind.MULTI_BLOCK and name not in attrs:
                for elt in pool:
                    if elt.tagName == name:
                        multi_blocks[name] = list(elt.childNodes)
                        pool.remove(elt)
                        break

        scoped = Table(scope)  # new local name space for macro evaluation
        for name, param in m.params.items():
            if name in attrs:
                value = self.eval_text(attrs.pop(name), scope)
            elif param.kind is ParamKind.BLOCK and pool:
                value = [pool.pop(0)]
            elif param.kind is ParamKind.MULTI_BLOCK and name in multi_blocks:
                value = multi_blocks[name]
            elif param.forward or param.default is not None:
                value = self.eval_default_arg(name, param, scope, m)
            else:
                raise MissingParameter(name, macro=m, suffix='when instantiating macro "%s"' % m.name)
            scoped.define(name, value)

        for name in attrs:
            self.warn('%s: unknown parameter "%s"' % (m.name, name))

        self.macro_stack.append(m)
        try:
            return self.eval_children(m.body, scoped, dict(macros))
        finally:
            self.macro_stack.pop()

    # document processing

    def grab_definitions(self, root, scope, macros):
        """Collect all property, then all macro definitions below root, in document order."""
        def is_directive(*kinds):
            return lambda e: self.classify(e, macros) in kinds

        definition = is_directive(Directive.PROPERTY, Directive.MACRO)
        for elt in find_elements(root, is_directive(Directive.PROPERTY), prune=definition):
            self.eval_node(elt, scope, macros)
        for elt in find_elements(root, is_directive(Directive.MACRO), prune=definition):
            self.eval_node(elt, scope, macros)

    def strip_definitions(self, root, macros):
        return deep_clone(
            root, skip=lambda e: self.classify(e, macros) in (Directive.PROPERTY, Directive.MACRO))

    def collect_includes(self, root, working_path, scope, macros):
        """
        Preload all includes below root (recursively) and gather their definitions.

        Sibling includes are fetched concurrently but processed in document order.
        """
        paths = []
        for elt in find_elements(root, lambda e: self.classify(e, macros) is Directive.INCLUDE):
            filename = attribute(elt, 'filename')
            if filename is None:
                continue
            path = abs_filename_spec(self.eval_text(filename, scope), working_path)
            if path not in paths and path not in self.preloaded and path not in self.failed:
                paths.append(path)
        if not paths:
            return

        with ThreadPoolExecutor(max_workers=min(len(paths), 8)) as executor:
            futures = [executor.submit(self.fetcher, path) for path in paths]

        for path, future in zip(paths, futures):
            try:
                text = future.result()
            except Exception as e:
                self.failed[path] = e
                continue
            self.all_includes.append(path)

            oldstack = self.push_file(path)
            try:
                included = parse(text).documentElement
                self.grab_definitions(included, scope, macros)
                included = self.strip_definitions(included, macros)
                self.preloaded[path] = IncludeRecord(path, working_path, included)
                self.collect_includes(included, get_url_base(path), scope, macros)
            finally:
                self.restore_filestack(oldstack)

    def gather(self, root, scope, macros):
        if self.local_properties:
            self.warn('local properties are not supported when gathering definitions first, '
                      'all properties are global')
            self.local_properties = False
        self.grab_definitions(root, scope, macros)
        root = self.strip_definitions(root, macros)
        self.collect_includes(root, self.working_path, scope, macros)
        return root

    def process_doc(self, doc):
        """
        Expand the document doc.

        :return: the expanded xml.dom.minidom.Document
        :raise xml.parsers.expat.ExpatError: if an included file is not well-formed
        """
        self.out_doc = xml.dom.minidom.getDOMImplementation().createDocument(None, None, None)
        scope = Table()
        macros = {}

        root = doc.documentElement
        if not self.config.in_order:
            root = self.gather(root, scope, macros)

        for node in doc.childNodes:
            if node is doc.documentElement:
                result, = self.handle_element(root, scope, macros)
                if result.hasAttribute('xmlns:xacro'):
                    result.removeAttribute('xmlns:xacro')
            elif node.nodeType == xml.dom.Node.DOCUMENT_TYPE_NODE:
                continue
            else:
                result = self.eval_leaf(node, scope)
            self.out_doc.appendChild(result)
        return self.out_doc


def expand(doc, config=None, fetcher=None, filename=None):
    """
    Expand all xacro directives of doc.

    :param doc: xml.dom.minidom.Document or XML text
    :param config: XacroConfig, defaults apply if None
    :param fetcher: callable(path) -> str loading included files, reads from disk if None
    :param filename: name of the document, used for diagnostics and $(dirname)
    :return: the expanded xml.dom.minidom.Document
    """
    config = config if config is not None else XacroConfig()
    doc = parse(doc)
    old_verbosity = set_verbosity(config.verbosity)
    try:
        return XacroExpander(config, fetcher, filename).process_doc(doc)
    finally:
        set_verbosity(old_verbosity)


def open_output(output_filename):
    if output_filename is None:
        return sys.stdout
    else:
        dir_name = os.path.dirname(output_filename)
        if dir_name:
            try:
                os.makedirs(dir_name)
            except os.error:
                # errors occur when dir_name exists or creation failed
                # ignore error here; opening of file will fail if directory is still missing
                pass

        try:
            return open(output_filename, 'w')
        except IOError as e:
            raise XacroException('Failed to open output:', exc=e)


def print_location(filestack, macros=None, file=None):
    if file is None:
        file = sys.stderr
    macros = macros or []
    msg = 'when instantiating macro:'
    for m in macros:
        location = '(%s)' % (m.history[-1][-1] or 'string') if m.history else ''
        print(msg, m.name, location, file=file)
        msg = 'instantiated from:'

    msg = 'in file:' if macros else 'when processing file:'
    for f in reversed(filestack):
        if f is None:
            f = 'string'
        print(msg, f, file=file)
        msg = 'included from:'


def main():
    opts, input_file = process_args(sys.argv[1:])
    try:
        config = make_config(opts)
    except XacroException as e:
        error(str(e))
        sys.exit(2)
    if not config.working_path:
        config.working_path = get_url_base(input_file)
    set_verbosity(config.verbosity)

    expander = XacroExpander(config, filename=input_file)
    try:
        doc = parse(None, input_file)
        doc = expander.process_doc(doc)
        out = open_output(opts.output)

    except xml.parsers.expat.ExpatError as e:
        error('XML parsing error: %s' % str(e), alt_text=None)
        if color.verbosity > 0:
            print_location(expander.filestack)
            print(file=sys.stderr)  # add empty separator line before error
            print('Check that:', file=sys.stderr)
            print(' - Your XML is well-formed', file=sys.stderr)
            print(' - You have the xacro xmlns declaration:',
                  'xmlns:xacro="http://www.ros.org/wiki/xacro"', file=sys.stderr)
        sys.exit(2)  # indicate failure, but don't print stack trace on XML errors

    except Exception as e:
        error(str(e))
        if color.verbosity > 0:
            print_location(expander.filestack, expander.macro_stack)
        if color.verbosity > 1:
            print(file=sys.stderr)  # add empty separator line before error
            raise  # create stack trace
        else:
            sys.exit(2)  # gracefully exit with error condition

    if opts.just_deps:
        out.write(' '.join(OrderedDict.fromkeys(expander.all_includes)))
        out.write('\n')
        return

    banner = [doc.createComment(c) for c in
              [' %s ' % ('=' * 83),
               ' |    This document was autogenerated by xacro_parser from %-23s | ' % input_file,
               ' |    EDITING THIS FILE BY HAND IS NOT RECOMMENDED  %-30s | ' % '',
               ' %s ' % ('=' * 83)]]
    first = doc.firstChild
    for comment in banner:
        doc.insertBefore(comment, first)

    out.write(doc.toprettyxml(indent='  '))
    out.write('\n')
    if opts.output:
        out.close()
