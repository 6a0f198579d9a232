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

from optparse import IndentedHelpFormatter, OptionParser
import textwrap

from .color import colorize
from .config import XacroConfig


REMAP = ':='


class ColoredOptionParser(OptionParser):

    def error(self, message):
        msg = colorize(message, 'red')
        OptionParser.error(self, msg)


_original_wrap = textwrap.wrap


def wrap_with_newlines(text, width, **kwargs):

    result = []
    for paragraph in text.split('\n'):
        result.extend(_original_wrap(paragraph, width, **kwargs))
    return result


class IndentedHelpFormatterWithNL(IndentedHelpFormatter):

    def __init__(self, *args, **kwargs):
        IndentedHelpFormatter.__init__(self, *args, **kwargs)

    def format_option(self, text):
        textwrap.wrap, old = wrap_with_newlines, textwrap.wrap
        result = IndentedHelpFormatter.format_option(self, text)
        textwrap.wrap = old
        return result


def load_mappings(argv):
    """
    Load substitution args encoded in command-line arguments.

    Parameter assignments (_name:=value) are filtered out.
    @param argv: command-line arguments
    @type  argv: [str]
    @return: name->value mappings.
    @rtype: dict {str: str}
    """
    mappings = {}
    for arg in argv:
        if REMAP in arg:
            src, dst = [x.strip() for x in arg.split(REMAP, 1)]
            if src and dst:
                if len(src) > 1 and src[0] == '_' and src[1] != '_':
                    # ignore parameter assignment mappings
                    pass
                else:
                    mappings[src] = dst
    return mappings


def process_args(argv, require_input=True):

    parser = ColoredOptionParser(usage='usage: %prog [options] <input>',
                                 formatter=IndentedHelpFormatterWithNL())
    parser.add_option('-o', dest='output', metavar='FILE',
                      help='write output to FILE instead of stdout')
    parser.add_option('--inorder', '-i', action='store_true', dest='in_order',
                      help='use processing in read order [default]')
    parser.add_option('--legacy', action='store_false', dest='in_order',
                      help='gather all properties and macros before expansion')
    parser.add_option(
        '--permissive', action='store_false', dest='require_prefix',
        help='also accept directive tags without xacro: prefix')
    parser.add_option(
        '--global-properties', action='store_false', dest='local_properties',
        help='define all properties in global scope')
    parser.add_option('--working-path', metavar='PATH', dest='working_path',
                      help='base path of relative include filenames\n'
                           '[default: directory of <input>]')
    parser.add_option('--config', metavar='FILE', dest='config',
                      help='load options from a YAML file')

    parser.add_option('--deps', action='store_true', dest='just_deps',
                      help='print file dependencies')

    # verbosity options
    parser.add_option('-q', action='store_const', dest='verbosity', const=0,
                      help='quiet operation suppressing warnings')
    parser.add_option('-v', action='count', dest='verbose',
                      help='increase verbosity')
    parser.add_option(
        '--verbosity', metavar='level', dest='verbosity', type='int',
        help=textwrap.dedent("""\
        set verbosity level
        0: quiet, suppressing warnings
        1: default, showing warnings
        2: show warning locations and stack trace on errors
        3: log property definitions and usage"""))

    # process substitution args
    mappings = load_mappings(argv)
    # filter-out REMAP args
    filtered_args = [a for a in argv if REMAP not in a]

    parser.set_defaults(just_deps=False)
    (options, pos_args) = parser.parse_args(filtered_args)
    if options.verbosity is None and options.verbose:
        options.verbosity = 1 + options.verbose

    if len(pos_args) != 1:
        if require_input:
            parser.error('expected exactly one input file as argument')
        else:
            pos_args = [None]

    options.mappings = mappings
    return options, pos_args[0]


def make_config(options):
    """
    Build the XacroConfig of a command line run.

    Options given on the command line take precedence over a --config file.
    """
    overrides = {}
    for name in ['in_order', 'local_properties', 'require_prefix',
                 'working_path', 'verbosity']:
        value = getattr(options, name, None)
        if value is not None:
            overrides[name] = value

    if options.config:
        config = XacroConfig.from_yaml(options.config, **overrides)
    else:
        config = XacroConfig(**overrides)
    config.mappings.update(options.mappings)
    return config
