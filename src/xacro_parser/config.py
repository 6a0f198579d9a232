#!/usr/bin/env python3

# Copyright 2018 Open Source Robotics Foundation, Inc.
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

import yaml

from .exceptions import XacroException


class XacroConfig(object):
    """
    Options of a single expansion run.

    in_order: process the document in read order (otherwise gather all
        properties and macros first)
    local_properties: properties default to the scope they are defined in
        (otherwise every property is global)
    require_prefix: only tags prefixed with 'xacro:' are directives
    working_path: path prepended to relative include filenames
    rospack_commands: dict {name: callable(*args) -> str} for $(name args)
    mappings: substitution args available through $(arg name)
    verbosity: 0 quiet, 1 warnings, 2 warnings with locations, 3 property log
    """

    defaults = {
        'in_order': True,
        'local_properties': True,
        'require_prefix': True,
        'working_path': '',
        'rospack_commands': None,
        'mappings': None,
        'verbosity': 1,
    }

    def __init__(self, **kwargs):
        unknown = [k for k in kwargs if k not in self.defaults]
        if unknown:
            raise XacroException('unknown option(s): %s' % ', '.join(sorted(unknown)))
        for name, default in self.defaults.items():
            setattr(self, name, kwargs.get(name, default))
        self.rospack_commands = dict(self.rospack_commands or {})
        self.mappings = {str(k): str(v) for k, v in (self.mappings or {}).items()}

    @classmethod
    def from_yaml(cls, inp, **overrides):
        """
        Load options from a YAML mapping.

        :param inp: filename or open stream
        :param overrides: options taking precedence over the file's content
        """
        try:
            if isinstance(inp, str):
                with open(inp) as f:
                    data = yaml.safe_load(f)
            else:
                data = yaml.safe_load(inp)
        except (IOError, yaml.YAMLError) as e:
            raise XacroException('Failed to load config:', exc=e)

        data = data or {}
        if not isinstance(data, dict):
            raise XacroException('config must be a mapping of options')
        if 'rospack_commands' in data:
            raise XacroException('rospack_commands cannot be loaded from a config file')
        data.update(overrides)
        return cls(**data)

    def __repr__(self):
        return 'XacroConfig(%s)' % ', '.join(
            '%s=%r' % (name, getattr(self, name)) for name in self.defaults)
