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


class XacroException(Exception):
    """
    XacroException allows to wrap another exception (exc) and to augment
    its error message: prefixing with msg and suffixing with suffix.
    str(e) finally prints: msg str(exc) suffix
    """

    def __init__(self, msg=None, suffix=None, exc=None, macro=None):
        super(XacroException, self).__init__(msg)
        self.msg = msg
        self.suffix = suffix
        self.exc = exc
        self.macros = [] if macro is None else [macro]

    def __str__(self):
        return ' '.join([str(item) for item in
                         [self.msg, self.exc, self.suffix] if item])


class EvaluationError(XacroException):
    """An expression could not be tokenized, parsed or computed."""


class MissingParameter(XacroException):
    """A name has no binding in the current scope."""

    def __init__(self, name, **kwargs):
        super(MissingParameter, self).__init__('Missing parameter "%s"' % name, **kwargs)
        self.name = name


class CyclicReference(XacroException):

    def __init__(self, stack, **kwargs):
        super(CyclicReference, self).__init__(
            'Cannot evaluate infinitely recursive expression: %s' % ' > '.join(stack), **kwargs)
        self.stack = stack


class UnknownCommand(XacroException):

    def __init__(self, command, valid, **kwargs):
        super(UnknownCommand, self).__init__(
            'Unknown substitution command "%s". Valid commands are %s'
            % (command, sorted(valid)), **kwargs)
        self.command = command


class UnboundBlockReference(XacroException):
    pass


class MacroNotFound(XacroException):

    def __init__(self, name, **kwargs):
        super(MacroNotFound, self).__init__('Cannot find macro "%s"' % name, **kwargs)
        self.name = name


class IncludeLoadFailure(XacroException):

    def __init__(self, filename, **kwargs):
        super(IncludeLoadFailure, self).__init__(
            'Could not load included file "%s":' % filename, **kwargs)
        self.filename = filename


class UnsupportedFeature(XacroException):
    pass
