# Software License Agreement (BSD License)
#
# Copyright (c) 2008, Willow Garage, Inc.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions
# are met:
#
#  * Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
#  * Redistributions in binary form must reproduce the above
#    copyright notice, this list of conditions and the following
#    disclaimer in the documentation and/or other materials provided
#    with the distribution.
#  * Neither the name of Willow Garage, Inc. nor the names of its
#    contributors may be used to endorse or promote products derived
#    from this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT OWNER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""
Default $(...) substitution commands.

Each command is called with the whitespace separated arguments of the
substitution and returns the replacement text. Commands that need to know
about the current run (substitution args, the file being processed) read
them from a shared context dict.
"""

import functools
import os


class SubstitutionException(Exception):
    """Base class for exceptions in substitution_args routines."""
    pass


class ArgException(SubstitutionException):
    """Exception for missing $(arg) values."""
    pass


def _eval_env(name):
    """
    Returns the environment variable value or throws exception.

    @return: enviroment variable value
    @raise SubstitutionException: if environment variable not set
    """
    try:
        return os.environ[name]
    except KeyError as e:
        raise SubstitutionException(
            'environment variable %s is not set' % str(e))


def _env(*args, context):
    """
    Process $(env) arg.

    @raise SubstitutionException: if arg invalidly specified
    """
    if len(args) != 1:
        raise SubstitutionException(
            '$(env var) command only accepts one argument [%s]' % ' '.join(args))
    return _eval_env(args[0])


def _optenv(*args, context):
    """
    Process $(optenv) arg.

    The value of the environment variable, or the remaining arguments joined by spaces.
    """
    if len(args) == 0:
        raise SubstitutionException(
            '$(optenv var) must specify an environment variable')
    return os.environ.get(args[0], ' '.join(args[1:]))


def _eval_dirname(filename):
    if not filename:
        raise SubstitutionException('Cannot substitute $(dirname), '
                                    'no file/directory information available.')
    return os.path.abspath(os.path.dirname(filename))


def _dirname(*args, context):
    """
    Process $(dirname).

    @raise SubstitutionException: if no information about the current file is available,
    for example if XML was passed as a string.
    """
    return _eval_dirname(context.get('filename', None))


def _eval_find(pkg):
    import rospkg
    try:
        return rospkg.RosPack().get_path(pkg)
    except rospkg.ResourceNotFound as e:
        raise SubstitutionException('resource not found: %s' % e)


def _find(*args, context):
    """
    Process $(find PKG).

    Resolves to the path of the package
    :raises: :exc:SubstitutionException: if PKG invalidly specified
    """
    if len(args) != 1:
        raise SubstitutionException(
            '$(find pkg) accepts exactly one argument [%s]' % ' '.join(args))
    return _eval_find(args[0])


def _eval_arg(name, args):
    try:
        return args[name]
    except KeyError:
        raise ArgException('Undefined substitution argument %s' % name)


def _arg(*args, context):
    """
    Process $(arg) arg.

    :raises: :exc:`ArgException` If arg invalidly specified
    """
    if len(args) == 0:
        raise SubstitutionException('$(arg var) must specify a variable name')
    elif len(args) > 1:
        raise SubstitutionException(
            '$(arg var) may only specify one arg [%s]' % ' '.join(args))

    return _eval_arg(name=args[0], args=context.setdefault('arg', {}))


def _cwd(*args, context):
    return os.getcwd()


_commands = {
    'env': _env,
    'optenv': _optenv,
    'dirname': _dirname,
    'arg': _arg,
    'find': _find,
    'cwd': _cwd,
}


def default_commands(context):
    """
    Build the command table for one run.

    @param context: dict holding the substitution args under 'arg'
        and the currently processed file under 'filename'
    @return: dict {name: callable(*args) -> str}
    """
    return {name: functools.partial(func, context=context)
            for name, func in _commands.items()}
