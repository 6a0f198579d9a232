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

"""
Evaluation of ${...} expressions and $(...) substitution commands.

Expressions are evaluated by a small recursive-descent parser over a fixed
grammar (numbers, quoted strings, parentheses and the operators
``+ - * / % | & ==``). Names are replaced by the literal values they are
bound to before parsing, so there is no way to reach functions or attributes
of the host interpreter from within a document.
"""

import math
import re
from collections import namedtuple

from .exceptions import (CyclicReference, EvaluationError, UnknownCommand,
                         XacroException)


class QuickLexer(object):

    def __init__(self, *args, **kwargs):
        if args:
            # copy attributes + variables from other instance
            other = args[0]
            self.__dict__.update(other.__dict__)
        else:
            self.res = []
            for k, v in kwargs.items():
                self.__setattr__(k, len(self.res))
                self.res.append(re.compile(v))
        self.str = ''
        self.top = None

    def lex(self, text):
        self.str = text
        self.top = None
        self.next()

    def peek(self):
        return self.top

    def next(self):
        result = self.top
        self.top = None
        for i in range(len(self.res)):
            m = self.res[i].match(self.str)
            if m:
                self.top = (i, m.group(0))
                self.str = self.str[m.end():]
                break
        return result


# any run of two or more $ in front of a span escapes it
LEXER = QuickLexer(DOLLAR_DOLLAR_BRACE=r'\$\$+[({]',
                   EXPR=r'\$\{[^}]+\}',
                   EXTENSION=r'\$\([^)]+\)',
                   TEXT=r'(?:[^$]|\$+(?![${(]))+',
                   DOLLAR=r'\$')

_number = r'(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?'
re_number = re.compile(r'-?%s$' % _number)
re_symbol = re.compile(r'[a-zA-Z_][\w.]*$')

EXPR_LEXER = QuickLexer(IGNORE=r'\s+',
                        NUMBER=_number,
                        STRING=r'\'[^\']*\'|"[^"]*"',
                        SYMBOL=r'[a-zA-Z_][\w.]*',
                        OP=r'==|[-+*/%|&]',
                        LPAREN=r'\(',
                        RPAREN=r'\)')

NUMBER, STRING, OP, LPAREN, RPAREN = 'number', 'string', 'op', 'lparen', 'rparen'

Token = namedtuple('Token', ['kind', 'value', 'text'])


def is_valid_name(name):
    """Check whether name can be referenced from within an expression."""
    return re_symbol.match(name) is not None


def is_number(value):
    return isinstance(value, str) and re_number.match(value) is not None


def to_number(text):
    if any(c in text for c in '.eE'):
        return float(text)
    return int(text)


def to_numeric(value):
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if is_number(value):
        return to_number(value)
    raise EvaluationError('"%s" is not a number' % value)


def to_string(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return '%d' % value
        return repr(value)
    return str(value)


def values_equal(a, b):
    numeric = [not isinstance(v, str) or is_number(v) for v in (a, b)]
    if all(numeric):
        return to_numeric(a) == to_numeric(b)
    return to_string(a) == to_string(b)


class TokenStream(object):

    def __init__(self, tokens):
        self.tokens = tokens
        self.pos = 0

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def next(self):
        tok = self.peek()
        if tok is None:
            raise EvaluationError('unexpected end of expression')
        self.pos += 1
        return tok

    def accept(self, *ops):
        tok = self.peek()
        if tok is not None and tok.kind == OP and tok.value in ops:
            self.pos += 1
            return tok.value
        return None


def eval_lit(lex):
    tok = lex.next()
    if tok.kind in (NUMBER, STRING):
        return tok.value
    if tok.kind == LPAREN:
        result = eval_expr(lex)
        if lex.next().kind != RPAREN:
            raise EvaluationError('unmatched left paren')
        return result
    raise EvaluationError('misplaced "%s"' % tok.text)


def eval_factor(lex):
    op = lex.accept('-', '+')
    if op == '-':
        return -to_numeric(eval_factor(lex))
    if op == '+':
        return to_numeric(eval_factor(lex))
    return eval_lit(lex)


def eval_term(lex):
    result = eval_factor(lex)
    while True:
        op = lex.accept('*', '/', '%')
        if op is None:
            return result
        a, b = to_numeric(result), to_numeric(eval_factor(lex))
        if op == '*':
            result = a * b
        elif b == 0:
            raise EvaluationError('division by zero')
        elif op == '/':
            result = a / b
        elif isinstance(a, int) and isinstance(b, int):
            # remainder takes the sign of the dividend
            result = abs(a) % abs(b)
            if a < 0:
                result = -result
        else:
            result = math.fmod(a, b)


def eval_additive(lex):
    result = eval_term(lex)
    while True:
        op = lex.accept('+', '-')
        if op is None:
            return result
        n = eval_term(lex)
        if op == '+' and (isinstance(result, str) or isinstance(n, str)):
            result = to_string(result) + to_string(n)
        elif op == '+':
            result = to_numeric(result) + to_numeric(n)
        else:
            result = to_numeric(result) - to_numeric(n)


def eval_equality(lex):
    result = eval_additive(lex)
    while lex.accept('=='):
        result = values_equal(result, eval_additive(lex))
    return result


def eval_bitand(lex):
    result = eval_equality(lex)
    while lex.accept('&'):
        result = int(to_numeric(result)) & int(to_numeric(eval_equality(lex)))
    return result


def eval_expr(lex):
    result = eval_bitand(lex)
    while lex.accept('|'):
        result = int(to_numeric(result)) | int(to_numeric(eval_bitand(lex)))
    return result


class Evaluator(object):
    """
    Substitute all ${...} and $(...) spans of a text.

    :param resolve: callable returning the raw value bound to a name,
                    raising MissingParameter for unbound names
    :param commands: dict mapping command names to callables(*args) -> str
    """

    def __init__(self, resolve, commands):
        self.resolve = resolve
        self.commands = commands
        self.stack = []  # expressions currently being resolved

    def eval_text(self, text):
        results = []
        lex = QuickLexer(LEXER)
        lex.lex(text)
        while lex.peek():
            kind, value = lex.next()
            if kind == lex.EXPR:
                results.append(self.eval_expr(value[2:-1]))
            elif kind == lex.EXTENSION:
                results.append(self.eval_extension(value[2:-1]))
            elif kind == lex.DOLLAR_DOLLAR_BRACE:
                results.append(value[1:])
            else:
                results.append(value)
        return ''.join(results)

    def eval_expr(self, expr):
        if expr in self.stack:
            raise CyclicReference(self.stack + [expr])
        self.stack.append(expr)
        try:
            tokens = self.tokenize(expr)
            # a lone number keeps its original spelling
            if len(tokens) == 1 and tokens[0].kind == NUMBER:
                return tokens[0].text

            lex = TokenStream(tokens)
            result = eval_expr(lex)
            if lex.peek() is not None:
                raise EvaluationError('unexpected "%s"' % lex.peek().text)
            return to_string(result)
        except XacroException as e:
            if e.suffix is None:
                e.suffix = "when evaluating expression '%s'" % expr
            raise
        except (ArithmeticError, ValueError, RecursionError) as e:
            # e.g. int() of inf or nan, or too deeply nested parentheses
            raise EvaluationError(suffix="when evaluating expression '%s'" % expr, exc=e)
        finally:
            self.stack.pop()

    def tokenize(self, expr):
        tokens = []
        lex = QuickLexer(EXPR_LEXER)
        lex.lex(expr)
        while lex.peek():
            kind, text = lex.next()
            if kind == lex.IGNORE:
                continue
            elif kind == lex.SYMBOL:
                tokens.append(self.substitute(text))
            elif kind == lex.NUMBER:
                tokens.append(Token(NUMBER, to_number(text), text))
            elif kind == lex.STRING:
                tokens.append(Token(STRING, text[1:-1], text))
            elif kind == lex.OP:
                tokens.append(Token(OP, text, text))
            elif kind == lex.LPAREN:
                tokens.append(Token(LPAREN, text, text))
            else:
                tokens.append(Token(RPAREN, text, text))
        if lex.str:
            raise EvaluationError('invalid syntax at "%s"' % lex.str)
        return tokens

    def substitute(self, name):
        value = self.resolve(name)
        if not isinstance(value, str):
            raise EvaluationError('"%s" is a block, not a value' % name)
        value = self.eval_text(value)
        if is_number(value):
            return Token(NUMBER, to_number(value), value)
        return Token(STRING, value, value)

    def eval_extension(self, s):
        command = self.eval_text(s)
        tokens = command.split()
        if not tokens:
            raise EvaluationError('empty substitution command')
        stem, args = tokens[0], tokens[1:]
        try:
            func = self.commands[stem]
        except KeyError:
            raise UnknownCommand(stem, self.commands.keys())
        try:
            return str(func(*args))
        except XacroException:
            raise
        except Exception as e:
            raise XacroException('substitution command "%s" failed:' % command, exc=e)
