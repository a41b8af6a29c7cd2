'''
Recursive descent parser for calculator expressions.

Grammar, lowest precedence first:

    assign  ::= expr ( '=' expr )?
    expr    ::= mul ( ( '+' | '-' ) mul )*
    mul     ::= unary ( ( '*' | '/' | '%' | '//' ) unary )*
    unary   ::= ( '-' | '+' ) unary | power
    power   ::= primary ( '^' unary )?
    primary ::= number | '(' expr ')' | const | var
              | func '(' ( expr ( ',' expr )* )? ')'
              | command '(' token* ')'
    number  ::= literal prefix? ( 'i' | 'j' )? ( '[' unit ']' )?

    unit    ::= uterm ( ( '*' | '/' ) uterm )*
    uterm   ::= uatom ( '^' int )?
    uatom   ::= symbol | '1' | '(' unit ')'

Since power's exponent is a unary, ^ is right associative and binds tighter
than a leading sign: 2^3^4 is 2^(3^4), -2^2 is -(2^2).

Nesting is bounded by the environment's max_depth. Every operator of a chain
like 1+2+3 counts as a level too, since each one makes the tree deeper.
'''

from contextlib import ExitStack, contextmanager

from .lexer import FLOAT, IDENT, INT, OP
from .nodes import (BinOp, Command, Complex, Float, Func, Int, Unary, Unit,
                    Var)
from .util import ParseError, trace


# Metric prefixes that may directly follow a literal: 2k, 4.7u.
PREFIXES = {
    'k': 1e3,
    'M': 1e6,
    'G': 1e9,
    'T': 1e12,
    'm': 1e-3,
    'u': 1e-6,
    'n': 1e-9,
    'p': 1e-12,
}

IMAGINARY = {'i', 'j'}

# 1ki lexes as one identifier: a prefix glued to the imaginary unit.
PREFIXED_IMAGINARY = {prefix + unit
                      for prefix in PREFIXES
                      for unit in IMAGINARY}

ADDITIVE = {'+', '-'}
MULTIPLICATIVE = {'*', '/', '%', '//'}


class Parser:
    '''
    Parser over a complete token sequence.

    Identifiers are told apart (constant, function, command, variable) by
    asking the environment.
    '''

    def __init__(self, env, tokens):
        self.env = env
        self._tokens = list(tokens)
        self._current = 0
        self._depth = 0

    def parse(self):
        node = self._parse_assign()
        if not self._is_at_end():
            raise ParseError('Unexpected token left: {} at {}'
                             .format(_describe(self._peek()), self._current))
        return node

    # Token helpers

    def _is_at_end(self):
        return self._current >= len(self._tokens)

    def _peek(self, offset=0):
        index = self._current + offset
        if index < len(self._tokens):
            return self._tokens[index]
        return None

    def _advance(self):
        token = self._tokens[self._current]
        self._current += 1
        return token

    def _check(self, *operators):
        token = self._peek()
        return token is not None and token.kind == OP and \
            token.value in operators

    def _check_ident(self, names, offset=0):
        token = self._peek(offset)
        return token is not None and token.kind == IDENT and \
            token.value in names

    def _match(self, *operators):
        if self._check(*operators):
            return self._advance()
        return None

    def _consume(self, operator, message):
        if self._check(operator):
            return self._advance()
        raise ParseError('{}: got {} at {}'.format(message,
                                                   _describe(self._peek()),
                                                   self._current))

    @contextmanager
    def _nested(self):
        self._depth += 1
        try:
            if self._depth > self.env.max_depth:
                raise ParseError('Expression nested too deeply (limit {})'
                                 .format(self.env.max_depth))
            yield
        finally:
            self._depth -= 1

    def _trace(self, rule):
        trace(self.env, '{} {} at {}', rule, _describe(self._peek()),
              self._current)

    # Expressions

    def _parse_assign(self):
        self._trace('assign')
        node = self._parse_expr()
        if self._match('='):
            node = BinOp('=', node, self._parse_expr())
        return node

    def _parse_expr(self):
        self._trace('expr')
        with self._nested(), ExitStack() as chain:
            node = self._parse_mul()
            while True:
                token = self._match(*ADDITIVE)
                if token is None:
                    return node
                chain.enter_context(self._nested())
                node = BinOp(token.value, node, self._parse_mul())

    def _parse_mul(self):
        self._trace('mul')
        with ExitStack() as chain:
            node = self._parse_unary()
            while True:
                token = self._match(*MULTIPLICATIVE)
                if token is None:
                    return node
                chain.enter_context(self._nested())
                node = BinOp(token.value, node, self._parse_unary())

    def _parse_unary(self):
        self._trace('unary')
        token = self._match('-', '+')
        if token is None:
            return self._parse_power()
        with self._nested():
            return Unary(token.value, self._parse_unary())

    def _parse_power(self):
        self._trace('power')
        base = self._parse_primary()
        if self._match('^'):
            with self._nested():
                return BinOp('^', base, self._parse_unary())
        return base

    def _parse_primary(self):
        self._trace('primary')
        token = self._peek()
        if token is None:
            raise ParseError('Unexpected end of input')
        if token.kind in (INT, FLOAT):
            return self._parse_number()
        if token.kind == IDENT:
            return self._parse_identifier()
        if self._match('('):
            node = self._parse_expr()
            self._consume(')', "')' not found")
            return node
        raise ParseError('Unexpected token: {} at {}'.format(_describe(token),
                                                             self._current))

    def _parse_number(self):
        self._trace('number')
        value = self._advance().value
        scaled = imaginary = False
        if self._check_ident(PREFIXES):
            value = value * PREFIXES[self._advance().value]
            scaled = True
        elif self._check_ident(PREFIXED_IMAGINARY) and \
                not self.env.is_const(self._peek().value):
            # Constants win: 2pi is not 2 pico-i.
            value = value * PREFIXES[self._advance().value[0]]
            imaginary = True
        if not imaginary and self._check_ident(IMAGINARY):
            self._advance()
            imaginary = True
        if imaginary:
            node = Complex(complex(0, value))
        elif scaled or isinstance(value, float):
            node = Float(float(value))
        else:
            node = Int(value)
        if self._match('['):
            unit = self._parse_unit()
            self._consume(']', "']' not found")
            node = type(node)(node.value, Unit(unit))
        return node

    def _parse_identifier(self):
        name = self._advance().value
        self._trace('identifier ' + name)
        if self.env.is_const(name):
            return Var(name)
        elif self.env.is_func(name):
            return Func(name, tuple(self._parse_arguments(name)))
        elif self.env.is_cmd(name):
            return Command(name, tuple(self._parse_command_arguments(name)))
        # Variable, declared or not; the evaluator decides.
        return Var(name)

    def _parse_arguments(self, name):
        self._consume('(', "function {} has no '('".format(name))
        args = []
        if self._match(')'):
            return args
        args.append(self._parse_expr())
        while self._match(','):
            args.append(self._parse_expr())
        self._consume(')', "function {} has no ')'".format(name))
        return args

    def _parse_command_arguments(self, name):
        self._consume('(', "command {} has no '('".format(name))
        args = []
        while not self._match(')'):
            if self._is_at_end():
                raise ParseError("command {} has no ')'".format(name))
            token = self._advance()
            if not (token.kind == OP and token.value == ','):
                args.append(token)
        return args

    # Unit expressions

    def _parse_unit(self):
        self._trace('unit')
        with self._nested(), ExitStack() as chain:
            node = self._parse_unit_term()
            while True:
                token = self._match('*', '/')
                if token is None:
                    return node
                chain.enter_context(self._nested())
                node = BinOp(token.value, node, self._parse_unit_term())

    def _parse_unit_term(self):
        node = self._parse_unit_atom()
        if self._match('^'):
            token = self._peek()
            if token is None or token.kind != INT:
                raise ParseError('Unit exponent must be an integer: got {}'
                                 .format(_describe(token)))
            node = BinOp('^', node, Int(self._advance().value))
        return node

    def _parse_unit_atom(self):
        token = self._peek()
        if token is None:
            raise ParseError('Unexpected end of input in unit')
        if token.kind == IDENT:
            return Var(self._advance().value)
        if token.kind == INT and token.value == 1:
            return Int(self._advance().value)
        if self._match('('):
            node = self._parse_unit()
            self._consume(')', "')' not found in unit")
            return node
        raise ParseError('Unexpected token in unit: {}'
                         .format(_describe(token)))


def _describe(token):
    if token is None:
        return 'end of input'
    return repr(token.value)


def parse(env, tokens):
    '''
    Parse a token sequence into an AST.

    Raises ParseError on malformed input or trailing tokens.
    '''
    return Parser(env, tokens).parse()
