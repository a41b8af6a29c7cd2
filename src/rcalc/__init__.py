'''
Arithmetic calculator with units.

Infix expressions over 128-bit integers, floats and complex numbers, with
metric prefixes (2k, 4.7u), named constants, declared variables, builtin
functions and commands, and a small unit algebra: 6[km] is 6000[m], and
6[g]/2[m/s] is 3[g*s/m].

Text goes through three stages, each usable on its own:

    tokens = lex(text)
    tree = parse(env, tokens)
    result = evaluate(env, tree)

calculate() runs all three.
'''

from .builtins import register_builtins
from .cli import CLI
from .env import Environment
from .evaluator import calculate, evaluate
from .formatting import format_node
from .lexer import Lexer, lex
from .parser import Parser, parse
from .util import EvalError, LexError, ParseError, RCError


__all__ = ('CLI', 'Environment', 'EvalError', 'LexError', 'Lexer',
           'ParseError', 'Parser', 'RCError', 'calculate', 'evaluate',
           'format_node', 'lex', 'parse', 'register_builtins')
