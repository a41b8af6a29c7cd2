'''
Built-in constants, functions and commands.

Functions receive their evaluated arguments as a list of floats (complex
numbers stay complex) and return a number. Commands receive the raw tokens
between their parentheses and act on the environment.
'''

from sys import exit, float_info
import cmath
import math

from .env import RADIX_BIN, RADIX_DEC, RADIX_HEX, RADIX_OCT
from .lexer import IDENT, INT
from .nodes import Complex
from .util import EvalError


CONSTANTS = {
    'pi': math.pi,
    'e': math.e,
    'eps': float_info.epsilon,
    'i': Complex(1j),
    'j': Complex(1j),
}


def _unary(real, imaginary=None):
    '''
    One argument function, using the cmath flavour for complex arguments.
    '''
    def callback(args):
        only, = args
        if isinstance(only, complex) and imaginary is not None:
            return imaginary(only)
        return real(only)
    callback.__doc__ = real.__doc__
    callback.__name__ = real.__name__
    return callback


def _variadic(f):
    '''
    Any number of arguments; none at all gives 0.
    '''
    def callback(args):
        if not args:
            return 0.0
        return f(args)
    callback.__doc__ = f.__doc__
    callback.__name__ = f.__name__
    return callback


def _average(args):
    return math.fsum(args) / len(args)


def _sum(args):
    return math.fsum(args)


# name -> (arity, callback); arity 0 is variadic.
FUNCTIONS = {
    'sin': (1, _unary(math.sin, cmath.sin)),
    'cos': (1, _unary(math.cos, cmath.cos)),
    'tan': (1, _unary(math.tan, cmath.tan)),
    'asin': (1, _unary(math.asin, cmath.asin)),
    'acos': (1, _unary(math.acos, cmath.acos)),
    'atan': (1, _unary(math.atan, cmath.atan)),
    'exp': (1, _unary(math.exp, cmath.exp)),
    'log': (1, _unary(math.log, cmath.log)),
    'log10': (1, _unary(math.log10, cmath.log10)),
    'sqrt': (1, _unary(math.sqrt, cmath.sqrt)),
    'abs': (1, _unary(abs)),
    'max': (0, _variadic(max)),
    'min': (0, _variadic(min)),
    'ave': (0, _variadic(_average)),
    'sum': (0, _variadic(_sum)),
}


RADIX_NAMES = {
    'dec': RADIX_DEC,
    'decimal': RADIX_DEC,
    'hex': RADIX_HEX,
    'hexadecimal': RADIX_HEX,
    'oct': RADIX_OCT,
    'octal': RADIX_OCT,
    'bin': RADIX_BIN,
    'binary': RADIX_BIN,
}

SWITCHES = {
    'on': True,
    'true': True,
    'off': False,
    'false': False,
}


def output_format(env, args):
    '''
    output_format(hex), output_format(dec, 3), output_format(0)

    A radix name selects the output radix, an integer the digit group size
    (0 turns grouping off). No arguments restores the defaults.
    '''
    if not args:
        env.output_radix = RADIX_DEC
        env.digit_group = 0
        return
    for token in args:
        if token.kind == IDENT and token.value.lower() in RADIX_NAMES:
            env.output_radix = RADIX_NAMES[token.value.lower()]
        elif token.kind == INT and token.value >= 0:
            env.digit_group = token.value
        else:
            raise EvalError('output_format: unknown argument {!r}'
                            .format(token.value))


def debug(env, args):
    '''
    debug(on), debug(off), debug(1), debug(0); no argument toggles.
    '''
    if not args:
        env.debug = not env.debug
        return
    token, *rest = args
    if rest:
        raise EvalError('debug: takes at most one argument')
    if token.kind == IDENT and token.value.lower() in SWITCHES:
        env.debug = SWITCHES[token.value.lower()]
    elif token.kind == INT and token.value in (0, 1):
        env.debug = bool(token.value)
    else:
        raise EvalError('debug: unknown argument {!r}'.format(token.value))


def declare(env, args):
    '''
    var(a, b): make names assignable.
    '''
    for token in args:
        if token.kind != IDENT:
            raise EvalError('var: not a name: {!r}'.format(token.value))
        env.declare(token.value)


def leave(env, args):
    '''
    exit(): leave the calculator.
    '''
    exit(0)


# name -> (arity, callback); arity 0 is variadic.
COMMANDS = {
    'output_format': (0, output_format),
    'debug': (0, debug),
    'var': (0, declare),
    'exit': (0, leave),
}


def register_builtins(env):
    '''
    Populate env with the built-in constants, functions and commands.
    '''
    for name, value in CONSTANTS.items():
        env.add_constant(name, value)
    for name, (arity, callback) in FUNCTIONS.items():
        env.add_function(name, arity, callback)
    for name, (arity, callback) in COMMANDS.items():
        env.add_command(name, arity, callback)
    return env
