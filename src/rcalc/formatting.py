'''
Rendering of evaluation results.
'''

import math

from .env import RADIX_BIN, RADIX_DEC, RADIX_HEX, RADIX_OCT
from .nodes import BinOp, Complex, Empty, Float, Int, Unit, UnitFraction, Var


# Same prefixes the lexer reads, so output can be pasted back in.
PREFIXES = {
    RADIX_DEC: '',
    RADIX_HEX: '0x',
    RADIX_OCT: '0',
    RADIX_BIN: '0b',
}

SPECIFIERS = {
    RADIX_DEC: 'd',
    RADIX_HEX: 'x',
    RADIX_OCT: 'o',
    RADIX_BIN: 'b',
}

# Integral floats beyond this lose digits when printed as integers.
EXACT_FLOAT_LIMIT = 2 ** 53


def group(digits, size):
    '''
    Insert _ every size digits, counting from the right.

    >>> group('1234567', 3)
    '1_234_567'
    '''
    if size <= 0 or len(digits) <= size:
        return digits
    head = len(digits) % size or size
    chunks = [digits[:head]]
    chunks.extend(digits[i:i + size] for i in range(head, len(digits), size))
    return '_'.join(chunks)


def format_int(value, radix=RADIX_DEC, digit_group=0):
    sign = '-' if value < 0 else ''
    digits = format(abs(value), SPECIFIERS[radix])
    prefix = PREFIXES[radix]
    if radix == RADIX_OCT and value == 0:
        prefix = ''
    return sign + prefix + group(digits, digit_group)


def format_float(value):
    if math.isfinite(value) and value.is_integer() and \
       abs(value) < EXACT_FLOAT_LIMIT:
        return str(int(value))
    return repr(value)


def format_complex(value):
    imaginary = value.imag
    sign = '-' if math.copysign(1.0, imaginary) < 0 else '+'
    return '{}{}{}i'.format(format_float(value.real), sign,
                            format_float(abs(imaginary)))


def _power(symbol, exponent):
    if exponent == 1:
        return symbol
    return '{}^{}'.format(symbol, exponent)


def format_unit(unit):
    '''
    Render a unit payload without the surrounding brackets.

    Canonical fractions come out as m^2/s or g*s/m; several symbols below
    the bar are chained, g/m/s, which reads back the same way.
    '''
    if isinstance(unit, Unit):
        return format_unit(unit.inner)
    if isinstance(unit, UnitFraction):
        numerator = '*'.join(_power(symbol, exponent)
                             for symbol, exponent in unit.numerator)
        denominator = ''.join('/' + _power(symbol, exponent)
                              for symbol, exponent in unit.denominator)
        return (numerator or '1') + denominator
    if isinstance(unit, Var):
        return unit.name
    if isinstance(unit, Int):
        return str(unit.value)
    if isinstance(unit, BinOp):
        rhs = format_unit(unit.rhs)
        if isinstance(unit.rhs, BinOp) and unit.op != '^':
            rhs = '(' + rhs + ')'
        lhs = format_unit(unit.lhs)
        if isinstance(unit.lhs, BinOp) and unit.op == '^':
            lhs = '(' + lhs + ')'
        return lhs + unit.op + rhs
    return str(unit)


def format_node(env, node):
    '''
    Render an evaluated node the way the environment asks for.

    Radix and digit grouping only apply to integers.
    '''
    if isinstance(node, Empty):
        return ''
    if isinstance(node, Int):
        text = format_int(node.value, env.output_radix, env.digit_group)
    elif isinstance(node, Float):
        text = format_float(node.value)
    elif isinstance(node, Complex):
        text = format_complex(node.value)
    else:
        return str(node)
    if node.unit is None or \
       isinstance(node.unit, UnitFraction) and node.unit.is_dimensionless():
        return text
    return '{}[{}]'.format(text, format_unit(node.unit))
