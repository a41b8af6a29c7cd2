'''
Unit algebra.

Units ride along with numbers as small expression trees built from unit
symbols (Var), the literal 1 (Int) and BinOp('*', '/', '^'). Every numeric
result is brought to one canonical form. A unit as written goes through:

1. exponents are expanded into repeated products (m^3 -> m*m*m),
2. compound symbols are expanded to a fixpoint (feet -> 12 in -> 0.3048 m),
   scaling the number as they go,
3. the tree is rewritten into a single quotient of two products,
4. both products are counted into exponent maps.

Results of earlier operations already carry canonical fractions; when they
are combined, their exponent maps are added (or multiplied, for ^) directly.
Finally common factors cancel. The result is a UnitFraction, or None when
nothing but dimensionless factors remain, so 3[m/m] is just 3.
'''

from collections import Counter

from .nodes import (DIMENSIONLESS, BinOp, Complex, Float, Int, Unit,
                    UnitFraction, Var)
from .util import EvalError, trace


# Compound symbol -> (scale factor, replacement). Replacements may be
# compound themselves; expansion repeats until only atomic symbols remain.
UNIT_EXPANSIONS = {
    'km': (1000.0, Var('m')),
    'cm': (0.01, Var('m')),
    'mm': (0.001, Var('m')),
    'mi': (1600.0, Var('m')),
    'in': (0.0254, Var('m')),
    'feet': (12.0, Var('in')),
    'ft': (12.0, Var('in')),
    'yd': (3.0, Var('feet')),
}

# Bounds on rewriting units as written. MAX_UNIT_EXPONENT caps the total
# power of any factor, nested exponents multiplied: (m^8)^8 is the limit.
MAX_UNIT_EXPONENT = 64
MAX_EXPANSION_PASSES = 16


def unwrap(unit):
    '''
    Strip Unit wrappers: the payload as written is the tree inside.
    '''
    while isinstance(unit, Unit):
        unit = unit.inner
    return unit


def multiply(lhs, rhs):
    '''
    Unit of a product. None is the identity.
    '''
    lhs, rhs = unwrap(lhs), unwrap(rhs)
    if lhs is None:
        return rhs
    if rhs is None:
        return lhs
    return BinOp('*', lhs, rhs)


def divide(lhs, rhs):
    '''
    Unit of a quotient. None is the identity.
    '''
    lhs, rhs = unwrap(lhs), unwrap(rhs)
    if rhs is None:
        return lhs
    if lhs is None:
        return BinOp('/', Int(1), rhs)
    return BinOp('/', lhs, rhs)


def power(unit, exponent):
    '''
    Unit raised to an integer exponent.
    '''
    unit = unwrap(unit)
    if unit is None or exponent == 0:
        return None
    if exponent < 0:
        return divide(None, power(unit, -exponent))
    return BinOp('^', unit, Int(exponent))


def expand_exponents(unit, scale=1):
    '''
    Rewrite u^n as u * u^(n-1), down to u^1 = u.

    scale is the power the enclosing exponents already raise unit to.
    '''
    if not isinstance(unit, BinOp):
        return unit
    if unit.op != '^':
        return BinOp(unit.op, expand_exponents(unit.lhs, scale),
                     expand_exponents(unit.rhs, scale))
    if not isinstance(unit.rhs, Int):
        raise EvalError('Malformed unit exponent: {}'.format(unit.rhs))
    exponent = unit.rhs.value
    if exponent * scale > MAX_UNIT_EXPONENT:
        raise EvalError('Unit exponent too large: {}'
                        .format(exponent * scale))
    if exponent == 0:
        return Int(1)
    base = expand_exponents(unit.lhs, exponent * scale)
    product = base
    for _ in range(exponent - 1):
        product = BinOp('*', base, product)
    return product


def expand_prefixes(unit):
    '''
    Replace compound symbols by their scaled base units, one level deep.

    Returns (factor, unit, atomic). atomic is True when nothing was
    replaced, i.e. calling again would change nothing.
    '''
    if isinstance(unit, Var):
        if unit.name in UNIT_EXPANSIONS:
            factor, base = UNIT_EXPANSIONS[unit.name]
            return factor, base, False
        return 1.0, unit, True
    if isinstance(unit, Int):
        return 1.0, unit, True
    if isinstance(unit, BinOp) and unit.op in ('*', '/'):
        lfactor, lhs, latomic = expand_prefixes(unit.lhs)
        rfactor, rhs, ratomic = expand_prefixes(unit.rhs)
        if unit.op == '*':
            factor = lfactor * rfactor
        else:
            factor = lfactor / rfactor
        return factor, BinOp(unit.op, lhs, rhs), latomic and ratomic
    raise EvalError('Malformed unit expression: {}'.format(unit))


def _reduce_step(unit):
    if not isinstance(unit, BinOp):
        return unit
    lhs, rhs = _reduce_step(unit.lhs), _reduce_step(unit.rhs)
    ldiv = isinstance(lhs, BinOp) and lhs.op == '/'
    rdiv = isinstance(rhs, BinOp) and rhs.op == '/'
    if unit.op == '*':
        if ldiv:
            # (a/b)*c => (a*c)/b
            return BinOp('/', BinOp('*', lhs.lhs, rhs), lhs.rhs)
        if rdiv:
            # a*(b/c) => (a*b)/c
            return BinOp('/', BinOp('*', lhs, rhs.lhs), rhs.rhs)
    elif unit.op == '/':
        if rdiv:
            # a/(b/c) => (a*c)/b
            return BinOp('/', BinOp('*', lhs, rhs.rhs), rhs.lhs)
        if ldiv:
            # (a/b)/c => a/(b*c)
            return BinOp('/', lhs.lhs, BinOp('*', lhs.rhs, rhs))
    return BinOp(unit.op, lhs, rhs)


def reduce(unit):
    '''
    Rewrite a unit tree into one quotient of two pure products.
    '''
    while True:
        reduced = _reduce_step(unit)
        if reduced == unit:
            return unit
        unit = reduced


def _count(unit, counts):
    if isinstance(unit, Var):
        counts[unit.name] += 1
    elif isinstance(unit, Int):
        counts[DIMENSIONLESS] += 1
    elif isinstance(unit, BinOp) and unit.op == '*':
        _count(unit.lhs, counts)
        _count(unit.rhs, counts)
    else:
        raise EvalError('Malformed unit expression: {}'.format(unit))
    return counts


def _counts(unit):
    if isinstance(unit, BinOp) and unit.op == '/':
        return _count(unit.lhs, Counter()), _count(unit.rhs, Counter())
    return _count(unit, Counter()), Counter()


def cancel(numerator, denominator):
    '''
    Remove factors common to both sides of a fraction.
    '''
    numerator, denominator = Counter(numerator), Counter(denominator)
    for symbol in set(numerator) & set(denominator):
        common = min(numerator[symbol], denominator[symbol])
        numerator[symbol] -= common
        denominator[symbol] -= common
    return +numerator, +denominator


def to_fraction(unit):
    '''
    Count a reduced unit tree into a cancelled UnitFraction.
    '''
    return UnitFraction.from_maps(*cancel(*_counts(unit)))


def _contains_fraction(unit):
    if isinstance(unit, UnitFraction):
        return True
    if isinstance(unit, BinOp):
        return _contains_fraction(unit.lhs) or _contains_fraction(unit.rhs)
    return False


def _as_written(unit):
    '''
    Scale factor, whether it applies, and exponent maps of a written unit.
    '''
    unit = expand_exponents(unit)
    factor, scaled = 1.0, False
    for _ in range(MAX_EXPANSION_PASSES):
        step, unit, atomic = expand_prefixes(unit)
        if atomic:
            break
        factor, scaled = factor * step, True
    else:
        raise EvalError('Unit expansion does not terminate: {}'.format(unit))
    return (factor, scaled) + _counts(reduce(unit))


def _raise(counts, exponent):
    return Counter({symbol: count * exponent
                    for symbol, count in counts.items()})


def _collect(unit):
    '''
    Like _as_written, but for trees that combine canonical fractions.
    '''
    unit = unwrap(unit)
    if isinstance(unit, UnitFraction):
        return (1.0, False, Counter(unit.numerator_map),
                Counter(unit.denominator_map))
    if not _contains_fraction(unit):
        return _as_written(unit)
    if isinstance(unit, BinOp) and unit.op == '^':
        if not isinstance(unit.rhs, Int):
            raise EvalError('Malformed unit exponent: {}'.format(unit.rhs))
        exponent = unit.rhs.value
        factor, scaled, numerator, denominator = _collect(unit.lhs)
        if exponent < 0:
            numerator, denominator = denominator, numerator
        return (factor ** exponent, scaled,
                _raise(numerator, abs(exponent)),
                _raise(denominator, abs(exponent)))
    if isinstance(unit, BinOp) and unit.op in ('*', '/'):
        lfactor, lscaled, lnum, lden = _collect(unit.lhs)
        rfactor, rscaled, rnum, rden = _collect(unit.rhs)
        if unit.op == '*':
            return lfactor * rfactor, lscaled or rscaled, lnum + rnum, \
                lden + rden
        return lfactor / rfactor, lscaled or rscaled, lnum + rden, \
            lden + rnum
    raise EvalError('Malformed unit expression: {}'.format(unit))


def number(value, unit=None):
    if isinstance(value, complex):
        return Complex(value, unit)
    if isinstance(value, float):
        return Float(value, unit)
    return Int(value, unit)


def canonicalize(node, env=None):
    '''
    Bring a numeric node's unit payload into canonical form.

    Compound symbols scale the value, so 6[km] becomes 6000.0[m].
    '''
    if node.unit is None:
        return node
    trace(env, 'units canonicalize {}', node)
    factor, scaled, numerator, denominator = _collect(node.unit)
    value = node.value * factor if scaled else node.value
    numerator, denominator = cancel(numerator, denominator)
    numerator.pop(DIMENSIONLESS, None)
    denominator.pop(DIMENSIONLESS, None)
    if not numerator and not denominator:
        return number(value, None)
    return number(value, UnitFraction.from_maps(numerator, denominator))


def same_quantity(lhs, rhs):
    '''
    True if two numeric nodes denote the same physical quantity.
    '''
    lhs, rhs = canonicalize(lhs), canonicalize(rhs)
    return lhs.value == rhs.value and lhs.unit == rhs.unit
