'''
Abstract syntax tree of the calculator.

One frozen dataclass per node kind. Nodes are never mutated; the evaluator
and the unit engine build new nodes instead.
'''

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Node:
    '''Base class for all AST nodes.'''


@dataclass(frozen=True)
class Empty(Node):
    '''Absence of a value: result of commands, error sentinel.'''


@dataclass(frozen=True)
class Int(Node):
    value: int
    unit: Optional[Node] = None


@dataclass(frozen=True)
class Float(Node):
    value: float
    unit: Optional[Node] = None


@dataclass(frozen=True)
class Complex(Node):
    value: complex
    unit: Optional[Node] = None


@dataclass(frozen=True)
class Unary(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class BinOp(Node):
    op: str
    lhs: Node
    rhs: Node


@dataclass(frozen=True)
class Var(Node):
    '''Reference to a constant or variable; also a unit symbol.'''

    name: str


@dataclass(frozen=True)
class Func(Node):
    name: str
    args: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Command(Node):
    '''Meta command; args are raw tokens, not expressions.'''

    name: str
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Unit(Node):
    '''Unit expression attached to a number, as written.'''

    inner: Node


# Exponent map key that numeric literals (the 1 in 1/s) contribute to.
DIMENSIONLESS = '1'


@dataclass(frozen=True)
class UnitFraction(Node):
    '''
    Canonical unit: symbol exponents above and below the fraction bar.

    Both sides are tuples of (symbol, exponent) pairs sorted by symbol, so
    equal units compare equal however they were written.
    '''

    numerator: Tuple[Tuple[str, int], ...] = ()
    denominator: Tuple[Tuple[str, int], ...] = ()

    @classmethod
    def from_maps(cls, numerator: Mapping[str, int],
                  denominator: Mapping[str, int]) -> 'UnitFraction':
        return cls(_pairs(numerator), _pairs(denominator))

    @property
    def numerator_map(self):
        return dict(self.numerator)

    @property
    def denominator_map(self):
        return dict(self.denominator)

    def is_dimensionless(self):
        return all(symbol == DIMENSIONLESS
                   for symbol, _ in self.numerator + self.denominator)


def _pairs(exponents):
    return tuple(sorted((symbol, exponent)
                        for symbol, exponent
                        in exponents.items()
                        if exponent > 0))


NUMBERS = (Int, Float, Complex)


def is_number(node):
    return isinstance(node, NUMBERS)
