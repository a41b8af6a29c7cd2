'''
Tree walking evaluator.

Numbers climb a tower Int -> Float -> Complex: a binary operator works on
the highest kind among its operands, except that integer operands stay
integers wherever the operator is exact on them. Integers are 128-bit:
leaving that range is an error, never a wrap.
'''

import operator

from . import units
from .lexer import INT_MAX, INT_MIN, lex
from .nodes import (BinOp, Command, Complex, Empty, Float, Func, Int, Unary,
                    Unit, UnitFraction, Var, is_number)
from .parser import parse
from .util import EvalError, trace, wrap_user_errors


def _checked(value):
    if not INT_MIN <= value <= INT_MAX:
        raise EvalError('Integer overflow: result does not fit in 128 bits')
    return value


def _truncating_div(lhs, rhs):
    quotient = abs(lhs) // abs(rhs)
    return quotient if (lhs < 0) == (rhs < 0) else -quotient


def _truncating_mod(lhs, rhs):
    return lhs - rhs * _truncating_div(lhs, rhs)


def _checked_pow(base, exponent):
    # Any base other than 0, 1, -1 leaves 128 bits within 127 doublings.
    if abs(base) > 1 and exponent >= 128:
        raise EvalError('Integer overflow: result does not fit in 128 bits')
    return _checked(base ** exponent)


def _coerce(node, kind):
    if kind is Complex:
        return complex(node.value)
    if kind is Float:
        return float(node.value)
    return node.value


def _kind(lhs, rhs):
    kinds = {type(lhs), type(rhs)}
    if Complex in kinds:
        return Complex
    if Float in kinds:
        return Float
    return Int


class Evaluator:
    '''
    Evaluates AST nodes against an environment.

    Assignments update the environment as soon as they complete; a later
    error does not roll them back.
    '''

    def __init__(self, env):
        self.env = env

    def evaluate(self, node):
        trace(self.env, 'eval {}', node)
        if is_number(node):
            return units.canonicalize(node, self.env)
        if isinstance(node, Unary):
            return self._evaluate_unary(node)
        if isinstance(node, BinOp):
            if node.op == '=':
                return self._evaluate_assign(node)
            return self.binary(node.op,
                               self.evaluate(node.lhs),
                               self.evaluate(node.rhs))
        if isinstance(node, Var):
            return self.evaluate(self.env.lookup(node.name))
        if isinstance(node, Func):
            return self._evaluate_function(node)
        if isinstance(node, Command):
            return self._evaluate_command(node)
        if isinstance(node, Empty):
            return node
        if isinstance(node, (Unit, UnitFraction)):
            raise EvalError('Unit without a value: {}'.format(node))
        raise EvalError('Cannot evaluate {}'.format(node))

    def _evaluate_unary(self, node):
        operand = self._number(self.evaluate(node.operand), node.op)
        if node.op == '+':
            return operand
        if node.op == '-':
            value = -operand.value
            if isinstance(operand, Int):
                value = _checked(value)
            return type(operand)(value, operand.unit)
        raise EvalError('Unknown unary operator {!r}'.format(node.op))

    def _evaluate_assign(self, node):
        if not isinstance(node.lhs, Var):
            raise EvalError('Can only assign to a variable, not {}'
                            .format(node.lhs))
        name = node.lhs.name
        if self.env.is_const(name):
            raise EvalError('Attempting to assign to constant {!r}'
                            .format(name))
        if not self.env.is_variable(name):
            raise EvalError('Attempting to assign to undeclared variable {!r}'
                            .format(name))
        value = self._number(self.evaluate(node.rhs), '=')
        if isinstance(value, Int):
            value = Float(float(value.value), value.unit)
        self.env.assign(name, value)
        return value

    def _evaluate_function(self, node):
        if not self.env.is_func(node.name):
            raise EvalError('Unknown function {!r}'.format(node.name))
        arity, callback = self.env.functions[node.name]
        if arity and len(node.args) != arity:
            raise EvalError('Function {} takes {} argument(s), {} given'
                            .format(node.name, arity, len(node.args)))
        args = []
        for arg in node.args:
            value = self._number(self.evaluate(arg), node.name)
            args.append(_coerce(value, Complex if isinstance(value, Complex)
                                else Float))
        result = _call(node.name, callback, args)
        return units.number(result if isinstance(result, complex)
                       else float(result))

    def _evaluate_command(self, node):
        if not self.env.is_cmd(node.name):
            raise EvalError('Unknown command {!r}'.format(node.name))
        arity, callback = self.env.commands[node.name]
        if arity and len(node.args) != arity:
            raise EvalError('Command {} takes {} argument(s), {} given'
                            .format(node.name, arity, len(node.args)))
        callback(self.env, list(node.args))
        return Empty()

    def _number(self, node, where):
        if not is_number(node):
            raise EvalError('Operand of {!r} has no value'.format(where))
        return node

    # Binary operators

    def binary(self, op, lhs, rhs):
        '''
        Apply a binary operator to two evaluated numbers.
        '''
        lhs, rhs = self._number(lhs, op), self._number(rhs, op)
        try:
            handler = self.BINARY[op]
        except KeyError:
            raise EvalError('Unknown operator {!r}'.format(op))
        trace(self.env, 'binop {} {} {}', lhs, op, rhs)
        return handler(self, lhs, rhs)

    def _same_unit(self, op, lhs, rhs):
        if lhs.unit != rhs.unit:
            raise EvalError('Incompatible units for {!r}: {} and {}'
                            .format(op, lhs.unit, rhs.unit))
        return lhs.unit

    def _additive(op, function):
        def handler(self, lhs, rhs):
            unit = self._same_unit(op, lhs, rhs)
            kind = _kind(lhs, rhs)
            value = function(_coerce(lhs, kind), _coerce(rhs, kind))
            if kind is Int:
                value = _checked(value)
            return units.number(value, unit)
        return handler

    def _multiply(self, lhs, rhs):
        kind = _kind(lhs, rhs)
        value = _arithmetic(operator.mul, _coerce(lhs, kind),
                            _coerce(rhs, kind))
        if kind is Int:
            value = _checked(value)
        return self._with_units(value, units.multiply(lhs.unit, rhs.unit))

    def _divide(self, lhs, rhs):
        kind = _kind(lhs, rhs)
        # Floats too: 1.0/0 is an error here, not inf.
        if rhs.value == 0:
            raise EvalError('Division by zero')
        if kind is Int:
            value = _checked(_truncating_div(lhs.value, rhs.value))
        else:
            value = _arithmetic(operator.truediv, _coerce(lhs, kind),
                                _coerce(rhs, kind))
        return self._with_units(value, units.divide(lhs.unit, rhs.unit))

    def _modulo(self, lhs, rhs):
        unit = self._same_unit('%', lhs, rhs)
        if not (isinstance(lhs, Int) and isinstance(rhs, Int)):
            # Only defined on integers.
            return Int(0, unit)
        if rhs.value == 0:
            raise EvalError('Division by zero')
        return Int(_truncating_mod(lhs.value, rhs.value), unit)

    def _power(self, lhs, rhs):
        if rhs.unit is not None:
            raise EvalError('Exponent must be dimensionless: {}'
                            .format(rhs.unit))
        if isinstance(lhs, Int) and isinstance(rhs, Int) and rhs.value >= 0:
            value = _checked_pow(lhs.value, rhs.value)
        else:
            kind = Complex if Complex in (type(lhs), type(rhs)) else Float
            value = _arithmetic(operator.pow, _coerce(lhs, kind),
                                _coerce(rhs, kind))
        if lhs.unit is None:
            return units.number(value)
        if not isinstance(rhs, Int):
            raise EvalError('Unit {} raised to non-integer power {}'
                            .format(lhs.unit, rhs.value))
        return self._with_units(value, units.power(lhs.unit, rhs.value))

    def _parallel(self, lhs, rhs):
        unit = self._same_unit('//', lhs, rhs)
        kind = Complex if Complex in (type(lhs), type(rhs)) else Float
        a, b = _coerce(lhs, kind), _coerce(rhs, kind)
        # An error rather than IEEE inf or nan, as for /.
        if a + b == 0:
            raise EvalError('Division by zero')
        value = _arithmetic(operator.truediv, a * b, a + b)
        return units.number(value, unit)

    def _with_units(self, value, unit):
        return units.canonicalize(units.number(value, unit), self.env)

    BINARY = {
        '+': _additive('+', operator.add),
        '-': _additive('-', operator.sub),
        '*': _multiply,
        '/': _divide,
        '%': _modulo,
        '^': _power,
        '//': _parallel,
    }


@wrap_user_errors('Arithmetic error in {0.__name__}')
def _arithmetic(function, lhs, rhs):
    return function(lhs, rhs)


@wrap_user_errors('Error calling {0}')
def _call(name, callback, args):
    return callback(args)


def evaluate(env, node):
    '''
    Evaluate an AST against env and return the resulting node.

    Raises EvalError; assignments completed before the error stay in effect.
    '''
    try:
        return Evaluator(env).evaluate(node)
    except RecursionError:
        # Only reachable with trees built by hand; the parser bounds depth.
        raise EvalError('Expression nested too deeply') from None


def calculate(env, text):
    '''
    Lex, parse and evaluate one line of text.

    A line without tokens evaluates to Empty.
    '''
    tokens = lex(text, env)
    if not tokens:
        return Empty()
    return evaluate(env, parse(env, tokens))
