'''
Calculator parser tests
'''

from rcalc.lexer import IDENT, INT, Token, lex
from rcalc.nodes import (BinOp, Command, Complex, Float, Func, Int, Unary,
                         Unit, Var)
from rcalc.parser import parse
from rcalc.util import ParseError

from pytest import approx, mark, raises


def ast(env, text):
    return parse(env, lex(text))


def test_precedence(env):
    assert ast(env, '1+2*3') == BinOp('+', Int(1),
                                      BinOp('*', Int(2), Int(3)))
    assert ast(env, '(1+2)*3') == BinOp('*', BinOp('+', Int(1), Int(2)),
                                        Int(3))


def test_left_associative(env):
    assert ast(env, '1-2-3') == BinOp('-', BinOp('-', Int(1), Int(2)),
                                      Int(3))
    assert ast(env, '8/4//2') == BinOp('//', BinOp('/', Int(8), Int(4)),
                                       Int(2))


def test_power_right_associative(env):
    assert ast(env, '2^3^4') == BinOp('^', Int(2),
                                      BinOp('^', Int(3), Int(4)))


def test_power_binds_tighter_than_sign(env):
    assert ast(env, '-2^2') == Unary('-', BinOp('^', Int(2), Int(2)))
    assert ast(env, '2^-1') == BinOp('^', Int(2), Unary('-', Int(1)))


def test_repeated_signs(env):
    assert ast(env, '--1') == Unary('-', Unary('-', Int(1)))
    assert ast(env, '1-+1') == BinOp('-', Int(1), Unary('+', Int(1)))


def test_prefixes(env):
    node = ast(env, '2k')
    assert isinstance(node, Float)
    assert node.value == approx(2000.0)
    assert ast(env, '3u').value == approx(3e-6)
    assert ast(env, '1.5M') == Float(1.5e6)


def test_imaginary_literals(env):
    assert ast(env, '2i') == Complex(2j)
    assert ast(env, '0.5j') == Complex(0.5j)
    assert ast(env, '1ki') == Complex(1000j)


def test_bare_imaginary_unit_is_constant(env):
    assert ast(env, 'i') == Var('i')


def test_units(env):
    assert ast(env, '3[m/s]') == Int(3, Unit(BinOp('/', Var('m'),
                                                   Var('s'))))
    assert ast(env, '2[m^2]') == Int(2, Unit(BinOp('^', Var('m'), Int(2))))
    assert ast(env, '1.0[1/(m*s)]') == \
        Float(1.0, Unit(BinOp('/', Int(1), BinOp('*', Var('m'), Var('s')))))


def test_functions(env):
    assert ast(env, 'sqrt(4)') == Func('sqrt', (Int(4),))
    assert ast(env, 'max(1, 2+3)') == Func('max', (Int(1),
                                                   BinOp('+', Int(2),
                                                         Int(3))))
    assert ast(env, 'sum()') == Func('sum', ())


def test_names(env):
    assert ast(env, 'pi') == Var('pi')
    assert ast(env, 'nosuchname') == Var('nosuchname')


def test_assignment(env):
    assert ast(env, 'x = 3') == BinOp('=', Var('x'), Int(3))


def test_commands_take_raw_tokens(env):
    assert ast(env, 'output_format(hex, 3)') == \
        Command('output_format', (Token(IDENT, 'hex'), Token(INT, 3)))
    assert ast(env, 'exit()') == Command('exit', ())


@mark.parametrize('text, message', [
    ('(1+2', r"'\)' not found"),
    ('1+', 'Unexpected end of input'),
    ('1 2', 'Unexpected token left'),
    (')', 'Unexpected token'),
    ('sqrt 4', r"function sqrt has no '\('"),
    ('sqrt(4', r"function sqrt has no '\)'"),
    ('var(x', r"command var has no '\)'"),
    ('3[m', r"'\]' not found"),
    ('2[m^x]', 'Unit exponent must be an integer'),
    ('2[+]', 'Unexpected token in unit'),
    ('2[m*', 'Unexpected end of input in unit'),
])
def test_errors(env, text, message):
    with raises(ParseError, match=message):
        ast(env, text)


def test_nesting_limit(env):
    depth = env.max_depth + 10
    with raises(ParseError, match='nested too deeply'):
        ast(env, '(' * depth + '1' + ')' * depth)
    with raises(ParseError, match='nested too deeply'):
        ast(env, '-' * depth + '1')


def test_nesting_within_limit(env):
    depth = env.max_depth // 2
    assert ast(env, '(' * depth + '1' + ')' * depth) == Int(1)


def test_operator_chains_count_towards_limit(env):
    terms = env.max_depth + 10
    with raises(ParseError, match='nested too deeply'):
        ast(env, '+'.join(['1'] * terms))
    with raises(ParseError, match='nested too deeply'):
        ast(env, '*'.join(['2'] * terms))
    with raises(ParseError, match='nested too deeply'):
        ast(env, '1[' + '*'.join(['m'] * terms) + ']')


def test_prefixed_imaginary(env):
    assert ast(env, '2uj').value == approx(2e-6j)
    assert ast(env, '3Mi') == Complex(3e6j)


def test_constant_beats_prefixed_imaginary(env):
    with raises(ParseError, match="Unexpected token left: 'pi'"):
        ast(env, '2pi')
