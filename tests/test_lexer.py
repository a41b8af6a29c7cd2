'''
Calculator lexer tests
'''

import regex

from rcalc.lexer import (FLOAT, IDENT, INT, INT_MAX, OP, Lexer, Token, lex)
from rcalc.util import LexError

from pytest import mark, raises


def test_simple_expression():
    assert lex('1 + 2') == [Token(INT, 1), Token(OP, '+'), Token(INT, 2)]


def test_no_spaces_needed():
    assert lex('3*(x-1)') == [Token(INT, 3), Token(OP, '*'), Token(OP, '('),
                              Token(IDENT, 'x'), Token(OP, '-'),
                              Token(INT, 1), Token(OP, ')')]


def test_parallel_is_one_token():
    assert lex('1//2') == [Token(INT, 1), Token(OP, '//'), Token(INT, 2)]
    assert lex('1/ /2') == [Token(INT, 1), Token(OP, '/'), Token(OP, '/'),
                            Token(INT, 2)]


@mark.parametrize('text, value', [
    ('0', 0),
    ('42', 42),
    ('1_000_000', 1000000),
    ('0x1f', 31),
    ('0XFF_FF', 0xffff),
    ('0b1010', 10),
    ('017', 15),
    ('00', 0),
])
def test_integers(text, value):
    token, = lex(text)
    assert token == Token(INT, value)
    assert type(token.value) is int


@mark.parametrize('text, value', [
    ('1.5', 1.5),
    ('1.', 1.0),
    ('1_000.25', 1000.25),
    ('1.5e3', 1500.0),
    ('1.5E-3', 0.0015),
    ('1e3', 1000.0),
    ('2e+2', 200.0),
])
def test_floats(text, value):
    token, = lex(text)
    assert token == Token(FLOAT, value)
    assert type(token.value) is float


def test_largest_integer():
    assert lex(str(INT_MAX)) == [Token(INT, INT_MAX)]


def test_integer_too_large():
    with raises(LexError, match='128 bits'):
        lex(str(INT_MAX + 1))


@mark.parametrize('text', ['0b12', '019', '0x', '0xg'])
def test_bad_digits(text):
    with raises(LexError, match='Integer format'):
        lex(text)


def test_missing_exponent():
    with raises(LexError, match='missing exponent'):
        lex('1e')
    with raises(LexError, match='missing exponent'):
        lex('1.5e-')


def test_identifiers():
    assert lex('sqrt foo_bar1 _x') == [Token(IDENT, 'sqrt'),
                                       Token(IDENT, 'foo_bar1'),
                                       Token(IDENT, '_x')]


def test_number_then_prefix():
    assert lex('2k') == [Token(INT, 2), Token(IDENT, 'k')]
    assert lex('4.7u') == [Token(FLOAT, 4.7), Token(IDENT, 'u')]


def test_units_tokens():
    assert lex('3[m/s^2]') == [Token(INT, 3), Token(OP, '['),
                               Token(IDENT, 'm'), Token(OP, '/'),
                               Token(IDENT, 's'), Token(OP, '^'),
                               Token(INT, 2), Token(OP, ']')]


def test_unknown_characters_skipped():
    assert lex('1 $ 2 @') == [Token(INT, 1), Token(INT, 2)]


def test_blank():
    assert lex('') == []
    assert lex('  \t ') == []


def test_lexeme_groups():
    lexer = Lexer()
    groups = [lexer.matchedgroups(match) for match in lexer.matches('0x1f+a')]
    assert [list(g) for g in groups] == [['radix'], ['operator'],
                                         ['identifier']]


def test_grammar_compiles_verbose():
    assert Lexer.PATTERN.flags & regex.VERBOSE
    assert Lexer.PATTERN.flags & regex.POSIX


def test_tracing(env, capsys):
    env.debug = True
    lex('1+2', env)
    assert "lex '+'" in capsys.readouterr().err
