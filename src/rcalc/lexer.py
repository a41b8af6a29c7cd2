from collections import namedtuple
from functools import reduce
import operator

import regex

from .util import LexError, trace


INT = 'int'
FLOAT = 'float'
OP = 'op'
IDENT = 'ident'

# Immutable; value is an int, a float, the operator text or the name.
Token = namedtuple('Token', 'kind value')

# Largest magnitudes representable by a signed 128-bit integer.
INT_MAX = 2 ** 127 - 1
INT_MIN = -2 ** 127

OPERATORS = ('//', '+', '-', '*', '/', '%', '^', '(', ')', ',', '[', ']', '=')

RADIXES = {
    'x': 16,
    'b': 2,
}


class Lexer:
    '''
    Lexer for the calculator's *regular* token grammar.

    Holds no state; the optional environment only enables tracing.
    '''
    # Digits of a prefixed literal. Deliberately permissive: the literal is
    # validated against its radix afterwards, so 0b12 is an error rather than
    # 0b1 followed by 2.
    RADIX = r'''
             (?:
                 # 0x1f, 0XFF_FF, 0b1010, 0B1_0
                 0
                 (?<prefix>[xXbB])
                 (?<radix_digits>[0-9a-fA-F_]*)
             )
             '''
    # Floating point literal: needs a dot or an exponent.
    FLOAT = r'''
             (?:
                 # 1., 1.5, 1_000.25, 1.5e3, 1.5E-3
                 (?<mantissa>[0-9][0-9_]*\.[0-9_]*)
                 (?:
                     [eE]
                     (?<exponent>[-+]?[0-9_]*)
                 )?
             )|(?:
                 # 1e3, 1e-3, and the malformed 1e
                 (?<mantissa>[0-9][0-9_]*)
                 [eE]
                 (?<exponent>[-+]?[0-9_]*)
             )
             '''
    # Leading zero and more digits: octal.
    OCTAL = r'''
             (?:
                 0
                 (?<octal_digits>[0-9_]+)
             )
             '''
    DECIMAL = r'''
               (?:
                   # 0, 1, 12, 100_000
                   [1-9][0-9_]*
                   |
                   0
               )
               '''
    OPERATOR = r'(?:' + r'|'.join(map(regex.escape, OPERATORS)) + r')'
    # Anything that starts like a word and is not a number.
    IDENTIFIER = r'(?:[^\W\d]\w*)'
    SPACE = r'\s+'
    # Unrecognised characters are skipped, not rejected. Must never tie with
    # another lexeme, since POSIX matching would then be free to pick it.
    OTHER = r'(?:(?!' + OPERATOR + r')(?![^\W\d])(?![0-9])(?!\s).)'

    # All possible lexemes.
    LEXEME = r'(?<radix>' + RADIX + r')|' \
             r'(?<float>' + FLOAT + r')|' \
             r'(?<octal>' + OCTAL + r')|' \
             r'(?<decimal>' + DECIMAL + r')|' \
             r'(?<operator>' + OPERATOR + r')|' \
             r'(?<identifier>' + IDENTIFIER + r')|' \
             r'(?<space>' + SPACE + r')|' \
             r'(?<other>' + OTHER + r')'
    # Default regex flags for matching lexemes. POSIX gives leftmost-longest
    # matching, so // beats / and 0x1f beats 0.
    FLAGS = reduce(operator.__or__,
                   {regex.POSIX,
                    regex.DOTALL,
                    regex.VERSION1,
                    regex.VERBOSE},
                   0)

    PATTERN = regex.compile(LEXEME, flags=FLAGS)

    def __init__(self, env=None):
        self.env = env

    def matches(self, line):
        '''
        Yield every lexeme match in line, including spaces and skipped junk.
        '''
        position = 0
        while position < len(line):
            match = type(self).PATTERN.match(line, position)
            # OTHER matches any single character, so this cannot stall.
            yield match
            position = match.end()

    def lex(self, line):
        '''
        Take a line and yield its tokens.

        Raises LexError on the first malformed numeric literal.
        '''
        for match in self.matches(line):
            token = self.token(match)
            if token is not None:
                trace(self.env, 'lex {!r} -> {}', match.group(0), token)
                yield token

    def matchedgroups(self, match):
        '''
        Return the top-level groups a lexeme matched.
        '''
        return {key: value
                for key, value
                in match.groupdict().items()
                if value is not None and key in {'radix', 'float', 'octal',
                                                 'decimal', 'operator',
                                                 'identifier', 'space',
                                                 'other'}}

    def token(self, match):
        '''
        Convert one lexeme match into a Token, or None if it is skipped.
        '''
        groups = self.matchedgroups(match)
        if 'radix' in groups:
            radix = RADIXES[match.group('prefix').lower()]
            return self._integer(match.group('radix_digits'), radix,
                                 groups['radix'])
        elif 'float' in groups:
            return self._float(match.group('mantissa'),
                               match.group('exponent'),
                               groups['float'])
        elif 'octal' in groups:
            return self._integer(match.group('octal_digits'), 8,
                                 groups['octal'])
        elif 'decimal' in groups:
            return self._integer(groups['decimal'], 10, groups['decimal'])
        elif 'operator' in groups:
            return Token(OP, groups['operator'])
        elif 'identifier' in groups:
            return Token(IDENT, groups['identifier'])
        return None

    def _integer(self, digits, radix, literal):
        digits = digits.replace('_', '')
        try:
            value = int(digits, radix)
        except ValueError:
            raise LexError('Integer format: invalid digit for radix {}: {}'
                           .format(radix, literal))
        if not INT_MIN <= value <= INT_MAX:
            raise LexError('Integer format: number too large to fit in '
                           '128 bits: {}'.format(literal))
        return Token(INT, value)

    def _float(self, mantissa, exponent, literal):
        text = mantissa.replace('_', '')
        if exponent is not None:
            exponent = exponent.replace('_', '')
            if not exponent.lstrip('+-'):
                raise LexError('Float format: missing exponent digits: {}'
                               .format(literal))
            text += 'e' + exponent
        try:
            return Token(FLOAT, float(text))
        except ValueError:
            raise LexError('Float format: {}'.format(literal))


def lex(text, env=None):
    '''
    Tokenize text into a list of Tokens.
    '''
    return list(Lexer(env).lex(text))
