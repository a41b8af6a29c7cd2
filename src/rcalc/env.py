from collections import namedtuple

from .nodes import Empty, Float, Int
from .util import EvalError


# Callable with its declared arity; arity 0 means variadic.
Builtin = namedtuple('Builtin', 'arity callback')

# Placeholder held by variables that are declared but not yet assigned.
UNDEFINED = Empty()

RADIX_DEC = 10
RADIX_HEX = 16
RADIX_OCT = 8
RADIX_BIN = 2


class Environment:
    '''
    Everything a calculator session knows: names and settings.

    Constants and variables are separate namespaces; lookups try constants
    first. Passed explicitly to the parser and the evaluator.
    '''

    DEFAULT_MAX_DEPTH = 100

    def __init__(self, debug=False, max_depth=None):
        '''
        Create an empty environment. See builtins.register_builtins().

        :param debug: Trace lexing, parsing and evaluation on stderr.
        :param max_depth: Deepest expression nesting the parser accepts.
        '''
        self.constants = dict()
        self.variables = dict()
        self.functions = dict()
        self.commands = dict()
        self.debug = debug
        self.output_radix = RADIX_DEC
        self.digit_group = 0
        self.max_depth = max_depth or type(self).DEFAULT_MAX_DEPTH

    def is_const(self, name):
        return name in self.constants

    def is_variable(self, name):
        return name in self.variables

    def is_func(self, name):
        return name in self.functions

    def is_cmd(self, name):
        return name in self.commands

    def add_constant(self, name, value):
        if isinstance(value, int):
            value = Int(value)
        elif isinstance(value, float):
            value = Float(value)
        self.constants[name] = value

    def add_function(self, name, arity, callback):
        self.functions[name] = Builtin(arity, callback)

    def add_command(self, name, arity, callback):
        self.commands[name] = Builtin(arity, callback)

    def declare(self, name):
        '''
        Make name assignable. Declaring twice keeps the current value.
        '''
        if name in self.constants:
            raise EvalError('Cannot declare constant {!r} as a variable'
                            .format(name))
        self.variables.setdefault(name, UNDEFINED)

    def assign(self, name, value):
        if name in self.constants:
            raise EvalError('Attempting to assign to constant {!r}'
                            .format(name))
        if name not in self.variables:
            raise EvalError('Attempting to assign to undeclared variable {!r}'
                            .format(name))
        self.variables[name] = value

    def lookup(self, name):
        '''
        Resolve a name: constants first, then variables.
        '''
        if name in self.constants:
            return self.constants[name]
        if name in self.variables:
            value = self.variables[name]
            if value is UNDEFINED:
                raise EvalError('Variable {!r} has no value yet'.format(name))
            return value
        raise EvalError('Unknown identifier {!r}'.format(name))

    def names(self):
        '''
        All names a user can type, for completion and help.
        '''
        return sorted(set(self.constants) | set(self.variables) |
                      set(self.functions) | set(self.commands))
