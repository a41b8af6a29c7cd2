from functools import wraps
import sys


class RCError(Exception):
    '''
    Base of every error the calculator reports to its user.

    args[0] is always the human-readable message.
    '''
    pass


class LexError(RCError):
    pass


class ParseError(RCError):
    pass


class EvalError(RCError):
    pass


def wrap_user_errors(fmt, error=EvalError):
    '''
    Decorator that converts host library exceptions into calculator errors.

    Passes through RCErrors. fmt is formatted with the call's arguments.
    '''
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except RCError:
                raise
            except (ArithmeticError, ValueError, TypeError) as e:
                raise error(fmt.format(*args, **kwargs), e) from e
        return wrapper
    return decorator


def trace(env, fmt, *args):
    '''
    Print a debug line to stderr if the environment asks for it.
    '''
    if env is not None and env.debug:
        print(fmt.format(*args), file=sys.stderr)
