from pytest import Item, fixture

from rcalc import Environment, register_builtins


@fixture
def env() -> Environment:
    '''
    Fresh environment with the builtin names, isolated per test.
    '''
    return register_builtins(Environment())


def pytest_assertion_pass(item: Item,
                          lineno: int,
                          orig: str,
                          expl: str) -> None:
    '''
    Log every assertion, in case we later need to audit a calculation.

    Use with pytest -rP.
    '''
    print('given', item.name + ':' + str(lineno), str(orig))
    print('actual', item.name + ':' + str(lineno),
          # Drop the trailing full-diff hint.
          '\n'.join(str(expl).splitlines()[:-2]))
