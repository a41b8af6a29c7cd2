from os import isatty, path
from sys import stdin, stdout, exit
import sys
from argparse import ArgumentParser, FileType, REMAINDER, OPTIONAL

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory

from .builtins import register_builtins
from .env import Environment
from .evaluator import calculate
from .formatting import format_node
from .lexer import Lexer, lex
from .parser import parse
from .util import RCError


class InteractiveInput:
    def __init__(self, prompt, history=None, words=()):
        self.prompt = prompt
        self.history = history
        self.words = words

    def __iter__(self):
        history = None
        if self.history:
            history = FileHistory(path.expanduser(self.history))
        try:
            session = PromptSession(message=self.prompt,
                                    enable_suspend=True,
                                    history=history,
                                    completer=WordCompleter(self.words),
                                    complete_while_typing=False,
                                    prompt_continuation=' ' * len(self.prompt),
                                    # Certainly not! But be explicit.
                                    erase_when_done=False)
            while True:
                yield session.prompt()
        except EOFError:
            return


class CLI:
    '''
    Command line interface to the calculator.
    '''

    DEFAULT_PROMPT = '> '
    HISTORY_FILE = '~/.rcalc_history'

    def dumper(self):
        '''
        Dump the tokens and syntax tree of every line.
        '''
        def dump(line):
            tokens = lex(line, self.env)
            print(*('{}:{!r}'.format(kind, value)
                    for kind, value in tokens),
                  sep='\t')
            if tokens:
                print(parse(self.env, tokens))
        return self._each_line(dump)

    def executor(self):
        '''
        Evaluate every line and print its result.
        '''
        def execute(line):
            text = format_node(self.env, calculate(self.env, line))
            if text:
                print(text)
        return self._each_line(execute)

    def raw_grammar(self):
        '''
        Print current internally defined grammar.
        '''
        print(Lexer.LEXEME)
        return 0

    def _each_line(self, handle):
        '''
        Feed lines to handle, reporting calculator errors on stderr.

        Interactively, carry on with the next line; otherwise stop and
        return a failure status.
        '''
        if self.args.expressions is None:
            self.args.expressions = self._prompting_input()
        for line in self.args.expressions:
            try:
                handle(line)
            except RCError as e:
                print(e.args[0], file=sys.stderr)
                if not self._interactive():
                    return 1
        return 0

    def _prompting_input(self):
        '''
        Return prompting input if either:
        - prompt explicitly specified.
        - both stdin/out are a tty
        Plain stdin otherwise.
        '''
        if self.args.prompt or \
           isatty(stdin.fileno()) and isatty(stdout.fileno()):
            return InteractiveInput(prompt=self.args.prompt or
                                    self.DEFAULT_PROMPT,
                                    history=self.args.history,
                                    words=self.env.names)
        else:
            return stdin

    def __init__(self):
        '''
        Create ready to run CLI.

        Does not run or parse command line arguments.
        '''
        self.argument_parser = ArgumentParser(
            description='Arithmetic calculator with units')
        self.argument_parser.add_argument('-v', '--verbose',
                                          action='store_true',
                                          help='trace lexing, parsing and '
                                               'evaluation on stderr')
        self.argument_parser.add_argument('--history',
                                          default=self.HISTORY_FILE,
                                          help='interactive history file')
        self.argument_parser.add_argument('words', nargs='*',
                                          help='one expression, '
                                               'words joined with spaces')
        input_groups = self.argument_parser.add_mutually_exclusive_group()
        input_groups.add_argument('-e', '--expression',
                                  nargs=REMAINDER,
                                  dest='expressions',
                                  help='evaluate each argument as a line')
        input_groups.add_argument('-s', '--script',
                                  type=FileType('r'),
                                  help='evaluate the lines of a file')
        input_groups.add_argument('-p', '--prompt',
                                  nargs=OPTIONAL,
                                  const=self.DEFAULT_PROMPT)
        main_groups = self.argument_parser.add_mutually_exclusive_group()
        for short_, long_, action in [('-G', '--raw-grammar',
                                       self.raw_grammar),
                                      ('-D', '--dump', self.dumper)]:
            main_groups.add_argument(short_, long_,
                                     action='store_const',
                                     const=action,
                                     dest='action')
        self.argument_parser.set_defaults(action=self.executor,
                                          expressions=None)

    def _interactive(self):
        return isinstance(self.args.expressions, InteractiveInput)

    def run(self, *, args=None):
        '''
        Run CLI, given these args, or previously passed CLI args.

        Returns the exit status.
        '''
        self.args = self.argument_parser.parse_args(args)
        self.env = register_builtins(Environment(debug=self.args.verbose))
        if self.args.words:
            self.args.expressions = [' '.join(self.args.words)]
        elif self.args.script is not None:
            self.args.expressions = self.args.script
        try:
            return self.args.action()
        except KeyboardInterrupt:
            exit(1)
        finally:
            if self.args.script is not None:
                self.args.script.close()
