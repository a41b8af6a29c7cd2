'''
Command line interface tests
'''

from rcalc import CLI
from rcalc.lexer import Lexer

from pytest import raises


def run(*args):
    return CLI().run(args=list(args))


def test_expression(capsys):
    assert run('-e', '1+2') == 0
    assert capsys.readouterr().out == '3\n'


def test_words_joined(capsys):
    assert run('1', '+', '2*3') == 0
    assert capsys.readouterr().out == '7\n'


def test_each_expression_is_a_line(capsys):
    assert run('-e', 'var(x)', 'x = 2', 'x*3[m]') == 0
    assert capsys.readouterr().out == '2\n6[m]\n'


def test_error_stops(capsys):
    assert run('-e', '1/0', '2') == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'Division by zero' in captured.err


def test_script(tmp_path, capsys):
    script = tmp_path / 'calc.txt'
    script.write_text('output_format(hex)\n255\n\n1 +\n3\n')
    assert run('-s', str(script)) == 1
    captured = capsys.readouterr()
    assert captured.out == '0xff\n'
    assert 'Unexpected end of input' in captured.err


def test_script_success(tmp_path, capsys):
    script = tmp_path / 'calc.txt'
    script.write_text('var(r)\nr = 2[m]\npi*r^2\n')
    assert run('--script', str(script)) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == '2[m]'
    assert lines[1].startswith('12.566')
    assert lines[1].endswith('[m^2]')


def test_dump(capsys):
    assert run('-D', '-e', '1+2') == 0
    out = capsys.readouterr().out
    assert "int:1\top:'+'\tint:2" in out
    assert "BinOp(op='+'" in out


def test_raw_grammar(capsys):
    assert run('-G') == 0
    assert Lexer.LEXEME in capsys.readouterr().out


def test_verbose(capsys):
    assert run('-v', '-e', '1+2') == 0
    captured = capsys.readouterr()
    assert captured.out == '3\n'
    assert 'eval' in captured.err


def test_exit_command():
    with raises(SystemExit) as excinfo:
        run('-e', 'exit()', '1')
    assert excinfo.value.code == 0


def test_exclusive_inputs(tmp_path):
    script = tmp_path / 'calc.txt'
    script.write_text('1\n')
    with raises(SystemExit):
        run('-s', str(script), '-p')
