import pytest

from chalk.errors import ChalkSyntaxError
from chalk.interpreter import Interpreter, run_program
from chalk.lexer import tokenize


SOURCE = 'program Trace:\nsub f:\nreturn\nendsub\nx := 7\ncall f\nfor i := 0 to 2:\nprint i\nendfor\nend\n'


def test_debug_level_zero_writes_nothing(tmp_path, capsys):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(debug_file=str(debug_file))
    interp.run(tokenize(SOURCE))
    assert not debug_file.exists()
    assert capsys.readouterr().out.strip().split('\n') == ['0', '1']


def test_debug_level_two(tmp_path, capsys):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(debug_level=2, debug_file=str(debug_file))
    interp.run(tokenize(SOURCE))
    lines = debug_file.read_text(encoding='utf-8').splitlines()
    assert lines[0].startswith('program Trace:')
    assert 'define sub f at 7' in lines
    assert 'assign x = 7' in lines
    assert 'call f (depth 1)' in lines
    assert 'for i from 0: 2 passes' in lines
    assert not any(line.startswith('statement') for line in lines)
    assert interp.debug_fp is None


def test_debug_level_three_traces_statements(tmp_path, capsys):
    debug_file = tmp_path / 'trace.txt'
    Interpreter(debug_level=3, debug_file=str(debug_file)).run(tokenize(SOURCE))
    text = debug_file.read_text(encoding='utf-8')
    assert 'statement PRINT at line 8' in text


def test_run_program_returns_interpreter(capsys):
    interp = run_program('program T:\nx := 3\nend\n')
    assert interp.program_name == 'T'
    assert interp.symbols.get('x') == 3


def test_rerun_forgets_previous_program(capsys):
    interp = Interpreter()
    interp.run(tokenize('program First:\nsub f:\nreturn\nendsub\nend\n'))
    assert interp.program_name == 'First'
    with pytest.raises(ChalkSyntaxError):
        interp.run(tokenize('print 1\nend\n'))
    assert interp.program_name is None
    assert interp.sub_name is None
    assert interp.sub_marker is None
