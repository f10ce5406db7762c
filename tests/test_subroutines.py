import pytest

from chalk.errors import EmptyCallStackError, UnknownSymbolError
from chalk.interpreter import run_program


def test_call_resumes_after_the_call(run_chalk):
    body = 'sub greet:\nprint 1\nreturn\nendsub\nprint 0\ncall greet\nprint 2'
    assert run_chalk(body) == ['0', '1', '2']


def test_definition_does_not_run_the_body(run_chalk):
    assert run_chalk('sub f:\nprint 1\nreturn\nendsub\nprint 2') == ['2']


def test_call_without_name(run_chalk):
    assert run_chalk('sub f:\nprint 1\nreturn\nendsub\ncall\nprint 2') == ['1', '2']


def test_body_without_return_returns_at_endsub(run_chalk):
    assert run_chalk('sub f:\nprint 1\nendsub\ncall f\ncall f\nprint 2') == ['1', '1', '2']


def test_only_the_last_definition_is_callable(run_chalk):
    body = 'sub a:\nprint 1\nreturn\nendsub\nsub b:\nprint 2\nreturn\nendsub\ncall a'
    assert run_chalk(body) == ['2']


def test_return_from_inside_a_loop(run_chalk):
    body = '\n'.join([
        'sub find:',
        '  k := 0',
        '  while k < 10:',
        '    if k = 3:',
        '      return',
        '    endif',
        '    k := k + 1',
        '  endwhile',
        'endsub',
        'call find',
        'print k',
    ])
    assert run_chalk(body) == ['3']


def test_call_inside_loops_and_branches(run_chalk):
    body = '\n'.join([
        'total := 0',
        'sub add:',
        '  total := total + i',
        '  return',
        'endsub',
        'for i := 1 to 4:',
        '  if i > 1:',
        '    call add',
        '  else:',
        '    print 100',
        '  endif',
        'endfor',
        'print total',
    ])
    assert run_chalk(body) == ['100', '5']


def test_subroutine_shares_global_symbols(run_chalk):
    body = 'sub setx:\nx := 42\nreturn\nendsub\ncall setx\nprint x'
    assert run_chalk(body) == ['42']


def test_call_with_no_subroutine():
    with pytest.raises(UnknownSymbolError, match='no subroutine'):
        run_program('program T:\ncall missing\nend\n')


def test_return_without_call():
    with pytest.raises(EmptyCallStackError):
        run_program('program T:\nreturn\nend\n')


def test_call_stack_is_empty_afterwards(capsys):
    interp = run_program('program T:\nsub f:\nreturn\nendsub\ncall f\ncall f\nend\n')
    assert interp.return_stack == []
    assert interp.sub_name == 'f'
