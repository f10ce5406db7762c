import pytest

from chalk.cursor import Cursor
from chalk.environment import SymbolTable
from chalk.errors import ChalkSyntaxError, CursorError, UnknownSymbolError
from chalk.lexer import TokenType, tokenize


def test_expect_advances_and_refreshes():
    cursor = Cursor(tokenize('x := 1'))
    token = cursor.expect(TokenType.NAME)
    assert token.value == 'x'
    assert cursor.position == 1
    assert cursor.current.kind is TokenType.ASSIGN


def test_expect_reports_mismatch():
    cursor = Cursor(tokenize('\n\nprint 1'))
    cursor.jump(2)
    with pytest.raises(ChalkSyntaxError) as info:
        cursor.expect(TokenType.NAME)
    assert 'Expected NAME, but found PRINT at position 2 (line 3)' in str(info.value)
    assert cursor.position == 2


def test_advance_is_clamped_at_eof():
    cursor = Cursor(tokenize('x'))
    cursor.advance()
    cursor.advance()
    assert cursor.position == 1
    assert cursor.current.kind is TokenType.EOF
    cursor.expect(TokenType.EOF)
    assert cursor.current.kind is TokenType.EOF


def test_jump_moves_both_position_and_current():
    cursor = Cursor(tokenize('a b c'))
    cursor.jump(2)
    assert cursor.current.value == 'c'
    cursor.jump(0)
    assert cursor.current.value == 'a'
    assert cursor.at(TokenType.NAME, TokenType.EOF)


def test_jump_outside_program():
    cursor = Cursor(tokenize('a'))
    with pytest.raises(CursorError):
        cursor.jump(5)
    with pytest.raises(CursorError):
        cursor.jump(-1)


def test_empty_program():
    with pytest.raises(CursorError):
        Cursor(())


def test_symbol_table():
    symbols = SymbolTable()
    symbols.set('x', 7)
    assert symbols.get('x') == 7
    symbols.set('x', -2)
    assert symbols.get('x') == -2
    assert 'x' in symbols
    assert len(symbols) == 1
    with pytest.raises(UnknownSymbolError, match='Unrecognized symbol: y'):
        symbols.get('y')
