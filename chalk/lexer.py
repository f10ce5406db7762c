"""Scanner for the Chalk language.

Source text is split into tokens by a Lark ``basic`` lexer built from a
terminal-only grammar. Lark never parses anything here: the interpreter
walks the flat token sequence itself. Identifiers are scanned as NAME
and promoted to keyword kinds afterwards, so keywords stay
case-insensitive and names such as ``endless`` or ``toy`` are not split
at a keyword prefix.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple

from lark import Lark
from lark.exceptions import UnexpectedCharacters

from .errors import LexerError


class TokenType(Enum):
    NUMBER = 'number'
    NAME = 'name'

    # Operators and punctuation
    ASSIGN = ':='
    COLON = ':'
    EQUAL = '='
    NOT_EQUAL = '<>'
    LESS_THAN_OR_EQUAL = '<='
    GREATER_THAN_OR_EQUAL = '>='
    LESS_THAN = '<'
    GREATER_THAN = '>'
    PLUS = '+'
    MINUS = '-'
    TIMES = '*'
    DIVIDE = '/'
    MOD = '%'
    LEFT_PAREN = '('
    RIGHT_PAREN = ')'
    COMMA = ','
    QUOTE = '"'

    # Keywords
    PROGRAM = 'program'
    END = 'end'
    IF = 'if'
    ELSE = 'else'
    ENDIF = 'endif'
    WHILE = 'while'
    ENDWHILE = 'endwhile'
    FOR = 'for'
    TO = 'to'
    ENDFOR = 'endfor'
    SUB = 'sub'
    ENDSUB = 'endsub'
    CALL = 'call'
    RETURN = 'return'
    PRINT = 'print'
    INPUT = 'input'
    # Lexed but never consumed by any statement or expression
    THEN = 'then'
    DO = 'do'
    AND = 'and'
    OR = 'or'
    NOT = 'not'
    VAR = 'var'

    NEWLINE = 'newline'
    COMMENT = 'comment'
    EOF = 'eof'


KEYWORDS = {
    kind.value: kind for kind in (
        TokenType.PROGRAM, TokenType.END, TokenType.IF, TokenType.ELSE,
        TokenType.ENDIF, TokenType.WHILE, TokenType.ENDWHILE, TokenType.FOR,
        TokenType.TO, TokenType.ENDFOR, TokenType.SUB, TokenType.ENDSUB,
        TokenType.CALL, TokenType.RETURN, TokenType.PRINT, TokenType.INPUT,
        TokenType.THEN, TokenType.DO, TokenType.AND, TokenType.OR,
        TokenType.NOT, TokenType.VAR,
    )
}


@dataclass(frozen=True)
class Token:
    kind: TokenType
    value: Optional[str] = None
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.value is None:
            return self.kind.name
        return f"{self.kind.name}({self.value})"


CHALK_TOKENS = r"""
    start: _token*
    _token: NUMBER | NAME | ASSIGN | COLON | EQUAL | NOT_EQUAL
          | LESS_THAN_OR_EQUAL | GREATER_THAN_OR_EQUAL | LESS_THAN | GREATER_THAN
          | PLUS | MINUS | TIMES | DIVIDE | MOD
          | LEFT_PAREN | RIGHT_PAREN | COMMA | QUOTE
          | NEWLINE | COMMENT

    NUMBER: /[0-9]+/
    // Any Unicode letter starts a name; letters, digits and _ may follow
    NAME: /[^\W\d_]\w*/

    ASSIGN: ":="
    COLON: ":"
    EQUAL: "="
    NOT_EQUAL: "<>"
    LESS_THAN_OR_EQUAL: "<="
    GREATER_THAN_OR_EQUAL: ">="
    LESS_THAN: "<"
    GREATER_THAN: ">"
    PLUS: "+"
    MINUS: "-"
    TIMES: "*"
    DIVIDE: "/"
    MOD: "%"
    LEFT_PAREN: "("
    RIGHT_PAREN: ")"
    COMMA: ","
    QUOTE: "\""

    NEWLINE: "\n"
    // Comments may span lines
    COMMENT: /\{[^}]*\}/

    WS: /[ \t\r\f]+/
    %ignore WS
"""


CHALK_LEXER = Lark(
    CHALK_TOKENS,
    parser='lalr',
    lexer='basic',
)


class Lexer:
    """Token source over one piece of Chalk source text.

    ``next_token`` can be called any number of times: once the text is
    exhausted it keeps returning the same EOF token.
    """
    def __init__(self, source: str):
        self._stream: Iterator = CHALK_LEXER.lex(source)
        self._eof: Optional[Token] = None
        self._line = 1

    def next_token(self) -> Token:
        if self._eof is not None:
            return self._eof
        try:
            raw = next(self._stream)
        except StopIteration:
            self._eof = Token(TokenType.EOF, None, self._line, 0)
            return self._eof
        except UnexpectedCharacters as e:
            if e.char == '{':
                raise LexerError(f"unterminated comment starting at {e.line}:{e.column}") from None
            raise LexerError(f"unrecognized character {e.char!r} at {e.line}:{e.column}") from None
        self._line = raw.end_line or raw.line
        if raw.type == 'NEWLINE':
            self._line = raw.line + 1
        return self._convert(raw)

    @staticmethod
    def _convert(raw) -> Token:
        if raw.type == 'NAME':
            keyword = KEYWORDS.get(raw.value.lower())
            if keyword is not None:
                return Token(keyword, None, raw.line, raw.column)
            return Token(TokenType.NAME, raw.value, raw.line, raw.column)
        if raw.type == 'NUMBER':
            return Token(TokenType.NUMBER, raw.value, raw.line, raw.column)
        return Token(TokenType[raw.type], None, raw.line, raw.column)


def tokenize(source: str) -> Tuple[Token, ...]:
    """Scan ``source`` completely, returning the tokens up to and including EOF."""
    lexer = Lexer(source)
    tokens = []
    while True:
        token = lexer.next_token()
        tokens.append(token)
        if token.kind is TokenType.EOF:
            return tuple(tokens)


def format_tokens(tokens: Iterable[Token]) -> str:
    """Render tokens one source line per output line."""
    lines = []
    current = []
    for token in tokens:
        if token.kind is TokenType.NEWLINE:
            lines.append(' '.join(current))
            current = []
        else:
            current.append(str(token))
        if token.kind is TokenType.EOF:
            break
    lines.append(' '.join(current))
    return '\n'.join(lines)
