from typing import Sequence
from chalk.errors import ChalkSyntaxError, CursorError
from chalk.lexer import Token, TokenType


class Cursor:
    """Program counter over a fixed token sequence.

    ``current`` always holds ``program[position]``. The position only moves
    forward one token at a time through ``advance``/``expect`` or is
    reassigned wholesale by ``jump``.
    """
    def __init__(self, program: Sequence[Token], position: int = 0):
        if not program:
            raise CursorError('cannot run an empty token sequence')
        self.program = program
        self.position = 0
        self.current = program[0]
        self.jump(position)

    @property
    def kind(self) -> TokenType:
        return self.current.kind

    def at(self, *kinds: TokenType) -> bool:
        return self.current.kind in kinds

    def advance(self):
        # Clamped: the last token (EOF) stays current forever
        if self.position + 1 < len(self.program):
            self.position += 1
            self.current = self.program[self.position]

    def expect(self, kind: TokenType) -> Token:
        token = self.current
        if token.kind is not kind:
            raise ChalkSyntaxError(kind.name, token.kind.name, self.position, token.line)
        self.advance()
        return token

    def jump(self, position: int):
        if not 0 <= position < len(self.program):
            raise CursorError(f"jump to {position} outside program of {len(self.program)} tokens")
        self.position = position
        self.current = self.program[position]
