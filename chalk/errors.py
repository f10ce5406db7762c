class ChalkError(Exception):
    """Base class for every failure raised while running a Chalk program."""


class LexerError(ChalkError):
    """Raised when the source text contains a character no token starts with."""


class ChalkSyntaxError(ChalkError):
    """The current token does not match the kind expected at a consumption point."""
    def __init__(self, expected, found, position: int, line: int = 0):
        where = f"position {position}"
        if line:
            where += f" (line {line})"
        super().__init__(f"Expected {expected}, but found {found} at {where}")
        self.expected = expected
        self.found = found
        self.position = position


class UnknownSymbolError(ChalkError):
    """An expression or call refers to a name that was never defined."""
    def __init__(self, name: str, message: str = ''):
        super().__init__(message or f"Unrecognized symbol: {name}")
        self.name = name


class UnexpectedTokenError(ChalkError):
    """Statement dispatch found a token that cannot start a statement."""


class UnterminatedBlockError(ChalkError):
    """A block ran into the end of the program before its closing keyword."""


class EmptyCallStackError(ChalkError):
    """`return` was executed with no pending `call`."""


class InputError(ChalkError):
    """The input collaborator could not produce an integer."""


class CursorError(ChalkError):
    """The program counter was moved outside the token sequence."""


class ReturnSignal(Exception):
    """Internal exception that unwinds nested blocks back to the pending `call`."""
    def __init__(self):
        super().__init__('return')
