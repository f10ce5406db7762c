"""Interpreter for the Chalk language.

Chalk programs are never turned into a syntax tree. The interpreter
keeps the token sequence produced by the lexer and a single program
counter (see ``Cursor``). Expressions are evaluated while they are
parsed, and loops, branches and subroutine calls work by moving the
counter back to a saved marker or by skipping tokens until the matching
terminator shows up.
"""

from __future__ import annotations

import operator
from typing import Callable, Dict, List, Optional, Sequence

from .cursor import Cursor
from .environment import SymbolTable
from .errors import (
    ChalkSyntaxError, EmptyCallStackError, ReturnSignal, UnexpectedTokenError,
    UnknownSymbolError, UnterminatedBlockError,
)
from .lexer import Token, TokenType, tokenize
from .std.io import ConsoleIO


# Either of these ends the program; any block still open can never close.
PROGRAM_END = (TokenType.END, TokenType.EOF)

SEPARATORS = (TokenType.NEWLINE, TokenType.COMMENT)

# Statement heads that do nothing: the terminators are consumed by the
# construct that owns them.
NO_OP_STATEMENTS = frozenset({
    TokenType.NEWLINE, TokenType.COMMENT,
    TokenType.END, TokenType.ENDIF, TokenType.ENDWHILE,
    TokenType.ENDSUB, TokenType.ENDFOR, TokenType.EOF,
})


def int_divide(a: int, b: int) -> int:
    """Integer division truncating toward zero, as the reference host does."""
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def int_modulo(a: int, b: int) -> int:
    """Remainder whose sign follows the dividend."""
    return a - b * int_divide(a, b)


TERM_OPS: Dict[TokenType, Callable[[int, int], int]] = {
    TokenType.TIMES: operator.mul,
    TokenType.DIVIDE: int_divide,
    TokenType.MOD: int_modulo,
}

EXPRESSION_OPS: Dict[TokenType, Callable[[int, int], int]] = {
    TokenType.PLUS: operator.add,
    TokenType.MINUS: operator.sub,
}

RELATIONAL_OPS: Dict[TokenType, Callable[[int, int], bool]] = {
    TokenType.LESS_THAN: operator.lt,
    TokenType.GREATER_THAN: operator.gt,
    TokenType.LESS_THAN_OR_EQUAL: operator.le,
    TokenType.GREATER_THAN_OR_EQUAL: operator.ge,
    TokenType.EQUAL: operator.eq,
    TokenType.NOT_EQUAL: operator.ne,
}


class Interpreter:
    """Executes a tokenized Chalk program in place."""
    def __init__(self, io=None, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.io = io if io is not None else ConsoleIO()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None
        self.program: Sequence[Token] = ()
        self.cursor: Optional[Cursor] = None
        self.program_name: Optional[str] = None
        self.symbols = SymbolTable()
        self.return_stack: List[int] = []
        # Only the most recently defined subroutine can be called
        self.sub_marker: Optional[int] = None
        self.sub_name: Optional[str] = None
        self.statement_handlers: Dict[TokenType, Callable[[], None]] = {
            TokenType.INPUT: self.execute_input,
            TokenType.NAME: self.execute_assignment,
            TokenType.PRINT: self.execute_print,
            TokenType.IF: self.execute_if,
            TokenType.ELSE: self.execute_else,
            TokenType.WHILE: self.execute_while,
            TokenType.FOR: self.execute_for,
            TokenType.SUB: self.execute_sub,
            TokenType.CALL: self.execute_call,
            TokenType.RETURN: self.execute_return,
        }

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, program: Sequence[Token]) -> SymbolTable:
        self.program = tuple(program)
        self.cursor = Cursor(self.program)
        self.symbols = SymbolTable()
        self.return_stack = []
        self.sub_marker = None
        self.sub_name = None
        self.program_name = None
        if self.debug_level > 0:
            self.debug_fp = open(self.debug_file, 'w', encoding='utf-8')
        try:
            self.execute_program()
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        return self.symbols

    @property
    def current(self) -> Token:
        return self.cursor.current

    def where(self) -> str:
        return f"line {self.current.line}, position {self.cursor.position}"

    ###########################################################################
    # Expressions
    ###########################################################################

    def eval_factor(self) -> int:
        kind = self.cursor.kind
        if kind is TokenType.NUMBER:
            return int(self.cursor.expect(TokenType.NUMBER).value)
        if kind is TokenType.NAME:
            return self.symbols.get(self.cursor.expect(TokenType.NAME).value)
        if kind is TokenType.LEFT_PAREN:
            self.cursor.expect(TokenType.LEFT_PAREN)
            value = self.eval_expression()
            self.cursor.expect(TokenType.RIGHT_PAREN)
            return value
        token = self.current
        raise ChalkSyntaxError('NUMBER, NAME or LEFT_PAREN', token.kind.name, self.cursor.position, token.line)

    def eval_unary(self) -> int:
        if self.cursor.at(TokenType.MINUS):
            self.cursor.expect(TokenType.MINUS)
            return -self.eval_factor()
        return self.eval_factor()

    def eval_term(self) -> int:
        value = self.eval_unary()
        while self.cursor.kind in TERM_OPS:
            apply = TERM_OPS[self.cursor.kind]
            self.cursor.advance()
            value = apply(value, self.eval_unary())
        return value

    def eval_expression(self) -> int:
        value = self.eval_term()
        while self.cursor.kind in EXPRESSION_OPS:
            apply = EXPRESSION_OPS[self.cursor.kind]
            self.cursor.advance()
            value = apply(value, self.eval_term())
        return value

    def eval_conditional(self) -> int:
        """An expression, optionally compared against a second one.

        With a relational operator the result is 1 or 0; without one it
        is the plain expression value. Comparisons do not chain.
        """
        value = self.eval_expression()
        compare = RELATIONAL_OPS.get(self.cursor.kind)
        if compare is None:
            return value
        self.cursor.advance()
        rhs = self.eval_expression()
        return 1 if compare(value, rhs) else 0

    ###########################################################################
    # Statements
    ###########################################################################

    def execute_program(self):
        self.skip_separators()
        self.cursor.expect(TokenType.PROGRAM)
        self.program_name = self.cursor.expect(TokenType.NAME).value
        self.cursor.expect(TokenType.COLON)
        self.debug(f"program {self.program_name}: {len(self.program)} tokens")
        self.execute_block()
        while not self.cursor.at(*PROGRAM_END):
            self.execute_body_block()

    def execute_block(self):
        self.execute_statement()
        self.skip_separators()

    def execute_body_block(self):
        """``execute_block`` for loops that run until some terminator.

        A terminator that belongs to none of the open constructs would
        otherwise be re-dispatched as a no-op forever.
        """
        start = self.cursor.position
        self.execute_block()
        if self.cursor.position == start:
            raise UnexpectedTokenError(f"Unexpected token: {self.current.kind.name} at {self.where()}")

    def execute_statement(self):
        kind = self.cursor.kind
        if self.debug_level >= 3:
            self.debug(f"statement {kind.name} at {self.where()}")
        if kind in NO_OP_STATEMENTS:
            return
        handler = self.statement_handlers.get(kind)
        if handler is None:
            raise UnexpectedTokenError(f"Unexpected token: {kind.name} at {self.where()}")
        handler()

    def skip_separators(self):
        while self.cursor.at(*SEPARATORS):
            self.cursor.advance()

    def skip_block(self, opener: TokenType, closer: TokenType):
        """Advance without executing until the ``closer`` matching an already consumed ``opener``."""
        depth = 0
        while True:
            if self.cursor.at(*PROGRAM_END):
                raise UnterminatedBlockError(f"Reached end of program looking for {closer.name}")
            if self.cursor.at(opener):
                depth += 1
            elif self.cursor.at(closer):
                if depth == 0:
                    return
                depth -= 1
            self.cursor.advance()

    def close_block(self, closer: TokenType):
        if self.cursor.at(*PROGRAM_END):
            raise UnterminatedBlockError(f"Reached end of program while executing (expected {closer.name})")
        self.cursor.expect(closer)

    def execute_assignment(self) -> str:
        name = self.cursor.expect(TokenType.NAME).value
        self.cursor.expect(TokenType.ASSIGN)
        value = self.eval_expression()
        self.symbols.set(name, value)
        if self.debug_level >= 2:
            self.debug(f"assign {name} = {value}")
        return name

    def execute_print(self):
        self.cursor.expect(TokenType.PRINT)
        self.io.emit(self.eval_expression())

    def execute_input(self):
        self.cursor.expect(TokenType.INPUT)
        name = self.cursor.expect(TokenType.NAME).value
        value = self.io.prompt_int(name)
        self.symbols.set(name, value)
        if self.debug_level >= 2:
            self.debug(f"input {name} = {value}")

    def execute_if(self):
        self.cursor.expect(TokenType.IF)
        condition = self.eval_conditional()
        self.cursor.expect(TokenType.COLON)
        if self.debug_level >= 3:
            self.debug(f"if condition -> {condition}")
        if not condition:
            # Plain linear scan: an if/else/endif nested in the skipped
            # branch is not matched up.
            while not self.cursor.at(TokenType.ENDIF, TokenType.ELSE, *PROGRAM_END):
                self.cursor.advance()
            self.execute_else()
        else:
            while not self.cursor.at(TokenType.ENDIF, TokenType.ELSE, *PROGRAM_END):
                self.execute_body_block()
                if self.cursor.at(TokenType.IF):
                    self.execute_if()
                if self.cursor.at(TokenType.ELSE):
                    while not self.cursor.at(TokenType.ENDIF, TokenType.IF, *PROGRAM_END):
                        self.cursor.advance()
        self.close_block(TokenType.ENDIF)

    def execute_else(self):
        if not self.cursor.at(TokenType.ELSE):
            return
        self.cursor.expect(TokenType.ELSE)
        self.cursor.expect(TokenType.COLON)
        while not self.cursor.at(TokenType.ENDIF, *PROGRAM_END):
            self.execute_body_block()

    def execute_while(self):
        self.cursor.expect(TokenType.WHILE)
        condition_marker = self.cursor.position
        condition = self.eval_conditional()
        self.cursor.expect(TokenType.COLON)
        loop_end = None
        passes = 0
        while condition:
            if self.cursor.at(TokenType.ENDWHILE):
                loop_end = self.cursor.position
                self.cursor.jump(condition_marker)
                condition = self.eval_conditional()
                self.cursor.expect(TokenType.COLON)
                passes += 1
                if self.debug_level >= 3:
                    self.debug(f"while condition -> {condition}")
                continue
            if self.cursor.at(*PROGRAM_END):
                raise UnterminatedBlockError(f"Reached end of program while executing while loop at {self.where()}")
            self.execute_body_block()
        if loop_end is None:
            self.skip_block(TokenType.WHILE, TokenType.ENDWHILE)
        else:
            self.cursor.jump(loop_end)
        if self.debug_level >= 2:
            self.debug(f"while loop done after {passes} passes")
        self.close_block(TokenType.ENDWHILE)

    def execute_for(self):
        self.cursor.expect(TokenType.FOR)
        name = self.execute_assignment()
        start = self.symbols.get(name)
        self.cursor.expect(TokenType.TO)
        # Fixed before the first pass: the body may reassign the variable freely
        count = self.eval_expression() - start
        self.cursor.expect(TokenType.COLON)
        self.skip_separators()
        body_start = self.cursor.position
        if self.debug_level >= 2:
            self.debug(f"for {name} from {start}: {max(count, 0)} passes")
        if count <= 0:
            self.skip_block(TokenType.FOR, TokenType.ENDFOR)
        end_for = self.cursor.position
        for k in range(count):
            self.cursor.jump(body_start)
            self.symbols.set(name, start + k)
            while not self.cursor.at(TokenType.ENDFOR):
                if self.cursor.at(*PROGRAM_END):
                    raise UnterminatedBlockError(f"Reached end of program while executing for loop over {name}")
                self.execute_body_block()
            end_for = self.cursor.position
        self.cursor.jump(end_for)
        self.close_block(TokenType.ENDFOR)

    ###########################################################################
    # Subroutines
    ###########################################################################

    def execute_sub(self):
        self.cursor.expect(TokenType.SUB)
        name = self.cursor.expect(TokenType.NAME).value
        self.cursor.expect(TokenType.COLON)
        if self.sub_name is not None and self.sub_name != name:
            self.debug(f"sub {name} replaces sub {self.sub_name}")
        self.sub_marker = self.cursor.position
        self.sub_name = name
        self.debug(f"define sub {name} at {self.sub_marker}")
        while not self.cursor.at(TokenType.ENDSUB):
            if self.cursor.at(*PROGRAM_END):
                raise UnterminatedBlockError(f"Reached end of program inside sub {name}")
            self.cursor.advance()
        self.cursor.expect(TokenType.ENDSUB)
        self.execute_continuation()

    def execute_call(self):
        line = self.current.line
        self.cursor.expect(TokenType.CALL)
        name = None
        if self.cursor.at(TokenType.NAME):
            name = self.cursor.expect(TokenType.NAME).value
        if self.sub_marker is None:
            raise UnknownSymbolError(name or 'sub', f"call with no subroutine defined (line {line})")
        if name is not None and name != self.sub_name:
            self.debug(f"call {name} runs sub {self.sub_name}")
        self.return_stack.append(self.cursor.position)
        self.debug(f"call {self.sub_name} (depth {len(self.return_stack)})")
        self.cursor.jump(self.sub_marker)
        try:
            while not self.cursor.at(TokenType.ENDSUB):
                if self.cursor.at(*PROGRAM_END):
                    raise UnterminatedBlockError(f"Reached end of program while executing sub {self.sub_name}")
                self.execute_body_block()
            # Ran off the end of the body: return implicitly
            self.cursor.jump(self.return_stack.pop())
        except ReturnSignal:
            pass
        self.execute_continuation()

    def execute_return(self):
        self.cursor.expect(TokenType.RETURN)
        if not self.return_stack:
            raise EmptyCallStackError(f"return without call at {self.where()}")
        self.cursor.jump(self.return_stack.pop())
        self.debug(f"return to {self.cursor.position}")
        raise ReturnSignal()

    def execute_continuation(self):
        """Run one block at the resume point of a sub definition or call."""
        # An else here belongs to an enclosing if, which skips it itself
        if not self.cursor.at(TokenType.ELSE):
            self.execute_block()


def run_program(source: str, debug_level: int = 0, io=None) -> Interpreter:
    """Convenience function to tokenize and run a Chalk program from a source string."""
    interpreter = Interpreter(io=io, debug_level=debug_level)
    interpreter.run(tokenize(source))
    return interpreter


def run_file(file_path: str, debug_level: int = 0, io=None) -> Interpreter:
    """Run a Chalk file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level, io=io)
