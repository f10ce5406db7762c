# Chalk language package
# This package provides a scanner and a token-walking interpreter for the Chalk teaching language.
from .interpreter import run_program, run_file, Interpreter
from .lexer import tokenize
from .errors import ChalkError

__all__ = [
    'run_program',
    'run_file',
    'Interpreter',
    'tokenize',
    'ChalkError',
]
