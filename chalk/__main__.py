"""CLI entry point for the Chalk interpreter.

Usage:
    python -m chalk [-v|-vv|-vvv] [--debug-file PATH] <program_file>
    python -m chalk --tokens <program_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --debug-file  Where debug output goes (default: debug.txt)
  --tokens      Print the token stream of the program instead of running it

Debug information is written to the debug file when verbosity is greater
than zero. `input` statements prompt on the terminal and `print`
statements write to standard output.
"""

import argparse
import sys
from pathlib import Path
from .errors import ChalkError
from .interpreter import Interpreter
from .lexer import tokenize, format_tokens


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog='chalk', description="Chalk language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', metavar='PATH', help='file receiving debug output')
    parser.add_argument('--tokens', action='store_true', help='print the token stream instead of running the program')
    parser.add_argument('program', help='Chalk program file to execute')
    args = parser.parse_args(argv)

    program_file = Path(args.program)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        source = f.read()

    try:
        tokens = tokenize(source)
        if args.tokens:
            print(format_tokens(tokens))
            return
        interpreter = Interpreter(debug_level=args.v, debug_file=args.debug_file)
        interpreter.run(tokens)
    except (ChalkError, ArithmeticError) as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == '__main__':
    main()
