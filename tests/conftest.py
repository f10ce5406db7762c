from pathlib import Path

import pytest

from chalk.interpreter import run_program

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


@pytest.fixture
def example_source():
    def load(name: str) -> str:
        with open(EXAMPLES / name, 'r', encoding='utf-8') as f:
            return f.read()
    return load


@pytest.fixture
def run_chalk(capsys):
    """Run a program body (wrapped in a program header) and return its printed lines."""
    def run(body: str, name: str = 'Test') -> list:
        run_program(f"program {name}:\n{body}\nend\n")
        out = capsys.readouterr().out.strip()
        return out.split('\n') if out else []
    return run
