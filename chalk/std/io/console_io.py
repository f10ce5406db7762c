import builtins
from chalk.errors import InputError


class ConsoleIO:
    """Blocking terminal I/O used by `input` and `print` statements."""
    prompt_template = 'Enter a value for {name}: '

    def prompt_int(self, name: str) -> int:
        try:
            text = builtins.input(self.prompt_template.format(name=name))
        except EOFError:
            raise InputError(f'no input available for {name}')
        try:
            return int(text.strip())
        except ValueError:
            raise InputError(f'expected an integer for {name}, got {text!r}')

    def emit(self, value: int):
        print(value)
