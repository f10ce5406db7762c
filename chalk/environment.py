from typing import Dict, Iterator
from chalk.errors import UnknownSymbolError


class SymbolTable:
    """Flat mapping from variable names to integers for a whole run.

    There is no declaration step: assignment and input create entries.
    Reading a name that was never assigned is an error.
    """
    def __init__(self):
        self.values: Dict[str, int] = {}

    def get(self, name: str) -> int:
        if name in self.values:
            return self.values[name]
        raise UnknownSymbolError(name)

    def set(self, name: str, value: int):
        self.values[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)
