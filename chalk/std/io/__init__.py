from .console_io import ConsoleIO

__all__ = ['ConsoleIO']
