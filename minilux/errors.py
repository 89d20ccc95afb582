from typing import Any, Optional


class MiniluxError(Exception):
    """Base exception for every error a Minilux program can raise.

    ``kind`` names the error class as reported to the user, ``line`` and
    ``column`` locate it in the source when known. The interpreter fills
    in the position of the failing statement if the raiser did not.
    """
    kind = 'Error'

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def locate(self, line: int, column: int) -> None:
        if self.line is None:
            self.line = line
            self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind}: {self.message} at {self.line}:{self.column}"


class LexError(MiniluxError):
    kind = 'LexError'


class ParseError(MiniluxError):
    kind = 'ParseError'


class MiniluxRuntimeError(MiniluxError):
    """Raised while a program executes; aborts the whole script."""
    kind = 'RuntimeError'

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None,
                 kind: Optional[str] = None):
        super().__init__(message, line, column)
        if kind is not None:
            self.kind = kind


class UndefinedVariable(MiniluxRuntimeError):
    kind = 'UndefinedVariable'


class TypeMismatch(MiniluxRuntimeError):
    kind = 'TypeMismatch'


class IndexOutOfBounds(MiniluxRuntimeError):
    kind = 'IndexOutOfBounds'


class ArrayUnderflow(MiniluxRuntimeError):
    kind = 'ArrayUnderflow'


class DivisionByZero(MiniluxRuntimeError):
    kind = 'DivisionByZero'


class UnknownFunction(MiniluxRuntimeError):
    kind = 'UnknownFunction'


class ArityMismatch(MiniluxRuntimeError):
    kind = 'ArityMismatch'


class RegexCompileError(MiniluxRuntimeError):
    kind = 'RegexCompileError'


class ProcessExecutionError(MiniluxRuntimeError):
    kind = 'ProcessExecutionError'


class SocketError(MiniluxRuntimeError):
    kind = 'SocketError'


class ReturnSignal(Exception):
    """Internal signal carrying a function's return value up to its caller."""
    def __init__(self, value: Any):
        super().__init__('return')
        self.value = value
