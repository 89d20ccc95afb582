# Minilux language package
# This package provides a lexer, parser and tree-walking interpreter for Minilux.
from .errors import MiniluxError, LexError, ParseError, MiniluxRuntimeError
from .interpreter import run_program, compile_module, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'compile_module',
    'parse_program',
    'Interpreter',
    'MiniluxError',
    'LexError',
    'ParseError',
    'MiniluxRuntimeError',
]
