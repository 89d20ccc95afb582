"""Core builtins: len/strlen, number, lower, upper."""

from typing import Any, List

from minilux.builtin_function import BuiltinFunction, BuiltinTable
from minilux.errors import TypeMismatch
from minilux.values import ArrayVal, INT_MAX, INT_MIN, is_integer, type_name


def populate_core_builtins() -> BuiltinTable:
    table = BuiltinTable()

    def std_len(args: List[Any]) -> Any:
        value = args[0]
        if isinstance(value, (str, ArrayVal)):
            return len(value)
        raise TypeMismatch(f'len expects Text or Array, got {type_name(value)}')

    def std_number(args: List[Any]) -> Any:
        value = args[0]
        if is_integer(value):
            return value
        if not isinstance(value, str):
            raise TypeMismatch(f'number expects Text, got {type_name(value)}')
        text = value.strip()
        digits = text[1:] if text[:1] in ('+', '-') else text
        if not digits or not all(c in '0123456789' for c in digits):
            raise TypeMismatch(f'cannot convert {value!r} to a number')
        number = int(text)
        if not INT_MIN <= number <= INT_MAX:
            raise TypeMismatch(f'{value!r} is out of Integer range')
        return number

    def std_lower(args: List[Any]) -> Any:
        if not isinstance(args[0], str):
            raise TypeMismatch(f'lower expects Text, got {type_name(args[0])}')
        return args[0].lower()

    def std_upper(args: List[Any]) -> Any:
        if not isinstance(args[0], str):
            raise TypeMismatch(f'upper expects Text, got {type_name(args[0])}')
        return args[0].upper()

    table.register(BuiltinFunction('len', 1, std_len))
    table.register(BuiltinFunction('strlen', 1, std_len))
    table.register(BuiltinFunction('number', 1, std_number))
    table.register(BuiltinFunction('lower', 1, std_lower))
    table.register(BuiltinFunction('upper', 1, std_upper))
    return table
