from .basic_io import BasicIO
from minilux.builtin_function import BuiltinFunction, BuiltinTable
from minilux.values import to_string
from typing import List, Any


def render(args: List[Any]) -> str:
    return ''.join(to_string(a) for a in args)


def populate_io_builtins(basic_io: BasicIO) -> BuiltinTable:
        io_table = BuiltinTable()

        def std_printf(args: List[Any]) -> Any:
            basic_io.write(render(args))
            return ''

        def std_print(args: List[Any]) -> Any:
            basic_io.write(render(args) + '\n')
            return ''

        io_table.register(BuiltinFunction('printf', None, std_printf))
        io_table.register(BuiltinFunction('print', None, std_print))

        return io_table
