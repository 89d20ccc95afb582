from .sockets import SocketTable
from minilux.builtin_function import BuiltinFunction, BuiltinTable
from minilux.errors import TypeMismatch
from minilux.values import is_integer, to_string, type_name
from typing import List, Any


def populate_net_builtins(sockets: SocketTable) -> BuiltinTable:
        net_table = BuiltinTable()

        def std_sockopen(args: List[Any]) -> Any:
            name, host, port = args
            if not isinstance(name, str):
                raise TypeMismatch(f'sockopen name must be Text, got {type_name(name)}')
            if not isinstance(host, str):
                raise TypeMismatch(f'sockopen host must be Text, got {type_name(host)}')
            if not is_integer(port):
                raise TypeMismatch(f'sockopen port must be Integer, got {type_name(port)}')
            sockets.open(name, host, port)
            return ''

        def std_sockwrite(args: List[Any]) -> Any:
            name, data = args
            if not isinstance(name, str):
                raise TypeMismatch(f'sockwrite name must be Text, got {type_name(name)}')
            sockets.write(name, to_string(data))
            return ''

        def std_sockread(args: List[Any]) -> Any:
            name = args[0]
            if not isinstance(name, str):
                raise TypeMismatch(f'sockread name must be Text, got {type_name(name)}')
            return sockets.read(name)

        def std_sockclose(args: List[Any]) -> Any:
            name = args[0]
            if not isinstance(name, str):
                raise TypeMismatch(f'sockclose name must be Text, got {type_name(name)}')
            sockets.close(name)
            return ''

        net_table.register(BuiltinFunction('sockopen', 3, std_sockopen))
        net_table.register(BuiltinFunction('sockwrite', 2, std_sockwrite))
        net_table.register(BuiltinFunction('sockread', 1, std_sockread))
        net_table.register(BuiltinFunction('sockclose', 1, std_sockclose))

        return net_table
