from typing import Dict, Optional

from minilux.ast import FuncDecl
from minilux.builtin_function import BuiltinTable
from minilux.environment import Environment
from minilux.std.core import populate_core_builtins
from minilux.std.io import BasicIO, populate_io_builtins
from minilux.std.net import SocketTable, populate_net_builtins
from minilux.std.process import populate_process_builtins


class Runtime:
    """Process-wide state of one running program.

    Holds the global scope, the function table, the builtin table and the
    collaborators builtins talk to (console and sockets). Created when an
    interpreter starts and closed when it finishes, which closes every
    socket the script left open.
    """
    def __init__(self, basic_io: Optional[BasicIO] = None):
        self.globals = Environment()
        self.functions: Dict[str, FuncDecl] = {}
        self.io = basic_io if basic_io is not None else BasicIO()
        self.sockets = SocketTable()
        self.builtins = BuiltinTable()
        self.builtins.update(populate_core_builtins())
        self.builtins.update(populate_io_builtins(self.io))
        self.builtins.update(populate_process_builtins())
        self.builtins.update(populate_net_builtins(self.sockets))

    def define_function(self, decl: FuncDecl):
        self.functions[decl.name] = decl

    def get_function(self, name: str) -> Optional[FuncDecl]:
        return self.functions.get(name)

    def close(self):
        self.sockets.close_all()
