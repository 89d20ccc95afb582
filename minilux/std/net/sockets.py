import socket
from typing import Dict

from minilux.errors import SocketError

READ_SIZE = 1024


class SocketTable:
    """Named TCP connections opened by sockopen and closed by sockclose."""
    def __init__(self):
        self.open_sockets: Dict[str, socket.socket] = {}

    def open(self, name: str, host: str, port: int):
        if not 0 < port < 65536:
            raise SocketError(f'invalid port {port}')
        if name in self.open_sockets:
            self.close(name)
        try:
            self.open_sockets[name] = socket.create_connection((host, port))
        except OSError as e:
            raise SocketError(f'failed to connect to {host}:{port}: {e}')

    def get(self, name: str) -> socket.socket:
        if name not in self.open_sockets:
            raise SocketError(f'no open socket named {name!r}')
        return self.open_sockets[name]

    def write(self, name: str, data: str):
        sock = self.get(name)
        try:
            sock.sendall(data.encode('utf-8'))
        except OSError as e:
            raise SocketError(f'error writing to socket {name!r}: {e}')

    def read(self, name: str) -> str:
        sock = self.get(name)
        try:
            data = sock.recv(READ_SIZE)
        except OSError as e:
            raise SocketError(f'error reading from socket {name!r}: {e}')
        return data.decode('utf-8', errors='replace')

    def close(self, name: str):
        sock = self.get(name)
        del self.open_sockets[name]
        try:
            sock.close()
        except OSError as e:
            raise SocketError(f'error closing socket {name!r}: {e}')

    def close_all(self):
        for name in list(self.open_sockets):
            self.close(name)
