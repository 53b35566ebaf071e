"""
Core transport components.

- Connection / open_connection: one TCP exchange, client or server side
- SocketServer: bind, listen and the sequential accept loop
- ShutdownController: SIGINT / SIGTERM handling between connections
"""

from .connection import Connection, ConnectionState, open_connection
from .shutdown import ShutdownController
from .socket_server import SocketServer

__all__ = [
    "Connection",
    "ConnectionState",
    "open_connection",
    "ShutdownController",
    "SocketServer",
]
