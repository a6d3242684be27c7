"""
=============================================================================
CORE - Socket plumbing
=============================================================================

    SocketServer   listening socket and accept loop
    Connection     one client socket: one read, one write, close

Nothing here knows about HTTP; it moves bytes.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Wraps a client socket
    "ConnectionState",  # Connection lifecycle states
]
