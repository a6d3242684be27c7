"""
=============================================================================
TINYHTTPD - A minimal HTTP/1.1 server on raw sockets
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ARCHITECTURE                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   core/       SocketServer, Connection      (TCP plumbing)          │
    │   http/       decoder, encoder, router      (protocol)              │
    │   handlers/   /, /echo/, /user-agent, /files/                       │
    │   config.py   ServerConfig                                          │
    │   server.py   HTTPServer                    (wires it together)     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Quick start:

    python -m tinyhttpd --directory /tmp/files

    curl -i http://localhost:4221/echo/hello
    curl -i --data-binary @notes.txt http://localhost:4221/files/notes.txt

Or from code:

    from tinyhttpd import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(port=8080, directory="/tmp/files")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
