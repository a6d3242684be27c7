"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: the socket server accepts, one thread per
connection reads, decodes, dispatches, encodes and writes.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   new Thread ─► Connection.read_request()    one recv()              │
    │                      │                                               │
    │                      ▼                                               │
    │                 RequestDecoder.decode()     bytes → HTTPRequest      │
    │                      │                                               │
    │                      ▼                                               │
    │                 Router.dispatch()           HTTPRequest → Response   │
    │                      │                                               │
    │                      ▼                                               │
    │                 HTTPResponse.to_bytes()     Response → bytes         │
    │                      │                                               │
    │                      ▼                                               │
    │                 Connection.send_response()  one sendall()            │
    │                      │                                               │
    │                      ▼                                               │
    │                 Connection.close()          always                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Workers share nothing mutable. The only shared state is the frozen
ServerConfig and the router built from it, both read-only.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional, Tuple

from .config import ServerConfig
from .core import Connection, SocketServer
from .handlers import create_router
from .http import HTTPRequest, HTTPResponse, RequestDecoder, Router


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("tinyhttpd.access")


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(directory="/srv/data"))
        server.run()  # blocks until SIGINT/SIGTERM or shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Defaults to 0.0.0.0:4221.
            router: Routing table. Defaults to create_router(config).
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._decoder = RequestDecoder()
        self._router = router or create_router(self.config)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(f"Serving files from: {self.config.directory or '.'}")
        self._socket_server.start(self._handle_connection)

    def shutdown(self):
        """Stop accepting connections. In-flight workers finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_listening(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("tinyhttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_request(self, data: bytes) -> bytes:
        """
        Run raw request bytes through decode → dispatch → encode.

        This is the whole protocol pipeline without any sockets, which makes
        it the natural seam for tests.
        """
        _, response = self._exchange(data)
        return response.to_bytes()

    def _exchange(self, data: bytes) -> Tuple[HTTPRequest, HTTPResponse]:
        request = self._decoder.decode(data)
        response = self._router.dispatch(request)
        return request, response

    def _handle_connection(self, conn: Connection):
        """
        Give each connection its own worker thread.

        Called on the accept loop, so it must not block.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """
        One request/response exchange (runs in the worker thread).

        Errors end the exchange but never escape the thread, and the
        connection is closed on every path.
        """
        with conn:
            try:
                try:
                    data = conn.read_request()
                except OSError as e:
                    logger.warning(f"[{conn.id}] Read failed: {e}")
                    return

                if not data:
                    logger.debug(f"[{conn.id}] Client closed without sending a request")
                    return

                start = time.perf_counter()
                request, response = self._exchange(data)

                if conn.send_response(response.to_bytes()):
                    self._log_access(conn, request, response, start)
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def _log_access(
        self,
        conn: Connection,
        request: HTTPRequest,
        response: HTTPResponse,
        start: float,
    ):
        duration_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            f'{conn.client_ip} "{request.method} {request.path}" '
            f"{response.status_code} {len(response.body)} {duration_ms:.2f}ms"
        )


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Factory for an HTTPServer with the standard routes."""
    return HTTPServer(config)
