"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response exchange.

=============================================================================
ONE READ, ONE WRITE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                   Lifetime of a Connection                      │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   accept()                                                       │
    │      │                                                           │
    │      ▼                                                           │
    │   read_request()   ONE recv() of at most buffer_size bytes      │
    │      │                                                           │
    │      ▼                                                           │
    │   (decode → dispatch → encode, done by the server)              │
    │      │                                                           │
    │      ▼                                                           │
    │   send_response()  sendall() of the encoded bytes               │
    │      │                                                           │
    │      ▼                                                           │
    │   close()          always, via the context manager              │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

There is no buffering across reads: a request larger than buffer_size is
cut off, and a request split across TCP segments is decoded from whatever
the first segment held. No keep-alive, no timeouts, no retries.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
     │         │                          │           ▲
     └─────────┴──────────────────────────┴───────────┘
                    (any error goes straight to close)

=============================================================================
"""

import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum


logger = logging.getLogger(__name__)

# Upper bound on the whole drain in close(), however the peer paces its bytes
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, mostly for logs."""

    NEW = "new"                # Just accepted
    READING = "reading"        # Waiting on recv()
    PROCESSING = "processing"  # Request decoded, building the response
    WRITING = "writing"        # Sending the response
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        buffer_size: Capacity of the single read.
        id: Short identifier for log lines.
        state: Current lifecycle state.
        created_at: When the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]
    buffer_size: int = 1024

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        # Accepted sockets may inherit the listener's timeout; reads here block
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Perform the single read for this connection.

        Returns:
            Up to buffer_size bytes; b"" if the client closed without
            sending anything.

        Raises:
            OSError: If the read fails. The caller logs it and gives up on
                     the connection.
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(self.buffer_size)
        self.state = ConnectionState.PROCESSING
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the encoded response.

        Uses sendall() so a partial send can't truncate the response.

        Returns:
            True if sent, False if the connection was lost (logged).
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response.
        2. Unread input is drained for at most DRAIN_TIMEOUT seconds in
           total; closing with bytes still queued would make the kernel
           answer with RST and the client could lose the response.
        3. close() releases the descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(self.buffer_size):
                    break
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Guarantees release on every exit path:

            with conn:
                data = conn.read_request()
                conn.send_response(response)
            # closed here, even if anything above raised
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
