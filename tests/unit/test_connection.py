"""
Unit tests for the client connection wrapper.
"""

import socket
import threading
import time

import pytest

from tinyhttpd.core.connection import DRAIN_TIMEOUT, Connection, ConnectionState


@pytest.fixture
def pair():
    """Connected (server side, client side) sockets."""
    server_sock, client_sock = socket.socketpair()
    yield server_sock, client_sock
    server_sock.close()
    client_sock.close()


class TestConnection:
    """Tests for Connection class."""

    def test_single_read_and_write(self, pair):
        server_sock, client_sock = pair
        conn = Connection(server_sock, ("127.0.0.1", 5000))

        client_sock.sendall(b"GET / HTTP/1.1\r\n\r\n")
        assert conn.read_request() == b"GET / HTTP/1.1\r\n\r\n"

        conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n")
        conn.close()

        assert client_sock.recv(1024) == b"HTTP/1.1 200 OK\r\n\r\n"
        assert client_sock.recv(1024) == b""

    def test_close_is_idempotent(self, pair):
        conn = Connection(pair[0], ("127.0.0.1", 5000))

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_close_bounded_by_trickling_peer(self, pair):
        """A peer that keeps sending a byte at a time cannot hold close() open."""
        server_sock, client_sock = pair
        conn = Connection(server_sock, ("127.0.0.1", 5000))
        stop = threading.Event()

        def trickle():
            while not stop.is_set():
                try:
                    client_sock.send(b"x")
                except OSError:
                    return
                time.sleep(0.05)

        sender = threading.Thread(target=trickle, daemon=True)
        sender.start()
        try:
            started = time.monotonic()
            conn.close()
            elapsed = time.monotonic() - started
        finally:
            stop.set()
            sender.join(timeout=2.0)

        assert conn.state == ConnectionState.CLOSED
        assert elapsed < DRAIN_TIMEOUT + 1.0
