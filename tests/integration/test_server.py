"""
Integration tests: real sockets against a running server.
"""

import threading
from pathlib import Path

import pytest

from tinyhttpd import HTTPServer, ServerConfig


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split wire bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode().split("\r\n")
    headers = dict(line.split(": ", 1) for line in lines[1:])
    return lines[0], headers, body


class TestScenarios:
    """End-to-end request/response exchanges."""

    def test_root(self, test_server):
        raw = test_server.send(b"GET / HTTP/1.1\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 200 OK\r\n")
        assert raw.endswith(b"\r\n\r\n")
        assert split_response(raw)[2] == b""

    def test_echo(self, test_server):
        raw = test_server.send(b"GET /echo/abc HTTP/1.1\r\n\r\n")
        status, headers, body = split_response(raw)

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/plain"
        assert headers["Content-Length"] == "3"
        assert body == b"abc"

    def test_user_agent(self, test_server):
        raw = test_server.send(
            b"GET /user-agent HTTP/1.1\r\nUser-Agent: test-client\r\n\r\n"
        )
        _, headers, body = split_response(raw)

        assert body == b"test-client"
        assert headers["Content-Length"] == "11"

    def test_post_then_get_file(self, test_server, files_dir: Path):
        post = test_server.send(
            b"POST /files/foo.txt HTTP/1.1\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )
        assert split_response(post)[0] == "HTTP/1.1 201 Created"
        assert (files_dir / "foo.txt").read_bytes() == b"hello"

        get = test_server.send(b"GET /files/foo.txt HTTP/1.1\r\n\r\n")
        status, headers, body = split_response(get)

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "application/octet-stream"
        assert headers["Content-Length"] == "5"
        assert body == b"hello"

    def test_missing_file(self, test_server):
        raw = test_server.send(b"GET /files/missing.txt HTTP/1.1\r\n\r\n")

        assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_unknown_path(self, test_server):
        raw = test_server.send(b"GET /does-not-exist HTTP/1.1\r\n\r\n")

        assert split_response(raw)[0] == "HTTP/1.1 404 Not Found"


class TestRobustness:
    """Bad input and concurrency."""

    def test_malformed_request_still_answered(self, test_server):
        raw = test_server.send(b"garbage\r\n\r\n")

        assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_server_survives_bad_input(self, test_server):
        test_server.send(b"\x00\xff\xfe")
        raw = test_server.send(b"GET / HTTP/1.1\r\n\r\n")

        assert raw.startswith(b"HTTP/1.1 200 OK")

    def test_version_echoed(self, test_server):
        raw = test_server.send(b"GET / HTTP/1.0\r\n\r\n")

        assert raw == b"HTTP/1.0 200 OK\r\n\r\n"

    def test_concurrent_connections(self, test_server):
        results = {}

        def fetch(n: int):
            raw = test_server.send(f"GET /echo/{n} HTTP/1.1\r\n\r\n".encode())
            results[n] = split_response(raw)[2]

        threads = [threading.Thread(target=fetch, args=(n,)) for n in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert results == {n: str(n).encode() for n in range(10)}


class TestHandleRequest:
    """The socket-free pipeline."""

    @pytest.fixture
    def server(self, files_dir: Path) -> HTTPServer:
        return HTTPServer(ServerConfig(directory=str(files_dir)))

    def test_pipeline(self, server: HTTPServer):
        assert server.handle_request(b"GET /echo/hi HTTP/1.1\r\n\r\n") == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 2\r\n"
            b"\r\n"
            b"hi"
        )

    def test_incomplete_request_is_handled(self, server: HTTPServer):
        """No blank line: the request line still routes."""
        raw = server.handle_request(b"GET /echo/partial HTTP/1.1\r\nHost: x")

        assert raw.endswith(b"\r\n\r\npartial")

    def test_user_agent_bytes_echoed_exactly(self, server: HTTPServer):
        raw = server.handle_request(
            b"GET /user-agent HTTP/1.1\r\nUser-Agent: caf\xe9\r\n\r\n"
        )

        assert raw.endswith(b"Content-Length: 4\r\n\r\ncaf\xe9")

    def test_echo_non_utf8_path(self, server: HTTPServer):
        raw = server.handle_request(b"GET /echo/\xff\xfe HTTP/1.1\r\n\r\n")

        assert raw.endswith(b"Content-Length: 2\r\n\r\n\xff\xfe")

    def test_empty_request(self, server: HTTPServer):
        assert server.handle_request(b"") == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(port=-5))
