"""
=============================================================================
HANDLERS - The routes this server answers
=============================================================================

    GET  /                  200, empty body
    ANY  .../echo/<text>    200 text/plain, body = <text>
    ANY  /user-agent        200 text/plain, body = User-Agent header
    GET  /files/<name>      200 application/octet-stream, or 404
    POST /files/<name>      201, request body written to <name>
    *                       404

create_router() assembles them into a Router in exactly this order. The
file root comes from the ServerConfig passed in and is captured by the
handlers, so each server instance can serve a different directory.

=============================================================================
"""

from ..config import ServerConfig
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, created, not_found, ok
from ..http.router import (
    Router,
    method_and_prefix,
    path_contains,
    path_equals,
    response_version,
)
from .files import FileStore


ECHO_MARKER = "/echo/"
FILES_PREFIX = "/files/"


def index(request: HTTPRequest) -> HTTPResponse:
    return ok(response_version(request))


def echo(request: HTTPRequest) -> HTTPResponse:
    """
    Reflect whatever follows the first "/echo/" in the path.

    The marker may appear anywhere, not just at the start:
    "/x/echo/abc" echoes "abc".
    """
    _, _, text = request.path.partition(ECHO_MARKER)
    return ok(response_version(request), text, content_type="text/plain")


def user_agent(request: HTTPRequest) -> HTTPResponse:
    return ok(response_version(request), request.user_agent, content_type="text/plain")


class FileHandler:
    """
    GET and POST handlers for /files/<name>, bound to one FileStore.

    Usage:
        files = FileHandler(FileStore("/srv/data"))
        router.add_route("read_file", method_and_prefix("GET", "/files/"), files.read)
    """

    def __init__(self, store: FileStore):
        self.store = store

    def read(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve a file's bytes, or 404 if it does not exist.

        A file that exists but cannot be read is served as an empty 200.
        """
        version = response_version(request)
        name = self.store.name_for(request.path)

        if not self.store.exists(name):
            return not_found(version)

        content = self.store.read(name)
        return ok(version, content, content_type="application/octet-stream")

    def write(self, request: HTTPRequest) -> HTTPResponse:
        """
        Store the request body verbatim, then answer 201.

        The client gets 201 even when the write fails; the failure is only
        logged.
        """
        name = self.store.name_for(request.path)
        self.store.write(name, request.body)
        return created(response_version(request))


def create_router(config: ServerConfig) -> Router:
    """
    Build the routing table for a server.

    Args:
        config: Supplies the /files/ root directory.

    Returns:
        A Router with every route registered in priority order.
    """
    files = FileHandler(FileStore(config.directory))

    router = Router()
    router.add_route("index", path_equals("/"), index)
    router.add_route("echo", path_contains(ECHO_MARKER), echo)
    router.add_route("user_agent", path_equals("/user-agent"), user_agent)
    router.add_route("read_file", method_and_prefix("GET", FILES_PREFIX), files.read)
    router.add_route("write_file", method_and_prefix("POST", FILES_PREFIX), files.write)
    return router


__all__ = [
    "FileHandler",
    "FileStore",
    "create_router",
    "echo",
    "index",
    "user_agent",
]
