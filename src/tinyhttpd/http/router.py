"""
=============================================================================
REQUEST DISPATCHER
=============================================================================

Maps a decoded request to the handler that builds its response.

=============================================================================
ORDERED FIRST-MATCH ROUTING
=============================================================================

Routes are checked strictly in registration order and the first whose
predicate accepts the request wins:

    ┌────┬──────────────────────────────────────────┬──────────────────┐
    │ #  │ Predicate                                │ Handler          │
    ├────┼──────────────────────────────────────────┼──────────────────┤
    │ 1  │ path == "/"                              │ index            │
    │ 2  │ "/echo/" in path                         │ echo             │
    │ 3  │ path == "/user-agent"                    │ user_agent       │
    │ 4  │ GET  and path.startswith("/files/")      │ read_file        │
    │ 5  │ POST and path.startswith("/files/")      │ write_file       │
    │ -  │ (nothing matched)                        │ 404 Not Found    │
    └────┴──────────────────────────────────────────┴──────────────────┘

Predicates are plain callables, so exact, prefix and substring matches all
look the same to the router. Order matters: "/files/echo/x" hits the echo
route because #2 is tried before #4.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found
from .wire import DEFAULT_VERSION


logger = logging.getLogger(__name__)


Handler = Callable[[HTTPRequest], HTTPResponse]
Predicate = Callable[[HTTPRequest], bool]


# =============================================================================
# PREDICATE BUILDERS
# =============================================================================

def path_equals(path: str) -> Predicate:
    """Match one exact path."""
    return lambda request: request.path == path


def path_contains(fragment: str) -> Predicate:
    """Match any path containing fragment anywhere."""
    return lambda request: fragment in request.path


def method_and_prefix(method: str, prefix: str) -> Predicate:
    """Match a method together with a path prefix."""
    return lambda request: request.method == method and request.path.startswith(prefix)


def response_version(request: HTTPRequest) -> str:
    """
    The version a response to this request should carry.

    Copied from the request; a request whose start line could not be
    decoded has no version, so HTTP/1.1 is used instead.
    """
    return request.version or DEFAULT_VERSION


@dataclass
class Route:
    """
    One entry of the routing table.

    Attributes:
        name: Label used in debug logs.
        predicate: Decides whether this route handles the request.
        handler: Builds the response.
    """

    name: str
    predicate: Predicate
    handler: Handler

    def matches(self, request: HTTPRequest) -> bool:
        return self.predicate(request)


class Router:
    """
    Ordered list of routes with a Not Found fallback.

    Usage:
        router = Router()
        router.add_route("index", path_equals("/"), index)

        @router.route("echo", path_contains("/echo/"))
        def echo(request):
            ...

        response = router.dispatch(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def add_route(self, name: str, predicate: Predicate, handler: Handler) -> Route:
        """Append a route; it is tried after every route added before it."""
        route = Route(name=name, predicate=predicate, handler=handler)
        self._routes.append(route)
        return route

    def route(self, name: str, predicate: Predicate) -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(name, predicate, handler)
            return handler
        return decorator

    def match(self, request: HTTPRequest) -> Optional[Route]:
        """Return the first route accepting the request, or None."""
        for route in self._routes:
            if route.matches(request):
                return route
        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Produce the response for a request.

        Unmatched requests get 404 Not Found with an empty body.
        """
        route = self.match(request)
        if route is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found(response_version(request))

        logger.debug(f"{request.method} {request.path} → {route.name}")
        return route.handler(request)
