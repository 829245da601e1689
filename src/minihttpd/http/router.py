"""
=============================================================================
URL ROUTER
=============================================================================

Ordered (method, pattern) → handler table. First match wins.

Pattern syntax:
- Static paths:       /user-agent
- Single segment:     /users/:id           (anything except "/")
- Rest of the path:   /files/*name         (anything, "/" included, may be "")

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   GET /echo/hello/world                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────────────────────────────────────────────────────────┐  │
    │   │  ROUTER (checked top to bottom)                               │  │
    │   │                                                               │  │
    │   │   GET  /              ^/$                          ✗          │  │
    │   │   GET  /echo/*value   ^/echo/(?P<value>.*)$        ✓ ◄── stop │  │
    │   │   GET  /user-agent    ^/user\\-agent$                          │  │
    │   │   GET  /files/*name   ^/files/(?P<name>.*)$                   │  │
    │   │   POST /files/*name   ^/files/(?P<name>.*)$                   │  │
    │   └──────────────────────────────────────────────────────────────┘  │
    │        │                                                             │
    │        ▼                                                             │
    │   request.path_params = {"value": "hello/world"}                     │
    │   echo(request)                                                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Paths are matched exactly as received. There is no trailing-slash
stripping, no "//" collapsing and no URL decoding, so handlers see the
same bytes the client sent.

A path that only matches under a different method ("DELETE /files/x")
gets a plain 404, the same as a path nothing matches.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found


# Handler: A function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/files/*name",     # URL pattern
            method="GET",            # HTTP method filter
            handler=read_file,       # Handler function
            _pattern=<compiled>,     # ^/files/(?P<name>.*)$
            _param_names=["name"]
        )
    """

    path: str                        # URL pattern (e.g., /echo/*value)
    method: Optional[str]            # HTTP method (None = any method)
    handler: Handler

    _pattern: Optional[re.Pattern] = field(default=None, repr=False)
    _param_names: List[str] = field(default_factory=list, repr=False)


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

    Example:
        Pattern: /echo/*value
        Path:    /echo/abc
        Result:  RouteMatch(route=<Route>, params={"value": "abc"})
    """
    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router.

    Routes are registered with add_route():

        router = Router()
        router.add_route("/echo/*value", echo, method="GET")

    The table is built once at startup and only read afterwards, so a
    single Router is safe to share across connection threads.
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
    ) -> Route:
        """
        Register a route at the end of the table.

        Args:
            path: URL pattern (e.g., /files/*name)
            handler: Handler function that takes request, returns response
            method: HTTP method (None for any method)

        Returns:
            The registered Route object
        """
        pattern, param_names = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method,
            handler=handler,
            _pattern=pattern,
            _param_names=param_names,
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> tuple[re.Pattern, List[str]]:
        """
        Compile a path pattern into a regex.

        =====================================================================
        PATTERN COMPILATION
        =====================================================================

        Input:  "/users/:id/files/*rest"

        Step 1: Split by "/"
                ["", "users", ":id", "files", "*rest"]

        Step 2: Process each segment
                "users"   → /users
                ":id"     → /(?P<id>[^/]+)
                "files"   → /files
                "*rest"   → /(?P<rest>.*)      (stops here)

        Step 3: Join and add anchors
                ^/users/(?P<id>[^/]+)/files/(?P<rest>.*)$

        The bare pattern "/" has no segments and compiles to ^/$.

        =====================================================================
        """
        param_names: List[str] = []
        regex_parts = ["^"]

        for segment in path.split("/"):
            if not segment:
                continue

            regex_parts.append("/")

            if segment.startswith(":"):
                # :id → (?P<id>[^/]+), exactly one non-empty segment
                param_name = segment[1:]
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>[^/]+)")

            elif segment.startswith("*"):
                # *rest → (?P<rest>.*), everything remaining, possibly empty
                param_name = segment[1:] or "wildcard"
                param_names.append(param_name)
                regex_parts.append(f"(?P<{param_name}>.*)")
                break

            else:
                regex_parts.append(re.escape(segment))

        if len(regex_parts) == 1:
            regex_parts.append("/")

        regex_parts.append("$")
        # DOTALL so a wildcard also swallows stray control bytes in the path
        pattern = re.compile("".join(regex_parts), re.DOTALL)

        return pattern, param_names

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Order matters: first-registered, first-matched.

        Returns:
            RouteMatch if found, None otherwise
        """
        for route in self._routes:
            if route.method is not None and route.method != method:
                continue

            if route._pattern:
                # fullmatch: "$" on its own also matches before a trailing "\n"
                found = route._pattern.fullmatch(path)
                if found:
                    return RouteMatch(route=route, params=found.groupdict())

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        1. Find matching route
        2. Inject path parameters into the request
        3. Call handler
        4. 404 if nothing matched
        """
        found = self.match(request.method, request.path)

        if found:
            request.path_params = found.params
            return found.route.handler(request)

        return not_found()

    @property
    def routes(self) -> List[Route]:
        """Registered routes, in match order (copy)."""
        return list(self._routes)
