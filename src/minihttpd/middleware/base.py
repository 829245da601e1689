"""
=============================================================================
MIDDLEWARE BASE
=============================================================================

A middleware wraps the router and can look at the request on the way in
and rewrite the response on the way out (Chain of Responsibility):

    request ──► Logging ──► Compression ──► Router ──► handler
                                                          │
    response ◄── Logging ◄── Compression ◄────────────────┘

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, List
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# =============================================================================
# TYPE ALIAS
# =============================================================================
# NextHandler is the next middleware or the final handler. Each middleware
# receives it and must call it to continue the chain.

NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    Abstract base class for middleware.

    =========================================================================
    THE MIDDLEWARE CONTRACT
    =========================================================================

        class MyMiddleware(Middleware):
            def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
                # PRE-PROCESSING (before handler runs)
                response = next(request)  # <-- continue the chain
                # POST-PROCESSING (after handler runs)
                return response

    =========================================================================
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming HTTP request
            next: The next handler in the chain (call this to continue!)

        Returns:
            HTTP response (either from next() or short-circuited)
        """

    @property
    def name(self) -> str:
        """Get the middleware name for logging."""
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    Chains middleware together with a final handler.

    =========================================================================
    PIPELINE ARCHITECTURE
    =========================================================================

        pipeline.add(LoggingMiddleware())      # First added = outermost
        pipeline.add(CompressionMiddleware())  # Last added = closest to handler

            ┌─────────────────────────────────────────────────┐
            │  LoggingMiddleware                              │
            │  ┌───────────────────────────────────────────┐  │
            │  │  CompressionMiddleware                    │  │
            │  │  ┌─────────────────────────────────────┐  │  │
            │  │  │         FINAL HANDLER               │  │  │
            │  │  │        (router.handle)              │  │  │
            │  │  └─────────────────────────────────────┘  │  │
            │  └───────────────────────────────────────────┘  │
            └─────────────────────────────────────────────────┘

    Request flows INWARD, response flows OUTWARD. The access log therefore
    sees the response after compression, with its final body length.

    =========================================================================
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """
        Add middleware to the pipeline (first added = outermost).

        Returns:
            Self for method chaining
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        """
        Add several middleware at once.

        Example:
            pipeline.use(LoggingMiddleware(), CompressionMiddleware())
        """
        for mw in middleware:
            self.add(mw)
        return self

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Wrap a handler with all middleware in the pipeline.

        =====================================================================
        HOW WRAPPING WORKS
        =====================================================================

        Given: [MW1, MW2] and handler

        Step 1: current = handler
        Step 2: current = MW2.wrap(current)  # MW2 calls handler
        Step 3: current = MW1.wrap(current)  # MW1 calls MW2

        Final: MW1 → MW2 → handler

        =====================================================================
        """
        current = handler

        # reversed([A, B]) = [B, A]  →  A(B(handler))
        for middleware in reversed(self._middleware):
            current = self._create_wrapped_handler(middleware, current)

        return current

    def _create_wrapped_handler(
        self,
        middleware: Middleware,
        next_handler: NextHandler
    ) -> NextHandler:
        # Closure over middleware and next_handler
        def wrapped(request: HTTPRequest) -> HTTPResponse:
            return middleware(request, next_handler)

        return wrapped

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self):
        return iter(self._middleware)
