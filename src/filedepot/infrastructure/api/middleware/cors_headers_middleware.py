"""CORS headers middleware for FileDepot.

Every response carries the configured CORS headers, whether or not the
request sent an ``Origin`` header, and any ``OPTIONS`` request is answered
directly as a preflight.
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from filedepot.core.config import Settings
from filedepot.core.logging import get_logger

logger = get_logger(__name__)


def cors_headers(settings: Settings) -> dict[str, str]:
    """Build the CORS headers attached to every response."""
    return {
        "Access-Control-Allow-Origin": ", ".join(settings.cors_origins),
        "Access-Control-Allow-Methods": ", ".join(settings.cors_allow_methods),
        "Access-Control-Allow-Headers": ", ".join(settings.cors_allow_headers),
    }


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to answer preflights and add CORS headers to all responses."""

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Answer OPTIONS requests, otherwise add CORS headers to the response.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint to call.

        Returns:
            The response with CORS headers added.
        """
        headers = cors_headers(self.settings)

        if request.method == "OPTIONS":
            logger.debug("Answering CORS preflight", path=str(request.url.path))
            headers["Access-Control-Max-Age"] = str(self.settings.cors_max_age)
            return Response(status_code=200, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
