"""API middleware for FileDepot."""

from filedepot.infrastructure.api.middleware.cors_headers_middleware import (
    CorsHeadersMiddleware,
    cors_headers,
)

__all__ = ["CorsHeadersMiddleware", "cors_headers"]
