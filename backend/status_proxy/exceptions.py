"""
Status Proxy Exceptions

Typed errors raised by the cache store, the upstream fetcher and the
request router. Each class carries the HTTP status it is rendered as,
so the router can translate failures without inspecting messages or
platform error codes.
"""

from typing import Optional


class ProxyError(Exception):
    """Base exception for all status proxy failures."""

    status_code: int = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        super().__init__(self.message)
        if original_error:
            self.__cause__ = original_error


class ValidationError(ProxyError):
    """Request shape is invalid."""

    status_code = 400


class InvalidCacheKeyError(ValidationError):
    """Raised when the path segment is empty or not an integer."""

    def __init__(self, segment: str):
        self.segment = segment
        super().__init__("Invalid HTTP status code in URL path.")


class EmptyBodyError(ValidationError):
    """Raised when a PUT request carries no image bytes."""

    def __init__(self):
        super().__init__("Request body is empty.")


class NotFoundError(ProxyError):
    """Requested resource does not exist."""

    status_code = 404


class CacheNotFoundError(NotFoundError):
    """Raised when no cache file exists for a key."""

    def __init__(self, key: str, original_error: Optional[Exception] = None):
        self.key = key
        super().__init__(f"Image for {key} not found in cache.", original_error)


class CacheIOError(ProxyError):
    """Raised for filesystem failures other than a missing entry."""

    status_code = 500

    def __init__(
        self,
        operation: str,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.operation = operation
        self.key = key
        super().__init__(f"Internal Server Error during cache {operation}", original_error)


class UpstreamError(ProxyError):
    """
    Raised when the upstream image service cannot supply an image.

    Covers transport failures, non-success statuses and empty bodies.
    The router folds this into a 404 on the GET miss path.
    """

    status_code = 404

    def __init__(
        self,
        key: str,
        reason: str,
        upstream_status: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        self.key = key
        self.reason = reason
        self.upstream_status = upstream_status
        super().__init__(
            f"Image for {key} not found upstream or fetch failed.", original_error
        )


class MethodNotSupportedError(ProxyError):
    """Raised for any verb other than GET, PUT and DELETE."""

    status_code = 405

    def __init__(self, method: str):
        self.method = method
        super().__init__("Method not allowed")


class RequestBodyError(ProxyError):
    """Raised when the request body could not be read."""

    status_code = 500

    def __init__(self, original_error: Optional[Exception] = None):
        super().__init__("Internal Server Error while reading request body", original_error)
