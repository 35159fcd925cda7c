"""
markerbridge: Exception Hierarchy
====================================

What:  One exception per way a request can fail.
How:   Each class carries a plain-text message (the response body), the HTTP
       status it maps to, and a context dict that is logged but never sent.
       The handlers registered in main.py turn these into responses.

Exception Hierarchy:
    BridgeError (base)                         → 500
    ├── AssetNotFoundError                     → 404
    ├── AssetReadError                         → 500
    ├── InvalidBodyError                       → 500 (configurable)
    ├── UnknownRouteError                      → 404
    ├── UnsupportedMethodError                 → 405
    ├── PayloadTooLargeError                   → 413
    ├── BodyTimeoutError                       → 408
    └── SinkDeliveryError                      → 500
    ServerStartupError                         (bootstrap only, never HTTP)
"""

from typing import Any, Dict, Optional


class BridgeError(Exception):
    """
    Base exception for all request-level bridge errors.

    Attributes:
        message:      Response body sent to the client
        status_code:  HTTP status for the response
        context:      Debug info for the server log only
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "Internal Server Error",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        super().__init__(self.message)


class AssetNotFoundError(BridgeError):
    """The resolved asset path does not exist. HTTP 404."""

    status_code = 404

    def __init__(self, path: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["path"] = path
        super().__init__(message=f"File {path} not found!", context=ctx)
        self.path = path


class AssetReadError(BridgeError):
    """
    The asset exists but could not be read. HTTP 500.

    When: permission denied, the file vanished between the existence check
    and the read, or a directory has no index.html.
    """

    status_code = 500

    def __init__(self, path: str, error: Exception, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["path"] = path
        ctx["os_error"] = str(error)
        super().__init__(message=f"Error reading the file: {error}.", context=ctx)
        self.path = path


class InvalidBodyError(BridgeError):
    """
    The ingest body is not valid marker JSON.

    HTTP: 500 unless Settings.invalid_body_status says otherwise. This is a
    client input error reported with a server status; clients already depend
    on it.
    """

    status_code = 500

    def __init__(
        self,
        reason: str,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"Invalid JSON body: {reason}.",
            status_code=status_code,
            context=context,
        )
        self.reason = reason


class UnknownRouteError(BridgeError):
    """POST to a path outside /qr/. HTTP 404."""

    status_code = 404

    def __init__(self, path: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message="Not Found", context=ctx)


class UnsupportedMethodError(BridgeError):
    """Any method other than GET or POST. HTTP 405."""

    status_code = 405

    def __init__(self, method: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if method:
            ctx["method"] = method
        super().__init__(message="Method Not Allowed", context=ctx)


class PayloadTooLargeError(BridgeError):
    """Ingest body went past Settings.max_body_size. HTTP 413."""

    status_code = 413

    def __init__(self, limit: int, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["max_body_size"] = limit
        super().__init__(message="Payload Too Large", context=ctx)
        self.limit = limit


class BodyTimeoutError(BridgeError):
    """Ingest body did not finish arriving within Settings.body_timeout. HTTP 408."""

    status_code = 408

    def __init__(self, timeout: float, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["body_timeout"] = timeout
        super().__init__(message="Request Timeout", context=ctx)
        self.timeout = timeout


class SinkDeliveryError(BridgeError):
    """
    The sink refused or failed the delivery. HTTP 500.

    No retry is attempted; the client decides whether to send again.
    """

    status_code = 500

    def __init__(self, error: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"Sink delivery failed: {error}.", context=context)


class ServerStartupError(Exception):
    """Raised by BridgeServer.start() when the listening socket cannot be bound."""
