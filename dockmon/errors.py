"""
Exception types for the Dockmon service.

Every error carries a client-facing message and the HTTP status used when it
surfaces through a REST endpoint. Over the WebSocket the same message is sent
as an ``error`` event.
"""


class DockmonError(Exception):
    """Base class for all Dockmon errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(DockmonError):
    """Missing, invalid or expired credentials or token."""

    status_code = 401


class NotFoundError(DockmonError):
    """Requested container does not exist."""

    status_code = 404


class SourceError(DockmonError):
    """A runtime log stream failed while being read."""

    status_code = 502


class ProtocolError(DockmonError):
    """A client message could not be understood."""

    status_code = 400

    def __init__(self, message: str = "Invalid message format"):
        super().__init__(message)


class RuntimeUnavailableError(DockmonError):
    """The container runtime cannot be reached."""

    status_code = 503

    def __init__(self, message: str = "Docker is not available. Please ensure Docker is running and accessible."):
        super().__init__(message)
