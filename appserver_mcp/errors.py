"""Exceptions raised when talking to the Appserver and the platform."""


class AppserverApiError(RuntimeError):
    """Represents failures when communicating with the Appserver."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PlatformAuthError(AppserverApiError):
    """Raised when a bearer token cannot be obtained from the platform."""
