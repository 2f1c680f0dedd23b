"""Exception types raised by the Hue bridge SDK.

All exceptions share the HueError base so callers can catch everything the
SDK raises with a single except clause:
- ValidationError: a caller-supplied value is out of range, raised before any request
- CommError: transport failure or an error payload returned by the bridge
- ConfigurationError: local setup failure (discovery socket, settings)
- UnsupportedOperationError: a bridge action the modelled API version lacks
- TransactionStateError: a second transaction opened on the same entity
- NotAuthenticatedError: cached state accessed before authentication
"""


class HueError(Exception):
    """Base class for all SDK exceptions."""


class ValidationError(HueError, ValueError):
    """Raised when a value passed to the SDK is out of its documented range."""


class ConfigurationError(HueError):
    """Raised on fatal local setup failures. Never retried."""


class UnsupportedOperationError(HueError, NotImplementedError):
    """Raised for bridge actions the modelled API version does not support."""


class TransactionStateError(HueError, RuntimeError):
    """Raised when a state change transaction is already open on an entity."""


class NotAuthenticatedError(HueError, RuntimeError):
    """Raised when bridge state is accessed before authenticating."""


class CommError(HueError):
    """Raised when communication with the bridge fails.

    Always carries an error dict. For a failed request this is the bridge's
    own error object (``{"type": 101, "address": "", "description": "..."}``),
    otherwise one is built with just a ``description``.
    """

    def __init__(self, message: str | None = None, error: dict | None = None):
        if error is None:
            error = {'description': message or ''}
        self.error = error
        super().__init__(message or error.get('description', ''))

    @classmethod
    def from_payload(cls, error: dict | None) -> 'CommError':
        """Build a CommError from a bridge ``error`` object."""
        if not isinstance(error, dict):
            return cls(f"Unexpected bridge response: {error!r}")
        return cls(error.get('description', 'Bridge reported an error'), error)

    @property
    def error_type(self) -> int | None:
        """The bridge error type number, if the bridge supplied one."""
        return self.error.get('type')

    @property
    def description(self) -> str:
        return self.error.get('description', '')
