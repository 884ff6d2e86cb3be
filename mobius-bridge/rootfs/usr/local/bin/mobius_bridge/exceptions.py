"""Exception types raised by the bridge.

Decoders never raise; everything else in the poll path raises a
`MobiusError` subclass which the poll cycle converts into an offline
availability and a backoff step.
"""

from typing import Optional


class MobiusError(Exception):
    """Base exception for Mobius bridge failures."""


class ConfigError(MobiusError):
    """Process configuration is missing or invalid."""


class AuthenticationError(MobiusError):
    """Login rejected, or login response carried no usable credential."""


class TransportError(MobiusError):
    """Network error talking to the Mobius cloud."""


class ConfigFetchError(MobiusError):
    """Config document could not be fetched.

    Attributes:
        status: HTTP status of the final response, if there was one.
    """

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status
