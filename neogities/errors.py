"""Exception hierarchy for the neogities client.

Every failure inside the request pipeline is mapped onto one of four kinds
before it leaves the library:

``TransportError``
    Connection, TLS or timeout failure, or an HTTP status >= 400.
``OutOfMemoryError``
    The response buffer could not grow while a body was streaming in.
``ProtocolError``
    The body is not valid JSON or lacks a required field.
``AuthError``
    An operation that needs credentials was called without usable ones.
"""

from __future__ import annotations


class NeocitiesError(Exception):
    """Base class for all errors raised by this package."""


class TransportError(NeocitiesError):
    """The request could not be completed successfully."""


class RequestTimeout(TransportError):
    """Connection establishment or the whole transfer ran out of time."""


class HTTPStatusError(TransportError):
    """The server answered with a status code of 400 or above."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class OutOfMemoryError(NeocitiesError):
    """The response buffer could not hold the next chunk."""


class ProtocolError(NeocitiesError):
    """The response body does not have the expected JSON shape."""


class AuthError(NeocitiesError):
    """Credentials are missing or cannot be sent."""


__all__ = [
    "NeocitiesError",
    "TransportError",
    "RequestTimeout",
    "HTTPStatusError",
    "OutOfMemoryError",
    "ProtocolError",
    "AuthError",
]
