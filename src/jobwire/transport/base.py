"""Transport exceptions.

These live outside :mod:`jobwire.protocol` so the protocol remains free of
socket concerns. A :class:`TransportError` is fatal to the session that
raised it; only :class:`TransportPortError` is fatal to a server process.
"""

from __future__ import annotations


class TransportError(Exception):
    """Base class for all transport-layer errors."""


class AddressResolutionError(TransportError):
    """The server address could not be parsed or looked up."""


class TransportConnectionError(TransportError):
    """A connect, accept, read or write failed, or the peer hung up early."""


class TransportTimeout(TransportConnectionError):
    """A read or write did not complete before the socket deadline."""


class TransportPortError(TransportError):
    """The listening socket could not be created, bound, or put to listen."""
