"""Transport layer: framed reads and writes over TCP stream sockets."""

from .base import (
    TransportError,
    AddressResolutionError,
    TransportConnectionError,
    TransportTimeout,
    TransportPortError,
)

from . import stream
