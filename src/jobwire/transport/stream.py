"""Framed I/O over a TCP stream socket.

Every read and write loops until the full count of bytes has moved; a short
read or write is a continuation, not an error. A read that returns nothing
before the count is satisfied means the peer hung up, and is reported as a
:class:`TransportConnectionError` like any other socket failure.

All multi-byte integers on the socket are in network byte order; that is
handled by :mod:`jobwire.protocol.wire`, this module only moves bytes.
"""

from __future__ import annotations

import socket
from typing import Optional, Tuple

from ..protocol import wire
from ..protocol.fields import HEADER_SIZE
from ..protocol.message import JobMessage
from .base import (
    AddressResolutionError,
    TransportConnectionError,
    TransportPortError,
    TransportTimeout,
)


def send_frame(conn: socket.socket, data: bytes) -> None:
    """Write all of *data* to *conn*."""

    view = memoryview(data)
    sent = 0

    while sent < len(view):
        try:
            count = conn.send(view[sent:])
        except socket.timeout as exc:
            raise TransportTimeout(f"write stalled after {sent} of {len(view)} bytes") from exc
        except OSError as exc:
            raise TransportConnectionError(f"write failed after {sent} of {len(view)} bytes: {exc}") from exc

        if count == 0:
            raise TransportConnectionError(f"connection closed after {sent} of {len(view)} bytes")

        sent += count


def recv_frame(conn: socket.socket, length: int) -> bytes:
    """Read exactly *length* bytes from *conn*."""

    buffer = bytearray(length)
    view = memoryview(buffer)
    received = 0

    while received < length:
        try:
            count = conn.recv_into(view[received:], length - received)
        except socket.timeout as exc:
            raise TransportTimeout(f"read stalled after {received} of {length} bytes") from exc
        except OSError as exc:
            raise TransportConnectionError(f"read failed after {received} of {length} bytes: {exc}") from exc

        if count == 0:
            raise TransportConnectionError(f"connection closed after {received} of {length} bytes")

        received += count

    return bytes(buffer)


def send_byte(conn: socket.socket, value: int) -> None:
    send_frame(conn, bytes((value,)))


def recv_byte(conn: socket.socket) -> int:
    return recv_frame(conn, 1)[0]


def send_job(conn: socket.socket, msg: JobMessage) -> int:
    """Encode and send one job frame; return the number of bytes sent."""

    frame = wire.encode_message(msg)
    send_frame(conn, frame)
    return len(frame)


def recv_job(conn: socket.socket) -> JobMessage:
    """Receive and decode one job frame.

    The header is read and checked before the body, so an implausible length
    is rejected without attempting to read it. Raises
    :class:`jobwire.protocol.ChecksumError` if the text does not match the
    checksum carried in the header.
    """

    header = recv_frame(conn, HEADER_SIZE)
    category, checksum, length = wire.decode_header(header)
    body = recv_frame(conn, wire.body_size(length))
    return wire.decode_body(category, checksum, length, body)


# --- socket setup ---

def resolve(host: str, port: int) -> Tuple[str, int]:
    """Return the first IPv4 address for *host*, which may be a dotted quad
    or a name to look up."""

    try:
        found = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as exc:
        raise AddressResolutionError(f"cannot resolve {host!r}: {exc}") from exc

    if not found:
        raise AddressResolutionError(f"no IPv4 address for {host!r}")

    return found[0][4]


def connect(host: str, port: int, timeout: Optional[float] = None) -> socket.socket:
    """Connect to *host*:*port*; reads and writes honor *timeout* seconds."""

    address = resolve(host, port)

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.settimeout(timeout)

    try:
        sock.connect(address)
    except OSError as exc:
        sock.close()
        raise TransportConnectionError(f"cannot connect to {host}:{port}: {exc}") from exc

    return sock


def listen(port: int, address: str = '') -> socket.socket:
    """Create a non-blocking listening socket on *port*, all interfaces."""

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise TransportPortError(f"could not create socket: {exc}") from exc

    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((address, port))
        sock.listen(socket.SOMAXCONN)
        sock.setblocking(False)
    except OSError as exc:
        sock.close()
        raise TransportPortError(f"cannot listen on port {port}: {exc}") from exc

    return sock


def accept(listener: socket.socket, timeout: Optional[float] = None) -> Optional[Tuple[socket.socket, Tuple[str, int]]]:
    """Accept one pending connection from a non-blocking *listener*.

    Returns None if nothing is waiting. The accepted socket is blocking with
    *timeout* as its deadline.
    """

    try:
        conn, address = listener.accept()
    except BlockingIOError:
        return None
    except OSError as exc:
        raise TransportConnectionError(f"could not accept connection: {exc}") from exc

    conn.settimeout(timeout)
    return conn, address
