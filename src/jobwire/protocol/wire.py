from __future__ import annotations

import struct
from typing import Tuple

from . import fields
from .message import Category, ChecksumError, JobMessage, ProtocolError


# Info byte, then text length in network byte order.
_HEADER = struct.Struct('!BI')


def pack_info(category: Category, checksum: int) -> int:
    """ Pack the category and checksum into the single info byte. """

    return (int(category) << fields.CATEGORY_SHIFT) | (checksum & fields.CHECKSUM_MASK)


def unpack_info(info: int) -> Tuple[Category, int]:
    """ Split an info byte into its category and checksum. """

    code = info >> fields.CATEGORY_SHIFT

    try:
        category = Category(code)
    except ValueError:
        raise ProtocolError('unknown job category: %d' % (code,)) from None

    return category, info & fields.CHECKSUM_MASK


def encode(category, text=b'') -> bytes:
    """
    Serialize a job -> bytes

    Layout:
        [info][text length][text][NUL]

    The text and its terminator are omitted when the text is empty. The
    info byte for an END message carries no checksum.
    """

    msg = JobMessage(category, text)
    return encode_message(msg)


def encode_message(msg: JobMessage) -> bytes:

    text = msg.text

    if len(text) > fields.MAXIMUM_TEXT:
        raise ProtocolError('job text too long: %d bytes' % (len(text),))

    if fields.TERMINATOR in text:
        raise ProtocolError('job text contains a NUL byte')

    if msg.is_end:
        info = pack_info(Category.END, 0)
    else:
        info = pack_info(msg.category, msg.checksum)

    header = _HEADER.pack(info, len(text))

    if len(text) == 0:
        return header

    return header + text + fields.TERMINATOR


def decode_header(header: bytes) -> Tuple[Category, int, int]:
    """
    Deserialize the fixed-size frame header -> (category, checksum, length)

    The length field is not trusted: anything longer than the largest job a
    source can produce, or an END frame claiming to carry text, means the
    stream is no longer aligned on frame boundaries.
    """

    if len(header) != fields.HEADER_SIZE:
        raise ProtocolError('frame header must be %d bytes, got %d' % (fields.HEADER_SIZE, len(header)))

    info, length = _HEADER.unpack(header)
    category, checksum = unpack_info(info)

    if length > fields.MAXIMUM_TEXT:
        raise ProtocolError('frame length out of range: %d' % (length,))

    if category == Category.END and length != 0:
        raise ProtocolError('END frame with non-empty text')

    return category, checksum, length


def body_size(length: int) -> int:
    """ Number of bytes following the header for a text of *length* bytes. """

    if length == 0:
        return 0

    return length + len(fields.TERMINATOR)


def decode_body(category: Category, checksum: int, length: int, body: bytes) -> JobMessage:
    """
    Deserialize the bytes following a header -> JobMessage

    The checksum is recomputed over the text and compared with the value
    carried in the header.
    """

    if len(body) != body_size(length):
        raise ProtocolError('frame body must be %d bytes, got %d' % (body_size(length), len(body)))

    if length == 0:
        text = b''
    else:
        text = body[:length]
        if body[length:] != fields.TERMINATOR:
            raise ProtocolError('frame text is not terminated')

    msg = JobMessage(category, text, checksum)
    msg.validate()
    return msg


def decode(frame: bytes) -> JobMessage:
    """
    Deserialize a complete frame -> JobMessage

    Raises :class:`ChecksumError` on a checksum mismatch and
    :class:`ProtocolError` on any other malformed frame.
    """

    header = frame[:fields.HEADER_SIZE]
    category, checksum, length = decode_header(header)
    return decode_body(category, checksum, length, frame[fields.HEADER_SIZE:])


__all__ = [
    'ChecksumError',
    'ProtocolError',
    'body_size',
    'decode',
    'decode_body',
    'decode_header',
    'encode',
    'encode_message',
    'pack_info',
    'unpack_info',
]
