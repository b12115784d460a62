from . import fields
from . import message
from . import wire

from .message import Category, ChecksumError, JobMessage, ProtocolError, classify


"""
jobwire Protocol Layer
======================

This package defines the job framing protocol shared by the server and the
client. It is pure: nothing here touches a socket, a file, or a thread.

The protocol layer MUST NOT depend on the transport layer.

---------------------------------------------------------------------

Layer Overview
--------------

Field Vocabulary (fields.py)
    Request codes, greeting codes, category codes, size limits

Message Model (message.py)
    - Category
    - JobMessage
    - ProtocolError / ChecksumError
    - classify() for request bytes

Wire Codec (wire.py)
    JobMessage <-> bytes

        +--------+-------------+-----------------+------+
        |  info  | text length |  text           | NUL  |
        +--------+-------------+-----------------+------+
        | 1 byte | uint32, net | text length     | 1    |
        +--------+-------------+-----------------+------+

    info = category << 5 | (sum(text) % 32)
    The text and NUL are absent when the text length is zero.

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer (jobwire.transport)
    Moves whole frames and single request bytes over a stream socket,
    looping over partial reads and writes.

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
