"""Protocol constants.

Keep these in one place to avoid magic numbers in request and frame handling.

Request byte, client to server:
    0 - 126     that many jobs are requested
    127         all remaining jobs are requested
    128         normal termination
    129 - 255   termination with error
"""

ONE_JOB_REQUEST = 1
MAXIMUM_COUNT = 126
ALL_JOBS_REQUEST = 127
STOP_REQUEST = 128
ERROR_REQUEST = 129     # Any value from 129 to 255 has the same meaning.

# Greeting byte, server to client, sent once per accepted connection.

AVAILABLE = 0
BUSY = STOP_REQUEST

# Categories occupy the top three bits of the frame info byte.

OUT = 0         # "000" bit pattern
ERR = 1         # "001" bit pattern
END = 7         # "111" bit pattern

CATEGORY_SHIFT = 5
CHECKSUM_MASK = 0x1F
CHECKSUM_MODULUS = 32

HEADER_SIZE = 5             # info byte + 4 byte text length
TERMINATOR = b'\x00'

# Maximum job text length produced by the job file generator.

MAXIMUM_TEXT = 54378

# Request classes, see message.classify().

FETCH = 'FETCH'
FETCH_ALL = 'FETCH_ALL'
STOP = 'STOP'
ERROR = 'ERROR'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
