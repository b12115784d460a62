""" Sequential reader for job files. A job file is a series of records, each
    of which is:

        +--------+-------------------+----------------------+
        |  type  |  text length      |  text                |
        +--------+-------------------+----------------------+
        | 'O'/'E'| 4 bytes, byte i   |  text length bytes   |
        |        | is worth 256**i   |                      |
        +--------+-------------------+----------------------+

    The files are produced by a separate job generator; this module only
    consumes them.
"""

from . import log
from .protocol import fields
from .protocol.message import Category, JobMessage

logger = log.get_logger(__name__)

_types = {b'O': Category.OUT, b'E': Category.ERR}


class JobSource:
    """ Produce one :class:`jobwire.protocol.JobMessage` per call to
        :func:`next`, in file order. The end of the file, an unknown record
        type, an oversized record, a truncated record, or a record whose
        text contains a NUL byte all produce the END sentinel; once END has
        been produced the source is exhausted and every later call returns
        END again. The cursor only moves forward and is never reset.

        *source* is either a path or a binary file object. A file object
        passed in is not closed by :func:`close`.
    """

    def __init__(self, source):

        if hasattr(source, 'read'):
            self.file = source
            self.owned = False
            self.name = getattr(source, 'name', repr(source))
        else:
            self.file = open(source, 'rb')
            self.owned = True
            self.name = str(source)

        self.exhausted = False
        self.produced = 0


    def __enter__(self):
        return self


    def __exit__(self, *exc_info):
        self.close()


    def close(self):
        if self.owned == True and self.file is not None:
            self.file.close()
        self.exhausted = True


    def _exhaust(self, reason):
        if reason is not None:
            logger.warning('Invalid job encountered in %s: %s', self.name, reason)
        else:
            logger.debug('End of jobs reached in %s.', self.name)

        self.exhausted = True
        return JobMessage.end()


    def next(self):
        """ Return the next job, or the END sentinel. """

        if self.exhausted == True:
            return JobMessage.end()

        logger.debug('Reading from %s.', self.name)

        type_byte = self.file.read(1)
        if type_byte == b'':
            return self._exhaust(None)

        raw_length = self.file.read(4)
        if len(raw_length) != 4:
            return self._exhaust(None)

        length = 0
        for i in range(4):
            length += raw_length[i] << (8 * i)

        try:
            category = _types[type_byte]
        except KeyError:
            return self._exhaust('unknown type %r (length %d)' % (type_byte, length))

        if length > fields.MAXIMUM_TEXT:
            return self._exhaust('length %d exceeds %d' % (length, fields.MAXIMUM_TEXT))

        text = self.file.read(length)

        if len(text) != length:
            return self._exhaust('truncated text, expected %d bytes, got %d' % (length, len(text)))

        if fields.TERMINATOR in text:
            return self._exhaust('text contains a NUL byte')

        self.produced += 1
        return JobMessage(category, text)


    def __iter__(self):
        """ Iterate over the remaining jobs, stopping before END. """

        while True:
            job = self.next()
            if job.is_end:
                break
            yield job

# end of class JobSource


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
