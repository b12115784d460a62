""" A class representation of a job message, the unit exchanged on the wire
    between server and client, and between the client's internal stages.
"""

import enum

from . import fields


class ProtocolError(Exception):
    """ A frame, request, or channel value arrived that the recipient cannot
        act upon. Fatal to the session that received it.
    """


class ChecksumError(ProtocolError):
    """ The checksum embedded in a frame does not match its text. The framing
        of the stream cannot be trusted past this point.
    """


class Category(enum.IntEnum):
    """ The output stream a job belongs to, or the end-of-jobs sentinel.
        The integer value is the three bit code used on the wire.
    """

    OUT = fields.OUT
    ERR = fields.ERR
    END = fields.END


def compute_checksum(text):
    """ Return the sum of the byte values of *text* modulo 32. Empty text
        has a checksum of zero.
    """

    return sum(bytes(text)) % fields.CHECKSUM_MODULUS



class JobMessage:
    """ One job, or the :data:`Category.END` sentinel. The *text* is stored
        as bytes; an END message never carries text. The *checksum* is
        computed from the text unless an explicit value is provided, which
        is what the decoder does with the value found on the wire.
    """

    __slots__ = ('category', 'text', 'checksum')

    def __init__(self, category, text=b'', checksum=None):

        category = Category(category)

        if text is None:
            text = b''
        elif isinstance(text, str):
            text = text.encode()
        else:
            text = bytes(text)

        if category == Category.END:
            if text:
                raise ValueError('END messages do not carry text')
            checksum = 0
        elif checksum is None:
            checksum = compute_checksum(text)

        self.category = category
        self.text = text
        self.checksum = checksum


    @classmethod
    def end(cls):
        return cls(Category.END)


    @property
    def is_end(self):
        return self.category == Category.END


    def validate(self):
        """ Raise :class:`ChecksumError` if the stored checksum does not
            match the text.
        """

        if self.is_end or len(self.text) == 0:
            return

        expected = compute_checksum(self.text)
        if expected != self.checksum:
            raise ChecksumError('checksum mismatch: expected %d, received %d' % (expected, self.checksum))


    def __eq__(self, other):
        try:
            return (self.category, self.text) == (other.category, other.text)
        except AttributeError:
            return NotImplemented


    def __repr__(self):
        return 'JobMessage(%s, %r, checksum=%d)' % (self.category.name, self.text, self.checksum)

# end of class JobMessage



def classify(request):
    """ Return the request class for the integer *request* byte: one of
        :data:`fields.FETCH`, :data:`fields.FETCH_ALL`, :data:`fields.STOP`,
        or :data:`fields.ERROR`. A zero request is a fetch of zero jobs.
    """

    if request < 0 or request > 255:
        raise ProtocolError('request byte out of range: ' + repr(request))

    if request <= fields.MAXIMUM_COUNT:
        return fields.FETCH
    if request == fields.ALL_JOBS_REQUEST:
        return fields.FETCH_ALL
    if request == fields.STOP_REQUEST:
        return fields.STOP

    return fields.ERROR


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
