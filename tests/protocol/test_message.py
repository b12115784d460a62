import pytest

from jobwire.protocol import classify, fields
from jobwire.protocol.message import Category, ChecksumError, JobMessage, ProtocolError, compute_checksum


def test_classify():

    assert classify(0) == fields.FETCH
    assert classify(1) == fields.FETCH
    assert classify(126) == fields.FETCH
    assert classify(127) == fields.FETCH_ALL
    assert classify(128) == fields.STOP

    for request in (129, 200, 255):
        assert classify(request) == fields.ERROR

    with pytest.raises(ProtocolError):
        classify(256)

    with pytest.raises(ProtocolError):
        classify(-1)


def test_message():

    msg = JobMessage(Category.OUT, 'hi')
    assert msg.text == b'hi'
    assert msg.checksum == 17
    assert msg.is_end == False
    msg.validate()

    msg = JobMessage(Category.ERR, b'bye', checksum=3)
    with pytest.raises(ChecksumError):
        msg.validate()

    end = JobMessage.end()
    assert end.is_end
    assert end.text == b''
    assert end.checksum == 0
    end.validate()

    assert JobMessage(Category.OUT, b'x') != JobMessage(Category.ERR, b'x')
    assert JobMessage(Category.OUT, b'x') == JobMessage(Category.OUT, b'x', checksum=0)


def test_compute_checksum():

    assert compute_checksum(b'') == 0
    assert compute_checksum(b'hi') == 17
    # 98 + 121 + 101 = 320, a multiple of 32.
    assert compute_checksum(b'bye') == 0
    assert compute_checksum(b'\xff' * 33) == (255 * 33) % 32


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
