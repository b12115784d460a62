""" End-to-end checks of the server over loopback connections. The tests
    play the client by hand, one request byte at a time.
"""

import logging
import socket
import threading
import time

import pytest

import jobwire
from jobwire.protocol import fields
from jobwire.protocol.message import Category
from jobwire.transport import stream
from jobwire.transport import TransportPortError


def test_scenario(serve, connect):

    server = serve([(b'O', 'hi'), (b'E', 'bye')])
    conn, greeting = connect(server.port)
    assert greeting == bytes((fields.AVAILABLE,))

    stream.send_byte(conn, fields.ALL_JOBS_REQUEST)

    first = stream.recv_job(conn)
    assert first.category == Category.OUT
    assert first.text == b'hi'
    assert first.checksum == 17

    second = stream.recv_job(conn)
    assert second.category == Category.ERR
    assert second.text == b'bye'
    assert second.checksum == 0

    assert stream.recv_job(conn).is_end

    stream.send_byte(conn, fields.STOP_REQUEST)
    assert conn.recv(1) == b''


def test_fetch_ceiling(serve, connect):
    """ Asking for more jobs than remain yields what remains, then END. """

    server = serve([(b'O', 'a'), (b'O', 'b'), (b'E', 'c')])
    conn, greeting = connect(server.port)

    stream.send_byte(conn, 10)

    texts = list()
    while True:
        job = stream.recv_job(conn)
        if job.is_end:
            break
        texts.append(job.text)

    assert texts == [b'a', b'b', b'c']

    stream.send_byte(conn, fields.STOP_REQUEST)
    assert conn.recv(1) == b''


def test_fetch_exact(serve, connect):

    server = serve([(b'O', 'a'), (b'O', 'b'), (b'E', 'c')])
    conn, greeting = connect(server.port)

    stream.send_byte(conn, 2)
    assert stream.recv_job(conn).text == b'a'
    assert stream.recv_job(conn).text == b'b'

    stream.send_byte(conn, 1)
    assert stream.recv_job(conn).text == b'c'

    stream.send_byte(conn, 1)
    assert stream.recv_job(conn).is_end

    # The source stays exhausted.
    stream.send_byte(conn, 5)
    assert stream.recv_job(conn).is_end


def test_zero_request(serve, connect):
    """ A request for zero jobs sends nothing and leaves the session open. """

    server = serve([(b'O', 'a')])
    conn, greeting = connect(server.port)

    stream.send_byte(conn, 0)

    conn.settimeout(0.2)
    with pytest.raises(socket.timeout):
        conn.recv(1)
    conn.settimeout(5)

    stream.send_byte(conn, 1)
    assert stream.recv_job(conn).text == b'a'


def test_busy(serve, connect):
    """ A second client is turned away while the first is connected, no
        matter how long the first one has been idle.
    """

    server = serve([(b'O', 'a'), (b'O', 'b')])
    first, greeting = connect(server.port)
    assert greeting == bytes((fields.AVAILABLE,))

    for attempt in range(3):
        time.sleep(0.1)
        second, greeting = connect(server.port)
        assert greeting == bytes((fields.BUSY,))
        assert second.recv(1) == b''

    assert server.admission.rejected == 3

    # The first client is unaffected.
    stream.send_byte(first, 1)
    assert stream.recv_job(first).text == b'a'


def test_busy_during_transfer(serve, connect, settings):
    """ A second client is turned away promptly even while the first is in
        the middle of a long fetch-all.
    """

    settings.send_delay = 0.01
    total = 200

    server = serve([(b'O', 'job %d' % (i,)) for i in range(total)])
    first, greeting = connect(server.port)
    assert greeting == bytes((fields.AVAILABLE,))

    stream.send_byte(first, fields.ALL_JOBS_REQUEST)
    for i in range(5):
        assert stream.recv_job(first).text == b'job %d' % (i,)

    second, greeting = connect(server.port)
    assert greeting == bytes((fields.BUSY,))
    assert second.recv(1) == b''

    # Rejected between frames, long before the transfer could finish.
    assert server.session.sent < total
    assert server.session.state == jobwire.session.SERVING

    texts = [b'job %d' % (i,) for i in range(5)]
    while True:
        job = stream.recv_job(first)
        if job.is_end:
            break
        texts.append(job.text)

    assert texts == [b'job %d' % (i,) for i in range(total)]
    assert server.admission.rejected == 1


def test_next_client(serve, connect):
    """ After the active client stops, the slot is free again and the job
        file continues where it left off.
    """

    server = serve([(b'O', 'a'), (b'O', 'b')])

    first, greeting = connect(server.port)
    stream.send_byte(first, 1)
    assert stream.recv_job(first).text == b'a'
    stream.send_byte(first, fields.STOP_REQUEST)
    assert first.recv(1) == b''

    second, greeting = connect(server.port)
    assert greeting == bytes((fields.AVAILABLE,))
    stream.send_byte(second, 1)
    assert stream.recv_job(second).text == b'b'

    assert server.sessions == 2


def test_error_stop(serve, connect):

    server = serve([(b'O', 'a')])

    conn, greeting = connect(server.port)
    stream.send_byte(conn, 200)
    assert conn.recv(1) == b''

    conn, greeting = connect(server.port)
    assert greeting == bytes((fields.AVAILABLE,))


def test_client_vanishes(serve, connect):
    """ A client hanging up without a stop request ends only its session. """

    server = serve([(b'O', 'a')])

    conn, greeting = connect(server.port)
    conn.close()

    time.sleep(0.1)

    conn, greeting = connect(server.port)
    assert greeting == bytes((fields.AVAILABLE,))


def test_interrupt_during_session(serve, connect):

    server = serve([(b'O', 'a')])
    conn, greeting = connect(server.port)

    time.sleep(0.05)
    server.context.interrupt()

    assert stream.recv_job(conn).is_end
    assert conn.recv(1) == b''


def test_interrupt_during_transfer(serve, connect, settings, caplog, monkeypatch):
    """ An interrupt in the middle of a fetch-all cuts the transfer short
        with END, and is reported as an interrupted session.
    """

    monkeypatch.setattr(logging.getLogger('jobwire'), 'propagate', True)
    caplog.set_level(logging.INFO, logger='jobwire')

    settings.send_delay = 0.01
    total = 200

    server = serve([(b'O', 'job %d' % (i,)) for i in range(total)])
    conn, greeting = connect(server.port)

    stream.send_byte(conn, fields.ALL_JOBS_REQUEST)
    assert stream.recv_job(conn).text == b'job 0'

    server.context.interrupt()

    received = 1
    while stream.recv_job(conn).is_end == False:
        received += 1

    assert received < total
    assert conn.recv(1) == b''

    deadline = time.monotonic() + 5
    while 'Interrupted during a session, client notified.' not in caplog.messages:
        assert time.monotonic() < deadline
        time.sleep(0.01)

    assert 'Interrupted while waiting for a client.' not in caplog.messages


def test_interrupt_while_idle(job_file, settings):

    context = jobwire.Context(settings)
    server = jobwire.Server(job_file([(b'O', 'a')]), 0, context)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    time.sleep(0.05)
    context.interrupt()
    thread.join(2)

    assert thread.is_alive() == False
    assert server.sessions == 0
    server.close()


def test_setup_failures(job_file, settings, tmp_path):

    with pytest.raises(OSError):
        jobwire.Server(tmp_path / 'missing.job', 0, jobwire.Context(settings))

    path = job_file([(b'O', 'a')])
    occupied = stream.listen(0)
    port = occupied.getsockname()[1]

    # SO_REUSEADDR does not permit two listeners on the same port.
    try:
        with pytest.raises(TransportPortError):
            jobwire.Server(path, port, jobwire.Context(settings))
    finally:
        occupied.close()


def test_main_usage(capsys):

    assert jobwire.server.main([]) == 0
    assert 'usage' in capsys.readouterr().out


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
