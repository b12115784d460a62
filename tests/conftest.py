import socket
import threading

import pytest

import jobwire


def encode_record(kind, text):
    """ Build one job file record: type byte, four length bytes with byte i
        worth 256**i, then the text.
    """

    if isinstance(text, str):
        text = text.encode()

    length = len(text)
    raw_length = bytes((length >> (8 * i)) & 0xFF for i in range(4))
    return kind + raw_length + text


@pytest.fixture
def job_file(tmp_path):
    """ Factory fixture: write the (type, text) *records* to a job file and
        return its path. Raw bytes can be appended with *trailer*.
    """

    def make(records, trailer=b'', name='test.job'):
        path = tmp_path / name
        with open(path, 'wb') as f:
            for kind, text in records:
                f.write(encode_record(kind, text))
            f.write(trailer)
        return path

    return make


@pytest.fixture
def settings():
    return jobwire.config.Settings(
        poll_interval=0.02,
        recv_timeout=5.0,
        settle_delay=0.0,
        send_delay=0.0,
        menu_delay=0.0,
    )


@pytest.fixture
def context(settings):
    return jobwire.Context(settings)


@pytest.fixture
def serve(job_file, settings):
    """ Factory fixture: start a :class:`jobwire.Server` for the given
        records on an ephemeral port, in a background thread. The server is
        interrupted and closed at teardown.
    """

    started = list()

    def start(records, trailer=b''):
        path = job_file(records, trailer)
        context = jobwire.Context(settings)
        server = jobwire.Server(path, 0, context)
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        started.append((server, thread))
        return server

    yield start

    for server, thread in started:
        server.context.interrupt()
        thread.join(5)
        server.close()


@pytest.fixture
def connect():
    """ Factory fixture: open a raw connection to a server on localhost and
        return it along with the greeting byte.
    """

    opened = list()

    def open_connection(port):
        conn = socket.create_connection(('127.0.0.1', port), timeout=5)
        opened.append(conn)
        greeting = conn.recv(1)
        return conn, greeting

    yield open_connection

    for conn in opened:
        conn.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
