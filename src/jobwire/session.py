""" Server-side handling of the active client connection. A
    :class:`SessionLoop` owns the connection for as long as the client is
    admitted; it reads one request byte at a time and answers with job
    frames drawn from the server's :class:`jobwire.source.JobSource`.
"""

import time

from . import log
from .protocol import fields
from .protocol.message import JobMessage, classify
from .transport import TransportError
from .transport import stream

logger = log.get_logger(__name__)

AWAIT_REQUEST = 'AwaitRequest'
SERVING = 'Serving'
CLOSED = 'Closed'


class SessionLoop:
    """ The per-connection state machine. The server calls :func:`step`
        whenever the connection is readable, and :func:`interrupt` if an
        interrupt arrives while the session is open. Between frames the
        session calls :func:`jobwire.admission.Admission.poll` so that other
        clients are turned away promptly even during a long transfer.

        Transport and protocol errors propagate out of :func:`step`; the
        caller is expected to log them and :func:`close` the session.
    """

    def __init__(self, conn, source, admission, context):

        self.conn = conn
        self.source = source
        self.admission = admission
        self.context = context
        self.state = AWAIT_REQUEST
        self.sent = 0


    @property
    def closed(self):
        return self.state == CLOSED


    def step(self):
        """ Read and act upon one request byte. Only call this when the
            connection is known to be readable.
        """

        if self.state == CLOSED:
            return

        request = stream.recv_byte(self.conn)
        logger.debug('Received request (%d) from client.', request)
        self.handle(request)


    def handle(self, request):

        kind = classify(request)

        if kind == fields.FETCH:
            if request == 0:
                logger.debug('Request for zero jobs, nothing to send.')
            self.serve(request)

        elif kind == fields.FETCH_ALL:
            self.serve(None)

        elif kind == fields.STOP:
            logger.info('Client disconnected.')
            self.close()

        else:
            logger.warning('Client disconnected with an error (request %d).', request)
            self.close()


    def serve(self, limit):
        """ Send up to *limit* jobs, or all remaining jobs if *limit* is None.
            Sending stops after the END sentinel has been sent; the count is
            a ceiling, not a guarantee.
        """

        self.state = SERVING
        count = 0
        delay = self.context.settings.send_delay

        while limit is None or count < limit:
            if self.context.interrupted:
                self.interrupt()
                return

            job = self.source.next()
            size = stream.send_job(self.conn, job)
            logger.debug('Sent message (%d bytes) to client.', size)

            if delay:
                time.sleep(delay)

            self.admission.poll()

            if job.is_end:
                break

            count += 1
            self.sent += 1

        self.state = AWAIT_REQUEST


    def interrupt(self):
        """ Tell the client there are no more jobs, then close. """

        if self.state == CLOSED:
            return

        try:
            stream.send_job(self.conn, JobMessage.end())
        except TransportError as e:
            logger.error('Failed to notify client of shutdown: %s', e)

        self.close()


    def close(self):

        if self.state == CLOSED:
            return

        self.state = CLOSED
        self.admission.release()

# end of class SessionLoop


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
