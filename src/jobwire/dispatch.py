""" Client-side request handling. The :class:`RequestDispatcher` turns one
    user operation (fetch one, fetch several, fetch all, stop) into the
    request byte the server expects, then receives and routes the job
    frames that come back.
"""

from . import log
from .protocol import fields
from .protocol.message import ProtocolError
from .router import ChannelError
from .transport import TransportError
from .transport import stream

logger = log.get_logger(__name__)

CONTINUE = 'CONTINUE'
FINISHED = 'FINISHED'
FAILED = 'FAILED'


class RequestDispatcher:
    """ Drive the request/receive cycle over *conn*, handing received jobs
        to the :class:`jobwire.router.OutputRouter` *router*.

        Every operation returns one of :data:`CONTINUE`, :data:`FINISHED`,
        or :data:`FAILED`. Once an operation returns anything other than
        :data:`CONTINUE` the session is over: the server has been sent a
        stop request (best-effort for :data:`FAILED`) and both output
        channels have been stopped.
    """

    def __init__(self, conn, router, context):

        self.conn = conn
        self.router = router
        self.context = context
        self.status = CONTINUE
        self.received = 0


    def fetch_one(self):
        return self.fetch(fields.ONE_JOB_REQUEST)


    def fetch(self, count):
        """ Request *count* jobs, 0 to 126 inclusive, and receive up to that
            many. Fewer arrive if the server runs out of jobs first.
        """

        count = int(count)
        if count < 0 or count > fields.MAXIMUM_COUNT:
            raise ValueError('job count must be between 0 and %d: %d' % (fields.MAXIMUM_COUNT, count))

        return self._run(count, count)


    def fetch_all(self):
        """ Request every remaining job and receive until the server
            signals there are none left.
        """

        return self._run(fields.ALL_JOBS_REQUEST, None)


    def stop(self):
        """ Tell the server this client is done, and stop both channels. """

        if self.status != CONTINUE:
            return self.status

        logger.debug('Sending request (%d) to server.', fields.STOP_REQUEST)

        try:
            stream.send_byte(self.conn, fields.STOP_REQUEST)
        except TransportError as e:
            return self.abort('Failed to send request', e)

        self.router.stop()
        logger.info('Disconnecting from the server.')
        self.status = FINISHED
        return self.status


    def abort(self, what, error=None):
        """ Report a failure, tell the server (best-effort) that this client
            is abandoning the session, and stop both channels.
        """

        if error is None:
            logger.error('%s.', what)
        else:
            logger.error('%s: %s', what, error)

        try:
            stream.send_byte(self.conn, fields.ERROR_REQUEST)
        except TransportError as e:
            logger.debug('Could not send error request to server: %s', e)

        self.router.stop()
        self.status = FAILED
        return self.status


    def _run(self, request, limit):

        if self.status != CONTINUE:
            return self.status

        logger.debug('Sending request (%d) to server.', request)

        try:
            stream.send_byte(self.conn, request)
        except TransportError as e:
            return self.abort('Failed to send request', e)

        count = 0

        try:
            while limit is None or count < limit:
                status = self.receive()
                if status != CONTINUE:
                    return status
                count += 1

        except KeyboardInterrupt:
            self.context.interrupt()
            return self.stop()

        return CONTINUE


    def receive(self):
        """ Receive, validate, and route one job frame. The END sentinel
            stops both channels and is answered with a stop request.
        """

        try:
            msg = stream.recv_job(self.conn)
        except ProtocolError as e:
            return self.abort('Failed to process message', e)
        except TransportError as e:
            return self.abort('Failed to receive job', e)

        if msg.is_end:
            logger.debug('Received END, sending request (%d) to server and channels.', fields.STOP_REQUEST)
            self.router.stop()

            try:
                stream.send_byte(self.conn, fields.STOP_REQUEST)
            except TransportError as e:
                return self.abort('Failed to send request', e)

            logger.info('All jobs finished.')
            self.status = FINISHED
            return self.status

        try:
            self.router.deliver(msg)
        except ChannelError as e:
            return self.abort('Failed to route job', e)

        self.received += 1
        return CONTINUE

# end of class RequestDispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
