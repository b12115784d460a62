""" Server-side admission control. The server has a single connection slot:
    the first client to connect while the slot is idle is told the server
    is available and becomes the active client; every other connection that
    arrives while the slot is taken is told the server is busy and closed
    immediately, without waiting for the active client to leave.
"""

from . import log
from .protocol import fields
from .transport import TransportError
from .transport import stream

logger = log.get_logger(__name__)

IDLE = 'Idle'
ACTIVE = 'Active'


class Admission:
    """ Maintain the connection slot for a non-blocking *listener* socket.
        :func:`poll` is cheap enough to call between every frame the active
        session sends, and never blocks.
    """

    def __init__(self, listener, context):

        self.listener = listener
        self.context = context
        self.active = None
        self.address = None
        self.rejected = 0


    @property
    def state(self):
        if self.active is None:
            return IDLE
        return ACTIVE


    def poll(self):
        """ Accept every connection currently waiting on the listener. If the
            slot is idle the first one is admitted and returned; all others
            are rejected. Returns None if no connection was admitted.
        """

        admitted = None
        timeout = self.context.settings.recv_timeout

        while True:
            try:
                accepted = stream.accept(self.listener, timeout)
            except TransportError as e:
                logger.error('Could not accept connection: %s', e)
                break

            if accepted is None:
                break

            conn, address = accepted
            logger.info('Client connected (address: %s).', address[0])

            if self.active is None:
                if self._admit(conn, address):
                    admitted = conn
            else:
                self._reject(conn, address)

        return admitted


    def _admit(self, conn, address):

        logger.debug("Notifying client of server's availability.")

        try:
            stream.send_byte(conn, fields.AVAILABLE)
        except TransportError as e:
            logger.error('Failed to send notification to client %s: %s', address[0], e)
            conn.close()
            return False

        self.active = conn
        self.address = address
        return True


    def _reject(self, conn, address):

        logger.debug('Notifying client that server is busy.')

        try:
            stream.send_byte(conn, fields.BUSY)
        except TransportError as e:
            logger.error('Failed to send busy notification to client %s: %s', address[0], e)
        finally:
            conn.close()

        self.rejected += 1


    def release(self):
        """ Close the active connection, if any, and return to idle. """

        conn = self.active
        self.active = None
        self.address = None

        if conn is not None:
            conn.close()

# end of class Admission


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
