""" The job server: serve jobs from one job file to one client at a time.

    Admission of new connections and service of the active client share a
    single control flow. A :class:`zmq.Poller` watches the listening socket
    and the active connection together; a connection attempt is answered on
    the next loop iteration whether or not the active client is doing
    anything, and the poll interval bounds how long an interrupt goes
    unnoticed.
"""

import argparse
import sys

import zmq

from . import config
from . import log
from .admission import Admission
from .context import Context
from .protocol import ProtocolError
from .session import SessionLoop
from .source import JobSource
from .transport import TransportError, TransportPortError
from .transport import stream

logger = log.get_logger(__name__)


class Server:
    """ Serve jobs from the job file at *path* on TCP *port*. A *port* of
        zero binds an ephemeral port; the bound port is available as
        :attr:`port` afterwards.

        Construction performs all of the process-wide setup: an unreadable
        job file raises :class:`OSError`, and a socket that cannot be bound
        raises :class:`jobwire.transport.TransportPortError`. Both are fatal.
    """

    def __init__(self, path, port, context=None):

        if context is None:
            context = Context()

        self.context = context
        self.path = path

        logger.debug('Checking source file "%s".', path)
        self.source = JobSource(path)

        logger.debug('Creating socket for incoming connections.')
        try:
            self.listener = stream.listen(port)
        except TransportPortError:
            self.source.close()
            raise

        self.port = self.listener.getsockname()[1]
        self.admission = Admission(self.listener, context)
        self.session = None
        self.sessions = 0


    def run(self):
        """ Accept and serve clients until interrupted. One client is served
            at a time; when its session ends the server goes back to waiting
            for the next one, continuing from the same place in the job file.
        """

        interval = int(self.context.settings.poll_interval * 1000)

        # pyzmq reports plain sockets by file descriptor, not by object.
        listening = self.listener.fileno()
        connected = None

        poller = zmq.Poller()
        poller.register(self.listener, zmq.POLLIN)

        logger.info('Listening on port %d.', self.port)

        while True:
            if self.context.interrupted:
                if self.session is None:
                    logger.info('Interrupted while waiting for a client.')
                else:
                    logger.info('Interrupted during a session, notifying client.')
                    self.session.interrupt()
                    self._finish(poller)
                break

            events = dict(poller.poll(interval))

            # Session before admission: a stop and a new connection in the
            # same poll must free the slot before the newcomer is answered.

            session = self.session
            if session is not None and connected in events:
                try:
                    session.step()
                except (TransportError, ProtocolError) as e:
                    logger.error('Session terminated: %s', e)
                    session.close()

                if session.closed:
                    self._finish(poller)
                    connected = None

                    if self.context.interrupted:
                        logger.info('Interrupted during a session, client notified.')
                        break

            if listening in events:
                conn = self.admission.poll()
                if conn is not None:
                    self.session = SessionLoop(conn, self.source, self.admission, self.context)
                    self.sessions += 1
                    connected = conn.fileno()
                    poller.register(conn, zmq.POLLIN)


    def _finish(self, poller):

        session = self.session
        self.session = None

        if session is None:
            return

        poller.unregister(session.conn)
        session.close()
        logger.debug('Session complete, %d jobs sent.', session.sent)


    def close(self):

        if self.session is not None:
            self.session.close()
            self.session = None

        self.admission.release()
        self.listener.close()
        self.source.close()

# end of class Server



def build_parser():
    p = argparse.ArgumentParser(prog="jobwire-server", description="Serve jobs from a job file to one client at a time")
    p.add_argument("file", nargs="?", help="Job file to read jobs from")
    p.add_argument("port", nargs="?", type=int, help="TCP port to listen on")
    p.add_argument("-debug", "--debug", action="store_true", dest="debug", help="Enable debug output")
    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.file is None or args.port is None:
        parser.print_usage()
        return 0

    settings = config.Settings(debug=args.debug)
    log.configure(settings)

    context = Context(settings)
    context.install()

    logger.debug('Server process start.')

    try:
        server = Server(args.file, args.port, context)
    except OSError as e:
        logger.error('Failed to open job file: %s', e)
        return 1
    except TransportPortError as e:
        logger.error('%s', e)
        return 1

    try:
        server.run()
    finally:
        server.close()

    logger.info('Exiting program.')
    return 0


if __name__ == "__main__":
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
