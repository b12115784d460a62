""" The job client: connect to a job server, fetch jobs on request, and
    print OUT jobs to stdout and ERR jobs to stderr.

    Three threads cooperate. The main thread runs the menu and the
    :class:`jobwire.dispatch.RequestDispatcher`; the two consumer threads of
    the :class:`jobwire.router.OutputRouter` print. They share nothing but
    the router's channels and the interrupt flag of the
    :class:`jobwire.context.Context`.
"""

import argparse
import sys

from . import config
from . import dispatch
from . import log
from . import menu
from .context import Context
from .protocol import ProtocolError, fields
from .router import OutputRouter
from .transport import AddressResolutionError, TransportError
from .transport import stream

logger = log.get_logger(__name__)


class ServerBusy(Exception):
    """ The server is serving another client and turned this one away. """



class Client:
    """ A connection to the job server at *host*:*port*. The constructor
        connects and reads the server's greeting; it raises
        :class:`ServerBusy` if the server is occupied, a
        :class:`jobwire.transport.TransportError` if the connection fails,
        and a :class:`jobwire.protocol.ProtocolError` if the greeting is
        neither of the two the server may send.

        *stdin* feeds the menu, *stdout* receives the menu and the OUT jobs,
        *stderr* receives the ERR jobs. All default to the process streams.
    """

    def __init__(self, host, port, context=None, stdin=None, stdout=None, stderr=None):

        if context is None:
            context = Context()

        self.context = context
        self.host = host
        self.port = port
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

        logger.debug('Attempting to connect to address %s, port %s.', host, port)
        self.conn = stream.connect(host, port, context.settings.recv_timeout)

        logger.debug("Confirming server's availability.")

        try:
            available = stream.recv_byte(self.conn)
        except TransportError:
            self.conn.close()
            raise

        if available == fields.BUSY:
            self.conn.close()
            raise ServerBusy('server at %s:%s is busy' % (host, port))

        if available != fields.AVAILABLE:
            self.conn.close()
            raise ProtocolError('unexpected greeting from server: %d' % (available,))

        logger.info('Server is ready to accept connections.')


    def run(self):
        """ Run the menu until the session ends. Returns the process exit
            status: 0 if the session ended normally and both output
            consumers stopped cleanly, 1 otherwise.
        """

        router = OutputRouter(self.context, self.stdout, self.stderr)
        router.start()

        dispatcher = dispatch.RequestDispatcher(self.conn, router, self.context)
        status = dispatch.CONTINUE

        try:
            while status == dispatch.CONTINUE:
                try:
                    status = self.step(dispatcher)
                except KeyboardInterrupt:
                    self.context.interrupt()
                    status = dispatcher.stop()
        finally:
            if router.stopped == False:
                router.stop()

            succeeded = router.join()
            router.close()
            self.conn.close()

        if status == dispatch.FAILED or succeeded == False:
            logger.warning('Terminating due to an error.')
            return 1

        logger.info('Terminating process.')
        return 0


    def step(self, dispatcher):
        """ Prompt for one operation and carry it out. """

        # Give the output threads a moment before the menu is redrawn.
        self.context.wait(self.context.settings.menu_delay)

        option = menu.choose(self.context, self.stdin, self.stdout)

        if option == menu.FETCH_ONE:
            return dispatcher.fetch_one()

        if option == menu.FETCH_SEVERAL:
            jobs = menu.count(self.context, self.stdin, self.stdout)
            if jobs is None:
                return dispatcher.stop()
            return dispatcher.fetch(jobs)

        if option == menu.FETCH_ALL:
            return dispatcher.fetch_all()

        return dispatcher.stop()

# end of class Client



def build_parser():
    p = argparse.ArgumentParser(
        prog="jobwire-client",
        description="Fetch jobs from a jobwire server",
        epilog="The server address is a domain name or IPv4 address; the first address found is used.",
    )
    p.add_argument("host", nargs="?", help="Server address")
    p.add_argument("port", nargs="?", type=int, help="Server port")
    p.add_argument("-debug", "--debug", action="store_true", dest="debug", help="Enable debug output")
    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.host is None or args.port is None:
        parser.print_usage()
        return 0

    settings = config.Settings(debug=args.debug)
    log.configure(settings)
    context = Context(settings)

    logger.debug('Client process start.')

    try:
        client = Client(args.host, args.port, context)
    except ServerBusy:
        logger.info('Server is busy.')
        return 0
    except AddressResolutionError as e:
        logger.error('Failed to resolve server address: %s', e)
        return 1
    except TransportError as e:
        logger.error('Failed to connect to server: %s', e)
        return 1
    except ProtocolError as e:
        logger.error('Server is not a job server: %s', e)
        return 1

    logger.debug('Connected to address %s, port %s.', args.host, args.port)
    return client.run()


if __name__ == "__main__":
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
