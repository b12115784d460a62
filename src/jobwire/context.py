""" The :class:`Context` carries the per-process state every component needs:
    the :class:`jobwire.config.Settings`, whether debug output is enabled,
    and whether an interrupt has been requested. It is passed explicitly to
    each component rather than being kept in module globals.
"""

import signal
import threading

from . import config
from . import log

logger = log.get_logger(__name__)


class Context:
    """ Shared state for one server or client process. The interrupt flag
        is a :class:`threading.Event`; it is set from a signal handler or
        from a :class:`KeyboardInterrupt` caught at a suspension point, and
        observed by the loops that would otherwise block.
    """

    def __init__(self, settings=None):

        if settings is None:
            settings = config.Settings()

        self.settings = settings
        self._interrupt = threading.Event()


    @property
    def debug(self):
        return self.settings.debug


    @property
    def interrupted(self):
        return self._interrupt.is_set()


    def interrupt(self):
        if self._interrupt.is_set() == False:
            logger.info('Received interrupt signal.')
        self._interrupt.set()


    def wait(self, timeout):
        """ Sleep for up to *timeout* seconds, returning early (and True) if
            an interrupt arrives in the meantime.
        """

        return self._interrupt.wait(timeout)


    def install(self, signum=signal.SIGINT):
        """ Route *signum* to :func:`interrupt` instead of the default
            handler. Only valid from the main thread. Returns the previous
            handler so that it can be restored.
        """

        def handler(signum, frame):
            self.interrupt()

        return signal.signal(signum, handler)

# end of class Context


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
