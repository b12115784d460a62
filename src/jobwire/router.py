""" Client-side output routing. Jobs received from the server are fanned out
    to two channels, one per category, each drained by its own consumer
    thread into its own sink: OUT jobs to the primary sink (stdout), ERR
    jobs to the secondary sink (stderr).

    Each channel is a pair of ZeroMQ PAIR sockets joined over ``inproc://``.
    The receiving thread owns the sending end of both channels, each
    consumer owns the receiving end of its own channel; sockets are never
    shared between threads. Delivery within a channel is first in, first
    out. Nothing orders one channel relative to the other.

    Every message on a channel is two frames: a one byte kind, and the job
    text. A stop on a channel is queued behind any jobs already sent on
    that channel.
"""

import itertools
import sys
import threading
import time

import zmq

from . import log
from .protocol import fields
from .protocol.message import Category

logger = log.get_logger(__name__)

JOB = bytes((fields.ONE_JOB_REQUEST,))
STOP = bytes((fields.STOP_REQUEST,))

zmq_context = zmq.Context.instance()
_sequence = itertools.count()


class ChannelError(Exception):
    """ A channel's consumer has terminated and can take no more jobs. """



class Channel:
    """ One ordered, one-directional delivery channel and its consumer.
        :attr:`succeeded` is None while the consumer runs, and a boolean
        once it has terminated.
    """

    def __init__(self, name, sink, context):

        self.name = name
        self.sink = sink
        self.context = context
        self.stopped = False
        self.succeeded = None
        self.printed = 0

        internal = 'inproc://jobwire.router:%d:%s' % (next(_sequence), name)
        self._rx = zmq_context.socket(zmq.PAIR)
        self._rx.setsockopt(zmq.LINGER, 0)
        self._rx.bind(internal)
        self._tx = zmq_context.socket(zmq.PAIR)
        self._tx.setsockopt(zmq.LINGER, 0)
        self._tx.connect(internal)

        # A PAIR socket whose peer has gone away blocks on send.
        timeout = context.settings.recv_timeout
        if timeout is not None:
            self._tx.setsockopt(zmq.SNDTIMEO, int(timeout * 1000))

        self.thread = threading.Thread(target=self.run, name='jobwire-' + name)
        self.thread.daemon = True


    def put(self, text):
        """ Queue one job's *text* (bytes) for printing. Raises
            :class:`ChannelError` if the consumer has already terminated.
        """

        if self.stopped == True:
            raise RuntimeError('channel %s is already stopped' % (self.name,))

        if self.succeeded is not None:
            raise ChannelError('%s printing thread has terminated' % (self.name,))

        try:
            self._tx.send_multipart((JOB, text))
        except zmq.Again:
            raise ChannelError('%s printing thread is not accepting jobs' % (self.name,))


    def stop(self):
        """ Queue the stop sentinel. Redundant calls are a no-op, as is a
            stop after the consumer has terminated on its own.
        """

        if self.stopped == True:
            return

        self.stopped = True

        if self.succeeded is not None:
            return

        try:
            self._tx.send_multipart((STOP, b''))
        except zmq.Again:
            logger.error('Could not stop %s printing thread.', self.name)


    def run(self):

        logger.debug('%s printing thread start.', self.name)
        delay = self.context.settings.settle_delay

        try:
            while True:
                kind, text = self._rx.recv_multipart()

                if kind == JOB:
                    self.sink.write(text.decode('utf-8', 'replace') + '\n')
                    self.sink.flush()
                    self.printed += 1

                    # Cosmetic only: lets the printed job settle before the
                    # menu prompt is redrawn.
                    if delay:
                        time.sleep(delay)

                elif kind == STOP:
                    logger.debug('%s printing thread received stop.', self.name)
                    self.succeeded = True
                    break

                else:
                    logger.error('Unknown %s channel request encountered (%r).', self.name, kind)
                    self.succeeded = False
                    break

        except (zmq.ZMQError, ValueError, OSError) as e:
            logger.error('%s printing thread failed: %s', self.name, e)
            self.succeeded = False

        finally:
            self._rx.close()


    def close(self):
        self._tx.close()

# end of class Channel



class OutputRouter:
    """ Route :class:`jobwire.protocol.JobMessage` instances to the OUT and
        ERR channels. *out* and *err* default to :data:`sys.stdout` and
        :data:`sys.stderr`. Call :func:`start` before delivering anything,
        and :func:`join` to wait for both consumers to finish; :func:`join`
        returns True only if both terminated successfully.
    """

    def __init__(self, context, out=None, err=None):

        if out is None:
            out = sys.stdout
        if err is None:
            err = sys.stderr

        self.context = context
        self.channels = dict()
        self.channels[Category.OUT] = Channel('stdout', out, context)
        self.channels[Category.ERR] = Channel('stderr', err, context)


    def start(self):
        for channel in self.channels.values():
            channel.thread.start()


    def deliver(self, msg):
        """ Queue *msg* on the channel for its category. Raises
            :class:`ChannelError` if that channel's consumer has terminated.
        """

        try:
            channel = self.channels[msg.category]
        except KeyError:
            raise ValueError('no channel for category ' + repr(msg.category))

        logger.debug('Sending message (%d bytes) to %s channel.', len(msg.text), channel.name)
        channel.put(msg.text)


    def stop(self):
        """ Queue a stop on both channels. """

        for channel in self.channels.values():
            channel.stop()


    @property
    def stopped(self):
        return all(channel.stopped for channel in self.channels.values())


    def join(self, timeout=None):

        for channel in self.channels.values():
            channel.thread.join(timeout)

        succeeded = True
        for channel in self.channels.values():
            if channel.thread.is_alive() or channel.succeeded != True:
                succeeded = False

        return succeeded


    def close(self):
        for channel in self.channels.values():
            channel.close()

# end of class OutputRouter


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
