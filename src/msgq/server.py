""" The long-running half of the exchange. A single :class:`Server` owns the
    well-known channel, and answers every request in the order received.
"""

import logging

from . import config
from . import transport
from .protocol import fields
from .protocol.message import FramingError, Request, Response

logger = logging.getLogger(__name__)


class Server:
    """ Receive :class:`Request` records on the well-known channel *name*
        and answer each one on the reply channel it names. The *backend*
        is a transport backend name or module, as accepted by
        :func:`msgq.transport.backend`; *capacity* is the number of
        requests the well-known channel can hold.

        Requests are handled strictly one at a time. The :attr:`sequence`
        is the id that will be assigned to the next request answered; it
        starts at 1 and advances only when a reply channel was successfully
        opened, so the ids received by clients form a contiguous run.

        :ivar reply_format: Format string for the reply payload, applied to
            the sequence id.
    """

    reply_format = 'Your message id = %d'

    def __init__(self, name=None, backend=None, capacity=fields.MSG_MAX_COUNT):

        if name is None:
            name = config.server_channel()

        self.name = name
        self.backend = transport.backend(backend)
        self.capacity = capacity
        self.channel = None
        self.sequence = 1


    def open(self):
        """ Create the well-known channel. A channel left behind by an earlier
            run is removed first. Any failure here is fatal, and propagates
            to the caller.
        """

        if self.backend.destroy(self.name):
            logger.info("removed stale channel %s", self.name)

        self.channel = self.backend.create(self.name, self.capacity, Request.size)
        logger.info("listening on %s", self.name)


    def close(self, destroy=False):
        """ Release the well-known channel handle. The channel name is only
            removed from the namespace if *destroy* is True.
        """

        channel = self.channel
        self.channel = None

        if channel is not None:
            channel.close()

        if destroy:
            self.backend.destroy(self.name)


    def receive(self, timeout=None):
        """ Block until a correctly framed :class:`Request` arrives, and return
            it. Messages of the wrong size are logged and discarded. A
            *timeout*, if given, applies to each underlying receive.
        """

        while True:
            data = self.channel.receive(timeout)

            try:
                return Request.unpack(data)
            except FramingError as error:
                logger.warning("discarding message on %s: %s", self.name, error)


    def handle(self, request):
        """ Answer one *request*. Returns the sequence id assigned to it, or
            None if the client's reply channel could not be opened; in that
            case nothing is sent and the sequence does not advance.
        """

        try:
            reply = self.backend.open_writer(request.channel_name, Response.size)
        except (transport.TransportError, ValueError) as error:
            logger.error("cannot reply to %s (sender %d, message %s): %s",
                         repr(request.channel_name), request.sender_id,
                         repr(request.text), error)
            return None

        sequence = self.sequence
        self.sequence += 1

        logger.info("%d. Received '%s' from %d", sequence, request.text, request.sender_id)

        response = Response(self.reply_format % (sequence))

        try:
            reply.send(response.encapsulate())
        except transport.TransportError as error:
            logger.error("reply %d to %s failed: %s", sequence, request.channel_name, error)
        finally:
            reply.close()

        return sequence


    def serve_one(self, timeout=None):
        """ Receive and answer a single request.
        """

        request = self.receive(timeout)
        return self.handle(request)


    def run(self):
        """ Serve requests forever. The well-known channel is created first if
            :func:`open` has not already been called.
        """

        if self.channel is None:
            self.open()

        while True:
            self.serve_one()


# end of class Server


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
