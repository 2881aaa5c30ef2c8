""" The short-lived half of the exchange: create a private reply channel,
    send one request naming it to the server, wait for the one reply, and
    tear the reply channel down again.
"""

import logging
import os
import time

from . import config
from . import transport
from .protocol import fields
from .protocol.message import FramingError, PayloadTooLarge, Request, Response

logger = logging.getLogger(__name__)


class Client:
    """ Perform request/response exchanges with the server listening on the
        well-known channel *server*. Each exchange uses a reply channel named
        ``<prefix>-<identity>``; the *identity* defaults to the process id,
        which keeps concurrently running client processes apart.

        The *timeout* is the number of seconds to wait for a reply; the
        default of None waits indefinitely, which is also what happens when
        the server cannot reach the reply channel.
    """

    def __init__(self, server=None, backend=None, prefix=fields.CLIENT_QNAME_PREFIX,
                 identity=None, timeout=None):

        if len(prefix) >= fields.QNAME_MAX_SIZE - 5:
            raise ValueError("channel prefix %s leaves no room for the identity suffix" % (repr(prefix)))

        if server is None:
            server = config.server_channel()

        if identity is None:
            identity = os.getpid()

        if timeout is None:
            timeout = config.reply_timeout()

        self.server = server
        self.backend = transport.backend(backend)
        self.prefix = prefix
        self.identity = identity
        self.timeout = timeout


    @property
    def channel_name(self):
        return '%s-%s' % (self.prefix, self.identity)


    def send(self, payload):
        """ Send *payload* to the server and return its :class:`Response`.
            A str payload is encoded with :func:`os.fsencode`, so command
            line arguments reach the server as the bytes that were typed,
            whatever their encoding. Anything longer than
            :data:`fields.MSG_MAX_SIZE` bytes raises :class:`PayloadTooLarge`
            before any channel is touched.

            :class:`msgq.transport.ChannelNotFound` is raised if the server
            is not running. The reply channel is always destroyed before
            this method returns or raises.
        """

        try:
            encoded = os.fsencode(payload)
        except TypeError:
            encoded = bytes(payload)

        if len(encoded) > fields.MSG_MAX_SIZE:
            raise PayloadTooLarge("message size limit exceeded: %d bytes, maximum is %d" % (len(encoded), fields.MSG_MAX_SIZE))

        name = self.channel_name
        request = Request(name, os.getpid(), encoded)

        # Connect to the server before creating the reply channel; if the
        # server isn't running there is nothing to clean up.

        server = self.backend.open_writer(self.server, Request.size)

        try:
            mine = self.backend.create(name, fields.MSG_MAX_COUNT, Response.size)

            try:
                server.send(request.encapsulate())
                logger.debug("sent %s to %s", repr(request), self.server)
                response = self._receive(mine)
            finally:
                mine.close()
                self.backend.destroy(name)
        finally:
            server.close()

        return response


    def _receive(self, channel):
        """ Wait for exactly one correctly sized reply on *channel*. Messages
            of the wrong size are logged and skipped.
        """

        if self.timeout is None:
            deadline = None
        else:
            deadline = time.monotonic() + self.timeout

        while True:
            if deadline is None:
                remaining = None
            else:
                remaining = max(0.0, deadline - time.monotonic())

            data = channel.receive(remaining)

            try:
                return Response.unpack(data)
            except FramingError as error:
                logger.warning("discarding message on %s: %s", channel.name, error)


# end of class Client



def send(payload, **kwargs):
    """ Convenience wrapper: perform one exchange with a new :class:`Client`
        built from *kwargs*, and return the :class:`Response`.
    """

    client = Client(**kwargs)
    return client.send(payload)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
