""" Fixed-size records exchanged between a client and the server. Every
    record on the wire is exactly the size of its :mod:`struct` layout; the
    bounded string fields are NUL-padded, with one byte beyond the maximum
    length reserved so that a well-formed record always carries a terminator.
"""

import os
import re
import struct

from .fields import MSG_MAX_SIZE, QNAME_MAX_SIZE


class FramingError(ValueError):
    """ A received message does not have the size of the expected record.
    """
    pass


class PayloadTooLarge(ValueError):
    """ A payload exceeds :data:`MSG_MAX_SIZE` bytes.
    """
    pass



def bounded(value, limit):
    """ Return *value* as bytes no longer than *limit*. Strings are encoded
        the way the operating system encodes command line arguments, so a
        str decoded from arbitrary bytes encodes back to the same bytes;
        anything longer than *limit* is truncated.
    """

    if value is None:
        value = b''

    try:
        value = os.fsencode(value)
    except TypeError:
        value = bytes(value)

    return value[:limit]



def terminate(field, limit):
    """ Interpret a raw fixed-width *field* as a C string: stop at the first
        NUL byte, and never look further than *limit* bytes regardless of
        whether a NUL byte is present.
    """

    field = field[:limit]
    field = field.split(b'\0', 1)[0]
    return field



class Request:
    """ A :class:`Request` is sent by a client to the well-known channel.
        The *channel_name* identifies the reply channel the client created
        for this exchange; *sender_id* is an informational process id; the
        *payload* is the user-supplied content, truncated to
        :data:`MSG_MAX_SIZE` bytes.

        A channel name longer than :data:`QNAME_MAX_SIZE` bytes is rejected
        outright, since a truncated name would address the wrong channel.
    """

    format = '=%dsq%ds' % (QNAME_MAX_SIZE + 1, MSG_MAX_SIZE + 1)
    size = struct.calcsize(format)

    def __init__(self, channel_name, sender_id, payload):

        name = bounded(channel_name, QNAME_MAX_SIZE + 1)

        if len(name) > QNAME_MAX_SIZE:
            raise ValueError("channel name exceeds %d bytes: %s" % (QNAME_MAX_SIZE, repr(channel_name)))

        self.channel_name = os.fsdecode(name)
        self.sender_id = int(sender_id)
        self.payload = bounded(payload, MSG_MAX_SIZE)


    def __repr__(self):
        return "Request(%s, %d, %s)" % (repr(self.channel_name), self.sender_id, repr(self.payload))


    @property
    def text(self):
        return self.payload.decode('utf-8', errors='replace')


    def encapsulate(self):
        """ Return the wire representation of this request.
        """

        name = os.fsencode(self.channel_name)
        return struct.pack(self.format, name, self.sender_id, self.payload)


    @classmethod
    def unpack(cls, data):
        """ Build a :class:`Request` from a received message. Raises
            :class:`FramingError` if *data* is not exactly :attr:`size`
            bytes long.
        """

        if len(data) != cls.size:
            raise FramingError("expected a %d byte request, got %d bytes" % (cls.size, len(data)))

        name, sender_id, payload = struct.unpack(cls.format, data)

        name = terminate(name, QNAME_MAX_SIZE)
        name = os.fsdecode(name)
        payload = terminate(payload, MSG_MAX_SIZE)

        return cls(name, sender_id, payload)


# end of class Request



class Response:
    """ A :class:`Response` is the server's answer, delivered to the reply
        channel named in the originating :class:`Request`.
    """

    format = '=%ds' % (MSG_MAX_SIZE + 1)
    size = struct.calcsize(format)

    sequence_pattern = re.compile(r'(\d+)\s*$')

    def __init__(self, payload):
        self.payload = bounded(payload, MSG_MAX_SIZE)


    def __repr__(self):
        return "Response(%s)" % (repr(self.payload))


    @property
    def text(self):
        return self.payload.decode('utf-8', errors='replace')


    def sequence(self):
        """ Return the sequence id embedded at the end of the payload, or
            None if there isn't one.
        """

        match = self.sequence_pattern.search(self.text)

        if match is None:
            return None

        return int(match.group(1))


    def encapsulate(self):
        return struct.pack(self.format, self.payload)


    @classmethod
    def unpack(cls, data):

        if len(data) != cls.size:
            raise FramingError("expected a %d byte response, got %d bytes" % (cls.size, len(data)))

        payload, = struct.unpack(cls.format, data)
        payload = terminate(payload, MSG_MAX_SIZE)

        return cls(payload)


# end of class Response


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
