""" Drive an in-process :class:`msgq.Server` one request at a time. Where a
    test needs a reply channel it either uses a real :class:`msgq.Client` on
    the main thread, with the server on a background thread, or creates the
    reply channel by hand so the whole exchange stays on one thread.
"""

import logging
import os
import struct
import threading

import msgq
from msgq.protocol.fields import MSG_MAX_COUNT
from msgq.protocol.message import Request, Response


def serve(server, count):
    """ Answer *count* requests on a background thread. Returns the thread
        and the list the assigned sequence ids are appended to.
    """

    assigned = list()

    def run():
        for ignored in range(count):
            assigned.append(server.serve_one(timeout=10))

    thread = threading.Thread(target=run)
    thread.daemon = True
    thread.start()

    return thread, assigned


def reply_channel(backend, suffix):
    name = '/msgq-reply-%d-%s' % (os.getpid(), suffix)
    backend.destroy(name)
    return backend.create(name, MSG_MAX_COUNT, Response.size)


def test_sequence(server, backend):

    thread, assigned = serve(server, 2)

    identity = '%d-a' % (os.getpid())
    first = msgq.Client(server.name, backend, identity=identity, timeout=10).send('hello')

    identity = '%d-b' % (os.getpid())
    second = msgq.Client(server.name, backend, identity=identity, timeout=10).send('world')

    thread.join(10)

    assert first.text == 'Your message id = 1'
    assert second.text == 'Your message id = 2'
    assert assigned == [1, 2]
    assert server.sequence == 3


def test_request_logged(server, backend, caplog):

    caplog.set_level(logging.INFO, logger='msgq')

    with reply_channel(backend, 'log') as reply:
        with backend.open_writer(server.name) as writer:
            writer.send(Request(reply.name, 4321, 'hello').encapsulate())

        assert server.serve_one(timeout=10) == 1
        assert Response.unpack(reply.receive(timeout=10)).sequence() == 1

    assert "1. Received 'hello' from 4321" in caplog.text


def test_framing_error_skipped(server, backend, caplog):
    """ A message of the wrong size is discarded without consuming a
        sequence id; the next well-formed request is still number 1.
    """

    caplog.set_level(logging.WARNING, logger='msgq')

    with reply_channel(backend, 'framing') as reply:

        # One writer, so the two messages arrive in the order sent.

        with backend.open_writer(server.name) as writer:
            writer.send(b'garbage')
            writer.send(Request(reply.name, os.getpid(), 'after garbage').encapsulate())

        assert server.serve_one(timeout=10) == 1

        response = Response.unpack(reply.receive(timeout=10))
        assert response.text == 'Your message id = 1'

    assert 'discarding' in caplog.text
    assert server.sequence == 2


def test_unreachable_reply_channel(server, backend, caplog):
    """ The client is gone before the server gets to it. The failure is
        logged, nothing is sent, and the sequence id is not consumed.
    """

    caplog.set_level(logging.ERROR, logger='msgq')

    gone = '/msgq-gone-%d' % (os.getpid())
    backend.destroy(gone)

    with reply_channel(backend, 'next') as reply:
        with backend.open_writer(server.name) as writer:
            writer.send(Request(gone, 99, 'orphan').encapsulate())
            writer.send(Request('not a channel name', 98, 'invalid').encapsulate())
            writer.send(Request(reply.name, os.getpid(), 'present').encapsulate())

        assert server.serve_one(timeout=10) is None
        assert server.serve_one(timeout=10) is None
        assert server.sequence == 1

        assert server.serve_one(timeout=10) == 1
        assert Response.unpack(reply.receive(timeout=10)).sequence() == 1

    assert 'orphan' in caplog.text
    assert 'invalid' in caplog.text


def test_unusual_reply_names(server, backend, caplog):
    """ Reply channel names that are not valid UTF-8, or that a file system
        would read as a directory, are answered with a logged failure; the
        server keeps running and no id is spent on them.
    """

    caplog.set_level(logging.ERROR, logger='msgq')

    undecodable = struct.pack(Request.format, b'/' + b'\xff' * 63, 1, b'undecodable')

    with reply_channel(backend, 'unusual') as reply:
        with backend.open_writer(server.name) as writer:
            writer.send(undecodable)
            writer.send(Request('/..', 2, 'parent').encapsulate())
            writer.send(Request('/.', 3, 'current').encapsulate())
            writer.send(Request(reply.name, os.getpid(), 'present').encapsulate())

        assert server.serve_one(timeout=10) is None
        assert server.serve_one(timeout=10) is None
        assert server.serve_one(timeout=10) is None
        assert server.sequence == 1

        assert server.serve_one(timeout=10) == 1
        assert Response.unpack(reply.receive(timeout=10)).sequence() == 1

    assert 'undecodable' in caplog.text
    assert 'parent' in caplog.text
    assert 'current' in caplog.text


def test_stale_channel_replaced(backend, name):
    """ A channel left behind by a server that died is removed and created
        anew at startup.
    """

    if backend.__name__.endswith('.zmq.channel'):
        open(backend.path(name), 'w').close()
    else:
        backend.create(name, 1, 8).close()

    server = msgq.Server(name, backend)
    server.open()

    try:
        assert server.channel.message_size == Request.size

        with reply_channel(backend, 'stale') as reply:
            with backend.open_writer(name) as writer:
                writer.send(Request(reply.name, 1, 'fresh').encapsulate())

            assert server.serve_one(timeout=10) == 1
    finally:
        server.close(destroy=True)


def test_defaults(monkeypatch):

    monkeypatch.setenv('MSGQ_SERVER', '/msgq-configured')
    monkeypatch.setenv('MSGQ_TRANSPORT', 'zmq')

    server = msgq.Server()

    assert server.name == '/msgq-configured'
    assert server.backend is msgq.transport.backend('zmq')
    assert server.sequence == 1
    assert server.channel is None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
