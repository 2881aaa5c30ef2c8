"""ZeroMQ channel transport.

Each channel is an ``ipc://`` endpoint whose socket file lives in
:func:`msgq.config.directory`; the presence of that file is what makes the
channel name exist. The reading end binds a PULL socket, writers connect PUSH
sockets, and the high-water marks bound how many messages can be queued.
ZeroMQ delivers whole messages only, so a receive never returns a fragment.

Closing the reading handle also removes the socket file.
"""

from __future__ import annotations

import atexit
import os
import stat
import time
from typing import Optional

import zmq

from ... import config
from ...protocol.fields import MSG_MAX_COUNT
from ..base import (
    Channel,
    ChannelExists,
    ChannelNotFound,
    ChannelTimeout,
    TransportError,
    check_name,
)


# Milliseconds a writer keeps trying to deliver queued messages after it is
# closed. Replies are sent and the handle closed immediately afterwards, so
# this must be long enough for a live client to pick the reply up.

writer_linger = 1000

# Seconds to wait for a closed reader's socket file to disappear. libzmq
# unlinks the file from its I/O thread after close() returns; a channel of
# the same name created in the meantime would otherwise lose its file.

unlink_wait = 0.1

zmq_context = zmq.Context()


def path(name: str) -> str:
    """Return the socket file backing the channel *name*."""

    check_name(name)
    return os.path.join(config.directory(), name[1:])


def is_socket(filename: str) -> bool:
    """Return True if *filename* is a socket file a reader has bound."""

    try:
        mode = os.stat(filename).st_mode
    except OSError:
        return False
    return stat.S_ISSOCK(mode)


class ZmqChannel(Channel):
    """One end of a channel: a bound PULL socket, or a connected PUSH socket."""

    def __init__(self, name: str, socket: zmq.Socket, capacity: Optional[int],
                 message_size: Optional[int], readable: bool):
        super().__init__(name, capacity, message_size)
        self.socket: Optional[zmq.Socket] = socket
        self.readable = readable

    def _open_socket(self) -> zmq.Socket:
        if self.socket is None:
            raise TransportError(f"{self.name}: channel handle is closed")
        return self.socket

    def send(self, data: bytes) -> None:
        socket = self._open_socket()

        if self.readable:
            raise TransportError(f"{self.name}: channel is open for reading only")

        self.check_size(data)

        try:
            socket.send(data)
        except zmq.ZMQError as exc:
            raise TransportError(f"{self.name}: send failed: {exc}") from exc

    def receive(self, timeout: Optional[float] = None) -> bytes:
        socket = self._open_socket()

        if not self.readable:
            raise TransportError(f"{self.name}: channel is open for writing only")

        try:
            if timeout is not None:
                ready = socket.poll(int(timeout * 1000), zmq.POLLIN)
                if not ready:
                    raise ChannelTimeout(f"{self.name}: nothing received in {timeout:.2f} sec")
            return socket.recv()
        except zmq.ZMQError as exc:
            raise TransportError(f"{self.name}: receive failed: {exc}") from exc

    def close(self) -> None:
        socket = self.socket
        if socket is None:
            return

        self.socket = None

        if not self.readable:
            socket.close(linger=writer_linger)
            return

        socket.close(linger=0)

        filename = path(self.name)
        deadline = time.monotonic() + unlink_wait

        while os.path.exists(filename) and time.monotonic() < deadline:
            time.sleep(0.001)

    @property
    def closed(self) -> bool:
        return self.socket is None


def create(name: str, capacity: int = MSG_MAX_COUNT,
           message_size: Optional[int] = None, mode: int = 0o600) -> ZmqChannel:
    filename = path(name)

    if os.path.exists(filename):
        raise ChannelExists(f"channel already exists: {name}")

    socket = zmq_context.socket(zmq.PULL)
    socket.setsockopt(zmq.LINGER, 0)
    socket.setsockopt(zmq.RCVHWM, capacity)

    try:
        socket.bind("ipc://" + filename)
    except zmq.ZMQError as exc:
        socket.close()
        raise TransportError(f"cannot create channel {name}: {exc}") from exc

    os.chmod(filename, mode)
    return ZmqChannel(name, socket, capacity, message_size, readable=True)


def open_writer(name: str, message_size: Optional[int] = None) -> ZmqChannel:
    filename = path(name)

    if not is_socket(filename):
        raise ChannelNotFound(f"no such channel: {name}")

    socket = zmq_context.socket(zmq.PUSH)
    socket.setsockopt(zmq.LINGER, writer_linger)
    socket.setsockopt(zmq.SNDHWM, MSG_MAX_COUNT)

    try:
        socket.connect("ipc://" + filename)
    except zmq.ZMQError as exc:
        socket.close(linger=0)
        raise TransportError(f"cannot open channel {name}: {exc}") from exc

    return ZmqChannel(name, socket, MSG_MAX_COUNT, message_size, readable=False)


def destroy(name: str) -> bool:
    try:
        os.unlink(path(name))
    except FileNotFoundError:
        return False
    return True


def _cleanup() -> None:
    zmq_context.destroy(linger=writer_linger)


atexit.register(_cleanup)
