"""POSIX message queue channel transport.

A thin wrapper around :class:`posix_ipc.MessageQueue`. The kernel enforces the
capacity and the maximum message size, and a receive always returns exactly
one complete message. Queue names follow the POSIX rule: a leading slash and
no other slashes.
"""

from __future__ import annotations

from typing import Optional

import posix_ipc

from ...protocol.fields import MSG_MAX_COUNT
from ..base import (
    Channel,
    ChannelExists,
    ChannelNotFound,
    ChannelTimeout,
    TransportError,
    check_name,
)


class PosixChannel(Channel):
    """One open descriptor on a POSIX message queue."""

    def __init__(self, name: str, queue: posix_ipc.MessageQueue):
        super().__init__(name, queue.max_messages, queue.max_message_size)
        self.queue: Optional[posix_ipc.MessageQueue] = queue

    def _open_queue(self) -> posix_ipc.MessageQueue:
        if self.queue is None:
            raise TransportError(f"{self.name}: channel handle is closed")
        return self.queue

    def send(self, data: bytes) -> None:
        queue = self._open_queue()
        self.check_size(data)

        try:
            queue.send(data)
        except (posix_ipc.Error, ValueError, OSError) as exc:
            raise TransportError(f"{self.name}: send failed: {exc}") from exc

    def receive(self, timeout: Optional[float] = None) -> bytes:
        queue = self._open_queue()

        try:
            message, _priority = queue.receive(timeout)
        except posix_ipc.BusyError as exc:
            raise ChannelTimeout(f"{self.name}: nothing received in {timeout:.2f} sec") from exc
        except (posix_ipc.Error, OSError) as exc:
            raise TransportError(f"{self.name}: receive failed: {exc}") from exc

        return message

    def close(self) -> None:
        queue = self.queue
        if queue is None:
            return

        self.queue = None

        try:
            queue.close()
        except posix_ipc.Error as exc:
            raise TransportError(f"{self.name}: close failed: {exc}") from exc

    @property
    def closed(self) -> bool:
        return self.queue is None


def create(name: str, capacity: int = MSG_MAX_COUNT,
           message_size: Optional[int] = None, mode: int = 0o600) -> PosixChannel:
    check_name(name)

    if message_size is None:
        message_size = posix_ipc.QUEUE_MESSAGE_SIZE_MAX_DEFAULT

    try:
        queue = posix_ipc.MessageQueue(
            name,
            flags=posix_ipc.O_CREX,
            mode=mode,
            max_messages=capacity,
            max_message_size=message_size,
            read=True,
            write=False,
        )
    except posix_ipc.ExistentialError as exc:
        raise ChannelExists(f"channel already exists: {name}") from exc
    except (posix_ipc.Error, ValueError, OSError) as exc:
        raise TransportError(f"cannot create channel {name}: {exc}") from exc

    return PosixChannel(name, queue)


def open_writer(name: str, message_size: Optional[int] = None) -> PosixChannel:
    check_name(name)

    try:
        queue = posix_ipc.MessageQueue(name, read=False, write=True)
    except posix_ipc.ExistentialError as exc:
        raise ChannelNotFound(f"no such channel: {name}") from exc
    except (posix_ipc.Error, ValueError, OSError) as exc:
        raise TransportError(f"cannot open channel {name}: {exc}") from exc

    channel = PosixChannel(name, queue)

    if message_size is not None and message_size > channel.message_size:
        channel.close()
        raise TransportError(
            f"{name}: queue accepts {channel.message_size} byte messages, {message_size} required"
        )

    return channel


def destroy(name: str) -> bool:
    check_name(name)

    try:
        posix_ipc.unlink_message_queue(name)
    except posix_ipc.ExistentialError:
        return False
    except posix_ipc.Error as exc:
        raise TransportError(f"cannot destroy channel {name}: {exc}") from exc

    return True
