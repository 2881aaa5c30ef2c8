"""Channel transport interface.

This is the (small) contract that transport backends follow. It lives outside
:mod:`msgq.protocol` so the protocol remains transport-agnostic.

A backend module provides three functions in addition to its
:class:`Channel` subclass:

``create(name, capacity, message_size, mode=0o600)``
    Exclusively create a channel and return a handle opened for reading.
``open_writer(name, message_size=None)``
    Open an existing channel for writing.
``destroy(name)``
    Remove the channel from the namespace; return False if it was absent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class ChannelExists(TransportError):
    """A channel with the requested name is already present."""


class ChannelNotFound(TransportError):
    """No channel with the requested name exists."""


class ChannelTimeout(TransportError):
    """A receive did not complete before its timeout."""


def check_name(name: str) -> str:
    """Validate a channel name: a leading slash and no other slashes.

    The names ``/.`` and ``/..`` are refused as well; as file names they would
    refer to directories, not channels.
    """

    if not isinstance(name, str):
        raise ValueError(f"channel name must be a string: {name!r}")

    if len(name) < 2 or not name.startswith("/") or "/" in name[1:]:
        raise ValueError(f"invalid channel name: {name!r}")

    if "\0" in name or name in ("/.", "/.."):
        raise ValueError(f"invalid channel name: {name!r}")

    return name


class Channel(ABC):
    """Minimal contract for one open handle on a named channel."""

    def __init__(self, name: str, capacity: Optional[int], message_size: Optional[int]):
        self.name = name
        self.capacity = capacity
        self.message_size = message_size

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{type(self).__name__} {self.name} {state}>"

    def check_size(self, data: bytes) -> None:
        if self.message_size is not None and len(data) > self.message_size:
            raise TransportError(
                f"{self.name}: {len(data)} byte message exceeds the {self.message_size} byte limit"
            )

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Queue one message, blocking while the channel is full."""

    @abstractmethod
    def receive(self, timeout: Optional[float] = None) -> bytes:
        """Block until one complete message is available and return it."""

    @abstractmethod
    def close(self) -> None:
        """Release this handle; the channel itself remains."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
