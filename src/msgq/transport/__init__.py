"""Channel transport implementations."""

import importlib

from .base import (
    Channel,
    ChannelExists,
    ChannelNotFound,
    ChannelTimeout,
    TransportError,
)

backends = ('posix', 'zmq')


def backend(name=None):
    """ Return the channel module for the backend *name*, which defaults to
        :func:`msgq.config.transport`. A module passed in as *name* is
        returned unchanged, so callers can accept either form.
    """

    if name is None:
        from .. import config
        name = config.transport()

    if not isinstance(name, str):
        return name

    if name not in backends:
        raise ValueError(f"unknown channel transport backend: {name!r}")

    return importlib.import_module(f"{__name__}.{name}.channel")
