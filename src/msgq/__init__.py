""" Python implementation of a sequenced request/response exchange over named,
    bounded message channels. A single :class:`Server` answers requests on a
    well-known channel; each :class:`Client` exchange creates a private reply
    channel, names it in the request, and waits for the one reply.
"""

# Submodules used by multiple other components.

from . import protocol
from . import config
from . import transport

# Primary public-facing interfaces.

from .client import Client, send
from .server import Server

from .protocol import FramingError, PayloadTooLarge, Request, Response
from .transport import (
    ChannelExists,
    ChannelNotFound,
    ChannelTimeout,
    TransportError,
)

__version__ = '1.0.0'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
