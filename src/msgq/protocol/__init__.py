""" Wire format shared by the client and the server: the protocol constants
    in :mod:`fields`, and the fixed-size records in :mod:`message`.

    The protocol layer does not depend on any transport implementation.
"""

from . import fields
from . import message

from .message import FramingError, PayloadTooLarge, Request, Response


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
