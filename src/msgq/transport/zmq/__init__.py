"""ZeroMQ ``ipc://`` channel backend."""

from . import channel
