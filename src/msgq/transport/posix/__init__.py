"""POSIX message queue channel backend; requires the ``posix_ipc`` package."""

from . import channel
