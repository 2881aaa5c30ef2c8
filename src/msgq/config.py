""" Runtime configuration. Every setting has a built-in default that can be
    overridden with an environment variable; the environment is consulted at
    call time, except where noted for :func:`directory`.
"""

import os
import tempfile

from .protocol import fields


default_transport = 'zmq'


def transport():
    """ Return the name of the channel transport backend to use. This
        defaults to ``zmq``, and can be overridden by setting the
        ``MSGQ_TRANSPORT`` environment variable.
    """

    try:
        name = os.environ['MSGQ_TRANSPORT']
    except KeyError:
        return default_transport

    name = name.strip().lower()

    if name == '':
        return default_transport

    return name



def server_channel():
    """ Return the name of the well-known server channel. The default is
        :data:`fields.SERVER_QNAME`; set ``MSGQ_SERVER`` to run an isolated
        server and clients under a different name.
    """

    try:
        name = os.environ['MSGQ_SERVER']
    except KeyError:
        return fields.SERVER_QNAME

    if name == '':
        return fields.SERVER_QNAME

    return name



def reply_timeout():
    """ Return the number of seconds a client will wait for its reply, or
        None to wait indefinitely. This is None unless the ``MSGQ_TIMEOUT``
        environment variable is set to a positive number.
    """

    try:
        timeout = os.environ['MSGQ_TIMEOUT']
    except KeyError:
        return None

    timeout = timeout.strip()

    if timeout == '':
        return None

    timeout = float(timeout)

    if timeout <= 0:
        raise ValueError("MSGQ_TIMEOUT must be positive, got %s" % (repr(timeout)))

    return timeout



def directory(default=None):
    """ Return the directory where the zmq transport keeps its socket files.
        This defaults to ``msgq-<uid>`` in the system temporary directory,
        but can be overridden by calling this method with an absolute path,
        or by setting the ``MSGQ_HOME`` environment variable. Note that
        changes to the environment variable will be ignored unless it is set
        prior to the first invocation of this method.

        Calling this method with a *default* also sets ``MSGQ_HOME`` so that
        any subprocesses started afterwards use the same directory.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        os.environ['MSGQ_HOME'] = default
        directory.found = None


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['MSGQ_HOME']
    except KeyError:
        found = 'msgq-%d' % (os.getuid())
        found = os.path.join(tempfile.gettempdir(), found)

    if os.path.exists(found):
        pass
    else:
        os.makedirs(found, mode=0o700, exist_ok=True)

    directory.found = found
    return found

directory.found = None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
