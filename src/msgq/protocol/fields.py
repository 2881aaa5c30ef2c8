"""Protocol constants.

Both ends of the exchange size their records from these values; changing any
of them on one side only breaks the protocol.
"""

# Maximum number of messages queued on a channel at once. Ten is the default
# per-queue limit on Linux (/proc/sys/fs/mqueue/msg_max) for unprivileged
# processes.
MSG_MAX_COUNT = 10

# Maximum payload length in bytes, not counting the terminating NUL.
MSG_MAX_SIZE = 256

# Maximum channel name length in bytes, not counting the terminating NUL.
QNAME_MAX_SIZE = 64

SERVER_QNAME = '/sample-server-queue'
CLIENT_QNAME_PREFIX = '/sample-client-queue'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
