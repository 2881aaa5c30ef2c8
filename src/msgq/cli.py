""" Command-line entry points: ``msgq-server`` runs the server until it is
    interrupted or killed, ``msgq-client`` performs one exchange and prints
    the reply. Both are also available as subcommands of ``msgq``.
"""

import argparse
import logging
import os
import signal
import sys

from . import log
from .client import Client
from .protocol.message import PayloadTooLarge
from .server import Server
from .transport import ChannelNotFound, ChannelTimeout, TransportError, backends

logger = logging.getLogger('msgq.cli')


def positive(value):
    """ argparse type for the --timeout option.
    """

    try:
        value = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError('not a number: %s' % (repr(value)))

    if value <= 0:
        raise argparse.ArgumentTypeError('must be positive: %s' % (repr(value)))

    return value



def terminated(signum, frame):
    raise KeyboardInterrupt()



def cmd_server(args):

    log.configure(args.verbose - args.quiet, base=logging.INFO)

    server = Server(args.name, args.transport)

    # Being killed is the normal way to stop; shut down the same way as
    # for Ctrl-C so the channel handle gets closed.

    previous = signal.signal(signal.SIGTERM, terminated)

    try:
        try:
            server.open()
        except (TransportError, ValueError) as error:
            logger.critical('cannot create %s: %s', server.name, error)
            return 1

        server.run()
    except KeyboardInterrupt:
        logger.info('interrupted, %d requests answered', server.sequence - 1)
    finally:
        signal.signal(signal.SIGTERM, previous)
        server.close()

    return 0



def cmd_client(args, parser):

    log.configure(args.verbose)

    try:
        client = Client(args.server, args.transport, timeout=args.timeout)
        response = client.send(args.message)
    except PayloadTooLarge as error:
        parser.exit(1, '%s: %s\n' % (parser.prog, error))
    except ChannelNotFound as error:
        parser.exit(1, '%s: %s, is the server running?\n' % (parser.prog, error))
    except ChannelTimeout as error:
        parser.exit(1, '%s: no reply: %s\n' % (parser.prog, error))
    except (TransportError, ValueError) as error:
        parser.exit(1, '%s: %s\n' % (parser.prog, error))

    print('Process id = %d' % (os.getpid()))
    print('Reply :- %s' % (response.text))
    return 0



def add_common(parser):
    parser.add_argument('--transport', choices=backends, default=None,
                        help='channel backend (default: $MSGQ_TRANSPORT or zmq)')
    parser.add_argument('-v', '--verbose', action='count', default=0)


def add_server(parser):
    add_common(parser)
    parser.add_argument('--name', default=None,
                        help='well-known channel name (default: $MSGQ_SERVER or /sample-server-queue)')
    parser.add_argument('-q', '--quiet', action='count', default=0)


def add_client(parser):
    add_common(parser)
    parser.add_argument('message', help='message to send to the server')
    parser.add_argument('--server', default=None, help='well-known channel name of the server')
    parser.add_argument('--timeout', type=positive, default=None,
                        help='seconds to wait for the reply (default: $MSGQ_TIMEOUT, or forever)')



def server_main(argv=None):
    parser = argparse.ArgumentParser(prog='msgq-server', description='Answer msgq requests until killed.')
    add_server(parser)
    args = parser.parse_args(argv)
    return cmd_server(args)


def client_main(argv=None):
    parser = argparse.ArgumentParser(prog='msgq-client', description='Send one message to the msgq server.')
    add_client(parser)
    args = parser.parse_args(argv)
    return cmd_client(args, parser)


def main(argv=None):
    parser = argparse.ArgumentParser(prog='msgq', description='Sequenced request/response over message channels.')
    commands = parser.add_subparsers(dest='command', required=True)

    server = commands.add_parser('server')
    add_server(server)
    server.set_defaults(function=lambda args: cmd_server(args))

    client = commands.add_parser('client')
    add_client(client)
    client.set_defaults(function=lambda args: cmd_client(args, client))

    args = parser.parse_args(argv)
    return int(args.function(args))


if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
