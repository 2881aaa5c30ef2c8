import itertools
import logging
import os
import subprocess
import sys
import time

import pytest

import msgq

source = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
names = itertools.count()


def environment():

    env = dict(os.environ)

    try:
        path = env['PYTHONPATH']
    except KeyError:
        env['PYTHONPATH'] = source
    else:
        env['PYTHONPATH'] = source + os.pathsep + path

    return env



def wait_for_channel(backend, name, process=None, timeout=10):
    """ Block until *name* can be opened for writing. Raises RuntimeError if
        the *process* that was supposed to create it exits first.
    """

    expiration = time.time() + timeout

    while time.time() < expiration:
        try:
            channel = backend.open_writer(name)
        except msgq.ChannelNotFound:
            pass
        else:
            channel.close()
            return

        if process is not None and process.poll() is not None:
            stdout, stderr = process.communicate()
            raise RuntimeError('server exited early: ' + stderr.decode(errors='replace'))

        time.sleep(0.02)

    raise RuntimeError('timed out waiting for ' + name)



def run_client(message, server, backend_name, *extra):

    arguments = list()
    arguments.append(sys.executable)
    arguments.append('-m')
    arguments.append('msgq.cli')
    arguments.append('client')

    if message is not None:
        arguments.append(message)

    arguments.extend(('--server', server, '--transport', backend_name, '--timeout', '30'))
    arguments.extend(extra)

    return subprocess.run(arguments, capture_output=True, text=True, env=environment(), timeout=60)



@pytest.fixture(scope='session', autouse=True)
def home(tmp_path_factory):
    """ Keep the zmq socket files for the whole session in one scratch
        directory; subprocesses inherit it via MSGQ_HOME.
    """

    directory = tmp_path_factory.mktemp('msgq')
    msgq.config.directory(str(directory))
    yield directory


@pytest.fixture(autouse=True)
def reset_logging():

    yield

    logger = logging.getLogger('msgq')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(params=msgq.transport.backends)
def backend_name(request):

    if request.param == 'posix':
        pytest.importorskip('posix_ipc')

        # The module may be present while the kernel (or a container) still
        # refuses to hand out message queues.

        channel = msgq.transport.backend('posix')
        probe = '/msgq-probe-%d' % (os.getpid())

        try:
            channel.create(probe, 1, 8).close()
        except msgq.TransportError as error:
            pytest.skip('POSIX message queues unavailable: ' + str(error))

        channel.destroy(probe)

    return request.param


@pytest.fixture
def backend(backend_name):
    return msgq.transport.backend(backend_name)


@pytest.fixture
def name(backend):

    name = '/msgq-test-%d-%d' % (os.getpid(), next(names))
    yield name
    backend.destroy(name)


@pytest.fixture
def server(backend, name):
    """ An in-process :class:`msgq.Server` with its channel open; tests
        drive it one request at a time with serve_one().
    """

    server = msgq.Server(name, backend)
    server.open()
    yield server
    server.close(destroy=True)


@pytest.fixture
def run_server(backend, backend_name, name):
    """ Run msgq-server in a subprocess, the way it is deployed, and yield
        the name of its well-known channel once it is accepting requests.
    """

    arguments = list()
    arguments.append(sys.executable)
    arguments.append('-m')
    arguments.append('msgq.cli')
    arguments.append('server')
    arguments.extend(('--name', name, '--transport', backend_name))

    pipe = subprocess.PIPE
    server = subprocess.Popen(arguments, stdout=subprocess.DEVNULL, stderr=pipe, env=environment())

    try:
        wait_for_channel(backend, name, server)
        yield name
    finally:
        server.terminate()
        try:
            server.wait(timeout=5)
        except subprocess.TimeoutExpired:
            server.kill()
            server.wait()

        server.stderr.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
