""" Logging setup for the command-line entry points. Library modules only
    create ``logging.getLogger(__name__)`` loggers; nothing is emitted until
    an entry point calls :func:`configure`.
"""

import logging
import sys

line_format = '%(asctime)s %(name)s %(levelname)s: %(message)s'

levels = (logging.ERROR, logging.WARNING, logging.INFO, logging.DEBUG)


def level_for(verbosity, base=logging.WARNING):
    """ Map a -q/-v count onto a logging level, starting from *base*.
    """

    index = levels.index(base) + verbosity
    index = max(0, min(index, len(levels) - 1))
    return levels[index]



def configure(verbosity=0, base=logging.WARNING, stream=None):
    """ Send ``msgq`` log records to *stream*, or stderr if no stream is
        given. Calling this again replaces the handler installed by the
        previous call. Returns the ``msgq`` logger.
    """

    logger = logging.getLogger('msgq')

    for handler in list(logger.handlers):
        if getattr(handler, '_msgq', False):
            logger.removeHandler(handler)

    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(line_format))
    handler._msgq = True

    logger.addHandler(handler)
    logger.setLevel(level_for(verbosity, base))
    logger.propagate = False

    return logger


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
