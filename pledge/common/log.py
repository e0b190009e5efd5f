# -*- coding: utf-8 -*-

"""Configuration of the python ``logging`` module for pledge.

The promise module logs under the 'pledge' logger: ignored settlements and
discarded errors in DEBUG, unhandled rejections caught by
``Promise.safeguard()`` and crashing jobs in ERROR.

pledge never installs a handler by itself. ``set_debug_mode()`` and
``set_logs_level()`` only change levels; a ``Context`` also prints the logs
to a console stream for the duration of a ``with`` block.
"""

import logging

_logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _parse_level(level):
    """Convert a level read from the config file into a `logging` level."""
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
    return level


def set_logs_level(levels):
    """Configure a fine-grained log levels for the different modules.

    Args:
        levels (dict): associates a logger name and a log level. A log level
            can be a number or a str representing one of the logging levels
            (DEBUG, WARNING, ...), case-insensitive.
            Invalids values will be ignored.

    Example:

        >>> # Accept DEBUG logs only for the scheduler
        >>> set_logs_level({'pledge': 'info',
        ...                 'pledge.promise.scheduler': 'debug'})
    """
    for (name, level) in levels.items():
        try:
            logging.getLogger(name).setLevel(_parse_level(level))
        except (TypeError, ValueError):
            _logger.warning('Invalid log level "%s" for logger "%s". '
                            'Will be ignored.', level, name)


def set_debug_mode(debug):
    """Set, or unset the debug log level.

    Note: modules others than pledge.* are not set to DEBUG, even in DEBUG
    mode. If needed, their level can be set by ``set_logs_level()``.

    Args:
        debug (boolean): if True, the pledge log level will be set to DEBUG.
            If False, it will be set to INFO.
    """
    if debug:
        logging.getLogger().setLevel(logging.INFO)
        logging.getLogger('pledge').setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger('pledge').setLevel(logging.INFO)


class Context(object):
    """Console output of the logs, limited to a ``with`` block.

    Entering the context attaches a ``StreamHandler`` to the root logger,
    routes the warnings to ``logging`` and applies the debug mode and the
    levels. Leaving it removes the handler and puts back every level it
    changed.
    """

    def __init__(self, stream=None, debug=False, levels=None):
        """
        Args:
            stream (file, optional): output of the logs. Default to stderr.
            debug (boolean): debug mode. See ``set_debug_mode()``.
            levels (dict, optional): levels per logger name. See
                ``set_logs_level()``.
        """
        self._stream = stream
        self._debug = debug
        self._levels = dict(levels or {})
        self._handler = None
        self._saved_levels = {}

    def __enter__(self):
        for name in [None, 'pledge'] + list(self._levels):
            self._saved_levels.setdefault(name, logging.getLogger(name).level)

        self._handler = logging.StreamHandler(self._stream)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT,
                                                     DATE_FORMAT))
        logging.getLogger().addHandler(self._handler)
        logging.captureWarnings(True)

        set_debug_mode(self._debug)
        set_logs_level(self._levels)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _logger.debug('Stop logger ...')
        logging.captureWarnings(False)
        logging.getLogger().removeHandler(self._handler)
        self._handler.flush()
        self._handler = None

        for name, level in self._saved_levels.items():
            logging.getLogger(name).setLevel(level)
        self._saved_levels = {}
