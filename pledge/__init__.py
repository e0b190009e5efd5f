# -*- coding: utf-8 -*-

from .__version__ import __version__  # noqa

import logging

from .common import config
from .common import log
from .promise import (AggregateError, Deferred, JobQueue, LoopScheduler,
                      Promise, PromiseError, Scheduler, SelfResolutionError,
                      ThreadPoolExecutor, TimeoutError, get_default_scheduler,
                      reduce_coroutine, set_default_scheduler, wrap_promise)

__all__ = ['AggregateError', 'Deferred', 'JobQueue', 'LoopScheduler',
           'Promise', 'PromiseError', 'Scheduler', 'SelfResolutionError',
           'ThreadPoolExecutor', 'TimeoutError', 'configure',
           'get_default_scheduler', 'log_context', 'reduce_coroutine',
           'set_default_scheduler', 'wrap_promise']


def configure(config_path=None):
    """Load the config file and apply the log settings it contains.

    Args:
        config_path (str, optional): path of the config file. Default to
            `pledge.ini` in the user config folder.
    """
    config.load(config_path)
    log.set_debug_mode(config.get('debug_mode'))
    log.set_logs_level(config.get('log_levels'))
    logging.getLogger(__name__).debug('pledge %s configured', __version__)


def log_context(config_path=None, stream=None):
    """Load the config file, and print the logs while in a `with` block.

    Example:

        >>> with pledge.log_context():
        ...     pledge.Promise.reject(ValueError()).safeguard()
        ...     pledge.get_default_scheduler().run()

    Args:
        config_path (str, optional): path of the config file. Default to
            `pledge.ini` in the user config folder.
        stream (file, optional): output of the logs. Default to stderr.
    Returns:
        log.Context: context applying the log settings of the config file.
    """
    config.load(config_path)
    return log.Context(stream, debug=config.get('debug_mode'),
                       levels=config.get('log_levels'))
