# -*- coding: utf-8 -*-

from .decorators import wrap_promise
from .deferred import Deferred
from .errors import (AggregateError, PromiseError, SelfResolutionError,
                     TimeoutError)
from .promise import Promise
from .reduce_coroutine import reduce_coroutine
from .scheduler import (JobQueue, LoopScheduler, Scheduler,
                        get_default_scheduler, set_default_scheduler)
from .thread_pool import ThreadPoolExecutor
from .util import get_then, is_thenable

__all__ = ['get_then', 'is_thenable', 'AggregateError', 'Deferred',
           'PromiseError', 'Promise', 'SelfResolutionError', 'TimeoutError',
           'JobQueue', 'LoopScheduler', 'Scheduler', 'get_default_scheduler',
           'set_default_scheduler', 'reduce_coroutine', 'ThreadPoolExecutor',
           'wrap_promise']
