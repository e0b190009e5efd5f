# -*- coding: utf-8 -*-

"""Job schedulers used to run the Promise continuations.

A continuation is never executed on the call stack that registered it or
settled its promise: it's submitted as a job to a scheduler, who runs it
later, in FIFO order.

The module provides a default scheduler (a `JobQueue`) shared by all
promises. It can be replaced by `set_default_scheduler()`, or overridden per
promise with the `scheduler` argument of the Promise constructor.
"""

import abc
from collections import deque
import logging
from threading import Condition, Lock
import time

from .errors import TimeoutError

_logger = logging.getLogger(__name__)


class Scheduler(metaclass=abc.ABCMeta):
    """Single-threaded FIFO queue of jobs.

    Jobs submitted must be executed in the order of submission, after the
    call to `enqueue()` has returned. Promises call `enqueue()` while holding
    their lock, so it must never execute the job itself.
    """

    @abc.abstractmethod
    def enqueue(self, job, *args):
        """Submit a job for a deferred execution.

        Args:
            job (callable): function to execute.
            *args: arguments passed to `job`.
        """
        pass


class JobQueue(Scheduler):
    """Scheduler keeping its jobs until someone drains the queue.

    Jobs can be submitted from any thread, but the queue should be drained by
    only one thread at a time.
    """

    def __init__(self):
        self._jobs = deque()
        self._condition = Condition()

    def __len__(self):
        with self._condition:
            return len(self._jobs)

    def enqueue(self, job, *args):
        with self._condition:
            self._jobs.append((job, args))
            self._condition.notify_all()

    def run_once(self):
        """Execute the oldest job of the queue.

        Returns:
            boolean: True if a job has been executed; False if the queue was
                empty.
        """
        with self._condition:
            if not self._jobs:
                return False
            job, args = self._jobs.popleft()

        try:
            job(*args)
        except Exception:
            _logger.exception('Job %r raised an exception', job)
        return True

    def run(self):
        """Execute all jobs, until the queue is empty.

        Jobs added by the running jobs are executed too.

        Returns:
            int: number of jobs executed.
        """
        nb_jobs = 0
        while self.run_once():
            nb_jobs += 1
        return nb_jobs

    def run_until_settled(self, promise, timeout=None):
        """Execute the jobs until a promise is settled.

        When the queue is empty and the promise still pending, it waits for
        new jobs (submitted by other threads).

        Args:
            promise (Promise): promise to wait for.
            timeout (float, optional): maximum time to wait, in seconds. By
                default, it can wait indefinitely.
        Returns:
            Promise: the promise, fulfilled or rejected.
        Raises:
            ValueError: if the promise uses another scheduler.
            TimeoutError: if the promise is not settled within the delay.
        """
        if promise.scheduler is not self:
            raise ValueError('%r is not scheduled by this queue' % promise)

        deadline = None if timeout is None else time.monotonic() + timeout

        def _wake_up(_):
            pass

        # Its settlement will submit a job, and so notify the condition.
        promise.then(_wake_up, _wake_up)

        while True:
            self.run()
            if promise.state != promise.PENDING:
                return promise

            with self._condition:
                if self._jobs:
                    continue
                if deadline is None:
                    self._condition.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise TimeoutError('%r not settled after %ss'
                                           % (promise, timeout))
                    self._condition.wait(remaining)


class LoopScheduler(Scheduler):
    """Scheduler submitting its jobs to an asyncio event loop."""

    def __init__(self, loop):
        """
        Args:
            loop (asyncio.AbstractEventLoop): loop executing the jobs.
        """
        self._loop = loop

    def enqueue(self, job, *args):
        self._loop.call_soon_threadsafe(job, *args)


_default_scheduler = JobQueue()
_default_lock = Lock()


def get_default_scheduler():
    """Returns the scheduler used by promises created without scheduler."""
    with _default_lock:
        return _default_scheduler


def set_default_scheduler(scheduler):
    """Replace the default scheduler.

    Promises already created keep the scheduler they had.

    Args:
        scheduler (Scheduler): the new default scheduler.
    Returns:
        Scheduler: the previous default scheduler.
    """
    global _default_scheduler

    with _default_lock:
        previous = _default_scheduler
        _default_scheduler = scheduler
    _logger.debug('Default scheduler set to %r', scheduler)
    return previous
