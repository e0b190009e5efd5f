# -*- coding: utf-8 -*-

from functools import partial
import logging
from threading import Lock

from .errors import AggregateError, SelfResolutionError
from .scheduler import get_default_scheduler
from .util import get_then

_logger = logging.getLogger(__name__)


class _Continuation(object):
    """Callbacks registered by `then()`, and the promise they report to.

    Attributes:
        on_fulfilled (callable): transform of the fulfillment value, if any.
        on_rejected (callable): transform of the rejection reason, if any.
        resolve (callable): resolves the downstream promise.
        reject (callable): rejects the downstream promise.
    """

    __slots__ = ('on_fulfilled', 'on_rejected', 'resolve', 'reject')

    def __init__(self, on_fulfilled, on_rejected, resolve, reject):
        self.on_fulfilled = on_fulfilled
        self.on_rejected = on_rejected
        self.resolve = resolve
        self.reject = reject


class Promise(object):
    """It represents an operation expected to be completed in the future.

    A Promise is used for asynchronous computation. It contains a value not yet
    known when the Promise is created. It allows to set callbacks who will be
    called as soon as the result is known. It's a "promise" of a future value.

    Callbacks are never called synchronously: they're submitted as jobs to the
    scheduler of the Promise, and run when the scheduler executes them.

    The state and the continuation list are protected by a lock, so a Promise
    can be settled from any thread.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    def __init__(self, executor, scheduler=None, _name=None):
        """Constructor of the Promise.

        Generate the two callbacks for the executor, then call the `executor`.
        It means the executor will be fully executed before the constructor
        returns.
        If the executor raises an exception, it's caught and the Promise is
        rejected with this exception.

        Only the first call to one of the two callbacks has an effect. If the
        Promise is resolved with a thenable, it follows it: further calls are
        ignored, even if the thenable is still pending.

        Args:
            executor (callable): Takes 2 callable arguments:
                The first one, `resolve()` should be called when the Promise
                is fulfilled (ie the tasks is done) and must accept the
                result's value as its only argument. The value can be a
                thenable, in which case the Promise adopts its state.
                The second, `reject()`, should be called when an error
                occurs. Its argument should be an instance of `Exception`.
            scheduler (Scheduler, optional): scheduler running the callbacks.
                Default to the default scheduler.
            _name (str): if set, name used when converted to text.
        """

        self._state = self.PENDING
        self._result = None
        self._lock = Lock()
        self._continuations = []
        if scheduler is None:
            scheduler = get_default_scheduler()
        self._scheduler = scheduler
        self._name = _name or getattr(executor, '__name__', '???')

        already_resolved = [False]

        def _lock_resolution():
            with self._lock:
                if already_resolved[0]:
                    return False
                already_resolved[0] = True
                return True

        def resolve(value=None):
            if not _lock_resolution():
                _logger.debug('Try to resolve Promise %r already resolved. '
                              'New value will be ignored: %r', self, value)
                return
            self._resolve_value(value)

        def reject(reason=None):
            if not _lock_resolution():
                _logger.debug('Try to reject Promise %r already resolved. '
                              'New reason will be ignored: %r', self, reason)
                return
            self._settle(self.REJECTED, reason)

        try:
            executor(resolve, reject)
        except Exception as error:
            reject(error)

    @property
    def state(self):
        """str: one of PENDING, FULFILLED or REJECTED."""
        with self._lock:
            return self._state

    @property
    def result(self):
        """Fulfillment value or rejection reason; None while pending."""
        with self._lock:
            return self._result

    @property
    def scheduler(self):
        """Scheduler: scheduler running the callbacks of this promise."""
        return self._scheduler

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new promise from callbacks called when this one is settled.

        If the promise is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (the promise has been rejected), the `on_rejected`
        callback is called.
        In any case, the callback will define the state of the returned
        Promise. If the callback raises an exception, the new Promise is
        rejected. The callback can returns:
        - A value: the new promise will be fulfilled with this value.
        - Another Promise, or any object with a `then` method: when fulfilled
            or rejected, will transfer its status (state and result/error) to
            the Promise returned by this method.

        If a callback is not defined (or not callable), the state of the self
        promise is transferred at the new promise (the state and the
        value/error).

        The callbacks are always executed by the scheduler, never during the
        call to `then()`, even if the promise is already settled.

        Args:
            on_fulfilled (callable, optional):  This callback will receive the
                result of the original promise as argument.
            on_rejected (callable, optional): This callback will receive the
                reason of the rejection of the original promise as argument.
        Returns:
            Promise<*>: new promise depending of self.
        """

        def chained_executor(resolve, reject):
            continuation = _Continuation(on_fulfilled, on_rejected, resolve,
                                         reject)
            with self._lock:
                if self._state == self.PENDING:
                    self._continuations.append(continuation)
                else:
                    self._scheduler.enqueue(self._run_continuation,
                                            continuation)

        if not on_rejected:
            name = '%s' % getattr(on_fulfilled, '__name__', '???')
        elif not on_fulfilled:
            name = '<None, %s>' % getattr(on_rejected, '__name__', '???')
        else:
            name = '<%s, %s>' % (getattr(on_fulfilled, '__name__', '???'),
                                 getattr(on_rejected, '__name__', '???'))
        return Promise(chained_executor, scheduler=self._scheduler,
                       _name=name)

    def catch(self, on_rejected=None):
        """Create a new promise with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): Will be called with the rejection reason if
                `self` is rejected.
        returns:
            Promise<*>: new Promise chained to `self`. If `self` is fulfilled,
                the promised value will be the same as `self`. Otherwise, the
                value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def finally_(self, on_finally=None):
        """Create a new promise calling `on_finally()` when `self` settles.

        `on_finally` is called without argument, whatever the outcome of
        `self`. If it returns a thenable, the new promise waits for it.
        The new promise is then settled exactly like `self`, unless
        `on_finally()` raises an exception or its returned thenable is
        rejected: this new error replaces the original outcome.

        Args:
            on_finally (callable, optional): callback without argument.
        Returns:
            Promise<*>: new Promise chained to `self`.
        """
        if not callable(on_finally):
            return self.then()

        def callback(value):
            def keep_value(_):
                return value
            return Promise.resolve(on_finally(), self._scheduler) \
                .then(keep_value)

        def errback(reason):
            def keep_reason(_):
                return Promise.reject(reason, self._scheduler)
            return Promise.resolve(on_finally(), self._scheduler) \
                .then(keep_reason)

        return self.then(callback, errback)

    def safeguard(self):
        """Catch all errors and log them with the most details possible.

        This method is aimed to protect the program from uncaught rejected
        Promise. If no error handler has been set (via then() or catch()), the
        default behavior is to do nothing, and thus, errors are silently
        ignored.
        Calling `safeguard()` after all chains are set will catch these errors,
        and log them as ERROR with the maximum of details possible.
        """
        def guard(reason):
            if isinstance(reason, BaseException):
                _logger.error('[SAFEGUARD] %r', self,
                              exc_info=(type(reason), reason,
                                        reason.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %r rejected with non-exception '
                              'value: %r', self, reason)

        self.catch(guard)

    def __repr__(self):
        with self._lock:
            if self._state == self.REJECTED:
                state = 'R'
            elif self._state == self.FULFILLED:
                state = 'F'
            else:
                state = 'P'
        return 'Promise(%s %s)' % (self._name, state)

    def _resolve_value(self, value):
        """Resolution procedure of a value passed to `resolve()`.

        - The promise itself is refused (SelfResolutionError).
        - Another Promise is adopted.
        - Any object with a callable `then` member is adopted the same way.
          Only the first call to one of the callbacks given to `then` counts.
        - Everything else fulfills the promise.
        """
        if value is self:
            self._settle(self.REJECTED, SelfResolutionError())
            return

        if isinstance(value, Promise):
            value.then(self._resolve_value, partial(self._settle,
                                                    self.REJECTED))
            return

        try:
            then = get_then(value)
        except Exception as error:
            self._settle(self.REJECTED, error)
            return

        if then is None:
            self._settle(self.FULFILLED, value)
            return

        called = [False]

        def resolve_once(result=None):
            if called[0]:
                return
            called[0] = True
            self._resolve_value(result)

        def reject_once(reason=None):
            if called[0]:
                return
            called[0] = True
            self._settle(self.REJECTED, reason)

        try:
            then(resolve_once, reject_once)
        except Exception as error:
            if called[0]:
                _logger.debug('Error raised by then() of %r after its '
                              'settlement. It will be ignored: %r',
                              value, error)
                return
            called[0] = True
            self._settle(self.REJECTED, error)

    def _settle(self, state, result):
        with self._lock:
            is_pending = self._state == self.PENDING
            if is_pending:
                self._state = state
                self._result = result
                # Enqueued under the lock: a concurrent then() must not
                # overtake the continuations registered before it.
                for continuation in self._continuations:
                    self._scheduler.enqueue(self._run_continuation,
                                            continuation)
                self._continuations = []

        if not is_pending:
            _logger.debug('Promise %r already settled; %s with %r ignored.',
                          self, state, result)

    def _run_continuation(self, continuation):
        if self._state == self.FULFILLED:
            callback = continuation.on_fulfilled
            report = continuation.resolve
        else:
            callback = continuation.on_rejected
            report = continuation.reject

        if not callable(callback):
            report(self._result)
            return

        try:
            new_result = callback(self._result)
        except Exception as error:
            continuation.reject(error)
            return
        continuation.resolve(new_result)

    @classmethod
    def resolve(cls, value=None, scheduler=None):
        """Create a promise who resolves the selected value.

        Args:
            value: result of the promise. If it's a Promise, it's returned as
                is. If it's another thenable, the new Promise will follow it.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: Promise resolved with the value passed in parameter.
        """
        if isinstance(value, cls):
            return value

        def executor(resolve, _reject):
            resolve(value)

        return cls(executor, scheduler=scheduler, _name='RESOLVE')

    @classmethod
    def reject(cls, reason=None, scheduler=None):
        """Create a Promise rejected for the reason specified.

        Args:
            reason: Exception set to the Promise
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise already rejected.
        """
        def executor(_resolve, reject):
            reject(reason)

        return cls(executor, scheduler=scheduler, _name='REJECT')

    @classmethod
    def all(cls, values, scheduler=None):
        """Create a Promise who wait a list of promises to be all fulfilled.

        The resulting Promise resolve when all of the promises in the list are
        resolved, and returns a list of all the resulting values, keeping the
        order of the promise list.
        If a promise is rejected, then the resulting promise is rejected with
        the same reason, and all results from other promises are ignored.

        Args:
            values (iterable): promises, thenables or plain values. Plain
                values are considered as fulfilled promises.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise<list>: resulting promise, fulfilled when all promises
                are fulfilled, or rejected when one of the promises has been
                rejected. An empty list is fulfilled immediately.
        """
        def executor(resolve, reject):
            items = list(values)
            results = [None] * len(items)
            nb_fulfilled = [0]
            if not items:
                resolve([])
                return

            def resolve_one_promise(index, value):
                results[index] = value
                nb_fulfilled[0] += 1
                if nb_fulfilled[0] == len(items):
                    resolve(results)

            for index, value in enumerate(items):
                cls.resolve(value, scheduler).then(
                    partial(resolve_one_promise, index), reject)

        return cls(executor, scheduler=scheduler, _name='ALL')

    @classmethod
    def all_settled(cls, values, scheduler=None):
        """Create a Promise who wait a list of promises to be all settled.

        The resulting Promise is never rejected. It's fulfilled with a list of
        dict describing the outcome of each promise, in the order of the list:
        `{'status': 'fulfilled', 'value': value}` or
        `{'status': 'rejected', 'reason': reason}`.

        Args:
            values (iterable): promises, thenables or plain values.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise<list>: resulting promise. An empty list is fulfilled
                immediately.
        """
        def executor(resolve, _reject):
            items = list(values)
            results = [None] * len(items)
            nb_settled = [0]
            if not items:
                resolve([])
                return

            def settle_one_promise(index, outcome):
                results[index] = outcome
                nb_settled[0] += 1
                if nb_settled[0] == len(items):
                    resolve(results)

            def on_fulfilled(index, value):
                settle_one_promise(index, {'status': cls.FULFILLED,
                                           'value': value})

            def on_rejected(index, reason):
                settle_one_promise(index, {'status': cls.REJECTED,
                                           'reason': reason})

            for index, value in enumerate(items):
                cls.resolve(value, scheduler).then(
                    partial(on_fulfilled, index), partial(on_rejected, index))

        return cls(executor, scheduler=scheduler, _name='ALL_SETTLED')

    @classmethod
    def race(cls, values, scheduler=None):
        """Resolve or reject with the fastest Promise.

        The resulting Promise will be settled as soon as the one of the
        promises is settled. Result value or rejection reason of the finished
        promise are transmitted.
        All other Promise result's will be ignored.

        Note that with an empty list, the resulting Promise is never settled.

        Args:
            values (iterable): promises, thenables or plain values.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: a promise
        """
        def executor(resolve, reject):
            for value in list(values):
                cls.resolve(value, scheduler).then(resolve, reject)

        return cls(executor, scheduler=scheduler, _name='RACE')

    @classmethod
    def any(cls, values, scheduler=None):
        """Resolve with the first Promise to be fulfilled.

        The resulting Promise is fulfilled as soon as one of the promises is
        fulfilled. If all the promises are rejected, it's rejected with an
        `AggregateError` containing all the reasons, in the order of the list.

        Args:
            values (iterable): promises, thenables or plain values.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: a promise. An empty list is rejected immediately with an
                empty `AggregateError`.
        """
        def executor(resolve, reject):
            items = list(values)
            errors = [None] * len(items)
            nb_rejected = [0]
            if not items:
                reject(AggregateError([], 'No promise to wait for.'))
                return

            def reject_one_promise(index, reason):
                errors[index] = reason
                nb_rejected[0] += 1
                if nb_rejected[0] == len(items):
                    reject(AggregateError(errors))

            for index, value in enumerate(items):
                cls.resolve(value, scheduler).then(
                    resolve, partial(reject_one_promise, index))

        return cls(executor, scheduler=scheduler, _name='ANY')
