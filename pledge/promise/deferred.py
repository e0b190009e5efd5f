# -*- coding: utf-8 -*-

from .promise import Promise


class Deferred(object):
    """Pending Promise, with the functions settling it.

    The Promise is the side handed to consumers; `resolve` and `reject` stay
    with the code producing the value. Both follow the rules of the executor
    callbacks: only the first call has an effect.

    Attributes:
        promise (Promise): the pending Promise.
        resolve (callable): resolves `promise` with a value or a thenable.
        reject (callable): rejects `promise` with a reason.
    """

    __slots__ = ('promise', 'resolve', 'reject')

    def __init__(self, scheduler=None, _name='DEFERRED'):
        settlers = []

        def capture(resolve, reject):
            settlers.extend((resolve, reject))

        self.promise = Promise(capture, scheduler=scheduler, _name=_name)
        self.resolve, self.reject = settlers

    def __repr__(self):
        return 'Deferred(%r)' % self.promise
