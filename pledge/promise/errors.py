# -*- coding: utf-8 -*-


class PromiseError(Exception):
    """Base class of the errors raised by the promise module."""
    pass


class SelfResolutionError(PromiseError, TypeError):
    """A Promise has been resolved with itself."""

    def __init__(self, message='A promise cannot be resolved with itself.'):
        super(SelfResolutionError, self).__init__(message)


class AggregateError(PromiseError):
    """Several errors wrapped into a single one.

    Used by `Promise.any()` when no promise has been fulfilled.

    Attributes:
        errors (list): rejection reasons, in the order of the input promises.
    """

    def __init__(self, errors, message='All promises were rejected.'):
        super(AggregateError, self).__init__(message)
        self.errors = list(errors)

    def __repr__(self):
        return 'AggregateError(%r, %r)' % (self.errors, str(self))


class TimeoutError(PromiseError):
    """An operation could not be executed within the time allowed."""
    pass
