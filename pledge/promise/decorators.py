# -*- coding: utf-8 -*-

from .promise import Promise


def wrap_promise(f):
    """Decorator who converts the result in a Promise object.

    If the function decorated returns a Promise, it's transmitted as is. If it
    returns another thenable, the new Promise follows it.
    Else, a new Promise is created with the returned value as result.
    An exception raised by the function rejects the Promise.
    """
    def wrapper(*args, **kwargs):
        try:
            return Promise.resolve(f(*args, **kwargs))
        except Exception as error:
            return Promise.reject(error)

    wrapper.__name__ = getattr(f, '__name__', 'wrapper')
    wrapper.__doc__ = getattr(f, '__doc__', None)
    return wrapper
