# -*- coding: utf-8 -*-

"""Adapter used by the Promises/A+ conformance test suites.

The suites only need three factories: a fulfilled promise, a rejected
promise, and a pending promise with its resolution functions.
"""

from .promise import Deferred, Promise


def resolved(value):
    return Promise.resolve(value)


def rejected(reason):
    return Promise.reject(reason)


def deferred():
    """Returns a Deferred, exposing `promise`, `resolve` and `reject`."""
    return Deferred()
