# -*- coding: utf-8 -*-


def get_then(value):
    """Read the `then` member of an object.

    Only the absence of the member (`AttributeError`) is handled. Any other
    error raised while reading the attribute (ex: by a property) is
    propagated to the caller.

    Returns:
        callable: the `then` member if it's callable; None otherwise.
    """
    try:
        then = value.then
    except AttributeError:
        return None
    return then if callable(then) else None


def is_thenable(value):
    """Check if an object can be chained, like a Promise, or is a "result".

    The promise module uses this function to differentiate "chainable" objects
    and direct return values, when using a callback who can returns both.

    Returns:
        boolean: True if the value has an attribute 'then' who is callable.
            False if not, or if the attribute can't be read.
    """
    try:
        return get_then(value) is not None
    except Exception:
        return False
