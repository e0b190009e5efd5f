# -*- coding: utf-8 -*-

from .deferred import Deferred
from .promise import Promise
from .util import is_thenable


def reduce_coroutine(safeguard=False):
    """Decorator who converts a coroutine of promises into a single promise.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Promises.
    Whatever is the number of Promises or async calls used, the result will
    always be an unique Promise wrapping the whole process.

    Each thenable yielded by the generator is followed: its value is sent back
    to the generator, or its rejection reason is raised inside the generator.
    The value returned by the generator fulfills the resulting promise. If the
    generator ends without returning a value, the value of the last thenable
    yielded is used. If the generator yields a non-thenable value, it's
    stopped and the value is used as result.

    Args:
        safeguard (boolean): if true, use `Promise.safeguard()` on the
            resulting promise.
    """

    def decorator(func):
        def wrapper(*args, **kwargs):
            """
            Args:
                *args
                **kwargs
            Returns:
                Promise<*>
            """
            df = Deferred(_name='COROUTINE %s' % func.__name__)
            if safeguard:
                df.promise.safeguard()

            try:
                # Create generator; Initialization phase
                gen = func(*args, **kwargs)
            except Exception as error:
                df.reject(error)
                return df.promise

            def _call_next_or_set_result(value):
                if is_thenable(value):
                    Promise.resolve(value, df.promise.scheduler) \
                        .then(iter_next, iter_error)
                else:
                    gen.close()
                    df.resolve(value)

            def iter_next(yielded_value):
                try:
                    next_value = gen.send(yielded_value)
                except StopIteration as stop:
                    if stop.value is None:
                        # Implicit return: the last promise gives the result.
                        return df.resolve(yielded_value)
                    return df.resolve(stop.value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            def iter_error(reason):
                if not isinstance(reason, BaseException):
                    # Only exceptions can be raised into the generator.
                    gen.close()
                    return df.reject(reason)
                try:
                    next_value = gen.throw(reason)
                except StopIteration as stop:
                    return df.resolve(stop.value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            # Start and resolve loop.
            try:
                f = next(gen)
            except StopIteration as stop:
                df.resolve(stop.value)
                return df.promise
            except Exception as error:
                df.reject(error)
                return df.promise
            _call_next_or_set_result(f)

            return df.promise

        wrapper.__name__ = func.__name__
        return wrapper
    return decorator
