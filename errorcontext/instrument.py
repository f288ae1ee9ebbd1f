"""instrument.py - Scoped helpers that keep store/recall/reset balanced.

``store()`` and ``recall()`` must bracket a nested operation on every exit
path, and ``reset()`` must run once a top-level operation has finished. Doing
that by hand means a try/finally at every call site; the helpers here do it
for you.

    error_scope            Context manager (also usable as a decorator) that
                           pushes a fresh frame, optionally pre-populated, and
                           always pops it on exit.
    persistence_operation  Decorator for a data-access entry point. Wraps
                           failures in PersistenceError. The outermost call
                           resets the thread's context afterwards; nested
                           calls run on their own frame instead.

Usage:
    from errorcontext import error_scope, persistence_operation

    @persistence_operation("Error querying database", resource="UserMapper.xml")
    def select_by_id(user_id):
        with error_scope(activity="setting parameters"):
            bind(user_id)
        ...
"""

import threading
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Iterator

from .context import ErrorContext, depth, instance, recall, reset, store
from .exceptions import PersistenceError, wrap_exception

# Number of persistence_operation calls currently running in each thread.
_operations = threading.local()


def _active_operations() -> int:
    return getattr(_operations, "count", 0)


@contextmanager
def error_scope(**fields: Any) -> Iterator[ErrorContext]:
    """Run a nested operation on its own error context frame.

    On entry a new frame is pushed with ``store()`` and the given fields are
    applied to it. On exit, normal or exceptional, ``recall()`` restores the
    enclosing frame. Exceptions propagate unchanged.

    Args:
        **fields: Initial field values for the new frame, keyed by field name
            (``resource``, ``activity``, ``object``, ``message``, ``sql``,
            ``cause``).

    Yields:
        The new current frame.

    Raises:
        TypeError: If a keyword does not name a field. The frame is still
            recalled.
    """
    ctx = store()
    try:
        ctx.update(**fields)
        yield ctx
    finally:
        recall()


def persistence_operation(message: str, **fields: Any) -> Callable:
    """Decorator for a data-access operation.

    A call is *outermost* when no other persistence_operation is running in
    the thread and nothing has been stored with ``store()``. An outermost call
    applies ``fields`` to the current frame and runs ``reset()`` when it ends.
    Any other call is nested: it pushes its own frame with ``store()``,
    applies ``fields`` there and ``recall()``s on exit, so the enclosing
    operation's fields and stack survive.

    Any exception other than PersistenceError is wrapped with
    ``wrap_exception(message, exc)`` and raised from the original. A
    PersistenceError raised further down is re-raised as is, so nested
    operations do not wrap twice.

    Args:
        message: Summary used when wrapping a failure,
            e.g. ``"Error querying database"``.
        **fields: Field values set on the current frame on entry.

    Raises:
        TypeError: At decoration time, if a keyword does not name a field.

    Example:
        >>> @persistence_operation("Error querying database", object="UserMapper.selectAll")
        ... def select_all():
        ...     raise RuntimeError("connection refused")
        >>> select_all()
        Traceback (most recent call last):
        ...
        errorcontext.exceptions.PersistenceError: ...
    """
    ErrorContext().update(**fields)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            outermost = _active_operations() == 0 and depth() == 0
            ctx = instance() if outermost else store()
            _operations.count = _active_operations() + 1
            try:
                ctx.update(**fields)
                return func(*args, **kwargs)
            except PersistenceError:
                raise
            except Exception as exc:
                raise wrap_exception(message, exc) from exc
            finally:
                _operations.count -= 1
                if outermost:
                    reset()
                else:
                    recall()

        return wrapper

    return decorator
