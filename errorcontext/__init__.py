"""errorcontext/__init__.py - Public API for the errorcontext package.

errorcontext keeps a per-thread record of what a data-access runtime was doing
when something went wrong: which mapper file, which statement, which step, the
SQL text and the captured exception. When the failure surfaces, the record is
rendered into a fixed-order diagnostic block that ends up in the exception
message or the log.

Quick start:
    from errorcontext import instance, error_scope, reset, wrap_exception

    ctx = instance().resource("UserMapper.xml").object("UserMapper.selectById")
    try:
        with error_scope(activity="setting parameters"):
            bind_parameters()          # nested frame, popped on exit
        execute("SELECT * FROM users WHERE id = ?")
    except Exception as exc:
        raise wrap_exception("Error querying database", exc) from exc
    finally:
        reset()                        # never leak fields into the next operation

Exported names:
    ErrorContext:          One frame of diagnostic fields with chained setters.
    instance:              Current frame of the calling thread (created lazily).
    peek:                  Current frame if one exists, without creating it.
    store / recall:        Push a fresh frame / pop back to the enclosing one.
    reset:                 Clear the frame and forget the thread's stack.
    depth:                 Number of unmatched store() calls in this thread.
    error_scope:           Context manager that keeps store/recall balanced.
    persistence_operation: Decorator that wraps failures; the outermost call resets.
    PersistenceError:      Raised for failed data-access operations.
    wrap_exception:        Build a PersistenceError from the current frame.
    ErrorContextFilter:    logging.Filter adding ``%(error_context)s`` to records.
    ErrorContextHandler:   logging.Handler dumping the context on ERROR records.
"""

from .context import ErrorContext, depth, instance, peek, recall, remove, reset, store
from .exceptions import PersistenceError, wrap_exception
from .handler import ErrorContextFilter, ErrorContextHandler
from .instrument import error_scope, persistence_operation

__all__ = [
    "ErrorContext",
    "instance",
    "peek",
    "store",
    "recall",
    "reset",
    "remove",
    "depth",
    "error_scope",
    "persistence_operation",
    "PersistenceError",
    "wrap_exception",
    "ErrorContextFilter",
    "ErrorContextHandler",
]
__version__ = "0.1.0"
