"""exceptions.py - Wrapping data-access failures with the current error context.

A data-access entry point catches whatever went wrong underneath, stamps the
summary message and the captured exception onto the thread's current frame,
and raises a PersistenceError whose text is the rendered frame. The caller is
still responsible for calling ``reset()`` once the operation is over;
``persistence_operation`` in ``instrument.py`` does both.

Example:
    >>> from errorcontext import instance, wrap_exception
    >>> _ = instance().resource("UserMapper.xml")
    >>> try:
    ...     run_query()
    ... except Exception as exc:
    ...     raise wrap_exception("Error querying database", exc) from exc
"""

from typing import Optional

from .context import instance


class PersistenceError(Exception):
    """Raised when a data-access operation fails.

    Attributes:
        cause: The original exception, or None when the error was raised
            without one.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


def wrap_exception(message: str, exc: BaseException) -> PersistenceError:
    """Build a PersistenceError from the current frame.

    Sets ``message`` and ``cause`` on the calling thread's current frame and
    uses its rendering as the error text. The frame is not reset.

    Args:
        message: Summary of the failed operation, e.g. ``"Error updating database"``.
        exc: The captured exception.

    Returns:
        A new PersistenceError. Callers should ``raise ... from exc``.
    """
    ctx = instance().message(message).cause(exc)
    return PersistenceError(ctx.render(), exc)
