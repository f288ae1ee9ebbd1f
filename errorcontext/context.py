"""context.py - Per-thread diagnostic context for data-access failures.

ErrorContext collects the facts a developer needs when a database call fails:

    message:   Short summary, e.g. ``"Error querying database"``.
    resource:  The artifact the failing statement came from (a mapper file).
    object:    The statement or entity being acted on.
    activity:  What the runtime was doing, e.g. ``"setting parameters"``.
    sql:       The statement text.
    cause:     The captured exception.

Every thread owns a stack of frames kept in ``threading.local`` storage. The
top of the stack is the *current* frame; ``store()`` pushes a fresh one for a
nested operation and ``recall()`` pops back to the enclosing frame. ``reset()``
clears the current frame and forgets the thread's stack so that a pooled
thread does not carry stale fields into its next unrelated operation.

Typical usage:
    from errorcontext import instance, reset

    try:
        instance().resource("UserMapper.xml").object("UserMapper.selectById")
        ...
    finally:
        reset()
"""

import logging
import os
import threading
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

LINE_SEPARATOR = os.linesep

_FIELDS = ("message", "resource", "object", "activity", "sql", "cause")

# One frame stack per thread. The list is created lazily on first access.
_local_storage = threading.local()


def _frames() -> List["ErrorContext"]:
    if not hasattr(_local_storage, "frames"):
        _local_storage.frames = [ErrorContext()]
    return _local_storage.frames


def instance() -> "ErrorContext":
    """Return the current ErrorContext frame for the calling thread.

    On first access within a thread (or the first access after ``reset()``),
    an empty frame is created and bound to the thread so that subsequent calls
    return the same instance.

    Example:
        >>> ctx = instance()
        >>> ctx is instance()
        True
    """
    return _frames()[-1]


def peek() -> Optional["ErrorContext"]:
    """Return the calling thread's current frame, or None if it has none.

    Unlike ``instance()``, this never creates or binds a frame.
    """
    if not hasattr(_local_storage, "frames"):
        return None
    return _local_storage.frames[-1]


def depth() -> int:
    """Return the number of unmatched ``store()`` calls in the calling thread."""
    if not hasattr(_local_storage, "frames"):
        return 0
    return len(_local_storage.frames) - 1


def remove() -> None:
    """Forget the calling thread's frame stack.

    The next ``instance()`` call creates a brand-new frame. Suspended frames
    below the current one are discarded as well.
    """
    if hasattr(_local_storage, "frames"):
        del _local_storage.frames


def store() -> "ErrorContext":
    """Suspend the current frame and install a new, empty one.

    Returns:
        The new current frame.
    """
    frames = _frames()
    frames.append(ErrorContext())
    return frames[-1]


def recall() -> "ErrorContext":
    """Discard the current frame and restore the one suspended by ``store()``.

    Calling ``recall()`` without a matching ``store()`` leaves the current
    frame untouched and raises nothing.

    Returns:
        The frame that is current after the call.
    """
    frames = _frames()
    if len(frames) > 1:
        frames.pop()
    else:
        logger.debug("recall() without a matching store(); current frame kept")
    return frames[-1]


def reset() -> "ErrorContext":
    """Clear the current frame and forget the calling thread's association.

    Returns:
        The cleared frame. It is no longer bound to the thread.
    """
    ctx = instance()
    ctx.clear()
    remove()
    logger.debug("error context reset for thread %s", threading.current_thread().name)
    return ctx


def describe_cause(cause: Any) -> str:
    """Return the descriptive text for a captured failure.

    Exceptions are described as ``"TypeName: message"`` (or just the type name
    when the message is empty). Anything else is described by ``str()``.
    """
    if isinstance(cause, BaseException):
        text = str(cause)
        name = type(cause).__name__
        return f"{name}: {text}" if text else name
    return str(cause)


def _normalize_sql(sql: str) -> str:
    return sql.replace("\n", " ").replace("\r", " ").replace("\t", " ").strip()


class ErrorContext:
    """One frame of diagnostic fields describing an operation in progress.

    Every mutator overwrites its field and returns the frame itself, so calls
    can be chained. ``store()``, ``recall()`` and ``reset()`` act on the
    calling thread's stack, not on this particular instance, and return the
    frame that is current afterwards.

    A frame can also be built directly and passed down a call chain. Such a
    detached frame supports the mutators, accessors and rendering, but its
    ``store()``, ``recall()`` and ``reset()`` still act on the thread's stack
    and leave the detached frame itself untouched.

    Example:
        >>> ctx = ErrorContext().message("Error querying database")
        >>> ctx.resource("UserMapper.xml").is_empty()
        False
    """

    __slots__ = ("_message", "_resource", "_object", "_activity", "_sql", "_cause")

    def __init__(self) -> None:
        self.clear()

    # ---------------------------------------------------------------------- #
    # Mutators
    # ---------------------------------------------------------------------- #

    def resource(self, resource: Optional[str]) -> "ErrorContext":
        self._resource = resource
        return self

    def activity(self, activity: Optional[str]) -> "ErrorContext":
        self._activity = activity
        return self

    def object(self, object: Optional[str]) -> "ErrorContext":
        self._object = object
        return self

    def message(self, message: Optional[str]) -> "ErrorContext":
        self._message = message
        return self

    def sql(self, sql: Optional[str]) -> "ErrorContext":
        self._sql = sql
        return self

    def cause(self, cause: Any) -> "ErrorContext":
        self._cause = cause
        return self

    def update(self, **fields: Any) -> "ErrorContext":
        """Set several fields at once, e.g. ``update(activity="mapping results")``.

        Raises:
            TypeError: If a keyword does not name a field.
        """
        for name, value in fields.items():
            if name not in _FIELDS:
                raise TypeError(f"unknown error context field: {name!r}")
            getattr(self, name)(value)
        return self

    def clear(self) -> None:
        """Set every field to absent."""
        self._message = None
        self._resource = None
        self._object = None
        self._activity = None
        self._sql = None
        self._cause = None

    # ---------------------------------------------------------------------- #
    # Stack protocol
    # ---------------------------------------------------------------------- #

    def store(self) -> "ErrorContext":
        """Same as module-level ``store()``; ``self`` is not consulted."""
        return store()

    def recall(self) -> "ErrorContext":
        """Same as module-level ``recall()``; ``self`` is not consulted."""
        return recall()

    def reset(self) -> "ErrorContext":
        """Same as module-level ``reset()``.

        Clears the thread's current frame, which is ``self`` only when this
        frame came from ``instance()``. To clear a detached frame use
        ``clear()``.
        """
        return reset()

    # ---------------------------------------------------------------------- #
    # Accessors and rendering
    # ---------------------------------------------------------------------- #

    def as_dict(self) -> Dict[str, Any]:
        """Return the six fields by name, with absent fields as ``None``."""
        return {name: getattr(self, "_" + name) for name in _FIELDS}

    def is_empty(self) -> bool:
        """Return True when ``render()`` would produce the empty string."""
        return not any(self._present(name) for name in _FIELDS)

    def _present(self, name: str) -> bool:
        value = getattr(self, "_" + name)
        # Empty strings are treated like None; a cause is present if set at all.
        if isinstance(value, str):
            return bool(value)
        return value is not None

    def render(self) -> str:
        """Render the present fields as a multi-line diagnostic description.

        Sections are emitted in a fixed order (message, resource, object,
        activity, sql, cause), each preceded by ``LINE_SEPARATOR``. Absent
        fields contribute nothing; an empty frame renders as ``""``.

        Example:
            >>> ctx = ErrorContext().message("Error querying database")
            >>> ctx.resource("UserMapper.xml").render().splitlines()[1:]
            ['### Error querying database', '### The error may exist in UserMapper.xml']
        """
        sections = []
        if self._present("message"):
            sections.append(f"### {self._message}")
        if self._present("resource"):
            sections.append(f"### The error may exist in {self._resource}")
        if self._present("object"):
            sections.append(f"### The error may involve {self._object}")
        if self._present("activity"):
            sections.append(f"### The error occurred while {self._activity}")
        if self._present("sql"):
            sections.append(f"### SQL: {_normalize_sql(self._sql)}")
        if self._present("cause"):
            sections.append(f"### Cause: {describe_cause(self._cause)}")
        return "".join(LINE_SEPARATOR + section for section in sections)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:  # pragma: no cover
        present = ", ".join(
            f"{name}={getattr(self, '_' + name)!r}"
            for name in _FIELDS
            if self._present(name)
        )
        return f"ErrorContext({present})"
