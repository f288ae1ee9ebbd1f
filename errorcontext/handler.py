"""handler.py - Standard logging integration for the error context.

Two pieces plug the thread's current ErrorContext into an existing
``logging`` setup:

    ErrorContextFilter   Stamps the rendered context onto each LogRecord as
                         an attribute, so a Formatter can include
                         ``%(error_context)s``.
    ErrorContextHandler  On ERROR or above, writes the record message and the
                         rendered context to a stream as a delimited block.

Typical usage:
    import logging
    from errorcontext import ErrorContextHandler

    logging.getLogger().addHandler(ErrorContextHandler())
    logger = logging.getLogger(__name__)

    instance().resource("UserMapper.xml").activity("setting parameters")
    logger.error("query failed")   # dumps the context block to stderr
"""

import logging
import sys

from .context import peek, reset


class ErrorContextFilter(logging.Filter):
    """A logging.Filter that attaches the rendered error context to records.

    The filter never drops a record. Records at or above ``level`` get the
    current thread's rendered context; lower records get ``""`` so that a
    format string referencing the attribute never fails.

    Example:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(ErrorContextFilter())
        >>> handler.setFormatter(logging.Formatter("%(message)s%(error_context)s"))
    """

    def __init__(self, attribute: str = "error_context", level: int = logging.ERROR) -> None:
        """Initialise the filter.

        Args:
            attribute: Name of the LogRecord attribute to set.
            level: Minimum record level that receives the rendered context.
        """
        super().__init__()
        self._attribute = attribute
        self._level = level

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = peek() if record.levelno >= self._level else None
        setattr(record, self._attribute, ctx.render() if ctx is not None else "")
        return True


class ErrorContextHandler(logging.Handler):
    """A logging.Handler that dumps the error context on error records.

    Records below ERROR are ignored. For an ERROR or CRITICAL record, when the
    calling thread's current frame is not empty, a block with the record
    message and the rendered context is written to ``dump_stream``.

    Thread-safety:
        ``logging.Handler`` serialises emit() calls with its own lock. Each
        thread only ever reads its own frame, so dumps never mix threads.

    Attributes:
        _dump_stream: File-like object where dumps are written.
        _reset_after_dump (bool): If True, ``reset()`` is called after each
            dump so the next operation on the thread starts clean.
    """

    def __init__(self, dump_stream=None, reset_after_dump: bool = False) -> None:
        """Initialise the handler.

        Args:
            dump_stream: A writable file-like object. Defaults to sys.stderr.
            reset_after_dump: Reset the thread's context after each dump.
        """
        super().__init__(level=logging.ERROR)
        self._dump_stream = dump_stream or sys.stderr
        self._reset_after_dump = reset_after_dump

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno < logging.ERROR:
                return
            ctx = peek()
            if ctx is None or ctx.is_empty():
                return
            self._dump(record, ctx.render())
            if self._reset_after_dump:
                reset()
        except Exception:
            self.handleError(record)

    def _dump(self, record: logging.LogRecord, text: str) -> None:
        stream = self._dump_stream
        print(f"\n=== [ErrorContext] {record.name}: {record.getMessage()} ===", end="", file=stream)
        print(text.replace("\r\n", "\n"), file=stream)
        print("=== [ErrorContext] END ===\n", file=stream)
