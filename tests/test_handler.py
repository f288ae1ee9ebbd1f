"""test_handler.py - Tests for the logging integration.

Covers:
    - ErrorContextFilter stamps the rendered context on ERROR records
    - ErrorContextFilter stamps "" below its level and never drops records
    - ErrorContextHandler dumps a delimited block on ERROR with context
    - ErrorContextHandler stays silent for empty contexts and low levels
    - reset_after_dump clears the thread's context
    - Integration: logger + handler + formatter with %(error_context)s
    - Neither the filter nor the handler creates a frame in a thread without one
"""

import io
import logging
import threading

from errorcontext.context import instance, peek, reset
from errorcontext.handler import ErrorContextFilter, ErrorContextHandler


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_record(msg: str, level: int = logging.ERROR, name: str = "test") -> logging.LogRecord:
    """Create a minimal LogRecord for testing."""
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


# ---------------------------------------------------------------------------
# ErrorContextFilter
# ---------------------------------------------------------------------------


class TestErrorContextFilter:
    def setup_method(self):
        reset()

    def test_filter_attaches_rendered_context_on_error(self):
        instance().resource("UserMapper.xml")
        record = _make_record("failed")
        assert ErrorContextFilter().filter(record) is True
        assert record.error_context == instance().render()

    def test_filter_attaches_empty_string_below_level(self):
        instance().resource("UserMapper.xml")
        record = _make_record("step", level=logging.INFO)
        assert ErrorContextFilter().filter(record) is True
        assert record.error_context == ""

    def test_filter_custom_attribute_and_level(self):
        instance().object("UserMapper.selectAll")
        record = _make_record("step", level=logging.INFO)
        ErrorContextFilter(attribute="ctx", level=logging.DEBUG).filter(record)
        assert "UserMapper.selectAll" in record.ctx


# ---------------------------------------------------------------------------
# ErrorContextHandler
# ---------------------------------------------------------------------------


class TestErrorContextHandler:
    def setup_method(self):
        reset()
        self.stream = io.StringIO()

    def test_error_record_dumps_context_block(self):
        instance().resource("UserMapper.xml").activity("setting parameters")
        handler = ErrorContextHandler(dump_stream=self.stream)

        handler.emit(_make_record("query failed", name="app.dao"))

        lines = self.stream.getvalue().splitlines()
        assert lines == [
            "",
            "=== [ErrorContext] app.dao: query failed ===",
            "### The error may exist in UserMapper.xml",
            "### The error occurred while setting parameters",
            "=== [ErrorContext] END ===",
            "",
        ]

    def test_empty_context_writes_nothing(self):
        ErrorContextHandler(dump_stream=self.stream).emit(_make_record("failed"))
        assert self.stream.getvalue() == ""

    def test_warning_record_writes_nothing(self):
        instance().message("Error")
        handler = ErrorContextHandler(dump_stream=self.stream)
        handler.emit(_make_record("careful", level=logging.WARNING))
        assert self.stream.getvalue() == ""

    def test_context_kept_by_default(self):
        ctx = instance().message("Error")
        ErrorContextHandler(dump_stream=self.stream).emit(_make_record("failed"))
        assert instance() is ctx

    def test_reset_after_dump(self):
        instance().message("Error")
        handler = ErrorContextHandler(dump_stream=self.stream, reset_after_dump=True)
        handler.emit(_make_record("failed"))
        assert "### Error" in self.stream.getvalue()
        assert instance().is_empty()

    def test_handler_level_is_error(self):
        assert ErrorContextHandler(dump_stream=self.stream).level == logging.ERROR


# ---------------------------------------------------------------------------
# Integration
# ---------------------------------------------------------------------------


class TestLoggingIntegration:
    def setup_method(self):
        reset()
        self.logger = logging.getLogger("errorcontext.tests.integration")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

    def teardown_method(self):
        for h in list(self.logger.handlers):
            self.logger.removeHandler(h)

    def test_formatter_includes_error_context(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(ErrorContextFilter())
        handler.setFormatter(logging.Formatter("%(levelname)s %(message)s%(error_context)s"))
        self.logger.addHandler(handler)

        instance().object("UserMapper.selectById")
        self.logger.info("loading user")
        self.logger.error("query failed")

        lines = stream.getvalue().splitlines()
        assert lines == [
            "INFO loading user",
            "ERROR query failed",
            "### The error may involve UserMapper.selectById",
        ]

    def test_handler_attached_to_logger_ignores_info(self):
        stream = io.StringIO()
        self.logger.addHandler(ErrorContextHandler(dump_stream=stream))

        instance().message("Error querying database")
        self.logger.info("not dumped")
        assert stream.getvalue() == ""

        self.logger.error("dumped")
        assert "### Error querying database" in stream.getvalue()

    def test_logging_does_not_bind_a_frame(self):
        """Logging at ERROR from a thread that never used the context leaves it unbound."""
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.addFilter(ErrorContextFilter())
        handler.setFormatter(logging.Formatter("%(message)s|%(error_context)s"))
        self.logger.addHandler(handler)
        self.logger.addHandler(ErrorContextHandler(dump_stream=stream))
        seen = {}

        def worker():
            self.logger.error("failed outside any operation")
            seen["frame"] = peek()

        t = threading.Thread(target=worker)
        t.start()
        t.join()

        assert seen["frame"] is None
        assert stream.getvalue() == "failed outside any operation|\n"
