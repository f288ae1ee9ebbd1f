"""test_exceptions.py - Tests for PersistenceError and wrap_exception.

Covers:
    - wrap_exception sets message and cause on the current frame
    - The error text is the rendered frame
    - The frame is not reset by wrap_exception
"""

from errorcontext.context import LINE_SEPARATOR, instance, reset
from errorcontext.exceptions import PersistenceError, wrap_exception

SEP = LINE_SEPARATOR


class TestWrapException:
    def setup_method(self):
        reset()

    def test_wrap_exception_renders_current_frame(self):
        instance().resource("UserMapper.xml").activity("executing a query")
        cause = ConnectionError("server closed the connection")

        err = wrap_exception("Error querying database", cause)

        assert isinstance(err, PersistenceError)
        assert err.cause is cause
        assert str(err) == (
            f"{SEP}### Error querying database"
            f"{SEP}### The error may exist in UserMapper.xml"
            f"{SEP}### The error occurred while executing a query"
            f"{SEP}### Cause: ConnectionError: server closed the connection"
        )

    def test_wrap_exception_leaves_frame_populated(self):
        cause = ValueError("bad")
        wrap_exception("Error committing transaction", cause)
        fields = instance().as_dict()
        assert fields["message"] == "Error committing transaction"
        assert fields["cause"] is cause

    def test_persistence_error_without_cause(self):
        err = PersistenceError("plain")
        assert err.cause is None
        assert str(err) == "plain"
