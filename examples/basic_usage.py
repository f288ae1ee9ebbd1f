"""examples/basic_usage.py - errorcontext integration demo.

Demonstrates two usage levels:
    Scenario A: by hand, with instance() / store() / recall() / reset()
    Scenario B: with error_scope and persistence_operation doing the bookkeeping
"""

import logging

from errorcontext import (
    ErrorContextHandler,
    error_scope,
    instance,
    persistence_operation,
    recall,
    reset,
    store,
    wrap_exception,
)

# ---------------------------------------------------------------------------
# Standard logger setup (no changes from what a developer already has)
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("app")

# ---------------------------------------------------------------------------
# errorcontext integration: one line added to the existing setup
# ---------------------------------------------------------------------------
logging.getLogger().addHandler(ErrorContextHandler())

SELECT_BY_ID = """
    SELECT id, name
    FROM users
    WHERE id = ?
"""


def bind_parameters(user_id) -> None:
    """Simulate parameter binding that rejects bad input."""
    if not isinstance(user_id, int):
        raise TypeError(f"user id must be an int, got {type(user_id).__name__}")


# ===========================================================================
# Scenario A: manual bookkeeping
# ===========================================================================


def select_by_id(user_id):
    ctx = instance().resource("UserMapper.xml").object("UserMapper.selectById")
    try:
        ctx.sql(SELECT_BY_ID)
        store().activity("setting parameters")
        try:
            bind_parameters(user_id)
        finally:
            recall()
        return {"id": user_id, "name": "alice"}
    except Exception as exc:
        raise wrap_exception("Error querying database", exc) from exc
    finally:
        reset()


# ===========================================================================
# Scenario B: scoped helpers
# ===========================================================================


@persistence_operation("Error querying database", resource="UserMapper.xml")
def select_by_id_scoped(user_id):
    instance().object("UserMapper.selectById").sql(SELECT_BY_ID)
    with error_scope(activity="setting parameters"):
        bind_parameters(user_id)
    instance().activity("executing a query")
    logger.error("query failed for user_id=%s", user_id)
    raise ConnectionError("server closed the connection unexpectedly")


# ---------------------------------------------------------------------------
# Run both scenarios
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    print("=" * 60)
    print("Scenario A: manual store / recall / reset")
    print("=" * 60)
    try:
        select_by_id("42")
    except Exception as exc:
        print(exc)

    print()
    print("=" * 60)
    print("Scenario B: error_scope + persistence_operation")
    print("=" * 60)
    try:
        select_by_id_scoped(42)
    except Exception as exc:
        print(exc)
