"""examples/multithreaded_usage.py - Thread isolation and pooled-thread reuse demo.

Each thread owns its own error context. A failure in one request reports only
that request's resource, statement and activity, even though both requests run
at the same time. The thread pool reuses worker threads, and because every
operation ends with reset(), no request inherits a previous one's fields.

Run:
    python examples/multithreaded_usage.py
"""

import logging
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from errorcontext import ErrorContextFilter, error_scope, instance, persistence_operation

# ---------------------------------------------------------------------------
# Setup: the rendered context is appended to ERROR lines by the filter
# ---------------------------------------------------------------------------
handler = logging.StreamHandler(sys.stderr)
handler.addFilter(ErrorContextFilter())
handler.setFormatter(
    logging.Formatter("[%(levelname)s] [thread=%(threadName)s] %(message)s%(error_context)s")
)
logging.basicConfig(level=logging.DEBUG, handlers=[handler])

logger = logging.getLogger("order_dao")

STOCK = {1: 10, 2: 0, 3: 5}  # product 2 is out of stock


def fetch_stock(product_id: int) -> int:
    with error_scope(activity="reading inventory", sql="SELECT qty FROM stock WHERE id = ?"):
        time.sleep(0.01)  # simulate DB latency
        return STOCK.get(product_id, 0)


@persistence_operation("Error inserting order", resource="OrderMapper.xml")
def insert_order(order_id: int, product_id: int, qty: int) -> dict:
    instance().object("OrderMapper.insert")
    stock = fetch_stock(product_id)
    instance().activity("checking stock")
    if stock < qty:
        logger.error("Insufficient stock: product_id=%s requested=%s", product_id, qty)
        raise RuntimeError(f"OutOfStock: product_id={product_id}")
    logger.info("Order placed: order_id=%s", order_id)
    return {"order_id": order_id, "status": "confirmed"}


def worker(order_id: int, product_id: int, qty: int) -> None:
    try:
        result = insert_order(order_id, product_id, qty)
        print(f"[Thread {threading.current_thread().name}] SUCCESS: {result}")
    except Exception as exc:
        print(f"[Thread {threading.current_thread().name}] FAILED:{exc}")


if __name__ == "__main__":
    print("=" * 60)
    print("Submitting four orders to a two-thread pool...")
    print("  order 1002 fails (product 2 is out of stock)")
    print("=" * 60)

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="pool") as pool:
        for args in [(1001, 1, 3), (1002, 2, 1), (1003, 3, 1), (1004, 1, 2)]:
            pool.submit(worker, *args)

    print()
    print("Notice: only order 1002's context appears in the failure report,")
    print("and later orders on the same pool thread start from a clean context.")
