"""
Observability helpers for the collection core.

Adds correlation IDs and structured logging context to core operations.
"""

import time
import uuid
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from wastetrack.app.core.exceptions import AppException

# Configure structured logger
logger = logging.getLogger("wastetrack")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger once."""
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


@asynccontextmanager
async def track_operation(
    operation: str,
    correlation_id: Optional[str] = None,
    **fields: Any
) -> AsyncIterator[Dict[str, Any]]:
    """
    Time a core operation and emit one structured log line for it.

    The yielded dict is the log context; callers may add fields to it
    (e.g. the resulting status) before the block exits.
    """
    # 1. Generate or reuse Correlation ID
    log_data: Dict[str, Any] = {
        "correlation_id": correlation_id or str(uuid.uuid4()),
        "operation": operation,
        **fields
    }

    # 2. Start Timer
    start_time = time.perf_counter()

    try:
        yield log_data
    except AppException as exc:
        log_data["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
        log_data["error_code"] = exc.error_code
        logger.warning("Operation Rejected", extra=log_data)
        raise
    except Exception as exc:
        log_data["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
        log_data["error"] = type(exc).__name__
        logger.error("Operation Failed", extra=log_data)
        raise

    # 3. Structured Log
    log_data["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
    logger.info("Operation Completed", extra=log_data)
