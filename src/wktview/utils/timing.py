"""
Timing helpers for pipeline logging.
"""

import functools
import logging
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


def log_async_performance(
    log_level: int = logging.INFO,
    threshold_ms: Optional[float] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to log async function execution time.

    Args:
        log_level: Logging level to use
        threshold_ms: Only log if execution time exceeds this threshold (milliseconds)

    Returns:
        Decorated async function with performance logging

    Example:
        @log_async_performance(threshold_ms=100)
        async def normalize(...):
            ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            func_name = f"{func.__module__}.{func.__qualname__}"
            start_time = time.perf_counter()

            try:
                return await func(*args, **kwargs)
            finally:
                duration_ms = (time.perf_counter() - start_time) * 1000
                if threshold_ms is None or duration_ms >= threshold_ms:
                    logger.log(
                        log_level,
                        f"{func_name} executed in {duration_ms:.2f}ms",
                        extra={"duration_ms": duration_ms, "function": func_name},
                    )

        return wrapper

    return decorator


class StageTimer:
    """
    Context manager timing one pipeline stage.

    Usage:
        with StageTimer("crs_resolved") as timer:
            definition = await resolver.resolve(epsg)
        timer.duration_ms
    """

    def __init__(self, stage: str, log_level: int = logging.DEBUG):
        self.stage = stage
        self.log_level = log_level
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None
        self.failed = False

    def __enter__(self) -> "StageTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.start_time is None:
            return
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        self.failed = exc_type is not None

        outcome = "failed" if self.failed else "completed"
        logger.log(
            self.log_level,
            f"Stage {self.stage} {outcome} in {self.duration_ms:.2f}ms",
            extra={"stage": self.stage, "duration_ms": self.duration_ms},
        )
