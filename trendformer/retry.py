"""Exponential backoff for transient upstream failures."""

import functools
import time

from .log import get_logger


def retry_after_seconds(exc) -> float | None:
    """Server-requested wait from a `Retry-After` header on `exc.response`, if any."""
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    try:
        value = headers.get("retry-after")
    except AttributeError:
        return None
    try:
        return max(float(value), 0.0) if value is not None else None
    except (TypeError, ValueError):
        return None


def with_retry(max_retries: int = 3, base_delay: float = 2.0, max_delay: float = 30.0,
               exceptions: tuple = (Exception,)):
    """Decorator: retry on `exceptions` with exponential backoff.

    Delays: base_delay * 2^attempt, raised to the server's Retry-After when
    it asks for longer, capped at max_delay. Exceptions outside `exceptions`
    propagate on the first attempt.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error("%s failed after %d attempts: %s", func.__name__, attempt + 1, e)
                        raise
                    delay = base_delay * (2 ** attempt)
                    requested = retry_after_seconds(e)
                    if requested is not None:
                        delay = max(delay, requested)
                    delay = min(delay, max_delay)
                    logger.warning(
                        "%s: %s (attempt %d/%d), retrying in %.1fs",
                        func.__name__, e, attempt + 1, max_retries + 1, delay
                    )
                    time.sleep(delay)
        return wrapper
    return decorator
