"""
Retry helpers with exponential backoff.

Only errors classified as retryable (or whose message contains one of the
configured keywords) are retried; everything else is raised on first failure.
"""
import logging
import time
from typing import Callable, Iterable, Optional, TypeVar

from .errors import classify_error

logger = logging.getLogger("wedly")

T = TypeVar("T")

DEFAULT_RETRYABLE_KEYWORDS = (
    "network",
    "timeout",
    "temporarily unavailable",
    "rate limit",
    "connection",
    "unavailable",
)


def _is_retryable(exc: Exception, keywords: Iterable[str]) -> bool:
    if classify_error(exc).retryable:
        return True
    message = str(exc).lower()
    return any(keyword in message for keyword in keywords)


def with_retry(
    func: Callable[[], T],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    backoff_multiplier: float = 2.0,
    retryable_keywords: Optional[Iterable[str]] = None,
    label: str = "operation",
    retry_any: bool = False,
) -> T:
    """
    Call func until it succeeds or max_attempts is reached.

    The delay before attempt n+1 is base_delay * backoff_multiplier**(n-1),
    capped at max_delay.
    """
    keywords = tuple(k.lower() for k in (retryable_keywords or DEFAULT_RETRYABLE_KEYWORDS))

    for attempt in range(1, max_attempts + 1):
        try:
            result = func()
            if attempt > 1:
                logger.info(f"[RETRY] {label} succeeded on attempt {attempt}/{max_attempts}")
            return result
        except Exception as exc:
            if attempt == max_attempts or not (retry_any or _is_retryable(exc, keywords)):
                if attempt > 1:
                    logger.error(f"[RETRY] {label} failed after {attempt} attempts: {exc}")
                raise

            delay = min(base_delay * (backoff_multiplier ** (attempt - 1)), max_delay)
            logger.warning(
                f"[RETRY] {label} failed on attempt {attempt}/{max_attempts}: {exc}. "
                f"Retrying in {delay:.1f}s"
            )
            time.sleep(delay)

    raise RuntimeError("Unexpected retry logic error")


def with_database_retry(func: Callable[[], T], label: str = "database write", **kwargs) -> T:
    """Firestore writes get exactly one retry, whatever the failure."""
    kwargs.setdefault("max_attempts", 2)
    kwargs.setdefault("base_delay", 1.0)
    return with_retry(func, label=label, retry_any=True, **kwargs)
