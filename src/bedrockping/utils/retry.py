from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from bedrockping.errors import TransportError

T = TypeVar("T")

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    base_delay_s: float = 0.05
    max_delay_s: float = 0.25

def with_retries(
    fn: Callable[[], T],
    policy: RetryPolicy,
    retry_on: tuple[type[BaseException], ...] = (TransportError,),
) -> T:
    """
    Call fn until it succeeds or the policy runs out of attempts.
    Only exceptions in retry_on are retried; anything else propagates at once.
    """
    last_exc: BaseException | None = None
    delay = policy.base_delay_s
    attempts = max(1, policy.attempts)
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            last_exc = e
            logger.info("attempt %d/%d failed: %s", attempt, attempts, e)
            if attempt < attempts:
                time.sleep(delay)
                delay = min(policy.max_delay_s, delay * 2)
    assert last_exc is not None
    raise last_exc
