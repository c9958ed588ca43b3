#!/usr/bin/env python3
import time
import random
from typing import Callable, Optional, TypeVar

from infra.errors import TransientBackendError
from infra.logger import PipelineLogger, create_logger

T = TypeVar('T')

DEFAULT_BACKOFF_CAP_SECONDS = 60.0
DEFAULT_JITTER_SECONDS = 1.0


class RetryPolicy:
    """Retries TransientBackendError forever with capped exponential backoff.

    wait(attempt) = min(2 ** attempt, cap) + jitter * U[0, 1), attempt from 0.
    Any other exception propagates on the first occurrence. There is no
    attempt limit.
    """

    def __init__(
        self,
        logger: Optional[PipelineLogger] = None,
        backoff_cap_seconds: float = DEFAULT_BACKOFF_CAP_SECONDS,
        jitter_seconds: float = DEFAULT_JITTER_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        rand: Callable[[], float] = random.random,
    ):
        self.logger = logger or create_logger("retry", "retry")
        self.backoff_cap_seconds = backoff_cap_seconds
        self.jitter_seconds = jitter_seconds
        self.sleep = sleep
        self.rand = rand

    def backoff(self, attempt: int) -> float:
        # 2 ** 32 is already far past any sane cap.
        base = min(2 ** min(attempt, 32), self.backoff_cap_seconds)
        return base + self.jitter_seconds * self.rand()

    def execute_with_retry(self, fn: Callable[[], T], operation: str = "call") -> T:
        attempt = 0

        while True:
            try:
                result = fn()
            except TransientBackendError as e:
                delay = self.backoff(attempt)
                self.logger.warning(
                    f"{operation} failed transiently, retrying in {delay:.1f}s",
                    operation=operation,
                    attempt=attempt + 1,
                    delay_seconds=round(delay, 3),
                    error=str(e),
                )
                self.sleep(delay)
                attempt += 1
                continue

            if attempt > 0:
                self.logger.debug(
                    f"{operation} succeeded after {attempt + 1} attempts",
                    operation=operation,
                    attempt=attempt + 1,
                )
            return result
