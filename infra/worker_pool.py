#!/usr/bin/env python3
"""
Bounded worker pool for pull-based stages.

Workers are plain callables that drain a shared WorkQueue and return when
it is empty. run_workers starts `count` of them, waits for every one to
finish, and then re-raises the first error. Later errors are logged.

Usage:
    queue = WorkQueue(pages)

    def worker():
        while (page := queue.pop()) is not None:
            handle(page)

    run_workers(4, worker, logger=logger, description="Rendering pages")
"""

import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional

from infra.logger import PipelineLogger


def bounded_worker_count(requested: int, units: int) -> int:
    """Clamp a requested pool size to [1, units]."""
    return max(1, min(requested, units))


def run_workers(
    count: int,
    worker: Callable[[], None],
    logger: Optional[PipelineLogger] = None,
    description: str = "Processing",
    thread_name_prefix: str = "inkwell-worker",
) -> None:
    if count < 1:
        raise ValueError(f"Worker count must be at least 1, got {count}")

    start_time = time.time()
    if logger:
        logger.debug(f"{description}: starting {count} workers", workers=count)

    with ThreadPoolExecutor(max_workers=count, thread_name_prefix=thread_name_prefix) as executor:
        futures = [executor.submit(worker) for _ in range(count)]
        wait(futures)

    errors: List[BaseException] = [
        future.exception() for future in futures if future.exception() is not None
    ]

    if logger:
        logger.debug(
            f"{description}: {count} workers finished",
            workers=count,
            duration_seconds=round(time.time() - start_time, 3),
        )

    if not errors:
        return

    for extra in errors[1:]:
        if logger:
            logger.error(
                f"{description}: additional worker failure: {extra}",
                error=repr(extra),
            )
    raise errors[0]
