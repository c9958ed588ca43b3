import threading
from collections import deque
from typing import Deque, Generic, Iterable, Optional, TypeVar

T = TypeVar('T')


class WorkQueue(Generic[T]):
    """Thread-safe FIFO shared by a pool of pull-based workers.

    pop() never blocks: it returns None once the queue is drained, which is
    the signal for a worker to exit. Items are loaded up front, so None
    can't be confused with a queue that is still filling.

    Usage:
        queue = WorkQueue(range(10))
        while (item := queue.pop()) is not None:
            handle(item)
    """

    def __init__(self, items: Iterable[T] = ()):
        self._items: Deque[T] = deque()
        self._lock = threading.Lock()
        for item in items:
            self.push(item)

    def push(self, item: T) -> None:
        if item is None:
            raise ValueError("None is reserved as the drained signal")
        with self._lock:
            self._items.append(item)

    def pop(self) -> Optional[T]:
        with self._lock:
            if not self._items:
                return None
            return self._items.popleft()

    @property
    def remaining(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def drained(self) -> bool:
        return self.remaining == 0

    def __len__(self) -> int:
        return self.remaining
