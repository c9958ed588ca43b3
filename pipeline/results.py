from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class PageUnit:
    """One page waiting for extraction. `index` is 0-based and fixes output position."""
    index: int
    image_path: Path


class OrderedResults:
    """Fixed-size slots, each written exactly once.

    Not locked on its own: writers go through ProgressTracker.advance().
    """

    def __init__(self, size: int):
        if size < 0:
            raise ValueError(f"Result size must be non-negative, got {size}")
        self._slots: List[Optional[str]] = [None] * size

    def __len__(self) -> int:
        return len(self._slots)

    def store(self, index: int, text: str) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexError(f"Page index {index} out of range for {len(self._slots)} pages")
        if self._slots[index] is not None:
            raise ValueError(f"Page index {index} was already stored")
        self._slots[index] = text

    @property
    def filled(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)

    @property
    def complete(self) -> bool:
        return all(slot is not None for slot in self._slots)

    def as_list(self) -> List[str]:
        if not self.complete:
            missing = [i for i, slot in enumerate(self._slots) if slot is None]
            raise ValueError(f"Results incomplete, missing page indices: {missing}")
        return list(self._slots)
