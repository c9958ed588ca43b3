"""
Progress events and the shared completion counter.

ProgressTracker is the single critical section of a worker pool: the
caller's commit (e.g. storing a page result), the counter increment and the
event emission happen under one lock, so events arrive with strictly
increasing completed_units and never interleave.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from infra.logger import PipelineLogger


class Stage(str, Enum):
    SPLITTING = "splitting"
    EXTRACTING = "extracting"


@dataclass(frozen=True)
class ProgressEvent:
    document_path: Path
    stage: Stage
    completed_units: int
    total_units: int
    percentage: float
    remaining_units: int


ProgressSink = Callable[[ProgressEvent], None]


def percentage_of(completed: int, total: int) -> float:
    if total <= 0:
        return 100.0
    return round(completed / total * 100, 2)


class ProgressTracker:
    def __init__(
        self,
        document_path: Path,
        stage: Stage,
        total: int,
        sink: Optional[ProgressSink] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        self.document_path = Path(document_path)
        self.stage = stage
        self.total = total
        self.sink = sink
        self.logger = logger
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def advance(self, commit: Optional[Callable[[], None]] = None) -> ProgressEvent:
        """Run commit, count one finished unit and notify the sink, atomically.

        If commit raises, nothing is counted and the error propagates.
        """
        with self._lock:
            if commit is not None:
                commit()

            self._completed += 1
            event = ProgressEvent(
                document_path=self.document_path,
                stage=self.stage,
                completed_units=self._completed,
                total_units=self.total,
                percentage=percentage_of(self._completed, self.total),
                remaining_units=self.total - self._completed,
            )
            self._emit(event)
            return event

    def _emit(self, event: ProgressEvent):
        if self.sink is None:
            return

        # Sink failures never abort the run.
        try:
            self.sink(event)
        except Exception as e:
            if self.logger:
                self.logger.warning(
                    f"Progress sink failed: {e}",
                    document=str(self.document_path),
                    error=repr(e),
                )
